"""
Hardcore Supervisor - runs server sessions until one ends peacefully.
"""

# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Callable
from pathlib import Path

from hardcore.config import HardcoreConfig, load_config
from hardcore.events import Death, classify
from hardcore.lang import load_death_messages
from hardcore.logging_config import bind_session
from hardcore.penalty import DeathRitual, Penalty, Sleep
from hardcore.recovery import WorldManager
from hardcore.session import SessionState
from hardcore.supervisor.process_handle import ServerProcess, start_server
from hardcore.supervisor.pump import (
    HEARTBEAT_INTERVAL_SEC,
    ConsoleRelay,
    Echo,
    EventSource,
    echo_line,
)

logger = logging.getLogger(__name__)


class HardcoreSupervisor:
    """
    Outer supervision loop.

    Responsibilities:
    - (Re)load config and death templates for every session
    - Spawn the server and drive the session loop
    - Run checkpoints and the death ritual inline
    - Reset or rewind the world and restart after a deadly roll
    """

    def __init__(
        self,
        config_path: Path,
        console: ConsoleRelay | None = None,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        echo: Echo | None = echo_line,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SEC,
    ):
        self.config_path = config_path
        self.console = console
        self.rng = rng or random.Random()
        self.session_count = 0
        self._sleep = sleep
        self._clock = clock
        self._echo = echo
        self._heartbeat_interval = heartbeat_interval

        # Called with the freshly loaded state at the start of every session
        self.on_session_start: Callable[[SessionState], None] | None = None

    async def run(self) -> None:
        """Run sessions back to back until the server exits on its own."""
        while True:
            self.session_count += 1
            bind_session(self.session_count)
            if not await self.run_session():
                logger.info("server exited without a penalty, stopping")
                return
            logger.info("restarting server")

    async def run_session(self) -> bool:
        """
        Run one server session.

        Returns:
            True if the world was reset or rewound and the server
            should be started again.
        """
        config = load_config(self.config_path)
        templates = load_death_messages(config.lang)
        state = SessionState.load(config.world, config.checkpoint_minutes, clock=self._clock)
        if self.on_session_start:
            self.on_session_start(state)

        process, sink, source = await start_server(
            config.server,
            echo=self._echo,
            heartbeat_interval=self._heartbeat_interval,
        )
        if self.console is not None:
            self.console.attach(sink)

        try:
            world = WorldManager(
                config.world,
                config.backup_path,
                sink,
                commands=config.commands,
                sleep=self._sleep,
            )
            ritual = DeathRitual(config, sink, rng=self.rng, sleep=self._sleep)
            penalty = await self._consume(
                config, templates, state, process, source, world, ritual,
            )
            return await world.recover(penalty, process)
        finally:
            if self.console is not None:
                self.console.detach()
            await process.aclose()

    async def _consume(
        self,
        config: HardcoreConfig,
        templates: tuple[str, ...],
        state: SessionState,
        process: ServerProcess,
        source: EventSource,
        world: WorldManager,
        ritual: DeathRitual,
    ) -> Penalty:
        """Process server lines until a deadly penalty or server exit."""
        async for line in source:
            if state.tick() and config.make_backups:
                await world.make_backup()

            event = classify(line, config, templates)
            if isinstance(event, Death):
                penalty = await ritual.run(event.player)
                if penalty is not Penalty.NONE:
                    return penalty
            else:
                state.apply(event)

            if process.has_exited():
                logger.info("server exited (code=%s)", process.returncode)
                break
        return Penalty.NONE
