# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Trust Hardcore, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""The death ritual: announce, roll the dice, pass the verdict.

Runs inline on the session loop.  The pauses between chat lines are part
of the show, so no further server output is processed until the verdict
is in.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hardcore.config import HardcoreConfig
    from hardcore.supervisor.pump import CommandSink

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class Penalty(Enum):
    """Outcome of a death event."""
    NONE = "none"
    REWIND = "rewind"     # Restore the last checkpoint
    RESET = "reset"       # Delete the world and any checkpoint


class DeathRitual:
    """Turns a player's death into a :class:`Penalty`."""

    def __init__(
        self,
        config: HardcoreConfig,
        sink: CommandSink,
        rng: random.Random | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.config = config
        self.sink = sink
        self.rng = rng or random.Random()
        self._sleep = sleep

    def _say(self, message: str) -> None:
        self.sink.send(f"{self.config.commands.say} {message}")

    def roll(self) -> int:
        lo, hi = self.config.roll_range
        return self.rng.randint(lo, hi)

    async def run(self, player: str) -> Penalty:
        logger.info("player %s died, rolling dice", player)

        if self.config.on_death_command:
            self.sink.send(self.config.on_death_command.replace("{username}", player))

        self._say(f"{player} died")
        await self._sleep(3.0)
        self._say("Rolling dice...")
        await self._sleep(6.0)

        num = self.roll()
        self._say(f"Rolled {num}")
        await self._sleep(2.0)

        if num not in self.config.deadly_rolls:
            logger.info("rolled good number: %d", num)
            return Penalty.NONE

        self._say("Always lucky boii")
        await self._sleep(1.0)
        penalty = Penalty(self.config.deadly_penalty)
        logger.info("rolled bad number: %d (penalty=%s)", num, penalty.value)
        return penalty
