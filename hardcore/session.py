# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Trust Hardcore, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Online presence and playtime bookkeeping.

Playtime only counts while at least one tracked player is online.  It is
flushed to ``<world>/playtime.txt`` in steps of more than
:data:`FLUSH_THRESHOLD_SEC` and drives the checkpoint schedule.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from hardcore.events import Death, Event, Join, Leave
from hardcore.exceptions import PlaytimeLoadError, PlaytimeSaveError
from hardcore.paths import get_playtime_path

logger = logging.getLogger(__name__)

FLUSH_THRESHOLD_SEC = 8.0
CHECKPOINT_MARGIN_SEC = 30


# ── Persistence ────────────────────────────────────────────────────


def load_playtime(world: Path) -> float:
    """Read persisted playtime in seconds.

    Raises:
        PlaytimeLoadError: The file is missing, unreadable or garbled.
    """
    path = get_playtime_path(world)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PlaytimeLoadError(f"cannot read {path}: {exc}") from exc
    try:
        seconds = int(text.strip())
    except ValueError as exc:
        raise PlaytimeLoadError(f"garbled playtime in {path}: {text!r}") from exc
    if seconds < 0:
        raise PlaytimeLoadError(f"negative playtime in {path}: {seconds}")
    return float(seconds)


def load_playtime_or_zero(world: Path) -> float:
    try:
        return load_playtime(world)
    except PlaytimeLoadError as exc:
        logger.warning("failed to read playtime: %s", exc)
        return 0.0


def save_playtime(world: Path, playtime: float) -> None:
    """Overwrite the persisted playtime with whole seconds."""
    path = get_playtime_path(world)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(str(int(playtime)), encoding="utf-8")
    except OSError as exc:
        raise PlaytimeSaveError(f"cannot write {path}: {exc}") from exc


# ── Checkpoint schedule ────────────────────────────────────────────


def checkpoint_bucket(playtime: float, interval_sec: int) -> int:
    """Index of the checkpoint interval *playtime* falls in.

    Boundaries sit :data:`CHECKPOINT_MARGIN_SEC` past each multiple of the
    interval: with a 600s interval the buckets change at 30s, 630s,
    1230s, ... so a fresh world is checkpointed shortly after play starts.
    """
    return (int(playtime) + interval_sec - CHECKPOINT_MARGIN_SEC) // interval_sec


def checkpoint_due(before: float, after: float, checkpoint_minutes: int) -> bool:
    interval = checkpoint_minutes * 60
    return checkpoint_bucket(after, interval) > checkpoint_bucket(before, interval)


# ── Session State ──────────────────────────────────────────────────


class SessionState:
    """Presence tracking and playtime accumulation for one server session.

    The owner calls :meth:`apply` for every classified event and
    :meth:`tick` for every received line, heartbeats included.
    """

    def __init__(
        self,
        world: Path,
        checkpoint_minutes: int,
        playtime: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.world = world
        self.checkpoint_minutes = checkpoint_minutes
        self.playtime = playtime
        self.online: set[str] = set()
        self.online_since: float | None = None
        self._clock = clock

    @classmethod
    def load(
        cls,
        world: Path,
        checkpoint_minutes: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> SessionState:
        playtime = load_playtime_or_zero(world)
        logger.info("have played for %d seconds", int(playtime))
        return cls(world, checkpoint_minutes, playtime=playtime, clock=clock)

    def apply(self, event: Event) -> None:
        if isinstance(event, Join):
            if not self.online:
                logger.info("started counting time")
                self.online_since = self._clock()
            logger.info("%s went online", event.player)
            self.online.add(event.player)
        elif isinstance(event, Leave):
            logger.info("%s went offline", event.player)
            self.online.discard(event.player)
            if not self.online:
                logger.info("stopped counting time")
                self.online_since = None
        elif isinstance(event, Death):
            # Deaths are handled by the penalty procedure
            pass

    def tick(self) -> bool:
        """Advance playtime if due.  Returns whether a checkpoint is due."""
        if self.online_since is None:
            return False
        now = self._clock()
        elapsed = now - self.online_since
        if elapsed <= FLUSH_THRESHOLD_SEC:
            return False

        before = self.playtime
        self.playtime += elapsed
        self.online_since = now
        logger.debug("advancing by %dms", int(elapsed * 1000))
        logger.debug("new playtime: %dms", int(self.playtime * 1000))
        save_playtime(self.world, self.playtime)
        return checkpoint_due(before, self.playtime, self.checkpoint_minutes)
