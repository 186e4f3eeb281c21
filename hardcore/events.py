# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Trust Hardcore, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Log line classification.

Server log lines look like::

    [12:34:56] [Server thread/INFO]: Steve was slain by Zombie

The classifier strips a configured number of ``[...]`` prefixes, takes
the first run of username characters as the player and matches the rest
of the line against literal prefixes.  There is no grammar beyond that.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hardcore.config import HardcoreConfig

USERNAME_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_-0123456789"
)

JOINED_SUFFIX = " joined the game"
LEFT_SUFFIX = " left the game"


def is_username(name: str) -> bool:
    """Whether *name* could ever be extracted from a log line."""
    return bool(name) and all(c in USERNAME_CHARS for c in name)


# ── Events ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Join:
    player: str


@dataclass(frozen=True)
class Leave:
    player: str


@dataclass(frozen=True)
class Death:
    player: str


@dataclass(frozen=True)
class Ignored:
    pass


Event = Join | Leave | Death | Ignored

IGNORED = Ignored()


# ── Normalization ──────────────────────────────────────────────────


def strip_brackets(line: str, count: int) -> str | None:
    """Drop *count* leading ``[...]`` segments, or None if there are too few."""
    for _ in range(count):
        bracket = line.find("]")
        if bracket < 0:
            return None
        line = line[bracket + 1:]
    return line


def split_username(line: str) -> tuple[str, str] | None:
    """Split *line* into ``(username, message)``.

    Leading non-username characters are skipped.  The message keeps its
    leading space so suffixes like ``" joined the game"`` match exactly.
    """
    start = next((i for i, c in enumerate(line) if c in USERNAME_CHARS), None)
    if start is None:
        return None
    end = start
    while end < len(line) and line[end] in USERNAME_CHARS:
        end += 1
    return line[start:end], line[end:]


def _starts_with_any(message: str, prefixes: Iterable[str]) -> bool:
    """Exact prefix match, ignoring leading whitespace on both sides.

    Lang templates carry the space after the player name (``" was slain
    by"``) while hand-written config phrases usually don't.
    """
    body = message.lstrip()
    return any(body.startswith(p.lstrip()) for p in prefixes)


# ── Classification ─────────────────────────────────────────────────


def classify(
    line: str,
    config: HardcoreConfig,
    templates: Iterable[str],
) -> Event:
    """Classify a single normalized server line."""
    stripped = strip_brackets(line, config.bracket_count)
    if stripped is None:
        return IGNORED

    parts = split_username(stripped)
    if parts is None:
        return IGNORED
    username, message = parts

    if not config.allow_all_players and username not in config.players:
        return IGNORED

    # Ignore phrases take priority over death templates.
    if _starts_with_any(message, config.ignore_phrases):
        return IGNORED
    if _starts_with_any(message, templates):
        return Death(username)
    if message.startswith(JOINED_SUFFIX):
        return Join(username)
    if message.startswith(LEFT_SUFFIX):
        return Leave(username)
    return IGNORED
