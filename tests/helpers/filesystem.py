# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
"""Filesystem scaffolding helpers for tests.

Creates isolated world / backup / config layouts so that each test runs
against its own temporary filesystem.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

# Excerpt of a server lang file, including a non-death line.
SAMPLE_LANG = """\
{
  "death.attack.mob": "%1$s was slain by %2$s",
  "death.attack.lava": "%1$s tried to swim in lava",
  "death.fell.accident.generic": "%1$s fell from a high place",
  "death.attack.player": "%1$s was slain by %2$s",
  "death.attack.outOfWorld": "%1$s fell out of the world",
  "death.attack.generic": "%1$s died",
  "death.attack.message_too_long": "Actually, message was too long",
  "multiplayer.player.joined": "%s joined the game"
}
"""

# Config keys shared by every test; paths are filled in per test.
DEFAULT_TEST_CONFIG: dict[str, Any] = {
    "ignore_phrases": [" was killed by"],
    "make_backups": True,
    "players": ["Steve", "Alex"],
    "allow_all_players": False,
    "on_death_command": None,
    "checkpoint_minutes": 10,
    "roll_range": [1, 6],
    "deadly_rolls": [1],
    "bracket_count": 1,
}


def create_world(base: Path, name: str = "world", playtime: int | None = None) -> Path:
    """Create a small world tree under *base*."""
    world = base / name
    (world / "region").mkdir(parents=True)
    (world / "level.dat").write_bytes(b"\x0a\x00\x00level")
    (world / "region" / "r.0.0.mca").write_bytes(bytes(range(256)))
    if playtime is not None:
        (world / "playtime.txt").write_text(str(playtime))
    return world


def write_config(path: Path, **overrides: Any) -> Path:
    """Write a config.json merging *overrides* into the defaults."""
    data = dict(DEFAULT_TEST_CONFIG)
    for key, value in overrides.items():
        data[key] = str(value) if isinstance(value, Path) else value
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path
