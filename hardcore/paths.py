# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Trust Hardcore, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Centralized path resolution for Trust Hardcore.

All modules derive the backup and playtime locations from here instead
of computing them ad-hoc.
"""

from __future__ import annotations

from pathlib import Path

from hardcore.exceptions import SetupError

PLAYTIME_FILENAME = "playtime.txt"


def get_backup_path(world: Path, backup_dir: Path) -> Path:
    """Return the checkpoint location for *world*: ``{backup_dir}/{world.name}``."""
    if not world.name:
        raise SetupError(f"no world name (invalid world path): {world}")
    return backup_dir / world.name


def get_playtime_path(world: Path) -> Path:
    """Playtime lives inside the world so a reset discards it and a rewind restores it."""
    return world / PLAYTIME_FILENAME
