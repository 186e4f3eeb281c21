# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Trust Hardcore, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Central configuration module for Trust Hardcore.

Defines Pydantic models for the supervisor's config.json and a loader
that turns every failure mode into a :class:`SetupError`.  The config is
re-read at the start of every session, so edits made while the server
runs take effect after the next reset.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from hardcore.events import is_username
from hardcore.exceptions import ConfigNotFoundError, ConfigValidationError
from hardcore.paths import get_backup_path

logger = logging.getLogger("hardcore.config")

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class ServerCommandsConfig(BaseModel):
    """Console commands understood by the managed server."""

    say: str = "say"
    stop: str = "stop"
    save_all: str = "save-all"
    save_off: str = "save-off"
    save_on: str = "save-on"


class HardcoreConfig(BaseModel):
    server: list[str]
    world: Path
    lang: Path
    ignore_phrases: list[str] = []
    make_backups: bool = True
    backup_dir: Path
    players: list[str] = []
    allow_all_players: bool = False
    on_death_command: str | None = None  # "{username}" is substituted
    checkpoint_minutes: int = 30
    roll_range: tuple[int, int] = (1, 6)
    deadly_rolls: list[int] = [1]
    bracket_count: int = 2
    deadly_penalty: Literal["reset", "rewind"] = "reset"
    commands: ServerCommandsConfig = ServerCommandsConfig()

    @field_validator("server")
    @classmethod
    def _validate_server(cls, value: list[str]) -> list[str]:
        if not value or not value[0]:
            raise ValueError("server launch command must not be empty")
        return value

    @field_validator("checkpoint_minutes")
    @classmethod
    def _validate_checkpoint_minutes(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("checkpoint_minutes must be a positive integer")
        return value

    @field_validator("bracket_count")
    @classmethod
    def _validate_bracket_count(cls, value: int) -> int:
        if value < 0:
            raise ValueError("bracket_count must not be negative")
        return value

    @model_validator(mode="after")
    def _validate_paths(self) -> HardcoreConfig:
        if self.world.exists() and not self.world.is_dir():
            raise ValueError(f"world must be a directory: {self.world}")
        if not self.backup_dir.is_dir():
            raise ValueError(f"backup must be a directory: {self.backup_dir}")
        if not self.world.name:
            raise ValueError(f"no world name (invalid world path): {self.world}")
        return self

    @model_validator(mode="after")
    def _validate_rolls(self) -> HardcoreConfig:
        lo, hi = self.roll_range
        if lo > hi:
            raise ValueError("start of roll range must be smaller than its end")
        for num in self.deadly_rolls:
            if num < lo or num > hi:
                logger.warning(
                    "deadly roll %d is outside of roll range [%d, %d]", num, lo, hi,
                )
        return self

    @model_validator(mode="after")
    def _warn_malformed_players(self) -> HardcoreConfig:
        for player in self.players:
            if not is_username(player):
                logger.warning(
                    "player entry %r contains characters that never appear in "
                    "a username; it will never match",
                    player,
                )
        return self

    @property
    def backup_path(self) -> Path:
        return get_backup_path(self.world, self.backup_dir)


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def load_config(path: Path) -> HardcoreConfig:
    """Load and validate configuration from *path*.

    Raises:
        ConfigNotFoundError: The file does not exist or cannot be read.
        ConfigValidationError: The file is not JSON or fails validation.
    """
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigNotFoundError(f"cannot read config {path}: {exc}") from exc

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise ConfigValidationError(f"failed to parse {path}: {exc}") from exc

    try:
        config = HardcoreConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(f"invalid config {path}: {exc}") from exc

    logger.debug("Loaded config from %s", path)
    logger.info("%d deadly players: %s", len(config.players), ", ".join(config.players))
    return config
