# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
"""Global test fixtures for Trust Hardcore tests.

Provides filesystem isolation (world, backup directory, lang file and
config.json under ``tmp_path``) and a recording command sink.
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from tests.helpers.filesystem import SAMPLE_LANG, create_world, write_config

logger = logging.getLogger(__name__)


class RecordingSink:
    """Stand-in for CommandSink that keeps every command in order."""

    def __init__(self) -> None:
        self.commands: list[str] = []

    def send(self, command: str) -> bool:
        self.commands.append(command)
        return True


# ── Fixtures ──────────────────────────────────────────────


@pytest.fixture
def world(tmp_path: Path) -> Path:
    return create_world(tmp_path)


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    d = tmp_path / "backups"
    d.mkdir()
    return d


@pytest.fixture
def lang_file(tmp_path: Path) -> Path:
    path = tmp_path / "en_us.json"
    path.write_text(SAMPLE_LANG, encoding="utf-8")
    return path


@pytest.fixture
def config_path(tmp_path: Path, world: Path, backup_dir: Path, lang_file: Path) -> Path:
    """config.json pointing at the temporary world, backups and lang file."""
    return write_config(
        tmp_path / "config.json",
        server=["java", "-jar", "server.jar", "nogui"],
        world=world,
        lang=lang_file,
        backup_dir=backup_dir,
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep that records delays without waiting."""
    return AsyncMock(return_value=None)
