# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
"""End-to-end tests for HardcoreSupervisor with a scripted fake server.

The fake server prints a planned set of log lines per run, records what
it receives on stdin and exits when it reads the planned exit line.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from hardcore.exceptions import ConfigNotFoundError, SpawnError
from hardcore.supervisor import HardcoreSupervisor
from tests.helpers.filesystem import write_config

FAKE_SERVER = """
import json
import sys
from pathlib import Path

here = Path(sys.argv[1])
runs_file = here / "runs"
run = int(runs_file.read_text()) if runs_file.exists() else 0
runs_file.write_text(str(run + 1))
plan = json.loads((here / "plan.json").read_text())[run]

for line in plan["print"]:
    print(line, flush=True)
exit_on = plan.get("exit_on")
if exit_on is None:
    sys.exit(0)

with open(here / f"stdin.{run}.log", "a") as log:
    for line in sys.stdin:
        line = line.rstrip("\\n")
        log.write(line + "\\n")
        log.flush()
        if line == exit_on:
            print("[INFO] Stopping server", flush=True)
            break
"""


class SteppingClock:
    """Monotonic clock that jumps *step* seconds on every read."""

    def __init__(self, step: float) -> None:
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


def _rng(value: int) -> MagicMock:
    rng = MagicMock()
    rng.randint.return_value = value
    return rng


def _received(tmp_path: Path, run: int) -> list[str]:
    path = tmp_path / "fake" / f"stdin.{run}.log"
    if not path.exists():
        return []
    return path.read_text().splitlines()


@pytest.fixture
def fake_server(tmp_path: Path):
    """Write the fake server and return a function that installs a plan."""
    home = tmp_path / "fake"
    home.mkdir()
    script = home / "server.py"
    script.write_text(FAKE_SERVER, encoding="utf-8")

    def _install(plan: list[dict[str, Any]]) -> list[str]:
        (home / "plan.json").write_text(json.dumps(plan), encoding="utf-8")
        return [sys.executable, "-u", str(script), str(home)]

    return _install


def _supervisor(config_path: Path, rng_value: int, **kwargs) -> HardcoreSupervisor:
    return HardcoreSupervisor(
        config_path,
        rng=_rng(rng_value),
        sleep=AsyncMock(return_value=None),
        echo=None,
        heartbeat_interval=0.05,
        **kwargs,
    )


def _config(tmp_path: Path, world: Path, backup_dir: Path, lang_file: Path, server, **extra) -> Path:
    return write_config(
        tmp_path / "config.json",
        server=server,
        world=world,
        lang=lang_file,
        backup_dir=backup_dir,
        **extra,
    )


class TestSupervisor:
    @pytest.mark.asyncio
    async def test_safe_roll_keeps_world(
        self, tmp_path: Path, world: Path, backup_dir: Path, lang_file: Path, fake_server,
    ):
        server = fake_server([
            {"print": ["[INFO] Steve was slain by Zombie"], "exit_on": "say Rolled 4"},
        ])
        config = _config(tmp_path, world, backup_dir, lang_file, server)
        supervisor = _supervisor(config, rng_value=4)

        await asyncio.wait_for(supervisor.run(), timeout=30)

        assert supervisor.session_count == 1
        assert world.is_dir()
        assert _received(tmp_path, 0) == [
            "say Steve died",
            "say Rolling dice...",
            "say Rolled 4",
        ]

    @pytest.mark.asyncio
    async def test_deadly_roll_resets_and_restarts(
        self, tmp_path: Path, world: Path, backup_dir: Path, lang_file: Path, fake_server,
    ):
        backup = backup_dir / "world"
        backup.mkdir()
        (backup / "level.dat").write_text("checkpoint")
        server = fake_server([
            {
                "print": [
                    "[INFO] Steve joined the game",
                    "[INFO] Steve was slain by Zombie",
                    "[INFO] Alex was slain by Zombie",
                ],
                "exit_on": "stop",
            },
            {"print": ["[INFO] Done"], "exit_on": None},
        ])
        (world / "playtime.txt").write_text("900")
        config = _config(tmp_path, world, backup_dir, lang_file, server)
        supervisor = _supervisor(config, rng_value=1)
        starts: list[float] = []
        supervisor.on_session_start = lambda state: starts.append(state.playtime)

        await asyncio.wait_for(supervisor.run(), timeout=30)

        assert supervisor.session_count == 2
        # The restarted session re-reads playtime from the wiped world
        assert starts == [900.0, 0.0]
        assert not world.exists()
        assert not backup.exists()
        # Only one ritual: consumption stops at the first deadly verdict
        assert _received(tmp_path, 0) == [
            "say Steve died",
            "say Rolling dice...",
            "say Rolled 1",
            "say Always lucky boii",
            "say Destroying world...",
            "stop",
        ]

    @pytest.mark.asyncio
    async def test_rewind_restores_checkpoint(
        self, tmp_path: Path, world: Path, backup_dir: Path, lang_file: Path, fake_server,
    ):
        backup = backup_dir / "world"
        backup.mkdir()
        (backup / "level.dat").write_text("checkpoint")
        (backup / "playtime.txt").write_text("600")
        server = fake_server([
            {"print": ["[INFO] Alex fell from a high place"], "exit_on": "stop"},
            {"print": [], "exit_on": None},
        ])
        (world / "playtime.txt").write_text("900")
        config = _config(
            tmp_path, world, backup_dir, lang_file, server, deadly_penalty="rewind",
        )
        supervisor = _supervisor(config, rng_value=1)
        starts: list[float] = []
        supervisor.on_session_start = lambda state: starts.append(state.playtime)

        await asyncio.wait_for(supervisor.run(), timeout=30)

        assert supervisor.session_count == 2
        assert starts == [900.0, 600.0]
        assert (world / "level.dat").read_text() == "checkpoint"
        assert not (world / "region").exists()
        assert backup.is_dir()
        assert _received(tmp_path, 0)[-2:] == ["say Winding back...", "stop"]

    @pytest.mark.asyncio
    async def test_checkpoint_when_playtime_crosses_interval(
        self, tmp_path: Path, world: Path, backup_dir: Path, lang_file: Path, fake_server,
    ):
        server = fake_server([
            {
                "print": ["[INFO] Steve joined the game", "[INFO] Steve placed a block"],
                "exit_on": "say Checkpoint!",
            },
        ])
        config = _config(tmp_path, world, backup_dir, lang_file, server)
        supervisor = _supervisor(config, rng_value=4, clock=SteppingClock(700))

        await asyncio.wait_for(supervisor.run(), timeout=30)

        backup = backup_dir / "world"
        assert (backup / "level.dat").read_bytes() == (world / "level.dat").read_bytes()
        assert (backup / "region" / "r.0.0.mca").exists()
        assert int((world / "playtime.txt").read_text()) >= 700
        assert _received(tmp_path, 0)[:4] == [
            "save-all", "save-off", "save-on", "say Checkpoint!",
        ]

    @pytest.mark.asyncio
    async def test_console_relay_is_attached_and_detached(
        self, tmp_path: Path, world: Path, backup_dir: Path, lang_file: Path, fake_server,
    ):
        server = fake_server([{"print": ["[INFO] Done"], "exit_on": None}])
        config = _config(tmp_path, world, backup_dir, lang_file, server)
        relay = MagicMock()
        supervisor = _supervisor(config, rng_value=4, console=relay)

        await asyncio.wait_for(supervisor.run(), timeout=30)

        relay.attach.assert_called_once()
        relay.detach.assert_called_once()


class TestSetupFailures:
    @pytest.mark.asyncio
    async def test_missing_config(self, tmp_path: Path):
        supervisor = _supervisor(tmp_path / "missing.json", rng_value=4)
        with pytest.raises(ConfigNotFoundError):
            await supervisor.run()

    @pytest.mark.asyncio
    async def test_unlaunchable_server(
        self, tmp_path: Path, world: Path, backup_dir: Path, lang_file: Path,
    ):
        config = _config(
            tmp_path, world, backup_dir, lang_file, [str(tmp_path / "no-such-server")],
        )
        supervisor = _supervisor(config, rng_value=4)
        with pytest.raises(SpawnError):
            await supervisor.run()
        assert supervisor.session_count == 1
