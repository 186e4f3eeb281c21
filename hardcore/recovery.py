# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Trust Hardcore, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""World checkpoints, resets and rewinds.

Every mutation of the world directory happens while the server is either
paused (``save-off``) or stopped.  Nothing else writes to the world or
backup directories, so no locking is done here.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from hardcore.config import ServerCommandsConfig
from hardcore.exceptions import RecoveryError
from hardcore.penalty import Penalty, Sleep

if TYPE_CHECKING:
    from hardcore.supervisor.pump import CommandSink
    from hardcore.supervisor.process_handle import ServerProcess

logger = logging.getLogger(__name__)


# ── Filesystem helpers ─────────────────────────────────────────────


def copy_tree(src: Path, dst: Path) -> int:
    """Recursively copy regular files and directories from *src* into *dst*.

    Missing destination directories are created.  Symbolic links and
    special files (sockets, FIFOs, devices) are skipped with a warning.

    Returns:
        Number of files copied.
    """
    dst.mkdir(parents=True, exist_ok=True)
    copied = 0
    with os.scandir(src) as entries:
        for entry in entries:
            target = dst / entry.name
            if entry.is_symlink():
                logger.warning("Skipping symbolic link during copy: %s", entry.path)
            elif entry.is_dir(follow_symlinks=False):
                copied += copy_tree(Path(entry.path), target)
            elif entry.is_file(follow_symlinks=False):
                shutil.copyfile(entry.path, target)
                copied += 1
            else:
                logger.warning("Skipping special file during copy: %s", entry.path)
    return copied


def remove_tree(path: Path) -> bool:
    """Delete *path* and everything under it.  Returns False if absent."""
    if not path.exists() and not path.is_symlink():
        return False
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    return True


# ── World Manager ──────────────────────────────────────────────────


class WorldManager:
    """Checkpoint and recovery operations for one world directory."""

    def __init__(
        self,
        world: Path,
        backup: Path,
        sink: CommandSink,
        commands: ServerCommandsConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.world = world
        self.backup = backup
        self.sink = sink
        self.commands = commands or ServerCommandsConfig()
        self._sleep = sleep

    def _say(self, message: str) -> None:
        self.sink.send(f"{self.commands.say} {message}")

    def has_backup(self) -> bool:
        return self.backup.is_dir()

    async def _remove(self, path: Path, operation: str) -> None:
        logger.info("deleting %s directory on %s", operation, path)
        try:
            await asyncio.to_thread(remove_tree, path)
        except OSError as exc:
            raise RecoveryError(
                f"failed to delete {operation} directory {path}: {exc}",
                operation=f"delete {operation}",
            ) from exc

    async def _copy(self, src: Path, dst: Path, operation: str) -> None:
        logger.info("copying %s to %s", src, dst)
        try:
            copied = await asyncio.to_thread(copy_tree, src, dst)
        except OSError as exc:
            raise RecoveryError(
                f"failed to copy {src} to {dst}: {exc}", operation=operation,
            ) from exc
        logger.debug("copied %d files", copied)

    async def _stop_server(self, process: ServerProcess, announcement: str) -> None:
        self._say(announcement)
        await self._sleep(2.0)
        self.sink.send(self.commands.stop)
        # No timeout: a wedged server blocks here
        returncode = await process.wait()
        logger.info("server stopped (code=%s)", returncode)

    async def make_backup(self) -> None:
        """Replace the checkpoint with a fresh copy of the world."""
        logger.info("making backup")
        await self._remove(self.backup, "backup")

        self.sink.send(self.commands.save_all)
        await self._sleep(5.0)
        self.sink.send(self.commands.save_off)
        await self._sleep(1.0)

        await self._copy(self.world, self.backup, "backup")

        self.sink.send(self.commands.save_on)
        self._say("Checkpoint!")

    async def reset(self, process: ServerProcess) -> None:
        """Stop the server and delete the world along with any checkpoint."""
        logger.info("resetting world")
        await self._stop_server(process, "Destroying world...")
        await self._remove(self.world, "world")
        await self._remove(self.backup, "backup")

    async def rewind(self, process: ServerProcess) -> None:
        """Stop the server and restore the world from the checkpoint.

        Without a checkpoint this is a :meth:`reset`.
        """
        if not self.has_backup():
            logger.warning("no backup at %s to rewind to, resetting instead", self.backup)
            await self.reset(process)
            return

        logger.info("restoring backup")
        await self._stop_server(process, "Winding back...")
        await self._remove(self.world, "world")
        await self._copy(self.backup, self.world, "restore")

    async def recover(self, penalty: Penalty, process: ServerProcess) -> bool:
        """Carry out *penalty*.  Returns whether the server should restart."""
        if penalty is Penalty.REWIND:
            await self.rewind(process)
            return True
        if penalty is Penalty.RESET:
            await self.reset(process)
            return True
        return False
