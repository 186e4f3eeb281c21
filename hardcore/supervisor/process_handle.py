"""
Process handle for the managed game server.
"""

# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from hardcore.exceptions import SpawnError
from hardcore.supervisor.pump import (
    HEARTBEAT_INTERVAL_SEC,
    CommandSink,
    Echo,
    EventSource,
    command_writer,
    echo_line,
    heartbeat,
    pump_lines,
)

logger = logging.getLogger(__name__)

# Server log lines can be long (stack traces, chat spam)
STREAM_LIMIT = 1024 * 1024


# ── Process Handle ──────────────────────────────────────────────────

class ServerProcess:
    """
    Handle for one run of the managed server.

    Owns the child process and the pump tasks attached to its pipes.
    Never reused: a restart spawns a fresh handle.
    """

    def __init__(
        self,
        command: Sequence[str],
        process: asyncio.subprocess.Process,
        sink: CommandSink,
        source: EventSource,
        tasks: list[asyncio.Task],
    ):
        self.command = list(command)
        self.process = process
        self.sink = sink
        self.source = source
        self._tasks = tasks

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def returncode(self) -> int | None:
        return self.process.returncode

    def has_exited(self) -> bool:
        return self.process.returncode is not None

    async def wait(self) -> int:
        """Block until the server exits.  There is no timeout."""
        return await self.process.wait()

    async def aclose(self) -> None:
        """Close both channels and stop every pump task.

        A server still running at this point is orphaned by a fatal
        error and gets SIGTERM.
        """
        if not self.has_exited():
            logger.warning("Terminating orphaned server (PID %s)", self.pid)
            try:
                self.process.terminate()
            except ProcessLookupError:
                pass
            await self.wait()

        self.sink.close()
        self.source.close()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()


async def start_server(
    command: Sequence[str],
    *,
    echo: Echo | None = echo_line,
    heartbeat_interval: float = HEARTBEAT_INTERVAL_SEC,
) -> tuple[ServerProcess, CommandSink, EventSource]:
    """
    Spawn the server with all three standard streams piped.

    Returns:
        The process handle, its command sink and its event source.

    Raises:
        SpawnError: The executable could not be launched.
    """
    if not command or not command[0]:
        raise SpawnError("empty server command")

    logger.info("starting server using command %s", list(command))
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=STREAM_LIMIT,
        )
    except OSError as exc:
        raise SpawnError(f"failed to launch {command[0]!r}: {exc}") from exc
    logger.info("Server started (PID %s)", process.pid)

    sink = CommandSink()
    source = EventSource()
    tasks = [
        asyncio.create_task(pump_lines(process.stdout, source, echo), name="pump-stdout"),
        asyncio.create_task(pump_lines(process.stderr, source, echo), name="pump-stderr"),
        asyncio.create_task(heartbeat(source, heartbeat_interval), name="heartbeat"),
        asyncio.create_task(command_writer(sink, process.stdin), name="command-writer"),
    ]
    return ServerProcess(command, process, sink, source, tasks), sink, source
