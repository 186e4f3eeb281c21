# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
"""Line pumps between the supervisor and the managed server.

Two single-consumer channels connect the session loop to the server:

- :class:`EventSource` merges stdout, stderr and a periodic heartbeat
  into one stream of normalized lines.
- :class:`CommandSink` collects commands from the death ritual, the
  world manager and the operator console, and a single writer task
  feeds them to the server's stdin.

Each producer keeps its own order; nothing is promised across producers.
Closing a channel makes every task attached to it stop quietly.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from collections.abc import AsyncIterator, Callable
from typing import BinaryIO

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL_SEC = 10.0

Echo = Callable[[str], None]


class _Sentinel:
    """Queue termination marker."""

    __slots__ = ()


_SENTINEL = _Sentinel()


def normalize_line(raw: bytes) -> str:
    """Trim ASCII whitespace and decode, replacing invalid UTF-8."""
    return raw.strip().decode("utf-8", errors="replace")


def echo_line(line: str) -> None:
    print(line, flush=True)


# ── Channels ───────────────────────────────────────────────────────


class _Channel:
    """Unbounded FIFO with a close marker.

    ``send`` never blocks and reports whether the item was accepted.
    Must be used from the event loop thread; other threads go through
    ``loop.call_soon_threadsafe``.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | _Sentinel] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: str) -> bool:
        if self._closed:
            return False
        self._queue.put_nowait(item)
        return True

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_SENTINEL)

    async def get(self) -> str | None:
        """Next item in order, or None once the channel is closed and drained."""
        item = await self._queue.get()
        if isinstance(item, _Sentinel):
            # Keep the marker for any later get()
            self._queue.put_nowait(item)
            return None
        return item


class CommandSink(_Channel):
    """Commands bound for the server's stdin.

    Sending is fire-and-forget: the result may be ignored and a dead
    server silently drops everything.
    """


class EventSource(_Channel):
    """Lines coming out of the server, plus empty heartbeat lines."""

    def __aiter__(self) -> AsyncIterator[str]:
        return self

    async def __anext__(self) -> str:
        line = await self.get()
        if line is None:
            raise StopAsyncIteration
        return line


# ── Producers / consumers ──────────────────────────────────────────


async def pump_lines(
    stream: asyncio.StreamReader,
    source: EventSource,
    echo: Echo | None = echo_line,
) -> None:
    """Forward every line of *stream* onto *source* until EOF."""
    while True:
        try:
            raw = await stream.readline()
        except ValueError:
            # Line exceeded the reader limit; the oversized chunk is discarded
            logger.warning("Dropped an over-long server line")
            continue
        if not raw:
            return
        line = normalize_line(raw)
        if echo is not None:
            echo(line)
        if not source.send(line):
            return


async def heartbeat(
    source: EventSource,
    interval: float = HEARTBEAT_INTERVAL_SEC,
) -> None:
    """Wake the consumer periodically so playtime keeps ticking."""
    while True:
        await asyncio.sleep(interval)
        if not source.send(""):
            return


async def command_writer(sink: CommandSink, stdin: asyncio.StreamWriter) -> None:
    """Write queued commands to the server, one per line."""
    try:
        while True:
            command = await sink.get()
            if command is None:
                break
            logger.debug("-> server: %s", command)
            stdin.write(f"{command}\n".encode("utf-8"))
            await stdin.drain()
    except (BrokenPipeError, ConnectionResetError) as exc:
        logger.debug("Server stdin closed, dropping further commands: %s", exc)
    finally:
        sink.close()
        try:
            stdin.close()
        except (BrokenPipeError, ConnectionResetError, RuntimeError):
            logger.debug("stdin close error", exc_info=True)


# ── Console relay ──────────────────────────────────────────────────


class ConsoleRelay:
    """Forward the operator's own stdin to the current session's sink.

    One daemon thread lives for the whole program and is re-attached to
    every new session, so restarts never lose a typed line.  Lines typed
    while no session is attached are dropped.
    """

    def __init__(self, stream: BinaryIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()
        self._target: tuple[asyncio.AbstractEventLoop, CommandSink] | None = None
        self._thread: threading.Thread | None = None

    @classmethod
    def start(cls, stream: BinaryIO | None = None) -> ConsoleRelay:
        relay = cls(stream)
        relay._thread = threading.Thread(
            target=relay._run, name="console-relay", daemon=True,
        )
        relay._thread.start()
        return relay

    def attach(self, sink: CommandSink) -> None:
        loop = asyncio.get_running_loop()
        with self._lock:
            self._target = (loop, sink)

    def detach(self) -> None:
        with self._lock:
            self._target = None

    def forward(self, line: str) -> bool:
        """Hand *line* to the attached sink.  Safe to call from any thread."""
        with self._lock:
            target = self._target
        if target is None:
            logger.debug("No server attached, dropping console line: %s", line)
            return False
        loop, sink = target
        try:
            loop.call_soon_threadsafe(sink.send, line)
        except RuntimeError:
            # Event loop already closed
            return False
        return True

    def _run(self) -> None:
        stream = self._stream if self._stream is not None else sys.stdin.buffer
        for raw in stream:
            self.forward(normalize_line(raw))
        logger.debug("Console input closed")
