# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
"""
Server supervision package.

Spawns the managed game server, pumps its standard streams through
single-consumer channels and runs sessions until one ends peacefully.
"""

from __future__ import annotations

from hardcore.supervisor.manager import HardcoreSupervisor
from hardcore.supervisor.process_handle import ServerProcess, start_server
from hardcore.supervisor.pump import CommandSink, ConsoleRelay, EventSource

__all__ = [
    "CommandSink",
    "ConsoleRelay",
    "EventSource",
    "HardcoreSupervisor",
    "ServerProcess",
    "start_server",
]
