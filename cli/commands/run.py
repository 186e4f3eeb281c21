# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import traceback

logger = logging.getLogger("hardcore")


def report_error(exc: BaseException) -> None:
    """Print a summary, the full error and a usage hint to stderr."""
    from cli.parser import USAGE
    from hardcore.exceptions import RecoveryError

    err = sys.stderr
    print(f"error running program: {exc}", file=err)
    if isinstance(exc, RecoveryError) and exc.operation:
        print(f"interrupted during: {exc.operation}", file=err)
    print(file=err)
    print(f"full error: {exc!r}", file=err)
    traceback.print_exception(exc, file=err)
    print(file=err)
    print(USAGE, file=err)


def cmd_run(args: argparse.Namespace) -> int:
    """Supervise the configured server until it exits without a penalty.

    Returns the process exit status.
    """
    from hardcore.exceptions import HardcoreError
    from hardcore.supervisor import ConsoleRelay, HardcoreSupervisor

    relay = None if args.no_console else ConsoleRelay.start()
    supervisor = HardcoreSupervisor(args.config, console=relay)

    try:
        asyncio.run(supervisor.run())
    except (HardcoreError, OSError) as exc:
        report_error(exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    logger.info("Supervisor finished after %d session(s)", supervisor.session_count)
    return 0
