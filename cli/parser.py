# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

USAGE = "usage: trust-hardcore <config>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trust-hardcore",
        description="Trust Hardcore - permadeath supervisor for game servers",
    )
    parser.add_argument("config", type=Path, help="Path to config.json")
    parser.add_argument(
        "--log-level",
        default=os.environ.get("HARDCORE_LOG_LEVEL", "INFO"),
        help="Log level (default: INFO or HARDCORE_LOG_LEVEL)",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=os.environ.get("HARDCORE_LOG_DIR") or None,
        help="Write a rotated JSON log file into this directory",
    )
    parser.add_argument(
        "--no-console",
        action="store_true",
        help="Do not relay this terminal's input to the server console",
    )
    parser.set_defaults(func=_lazy_run)
    return parser


def cli_main(argv: list[str] | None = None) -> None:
    from dotenv import load_dotenv

    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    from hardcore.logging_config import setup_logging

    log_dir = Path(args.log_dir) if args.log_dir else None
    setup_logging(level=args.log_level, log_dir=log_dir)

    sys.exit(args.func(args))


def _lazy_run(args: argparse.Namespace) -> int:
    from cli.commands.run import cmd_run

    return cmd_run(args)
