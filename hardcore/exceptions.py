from __future__ import annotations
# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Trust Hardcore, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Unified exception hierarchy for Trust Hardcore.

All domain-specific exceptions derive from :class:`HardcoreError`,
enabling callers to catch the entire family with a single clause::

    try:
        ...
    except HardcoreError as e:
        logger.error("Domain error: %s", e)
"""


class HardcoreError(Exception):
    """Base exception for all Trust Hardcore errors."""


# ── Setup ────────────────────────────────────────────────────


class SetupError(HardcoreError):
    """Setup errors.  Fatal before any session starts."""


class ConfigNotFoundError(SetupError):
    """Configuration file not found or unreadable."""


class ConfigValidationError(SetupError):
    """Configuration validation failure."""


class TemplateLoadError(SetupError):
    """Death message source could not be read."""


# ── Process ──────────────────────────────────────────────────


class ProcessError(HardcoreError):
    """Managed server process errors."""


class SpawnError(ProcessError):
    """The server executable could not be launched."""


# ── Playtime ─────────────────────────────────────────────────


class PlaytimeError(HardcoreError):
    """Persisted playtime errors."""


class PlaytimeLoadError(PlaytimeError):
    """Persisted playtime is missing or garbled."""


class PlaytimeSaveError(PlaytimeError):
    """Persisted playtime could not be written."""


# ── Recovery ─────────────────────────────────────────────────


class RecoveryError(HardcoreError):
    """Filesystem failure during backup, restore or delete.

    Carries the operation name so the top-level report can say which
    step of the recovery sequence was interrupted.
    """

    def __init__(self, message: str, *, operation: str = "") -> None:
        super().__init__(message)
        self.operation = operation
