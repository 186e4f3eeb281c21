# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from hardcore.config.models import (
    HardcoreConfig,
    ServerCommandsConfig,
    load_config,
)

__all__ = [
    "HardcoreConfig",
    "ServerCommandsConfig",
    "load_config",
]
