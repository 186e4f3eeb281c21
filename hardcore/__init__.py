# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
"""Permadeath supervisor for long-running game servers."""

__version__ = "0.1.0"
