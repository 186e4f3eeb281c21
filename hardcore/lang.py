# Trust Hardcore - Permadeath Server Supervisor
# Copyright (C) 2026 Trust Hardcore Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of Trust Hardcore, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Death message templates extracted from a server language file.

Works on any line-oriented source, including the JSON lang files shipped
with the server jar::

    "death.attack.mob": "%1$s was slain by %2$s",

yields the template ``" was slain by"``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from hardcore.exceptions import TemplateLoadError

logger = logging.getLogger(__name__)

DEATH_MARKER = "death."
PLAYER_TOKEN = "%1$s"


def _template_length(msg: str) -> int:
    for i, c in enumerate(msg):
        if not (c.isalnum() or c.isspace() or c == "'"):
            return i
    return len(msg)


def parse_template_line(line: str) -> str | None:
    """Extract the death template from one lang line, if it holds one."""
    if DEATH_MARKER not in line:
        return None
    idx = line.find(PLAYER_TOKEN)
    if idx < 0:
        return None
    msg = line[idx + len(PLAYER_TOKEN):]
    return msg[:_template_length(msg)].rstrip()


def parse_lang(text: str) -> tuple[str, ...]:
    """Collect death templates from lang file *text*, in file order.

    Empty templates are dropped: an empty prefix matches every line.
    """
    templates: list[str] = []
    for line in text.splitlines():
        template = parse_template_line(line)
        if template is None:
            continue
        if not template:
            logger.debug("Skipping empty death template from line: %s", line.strip())
            continue
        templates.append(template)
    return tuple(templates)


def load_death_messages(path: Path) -> tuple[str, ...]:
    """Read *path* and return its death templates."""
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise TemplateLoadError(f"cannot read lang file {path}: {exc}") from exc

    templates = parse_lang(text)
    logger.info("%d death messages loaded from %s", len(templates), path)
    for template in templates:
        logger.debug("    %r", template)
    return templates
