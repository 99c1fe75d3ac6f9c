from __future__ import annotations

import logging
import os
from typing import Optional

from .config_loader import ExtractorConfig

LOG_LEVEL_ENV = "CONTACT_EXTRACTOR_LOG_LEVEL"


def _resolve_level(level_name: Optional[str]) -> int:
    """Map ``"debug"``, ``"15"`` and the like to a numeric level; anything unknown is INFO."""
    name = (level_name or "INFO").strip().upper()
    if name.isdigit():
        return int(name)
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(config: ExtractorConfig, level_override: Optional[str] = None) -> None:
    """
    Set the root level for an extraction run.

    The level comes from ``CONTACT_EXTRACTOR_LOG_LEVEL`` when set, then the
    ``--log-level`` flag, then ``logging.level`` in the YAML config, then
    WARNING. Handlers are only installed (with ``logging.format``) when the
    host application has not configured any; otherwise just the level moves.
    """
    level = _resolve_level(
        os.getenv(LOG_LEVEL_ENV) or level_override or config.logging.level or "WARNING"
    )
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return
    logging.basicConfig(level=level, format=config.logging.format)
