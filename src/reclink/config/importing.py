"""Import behaviour configuration values."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .env import read_bool_env
from .errors import ConfigurationError

DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True, slots=True)
class ImportConfig:
    """Knobs for the import run that are not part of a single request."""

    strip_stale_id: bool = False
    log_level: int = logging.INFO


def get_import_config() -> ImportConfig:
    level_name = (os.getenv("RECLINK_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelNamesMapping().get(level_name)
    if level is None:
        raise ConfigurationError(f"Unknown log level: {level_name}")
    return ImportConfig(
        strip_stale_id=read_bool_env("RECLINK_STRIP_STALE_ID"),
        log_level=level,
    )
