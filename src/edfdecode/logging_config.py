"""
Logging setup for the edfdecode command line.

Library modules only ever call ``logging.getLogger(__name__)``, so every
record they emit lands under the ``edfdecode`` package logger. This module
owns the other half of that split: it decides which handlers hang off the
package logger. The root logger is left alone so an embedding application
keeps its own configuration.

The console handler always exists. A rotating file handler is added only
when the ``[logging]`` config table sets ``enabled = true``.
"""

import logging
import logging.config
import os

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from edfdecode.constants import (
    DEFAULT_LOG_BACKUP_COUNT,
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_FILE,
    DEFAULT_LOG_MAX_SIZE_MB,
)

PACKAGE_LOGGER = "edfdecode"
DEFAULT_CONSOLE_FORMAT = "%(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)

_configured = False


class FileLogSettings(BaseModel):
    """The ``[logging]`` config table."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    enabled: bool = False
    level: str = "DEBUG"
    max_size_mb: int = Field(default=DEFAULT_LOG_MAX_SIZE_MB, gt=0)
    backup_count: int = Field(default=DEFAULT_LOG_BACKUP_COUNT, ge=0)

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def from_config(cls) -> "FileLogSettings":
        """Read the table from the config file; bad values fall back to defaults."""
        from edfdecode.config import load_config

        table = load_config().get("logging", {})
        if not isinstance(table, dict):
            table = {}
        try:
            return cls.model_validate(table)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid [logging] settings: {e}")
            return cls()


def get_log_path() -> Path:
    """Path of the rotating log file, creating its directory if needed."""
    os.makedirs(DEFAULT_LOG_DIR, mode=0o700, exist_ok=True)
    return DEFAULT_LOG_DIR / DEFAULT_LOG_FILE


def console_handler(verbose: bool) -> dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "level": "DEBUG" if verbose else "WARNING",
        "formatter": "console",
        "stream": "ext://sys.stderr",
    }


def file_handler(settings: FileLogSettings) -> dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": settings.level,
        "formatter": "file",
        "filename": str(get_log_path()),
        "maxBytes": settings.max_size_mb * 1024 * 1024,
        "backupCount": settings.backup_count,
        "encoding": "utf-8",
    }


def build_logging_config(
    settings: FileLogSettings,
    *,
    verbose: bool = False,
    console_format: str = DEFAULT_CONSOLE_FORMAT,
) -> dict[str, Any]:
    """
    Build a dictConfig mapping that wires handlers to the package logger.

    Args:
        settings: File handler settings
        verbose: Lower the console threshold to DEBUG
        console_format: Console format string

    Returns:
        Dictionary suitable for logging.config.dictConfig()
    """
    handlers = {"console": console_handler(verbose)}
    if settings.enabled:
        handlers["file"] = file_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": console_format},
            "file": {"format": FILE_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            PACKAGE_LOGGER: {
                "level": "DEBUG",
                "handlers": list(handlers),
                "propagate": False,
            },
        },
    }


def setup_logging(
    *,
    verbose: bool = False,
    console_format: str = DEFAULT_CONSOLE_FORMAT,
) -> None:
    """
    Attach handlers to the package logger once per process.

    If the configuration cannot be applied (for example an unwritable log
    directory), a plain stderr handler is attached instead.
    """
    global _configured

    if _configured:
        return
    _configured = True

    try:
        config = build_logging_config(
            FileLogSettings.from_config(),
            verbose=verbose,
            console_format=console_format,
        )
        logging.config.dictConfig(config)
    except (OSError, ValueError) as e:
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(console_format))
        handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG)
        package_logger.propagate = False
        package_logger.warning(f"Failed to configure logging: {e}")
