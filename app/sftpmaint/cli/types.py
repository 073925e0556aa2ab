"""Shared types and utilities for CLI commands.

This module provides the option enums and the logging setup shared by
the command modules.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from sftpmaint.core.config import LoggingSettings
from sftpmaint.core.logging_setup import setup_logging
from sftpmaint.core.paths import get_log_path


class LogLevel(str, Enum):
    """Log levels accepted on the command line."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


def resolve_log_level(obj: dict[str, Any], settings: LoggingSettings | None = None) -> str:
    """Pick the effective log level.

    --verbose and --quiet win over --log-level, which wins over the
    profiles file.

    Args:
        obj: Typer context object holding the global options.
        settings: Logging section of the profiles file, if loaded.

    Returns:
        Log level name.
    """
    if obj.get("verbose"):
        return "DEBUG"
    if obj.get("quiet"):
        return "WARNING"
    level: LogLevel | None = obj.get("log_level")
    if level is not None:
        return level.value
    if settings is not None:
        return settings.level
    return "INFO"


def configure_logging(obj: dict[str, Any], settings: LoggingSettings | None = None) -> None:
    """Set up logging from the global options and the profiles file.

    Without a profiles file only console logging is enabled, unless
    --log-file was given. Once the profiles file is loaded the log file
    falls back to its [logging] section and then to the XDG state path.

    Args:
        obj: Typer context object holding the global options.
        settings: Logging section of the profiles file, if loaded.
    """
    log_file: Path | None = obj.get("log_file")
    if log_file is None and settings is not None:
        log_file = Path(settings.file).expanduser() if settings.file else get_log_path()

    setup_logging(
        resolve_log_level(obj, settings),
        log_file,
        max_size_mb=settings.max_size_mb if settings else 10,
        backup_count=settings.backup_count if settings else 5,
    )
