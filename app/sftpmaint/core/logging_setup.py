"""Logging configuration for sftpmaint.

Console output goes through Rich; the optional log file is rotated by
size so scheduled runs never grow it without bound.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

from sftpmaint.utils.formatting import err_console

# Logger that owns every sftpmaint.* module logger
ROOT_LOGGER_NAME = "sftpmaint"

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def parse_level(level: str) -> int:
    """Convert a level name to a logging constant.

    Raises:
        ValueError: If the name is not a known level.
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        msg = f"Invalid log level: {level}"
        raise ValueError(msg)
    return numeric_level


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    max_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the sftpmaint logger.

    Existing handlers are replaced, so calling this again (for example
    after the profiles file has been read) reconfigures cleanly.

    Args:
        level: Log level name.
        log_file: Optional log file; rotated at max_size_mb.
        max_size_mb: Rotation size in megabytes.
        backup_count: Number of rotated files to keep.

    Returns:
        The configured sftpmaint logger.

    Raises:
        ValueError: If level is not a known level name.
    """
    numeric_level = parse_level(level)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=err_console,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    console_handler.setLevel(numeric_level)
    logger.addHandler(console_handler)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning("Could not set up file logging at %s: %s", log_file, e)
        else:
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            file_handler.setLevel(numeric_level)
            logger.addHandler(file_handler)

    # paramiko logs every channel event at INFO
    logging.getLogger("paramiko").setLevel(logging.WARNING)

    return logger
