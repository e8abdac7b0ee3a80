"""
Logging setup for Herald.

Everything logs under the ``herald`` logger. Records go to stderr, and
optionally to a rotating file, so stdout stays free for command output.
"""

import logging
import logging.handlers
import sys

PACKAGE_LOGGER = "herald"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_level(level: str | int) -> int:
    """
    Turn a level name or number into a logging level.

    Raises:
        ValueError: If the name is not one of LEVEL_NAMES
    """
    if isinstance(level, int):
        return level

    name = level.strip().upper()
    if name not in LEVEL_NAMES:
        raise ValueError(
            f"Unknown log level [{level}], expected one of {', '.join(LEVEL_NAMES)}"
        )
    return logging.getLevelName(name)


def _build_handlers(
    log_file: str | None,
    max_bytes: int,
    backup_count: int
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8"
        ))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(
    level: str | int = "INFO",
    log_file: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5
) -> logging.Logger:
    """
    Configure the herald logger, replacing any handlers from an earlier call.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        log_file: Optional rotating log file, written next to stderr
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep

    Returns:
        The configured package logger

    Raises:
        ValueError: If level is not a known level name
    """
    log_level = resolve_level(level)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(log_level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    for handler in _build_handlers(log_file, max_bytes, backup_count):
        package_logger.addHandler(handler)

    package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return the herald child logger for a module name (typically __name__)."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
