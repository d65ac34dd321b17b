"""
cmdtree logging helpers.

Overview
- get_logger(name): module loggers under the "cmdtree" namespace.
- setup_logging(level=None): attach a rich handler to the package logger.
  When level is omitted, CMDTREE_LOG_LEVEL is consulted ("DEBUG", "info", "10", ...)
  and WARNING is used when it is unset or unreadable.

Notes
- The library never configures the root logger; hosts that already manage
  logging can ignore setup_logging() entirely.
- setup_logging() is idempotent: the handler it installs replaces the previous one.
"""
import logging
import os

from rich.logging import RichHandler

from .faults import console

LOGGER_NAME = "cmdtree"
ENVIRONMENT_VARIABLE = "CMDTREE_LOG_LEVEL"


def resolve_env_log_level():
    """
    Return a logging level from CMDTREE_LOG_LEVEL, or None if unset or unknown.

    Accepts level names in any case and plain integers.
    """
    value = os.environ.get(ENVIRONMENT_VARIABLE, "").strip().upper()
    if not value:
        return None
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else None


def setup_logging(level=None):
    """
    Configure the "cmdtree" logger with a RichHandler writing to stderr.

    Parameters
    - level: int | None. None defers to resolve_env_log_level(), then WARNING.

    Returns
    - logging.Logger: the configured package logger.
    """
    if level is None:
        level = resolve_env_log_level()
    if level is None:
        level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(console=console, show_path=level <= logging.DEBUG, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name):
    """
    Return the logger for a cmdtree module.

    Names outside the package namespace are nested under it, so that every
    record reaches the handler installed by setup_logging().
    """
    if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


__all__ = (
    "get_logger",
    "setup_logging",
    "resolve_env_log_level",
)
