"""Platform services: logging and unrecoverable-error handling."""

from __future__ import annotations

import enum
import logging

_LOGGER_NAME = "ringmesh"


class PanicError(RuntimeError):
    """Raised when the device hits a condition it cannot continue from."""


class LogLevel(enum.Enum):
    """Severity of a log message."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Critical messages are emitted at error level; the extra severity is only
# a hint for callers.
_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.ERROR,
}


def _logger(tag: str) -> logging.Logger:
    return logging.getLogger(_LOGGER_NAME).getChild(tag)


def log(level: LogLevel, tag: str, message: str) -> None:
    """Emit ``message`` under ``tag`` at the given level."""
    _logger(tag).log(_LEVELS[LogLevel(level)], message)


def panic(message: str) -> None:
    """Log ``message`` as a panic and raise :class:`PanicError`."""
    _logger("panic").error("PANIC: %s", message)
    raise PanicError(message)