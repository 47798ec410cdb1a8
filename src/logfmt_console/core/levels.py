"""Severity model and custom log level helpers."""

from __future__ import annotations

import enum
import logging
from typing import Any

TRACE_LEVEL_NAME = "TRACE"
TRACE_LEVEL_NUM = 5


class Severity(enum.IntEnum):
    """Closed set of severities a line can be rendered with."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    CRITICAL = 5


_SEVERITY_TOKENS = {
    Severity.TRACE: "trace",
    Severity.DEBUG: "debug",
    Severity.INFO: "info",
    Severity.WARN: "warn",
    Severity.ERROR: "error",
    Severity.CRITICAL: "crit",
}

# Ordered from most to least severe so ``severity_from_levelno`` can bucket
# custom numeric levels onto the closest lower severity.
_LEVELNO_BUCKETS = (
    (logging.CRITICAL, Severity.CRITICAL),
    (logging.ERROR, Severity.ERROR),
    (logging.WARNING, Severity.WARN),
    (logging.INFO, Severity.INFO),
    (logging.DEBUG, Severity.DEBUG),
)


def severity_token(severity: Severity) -> str:
    """Return the short ``level=`` token for ``severity``.

    Anything outside :class:`Severity` is a caller bug and raises
    :class:`ValueError` immediately.
    """

    if not isinstance(severity, Severity):
        raise ValueError(f"Unknown severity: {severity!r}")
    return _SEVERITY_TOKENS[severity]


def severity_from_levelno(levelno: int) -> Severity:
    """Map a stdlib logging level number onto a :class:`Severity`."""

    for threshold, severity in _LEVELNO_BUCKETS:
        if levelno >= threshold:
            return severity
    return Severity.TRACE


def parse_severity(value: Severity | str | int) -> Severity:
    """Resolve a severity from an enum member, a name or a logging level."""

    if isinstance(value, Severity):
        return value
    if isinstance(value, int):
        return severity_from_levelno(value)
    name = str(value).strip().upper()
    aliases = {"WARNING": "WARN", "CRIT": "CRITICAL", "INFORMATION": "INFO", "FATAL": "CRITICAL"}
    name = aliases.get(name, name)
    try:
        return Severity[name]
    except KeyError:
        raise ValueError(f"Unknown severity: {value!r}") from None


def register_trace_level(enable: bool = True) -> None:
    """Register the TRACE level on the stdlib logging module.

    When ``enable`` is ``False`` the function becomes a no-op. The level is
    installed only once even if called repeatedly.
    """

    if not enable:
        return

    if logging.getLevelName(TRACE_LEVEL_NUM) != TRACE_LEVEL_NAME:
        logging.addLevelName(TRACE_LEVEL_NUM, TRACE_LEVEL_NAME)
    if not hasattr(logging, TRACE_LEVEL_NAME):
        setattr(logging, TRACE_LEVEL_NAME, TRACE_LEVEL_NUM)

    if not hasattr(logging.Logger, "trace"):
        def trace(self: logging.Logger, message: str, *args: object, **kwargs: Any) -> None:  # type: ignore[override]
            if self.isEnabledFor(TRACE_LEVEL_NUM):
                self._log(TRACE_LEVEL_NUM, message, args, **kwargs)

        logging.Logger.trace = trace  # type: ignore[assignment]


def get_level_by_name(name: str) -> int:
    """Resolve a logging level from a friendly name."""

    if name.upper() == TRACE_LEVEL_NAME:
        return TRACE_LEVEL_NUM
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name.upper())
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def ensure_level(value: int | str) -> int:
    """Normalize user supplied level values."""

    if isinstance(value, int):
        return value
    return get_level_by_name(value)
