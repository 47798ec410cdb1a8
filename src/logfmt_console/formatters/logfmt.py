"""logfmt formatter implementation."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Tuple

from ..core.context import DEFAULT_SCOPE_PROVIDER, ScopeProvider
from ..core.encoder import LogfmtEncoder, OptionsSource
from ..core.entry import ORIGINAL_FORMAT_KEY, ExceptionInfo, LogEntry
from ..core.levels import severity_from_levelno
from ..core.options import FormatterOptions

__all__ = ["LogFmtFormatter", "record_to_entry"]

_STANDARD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "asctime",
    "message",
    "event_id",
}


def _event_id(value: Any) -> int:
    """Coerce the ``event_id`` extra; values that are not integers become 0."""

    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def record_to_entry(record: logging.LogRecord) -> LogEntry:
    """Translate a stdlib ``LogRecord`` into a :class:`LogEntry`.

    The raw ``record.msg`` is kept as the reserved template attribute, and the
    record's non-standard attributes (``extra=...``) follow in insertion
    order.
    """

    exception = None
    if record.exc_info and record.exc_info[1] is not None:
        exception = ExceptionInfo.from_exception(record.exc_info[1])

    attributes: List[Tuple[str, Any]] = []
    if isinstance(record.msg, str):
        attributes.append((ORIGINAL_FORMAT_KEY, record.msg))
    for key, value in record.__dict__.items():
        if key in _STANDARD_ATTRS or key.startswith("_"):
            continue
        attributes.append((key, value))

    message = record.getMessage()
    return LogEntry(
        severity=severity_from_levelno(record.levelno),
        category=record.name,
        state=attributes,
        formatter=lambda _state, _exc: message,
        exception=exception,
        event_id=_event_id(getattr(record, "event_id", None)),
    )


class LogFmtFormatter(logging.Formatter):
    """Render records as logfmt lines through :class:`LogfmtEncoder`."""

    def __init__(
        self,
        options: FormatterOptions | OptionsSource | None = None,
        *,
        scope_provider: ScopeProvider | None = None,
        is_redirected: Callable[[], bool] | None = None,
    ) -> None:
        super().__init__()
        self.encoder = LogfmtEncoder(options, is_redirected=is_redirected)
        self.scope_provider = scope_provider or DEFAULT_SCOPE_PROVIDER

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line = self.encoder.encode(record_to_entry(record), self.scope_provider)
        # ``StreamHandler`` appends its own terminator.
        return line[:-1] if line.endswith("\n") else line
