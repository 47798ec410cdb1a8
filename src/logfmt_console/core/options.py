"""Formatter options and the hot-swappable options monitor."""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Mapping

from .colors import ColorBehavior, ColorPair
from .levels import Severity

__all__ = [
    "FormatterOptions",
    "OptionsMonitor",
    "StackTraceFormat",
    "StaticOptions",
    "ZERO_WIDTH_SPACE",
]

logger = logging.getLogger(__name__)

ZERO_WIDTH_SPACE = "\u200b"


class StackTraceFormat(enum.Enum):
    NONE = "none"
    SINGLE_LINE = "single_line"
    FULL = "full"


@dataclass(frozen=True, slots=True)
class FormatterOptions:
    """Immutable snapshot of every toggle the encoder honours.

    Derive modified copies with :func:`dataclasses.replace`; a snapshot is
    never mutated once published through an :class:`OptionsMonitor`.
    """

    color_behavior: ColorBehavior = ColorBehavior.DEFAULT
    log_level_colors: Mapping[Severity, ColorPair] | None = None
    timestamp_format: str | None = None
    use_utc_timestamp: bool = False
    stack_trace_format: StackTraceFormat = StackTraceFormat.SINGLE_LINE
    include_event_id: bool = True
    include_component: bool = True
    include_log_template: bool = True
    include_structured_parameters: bool = True
    include_scopes: bool = False
    first_line_signifier: str | None = ZERO_WIDTH_SPACE


Listener = Callable[[FormatterOptions], None]


@dataclass(slots=True)
class _Subscription:
    monitor: "OptionsMonitor"
    listener: Listener
    active: bool = True

    def dispose(self) -> None:
        if self.active:
            self.monitor._unsubscribe(self.listener)
            self.active = False

    def __enter__(self) -> "_Subscription":
        return self

    def __exit__(self, *exc: object) -> None:
        self.dispose()


class OptionsMonitor:
    """Holds the current :class:`FormatterOptions` reference.

    Readers take ``monitor.current`` once and work from that snapshot; the
    host may call :meth:`set` from any thread at any time. Replacing the
    reference is a single attribute store, so a reader never observes a
    half-updated option set.
    """

    def __init__(self, options: FormatterOptions | None = None) -> None:
        self._current = options or FormatterOptions()
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    @property
    def current(self) -> FormatterOptions:
        return self._current

    def set(self, options: FormatterOptions) -> None:
        """Publish ``options`` and notify subscribers."""

        with self._lock:
            self._current = options
            listeners = list(self._listeners)
        logger.debug("formatter options replaced: %r", options)
        for listener in listeners:
            listener(options)

    def on_change(self, listener: Listener) -> _Subscription:
        with self._lock:
            self._listeners.append(listener)
        return _Subscription(self, listener)

    def _unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass


@dataclass(slots=True)
class StaticOptions:
    """Adapter exposing a fixed snapshot through the monitor interface."""

    options: FormatterOptions = field(default_factory=FormatterOptions)

    @property
    def current(self) -> FormatterOptions:
        return self.options
