"""logfmt line encoder.

One call renders one entry as a single ``\\n``-terminated line::

    [<signifier>][ts=<ts> ]level=<tok> msg=<val> [exception=<type>] [err=<val>]
    [component=<cat>] [event_id=<n>] [msg_fmt=<val>] [<attr>=<val> ...]
    [<scope_key>=<val> ...] [<stacktrace>]

Values containing a space are wrapped in double quotes; embedded newlines
become ``\\u000A`` and embedded quotes ``\\u0022``.
"""

from __future__ import annotations

import io
import os
import sys
from datetime import datetime
from typing import Any, Callable, Protocol, TextIO

from ..utils.time import localnow, utcnow
from .colors import ColorPair, resolve_colors, write_colored
from .entry import ORIGINAL_FORMAT_KEY, LogEntry, key_value_pairs
from .levels import severity_token
from .options import FormatterOptions, StackTraceFormat, StaticOptions

__all__ = [
    "LogfmtEncoder",
    "OptionsSource",
    "escape_message",
    "normalize_key",
    "write_field",
    "write_scopes",
]


class OptionsSource(Protocol):
    @property
    def current(self) -> FormatterOptions: ...


class ScopeSource(Protocol):
    def for_each_scope(self, callback: Callable[[Any, Any], None], state: Any) -> None: ...


def escape_message(message: str | None) -> str | None:
    """Escape the platform line separator and double quotes.

    Only ``os.linesep`` is replaced, so a lone ``\\r`` on a ``\\n`` platform
    passes through unchanged.
    """

    if message is None:
        return None
    return message.replace(os.linesep, "\\u000A").replace('"', "\\u0022")


def normalize_key(key: str) -> str:
    """Convert ``PascalCase``/``camelCase`` keys to ``snake_case``.

    >>> normalize_key("UserId")
    'user_id'
    >>> normalize_key("ID")
    'i_d'
    """

    out = []
    for index, ch in enumerate(key):
        if ch.isupper():
            if index:
                out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def write_field(sink: TextIO, key: str, message: str | None, colors: ColorPair | None = None) -> None:
    """Append `` key=value``, quoting the value if it holds a space.

    Nothing is written for an empty or missing value. Colour codes wrap the
    value only, inside the quotes.
    """

    escaped = escape_message(message)
    if not escaped:
        return
    sink.write(f" {key}=")
    if " " in escaped:
        sink.write('"')
        write_colored(sink, escaped, colors)
        sink.write('"')
    else:
        write_colored(sink, escaped, colors)


def _write_scope_frame(frame: Any, sink: TextIO) -> None:
    pairs = key_value_pairs(frame)
    if pairs is None:
        return
    for key, value in pairs:
        if value is None:
            continue
        write_field(sink, normalize_key(key), str(value))


def write_scopes(sink: TextIO, scope_provider: ScopeSource | None) -> None:
    """Flatten every active scope frame into fields, outermost first."""

    if scope_provider is None:
        return
    scope_provider.for_each_scope(_write_scope_frame, sink)


def _stderr_redirected() -> bool:
    stream = sys.stderr
    isatty = getattr(stream, "isatty", None)
    return not (callable(isatty) and isatty())


class LogfmtEncoder:
    """Render :class:`LogEntry` objects as logfmt lines.

    ``options`` is either a fixed :class:`FormatterOptions` or any object with
    a ``current`` property (e.g. :class:`OptionsMonitor`); the latter is read
    exactly once per line. ``is_redirected`` reports whether the target output
    is a non-interactive stream and drives ``ColorBehavior.DEFAULT``.
    """

    def __init__(
        self,
        options: FormatterOptions | OptionsSource | None = None,
        *,
        clock: Callable[[bool], datetime] | None = None,
        is_redirected: Callable[[], bool] | None = None,
    ) -> None:
        if options is None or isinstance(options, FormatterOptions):
            options = StaticOptions(options or FormatterOptions())
        self._options: OptionsSource = options
        self._clock = clock or _default_clock
        self._is_redirected = is_redirected or _stderr_redirected

    @property
    def options(self) -> FormatterOptions:
        return self._options.current

    def encode(self, entry: LogEntry, scope_provider: ScopeSource | None = None) -> str:
        buffer = io.StringIO()
        self.write(entry, scope_provider, buffer)
        return buffer.getvalue()

    def write(self, entry: LogEntry, scope_provider: ScopeSource | None, sink: TextIO) -> None:
        options = self._options.current

        message = entry.render_message()
        exception = entry.exception
        if exception is None and message is None:
            return

        token = severity_token(entry.severity)
        colors = resolve_colors(
            entry.severity,
            options.color_behavior,
            options.log_level_colors,
            self._is_redirected,
        )

        if options.first_line_signifier is not None:
            sink.write(options.first_line_signifier)

        if options.timestamp_format is not None:
            timestamp = self._clock(options.use_utc_timestamp).strftime(options.timestamp_format)
            sink.write(f"ts={timestamp} ")

        sink.write("level=")
        write_colored(sink, token, colors)

        self._write_body(entry, message, scope_provider, sink, options, colors)

    def _write_body(
        self,
        entry: LogEntry,
        message: str | None,
        scope_provider: ScopeSource | None,
        sink: TextIO,
        options: FormatterOptions,
        colors: ColorPair,
    ) -> None:
        exception = entry.exception

        write_field(sink, "msg", message, colors)

        if exception is not None:
            write_field(sink, "exception", exception.type_name)
            write_field(sink, "err", exception.message, colors)

        if options.include_component:
            sink.write(f" component={entry.category}")
        if options.include_event_id:
            sink.write(f" event_id={int(entry.event_id)}")

        attributes = key_value_pairs(entry.state)
        if attributes is not None:
            templates = [value for key, value in attributes if key == ORIGINAL_FORMAT_KEY]
            if options.include_log_template and templates:
                template = templates[0]
                write_field(sink, "msg_fmt", str(template) if template is not None else message)
            if options.include_structured_parameters:
                for key, value in attributes:
                    if key == ORIGINAL_FORMAT_KEY or value is None:
                        continue
                    write_field(sink, normalize_key(key), str(value))

        if options.include_scopes:
            write_scopes(sink, scope_provider)

        stack = exception.stack_trace if exception is not None else None
        if options.stack_trace_format is not StackTraceFormat.NONE and stack:
            if options.stack_trace_format is StackTraceFormat.FULL:
                sink.write("\n")
                sink.write(stack)
            else:
                sink.write(" ")
                sink.write(stack.replace("\n", "\\u000A").replace("\r", "\\u000D"))

        sink.write("\n")


def _default_clock(use_utc: bool) -> datetime:
    return utcnow() if use_utc else localnow()
