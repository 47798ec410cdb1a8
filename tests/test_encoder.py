from __future__ import annotations

import io
import os
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from logfmt_console.core.colors import (
    DEFAULT_BACKGROUND,
    DEFAULT_FOREGROUND,
    ColorBehavior,
    ColorPair,
    ConsoleColor,
)
from logfmt_console.core.encoder import LogfmtEncoder, escape_message, normalize_key, write_field
from logfmt_console.core.entry import ORIGINAL_FORMAT_KEY, ExceptionInfo, LogEntry
from logfmt_console.core.levels import Severity
from logfmt_console.core.options import FormatterOptions, OptionsMonitor, StackTraceFormat

GREEN_ON_BLACK = "\x1b[40m\x1b[32m"
RESET = DEFAULT_FOREGROUND + DEFAULT_BACKGROUND


def _entry(severity: Severity = Severity.INFO, message: str = "hello world", **params: object) -> LogEntry:
    return LogEntry.from_template(severity, "app", message, **params)


def test_end_to_end_plain_line(plain_options: FormatterOptions) -> None:
    line = LogfmtEncoder(plain_options).encode(_entry(UserId=42))

    assert line == (
        'level=info msg="hello world" component=app event_id=0 '
        'msg_fmt="hello world" user_id=42\n'
    )


@pytest.mark.parametrize(
    ("severity", "token"),
    [
        (Severity.TRACE, "trace"),
        (Severity.DEBUG, "debug"),
        (Severity.INFO, "info"),
        (Severity.WARN, "warn"),
        (Severity.ERROR, "error"),
        (Severity.CRITICAL, "crit"),
    ],
)
def test_level_tokens(plain_options: FormatterOptions, severity: Severity, token: str) -> None:
    line = LogfmtEncoder(plain_options).encode(_entry(severity, "ping"))

    assert line.startswith(f"level={token} msg=ping")
    assert line.count("level=") == 1


def test_unknown_severity_fails_before_writing(plain_options: FormatterOptions) -> None:
    sink = io.StringIO()
    entry = LogEntry(severity=7, category="app", state="boom")  # type: ignore[arg-type]

    with pytest.raises(ValueError):
        LogfmtEncoder(plain_options).write(entry, None, sink)
    assert sink.getvalue() == ""


def test_record_without_message_or_exception_writes_nothing(plain_options: FormatterOptions) -> None:
    sink = io.StringIO()
    entry = LogEntry(severity=Severity.INFO, category="app", state=[("UserId", 1)], formatter=None)

    LogfmtEncoder(plain_options).write(entry, None, sink)

    assert sink.getvalue() == ""


def test_signifier_and_timestamp_preamble() -> None:
    seen: list[bool] = []

    def clock(use_utc: bool) -> datetime:
        seen.append(use_utc)
        return datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    options = FormatterOptions(
        color_behavior=ColorBehavior.DISABLED,
        timestamp_format="%Y-%m-%dT%H:%M:%SZ",
        use_utc_timestamp=True,
    )
    line = LogfmtEncoder(options, clock=clock).encode(_entry(message="ping"))

    assert line.startswith("\u200bts=2024-01-02T03:04:05Z level=info msg=ping")
    assert seen == [True]


def test_exception_with_single_line_stack(plain_options: FormatterOptions) -> None:
    exception = ExceptionInfo(type_name="Boom", message="bad thing", stack_trace="line1\nline2")
    entry = LogEntry(severity=Severity.ERROR, category="app", exception=exception)

    line = LogfmtEncoder(plain_options).encode(entry)

    assert 'exception=Boom err="bad thing"' in line
    assert line.endswith(" line1\\u000Aline2\n")
    assert line.count("\n") == 1


def test_single_line_stack_never_repeats_raw_trace(plain_options: FormatterOptions) -> None:
    exception = ExceptionInfo(type_name="Boom", message="bad", stack_trace="at a()\r\nat b()")
    entry = LogEntry(severity=Severity.ERROR, category="app", exception=exception)

    line = LogfmtEncoder(plain_options).encode(entry)

    assert "at a()\\u000D\\u000Aat b()" in line
    assert "at a()\r" not in line
    assert line.count("at a()") == 1


def test_full_stack_trace_on_following_lines(plain_options: FormatterOptions) -> None:
    options = replace(plain_options, stack_trace_format=StackTraceFormat.FULL)
    exception = ExceptionInfo(type_name="Boom", message="bad", stack_trace="line1\nline2")
    entry = LogEntry(severity=Severity.ERROR, category="app", exception=exception)

    line = LogfmtEncoder(options).encode(entry)

    assert line == "level=error exception=Boom err=bad component=app event_id=0\nline1\nline2\n"


def test_stack_trace_suppressed(plain_options: FormatterOptions) -> None:
    options = replace(plain_options, stack_trace_format=StackTraceFormat.NONE)
    exception = ExceptionInfo(type_name="Boom", message="bad", stack_trace="line1\nline2")
    entry = LogEntry(severity=Severity.ERROR, category="app", exception=exception)

    assert LogfmtEncoder(options).encode(entry) == "level=error exception=Boom err=bad component=app event_id=0\n"


def test_template_key_only_in_msg_fmt(plain_options: FormatterOptions) -> None:
    encoder = LogfmtEncoder(plain_options)
    line = encoder.encode(_entry(message="user {UserId} left", UserId=7))

    assert line.count("msg_fmt=") == 1
    assert "OriginalFormat" not in line
    assert 'msg="user 7 left"' in line
    assert 'msg_fmt="user {UserId} left"' in line

    no_template = LogfmtEncoder(replace(plain_options, include_log_template=False))
    assert "msg_fmt" not in no_template.encode(_entry(message="user {UserId} left", UserId=7))


def test_msg_fmt_falls_back_to_message(plain_options: FormatterOptions) -> None:
    entry = LogEntry(
        severity=Severity.INFO,
        category="app",
        state=[(ORIGINAL_FORMAT_KEY, None)],
        formatter=lambda state, exc: "rendered",
    )

    assert "msg_fmt=rendered" in LogfmtEncoder(plain_options).encode(entry)


def test_structured_parameters(plain_options: FormatterOptions) -> None:
    entry = _entry(message="ping", OrderId=3, Missing=None, Note="two words")

    line = LogfmtEncoder(plain_options).encode(entry)
    assert line.endswith('msg_fmt=ping order_id=3 note="two words"\n')
    assert "missing" not in line

    without = LogfmtEncoder(replace(plain_options, include_structured_parameters=False)).encode(entry)
    assert "order_id" not in without
    assert "msg_fmt=ping" in without


def test_malformed_attributes_are_ignored(plain_options: FormatterOptions) -> None:
    entry = LogEntry(
        severity=Severity.INFO,
        category="app",
        state=[("Good", 1), "junk"],
        formatter=lambda state, exc: "ping",
    )

    assert LogfmtEncoder(plain_options).encode(entry) == "level=info msg=ping component=app event_id=0\n"


def test_component_and_event_id_toggles(plain_options: FormatterOptions) -> None:
    options = replace(plain_options, include_component=False, include_event_id=False, include_log_template=False)
    entry = LogEntry(severity=Severity.WARN, category="svc", state="ping", event_id=12)

    assert LogfmtEncoder(options).encode(entry) == "level=warn msg=ping\n"
    assert " event_id=12" in LogfmtEncoder(plain_options).encode(entry)


def test_default_colors_wrap_only_values() -> None:
    options = FormatterOptions(color_behavior=ColorBehavior.ENABLED, first_line_signifier=None)
    line = LogfmtEncoder(options).encode(_entry())

    assert line.startswith(f"level={GREEN_ON_BLACK}info{RESET} ")
    assert f' msg="{GREEN_ON_BLACK}hello world{RESET}"' in line
    assert " component=app" in line
    assert line.count(GREEN_ON_BLACK) == line.count(RESET) == 2


def test_color_override_without_background() -> None:
    options = FormatterOptions(
        color_behavior=ColorBehavior.ENABLED,
        first_line_signifier=None,
        log_level_colors={Severity.INFO: ColorPair(foreground=ConsoleColor.CYAN)},
    )
    line = LogfmtEncoder(options).encode(_entry(message="ping"))

    assert line.startswith(f"level=\x1b[1m\x1b[36minfo{DEFAULT_FOREGROUND} msg=")
    assert DEFAULT_BACKGROUND not in line


@pytest.mark.parametrize(("redirected", "colored"), [(True, False), (False, True)])
def test_default_behavior_follows_redirection(redirected: bool, colored: bool) -> None:
    options = FormatterOptions(first_line_signifier=None)
    line = LogfmtEncoder(options, is_redirected=lambda: redirected).encode(_entry(message="ping"))

    assert ("\x1b[" in line) is colored


def test_exception_type_uncolored_err_colored() -> None:
    options = FormatterOptions(color_behavior=ColorBehavior.ENABLED, first_line_signifier=None)
    exception = ExceptionInfo(type_name="Boom", message="bad")
    entry = LogEntry(severity=Severity.ERROR, category="app", exception=exception)

    line = LogfmtEncoder(options).encode(entry)

    assert " exception=Boom " in line
    assert " err=\x1b[41m\x1b[30mbad" + RESET in line


class _CountingSource:
    def __init__(self, options: FormatterOptions) -> None:
        self.options = options
        self.reads = 0

    @property
    def current(self) -> FormatterOptions:
        self.reads += 1
        return self.options


def test_options_read_once_per_line(plain_options: FormatterOptions) -> None:
    source = _CountingSource(plain_options)
    encoder = LogfmtEncoder(source)

    encoder.encode(_entry(UserId=1))

    assert source.reads == 1


def test_monitor_swap_applies_to_next_line(plain_options: FormatterOptions) -> None:
    monitor = OptionsMonitor(plain_options)
    encoder = LogfmtEncoder(monitor)

    assert "component=app" in encoder.encode(_entry(message="ping"))
    monitor.set(replace(plain_options, include_component=False))
    assert "component=app" not in encoder.encode(_entry(message="ping"))


def test_write_field_quotes_only_values_with_spaces() -> None:
    sink = io.StringIO()
    write_field(sink, "a", "one two")
    write_field(sink, "b", "single")
    write_field(sink, "c", "")
    write_field(sink, "d", None)

    assert sink.getvalue() == ' a="one two" b=single'


def test_escaping() -> None:
    assert escape_message(f"one{os.linesep}two") == "one\\u000Atwo"
    assert escape_message('say "hi"') == "say \\u0022hi\\u0022"
    assert escape_message(None) is None


@pytest.mark.parametrize("text", ["plain", 'a "b"', f"x{os.linesep}y", "\\u000A literal", "\\u0022"])
def test_escaping_is_idempotent(text: str) -> None:
    once = escape_message(text)
    assert escape_message(once) == once


@pytest.mark.skipif(os.linesep != "\n", reason="only the platform line separator is escaped")
def test_lone_carriage_return_is_not_escaped() -> None:
    assert escape_message("a\rb") == "a\rb"


@pytest.mark.parametrize(
    ("key", "expected"),
    [("UserId", "user_id"), ("ID", "i_d"), ("plain", "plain"), ("orderId", "order_id"), ("Http2Port", "http2_port")],
)
def test_normalize_key(key: str, expected: str) -> None:
    assert normalize_key(key) == expected


def test_monitor_notifies_until_disposed(plain_options: FormatterOptions) -> None:
    monitor = OptionsMonitor()
    received: list[FormatterOptions] = []

    subscription = monitor.on_change(received.append)
    monitor.set(plain_options)
    subscription.dispose()
    monitor.set(FormatterOptions())

    assert received == [plain_options]
    assert monitor.current == FormatterOptions()
