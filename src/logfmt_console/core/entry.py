"""Log entry model handed to the encoder."""

from __future__ import annotations

import re
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Sequence, Tuple

from .levels import Severity

__all__ = [
    "ExceptionInfo",
    "LogEntry",
    "ORIGINAL_FORMAT_KEY",
    "key_value_pairs",
    "render_template",
]

ORIGINAL_FORMAT_KEY = "{OriginalFormat}"

_TEMPLATE_HOLE = re.compile(r"\{\{|\}\}|\{([^{}]+)\}")

Pairs = List[Tuple[str, Any]]
MessageFormatter = Callable[[Any, "ExceptionInfo | None"], "str | None"]


@dataclass(frozen=True, slots=True)
class ExceptionInfo:
    type_name: str
    message: str
    stack_trace: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ExceptionInfo":
        """Capture the qualified type, message and traceback of ``exc``."""

        exc_type = type(exc)
        module = exc_type.__module__
        qualname = exc_type.__qualname__
        type_name = f"{module}.{qualname}"
        stack = "".join(traceback.format_tb(exc.__traceback__)).rstrip("\n") if exc.__traceback__ else None
        return cls(type_name=type_name, message=str(exc), stack_trace=stack or None)


def key_value_pairs(value: Any) -> Pairs | None:
    """Return ``value`` as ordered ``(str, Any)`` pairs, or ``None``.

    Accepts mappings and sequences of two-item tuples whose first item is a
    string. Anything else does not expose the shape and yields ``None``.
    """

    if isinstance(value, Mapping):
        items: Iterable[Any] = value.items()
    elif isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        items = value
    else:
        return None

    pairs: Pairs = []
    for item in items:
        if not isinstance(item, tuple) or len(item) != 2 or not isinstance(item[0], str):
            return None
        pairs.append((item[0], item[1]))
    return pairs


def render_template(template: str, params: Mapping[str, Any]) -> str:
    """Fill ``{Name}`` holes in a message template.

    ``{{`` and ``}}`` are literal braces. The format part of a
    ``{Name:fmt}`` hole is ignored and the value is rendered with ``str``.
    Holes with no matching parameter are left as written.
    """

    def _replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "{{":
            return "{"
        if token == "}}":
            return "}"
        name = match.group(1).partition(":")[0].strip()
        if name not in params:
            return token
        return str(params[name])

    return _TEMPLATE_HOLE.sub(_replace, template)


def _template_formatter(state: Any, exception: ExceptionInfo | None) -> str | None:
    pairs = key_value_pairs(state) or []
    params = dict(pairs)
    template = params.pop(ORIGINAL_FORMAT_KEY, None)
    if template is None:
        return None
    return render_template(str(template), params)


def _text_formatter(state: Any, exception: ExceptionInfo | None) -> str | None:
    return None if state is None else str(state)


@dataclass(slots=True)
class LogEntry:
    """A single record: severity, origin and the state used to render it."""

    severity: Severity
    category: str
    state: Any = None
    formatter: MessageFormatter | None = _text_formatter
    exception: ExceptionInfo | None = None
    event_id: int = 0

    def render_message(self) -> str | None:
        if self.formatter is None:
            return None
        return self.formatter(self.state, self.exception)

    @classmethod
    def from_template(
        cls,
        severity: Severity,
        category: str,
        template: str,
        *,
        exception: ExceptionInfo | None = None,
        event_id: int = 0,
        **params: Any,
    ) -> "LogEntry":
        """Build an entry whose state carries ``params`` plus the raw template."""

        state: Pairs = list(params.items())
        state.append((ORIGINAL_FORMAT_KEY, template))
        return cls(
            severity=severity,
            category=category,
            state=state,
            formatter=_template_formatter,
            exception=exception,
            event_id=event_id,
        )
