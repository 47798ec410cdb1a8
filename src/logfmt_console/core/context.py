"""Scope chain storage and the context-aware logging adapter."""

from __future__ import annotations

import contextvars
import logging
from typing import Any, Callable, Iterator, Mapping, MutableMapping, Tuple, TypeVar

from .levels import TRACE_LEVEL_NUM

__all__ = [
    "ContextAdapter",
    "Scope",
    "ScopeProvider",
    "DEFAULT_SCOPE_PROVIDER",
    "begin_scope",
    "inject_context",
]

T = TypeVar("T")


class _Frame:
    __slots__ = ("state", "parent")

    def __init__(self, state: Any, parent: "_Frame | None") -> None:
        self.state = state
        self.parent = parent


class Scope:
    """Handle for one pushed frame; closing it restores the previous chain."""

    def __init__(self, provider: "ScopeProvider", state: Any) -> None:
        self._provider = provider
        self._state = state
        self._token: contextvars.Token[_Frame | None] | None = None

    def __enter__(self) -> "Scope":
        if self._token is None:
            self._token = self._provider._enter(self._state)
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        if self._token is not None:
            self._provider._var.reset(self._token)
            self._token = None


class ScopeProvider:
    """Per-context chain of scope frames.

    Frames are stored in a :class:`contextvars.ContextVar` so threads and
    asyncio tasks each see their own chain.
    """

    def __init__(self, name: str = "logfmt_console_scope") -> None:
        self._var: contextvars.ContextVar[_Frame | None] = contextvars.ContextVar(name, default=None)

    def push(self, state: Any) -> Scope:
        """Return a scope for ``state``; the frame is active inside ``with``."""

        return Scope(self, state)

    def _enter(self, state: Any) -> contextvars.Token[_Frame | None]:
        return self._var.set(_Frame(state, self._var.get()))

    def frames(self) -> Iterator[Any]:
        """Yield frame states from outermost to innermost."""

        chain = []
        frame = self._var.get()
        while frame is not None:
            chain.append(frame.state)
            frame = frame.parent
        return reversed(chain)

    def for_each_scope(self, callback: Callable[[Any, T], None], state: T) -> None:
        for frame in self.frames():
            callback(frame, state)


DEFAULT_SCOPE_PROVIDER = ScopeProvider()


def begin_scope(state: Any = None, **kwargs: Any) -> Scope:
    """Open a scope on the default provider.

    ``with begin_scope(request_id="abc"):`` adds ``request_id`` to every line
    logged inside the block when scopes are enabled.
    """

    if state is None:
        state = dict(kwargs)
    elif kwargs:
        raise TypeError("begin_scope() takes either a state object or keyword pairs, not both")
    return DEFAULT_SCOPE_PROVIDER.push(state)


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter carrying a base scope and an optional event id.

    The base context is pushed as the innermost scope frame for each call, and
    ``event_id`` lands in the record's extras where the logfmt formatter picks
    it up.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        base_context: Mapping[str, Any] | None = None,
        provider: ScopeProvider | None = None,
    ) -> None:
        super().__init__(logger, {})
        self._context = dict(base_context or {})
        self._provider = provider or DEFAULT_SCOPE_PROVIDER

    # -- Context management -------------------------------------------------
    def add_context(self, **kwargs: Any) -> None:
        self._context.update(kwargs)

    def begin_scope(self, **kwargs: Any) -> Scope:
        return self._provider.push(dict(kwargs))

    # -- LoggingAdapter API -------------------------------------------------
    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> Tuple[str, MutableMapping[str, Any]]:
        event_id = kwargs.pop("event_id", None)
        if event_id is not None:
            extra = dict(kwargs.get("extra") or {})
            extra["event_id"] = event_id
            kwargs["extra"] = extra
        return msg, kwargs

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        if not self.isEnabledFor(level):
            return
        msg, kwargs = self.process(msg, kwargs)
        if self._context:
            with self._provider.push(dict(self._context)):
                self.logger.log(level, msg, *args, **kwargs)
        else:
            self.logger.log(level, msg, *args, **kwargs)

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.logger.isEnabledFor(TRACE_LEVEL_NUM):
            self.log(TRACE_LEVEL_NUM, msg, *args, **kwargs)


def inject_context(
    logger: logging.Logger,
    *,
    base_context: Mapping[str, Any] | None = None,
    provider: ScopeProvider | None = None,
) -> ContextAdapter:
    """Return a :class:`ContextAdapter` wrapping ``logger``."""

    return ContextAdapter(logger, base_context=base_context, provider=provider)
