"""Console handler helpers."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Any, TextIO

from ..core.encoder import OptionsSource
from ..core.options import FormatterOptions
from ..formatters.logfmt import LogFmtFormatter

__all__ = ["ConsoleHandlerConfig", "build_console_handler", "is_redirected"]


@dataclass(slots=True)
class ConsoleHandlerConfig:
    """Configuration for console handlers."""

    stream: str = "stderr"
    level: int = logging.INFO


def is_redirected(stream: TextIO | None) -> bool:
    """Return ``True`` unless ``stream`` is an interactive terminal."""

    isatty = getattr(stream, "isatty", None)
    if not callable(isatty):
        return True
    try:
        return not isatty()
    except ValueError:
        # closed stream
        return True


def build_console_handler(
    config: ConsoleHandlerConfig | None = None,
    options: FormatterOptions | OptionsSource | None = None,
) -> logging.Handler:
    """Construct a :class:`logging.StreamHandler` emitting logfmt lines."""

    cfg = config or ConsoleHandlerConfig()
    stream: Any
    if cfg.stream == "stdout":
        stream = sys.stdout
    elif cfg.stream == "stderr":
        stream = sys.stderr
    else:
        stream = None
    handler = logging.StreamHandler(stream=stream)
    handler.setLevel(cfg.level)
    handler.setFormatter(LogFmtFormatter(options, is_redirected=lambda: is_redirected(handler.stream)))
    return handler
