"""ANSI colour selection for severity tokens and coloured values."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Mapping, TextIO

from .levels import Severity

__all__ = [
    "ColorBehavior",
    "ColorPair",
    "ConsoleColor",
    "DEFAULT_FOREGROUND",
    "DEFAULT_BACKGROUND",
    "NO_COLOR",
    "background_code",
    "foreground_code",
    "parse_color",
    "resolve_colors",
    "write_colored",
]


class ConsoleColor(enum.Enum):
    BLACK = "black"
    DARK_BLUE = "dark_blue"
    DARK_GREEN = "dark_green"
    DARK_CYAN = "dark_cyan"
    DARK_RED = "dark_red"
    DARK_MAGENTA = "dark_magenta"
    DARK_YELLOW = "dark_yellow"
    GRAY = "gray"
    DARK_GRAY = "dark_gray"
    BLUE = "blue"
    GREEN = "green"
    CYAN = "cyan"
    RED = "red"
    MAGENTA = "magenta"
    YELLOW = "yellow"
    WHITE = "white"


class ColorBehavior(enum.Enum):
    """``DEFAULT`` colours only while the output is an interactive terminal."""

    DEFAULT = "default"
    ENABLED = "enabled"
    DISABLED = "disabled"


@dataclass(frozen=True, slots=True)
class ColorPair:
    foreground: ConsoleColor | None = None
    background: ConsoleColor | None = None

    @property
    def is_unset(self) -> bool:
        return self.foreground is None and self.background is None


NO_COLOR = ColorPair()

DEFAULT_FOREGROUND = "\x1b[39m\x1b[22m"
DEFAULT_BACKGROUND = "\x1b[49m"

_FOREGROUND_CODES = {
    ConsoleColor.BLACK: "\x1b[30m",
    ConsoleColor.DARK_RED: "\x1b[31m",
    ConsoleColor.DARK_GREEN: "\x1b[32m",
    ConsoleColor.DARK_YELLOW: "\x1b[33m",
    ConsoleColor.DARK_BLUE: "\x1b[34m",
    ConsoleColor.DARK_MAGENTA: "\x1b[35m",
    ConsoleColor.DARK_CYAN: "\x1b[36m",
    ConsoleColor.GRAY: "\x1b[37m",
    ConsoleColor.DARK_GRAY: "\x1b[1m\x1b[30m",
    ConsoleColor.RED: "\x1b[1m\x1b[31m",
    ConsoleColor.GREEN: "\x1b[1m\x1b[32m",
    ConsoleColor.YELLOW: "\x1b[1m\x1b[33m",
    ConsoleColor.BLUE: "\x1b[1m\x1b[34m",
    ConsoleColor.MAGENTA: "\x1b[1m\x1b[35m",
    ConsoleColor.CYAN: "\x1b[1m\x1b[36m",
    ConsoleColor.WHITE: "\x1b[1m\x1b[37m",
}

# Terminals have no bright backgrounds in the basic palette; bright colours
# fall back to the default background.
_BACKGROUND_CODES = {
    ConsoleColor.BLACK: "\x1b[40m",
    ConsoleColor.DARK_RED: "\x1b[41m",
    ConsoleColor.DARK_GREEN: "\x1b[42m",
    ConsoleColor.DARK_YELLOW: "\x1b[43m",
    ConsoleColor.DARK_BLUE: "\x1b[44m",
    ConsoleColor.DARK_MAGENTA: "\x1b[45m",
    ConsoleColor.DARK_CYAN: "\x1b[46m",
    ConsoleColor.GRAY: "\x1b[47m",
}

# Background is always paired with foreground so a custom terminal
# background never yields unreadable text.
_DEFAULT_COLORS = {
    Severity.TRACE: ColorPair(ConsoleColor.GRAY, ConsoleColor.BLACK),
    Severity.DEBUG: ColorPair(ConsoleColor.GRAY, ConsoleColor.BLACK),
    Severity.INFO: ColorPair(ConsoleColor.DARK_GREEN, ConsoleColor.BLACK),
    Severity.WARN: ColorPair(ConsoleColor.YELLOW, ConsoleColor.BLACK),
    Severity.ERROR: ColorPair(ConsoleColor.BLACK, ConsoleColor.DARK_RED),
    Severity.CRITICAL: ColorPair(ConsoleColor.WHITE, ConsoleColor.DARK_RED),
}


def foreground_code(color: ConsoleColor) -> str:
    return _FOREGROUND_CODES[color]


def background_code(color: ConsoleColor) -> str:
    return _BACKGROUND_CODES.get(color, DEFAULT_BACKGROUND)


def parse_color(value: ConsoleColor | str | None) -> ConsoleColor | None:
    """Resolve ``"DarkGreen"``, ``"dark-green"`` or ``"dark_green"`` to a colour."""

    if value is None or isinstance(value, ConsoleColor):
        return value
    text = str(value).strip()
    if not text:
        return None
    plain = text.lower().replace("-", "_").replace(" ", "_")
    camel = "".join(
        f"_{ch.lower()}" if ch.isupper() and index else ch.lower()
        for index, ch in enumerate(text)
    ).replace("__", "_")
    for candidate in (plain, camel):
        try:
            return ConsoleColor(candidate)
        except ValueError:
            continue
    raise ValueError(f"Unknown console color: {value!r}")


def resolve_colors(
    severity: Severity,
    behavior: ColorBehavior,
    overrides: Mapping[Severity, ColorPair] | None,
    is_redirected: Callable[[], bool],
) -> ColorPair:
    """Pick the colour pair for ``severity``.

    Colours are dropped entirely when disabled, or in ``DEFAULT`` mode when the
    output is redirected. Otherwise an explicit override wins over the
    built-in table.
    """

    if behavior is ColorBehavior.DISABLED:
        return NO_COLOR
    if behavior is ColorBehavior.DEFAULT and is_redirected():
        return NO_COLOR
    if overrides and severity in overrides:
        return overrides[severity]
    return _DEFAULT_COLORS.get(severity, NO_COLOR)


def write_colored(sink: TextIO, text: str, colors: ColorPair | None) -> None:
    """Write ``text`` wrapped in balanced start/reset codes.

    Order: background, foreground, text, foreground reset, background reset.
    """

    if colors is None:
        sink.write(text)
        return
    if colors.background is not None:
        sink.write(background_code(colors.background))
    if colors.foreground is not None:
        sink.write(foreground_code(colors.foreground))
    sink.write(text)
    if colors.foreground is not None:
        sink.write(DEFAULT_FOREGROUND)
    if colors.background is not None:
        sink.write(DEFAULT_BACKGROUND)
