"""logfmt_console public API."""

from .api import configure, get_context_logger, get_logger, reload
from .core.colors import ColorBehavior, ColorPair, ConsoleColor
from .core.context import ScopeProvider, begin_scope
from .core.encoder import LogfmtEncoder, escape_message, normalize_key, write_field
from .core.entry import ORIGINAL_FORMAT_KEY, ExceptionInfo, LogEntry
from .core.levels import Severity
from .core.options import FormatterOptions, OptionsMonitor, StackTraceFormat
from .formatters.logfmt import LogFmtFormatter
from .version import __version__

__all__ = [
    "configure",
    "reload",
    "get_logger",
    "get_context_logger",
    "begin_scope",
    "ColorBehavior",
    "ColorPair",
    "ConsoleColor",
    "ExceptionInfo",
    "FormatterOptions",
    "LogEntry",
    "LogFmtFormatter",
    "LogfmtEncoder",
    "ORIGINAL_FORMAT_KEY",
    "OptionsMonitor",
    "ScopeProvider",
    "Severity",
    "StackTraceFormat",
    "escape_message",
    "normalize_key",
    "write_field",
    "__version__",
]
