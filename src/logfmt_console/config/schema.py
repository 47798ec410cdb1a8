"""Configuration schema definition for logfmt_console."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from ..core.colors import ColorBehavior, ColorPair, parse_color
from ..core.levels import Severity, parse_severity
from ..core.options import ZERO_WIDTH_SPACE, FormatterOptions, StackTraceFormat
from ..core.validation import ConfigurationError

DEFAULT_CONFIG: Dict[str, Any] = {
    "formatter": {
        "color_behavior": "default",
        "log_level_colors": {},
        "timestamp_format": None,
        "use_utc_timestamp": False,
        "stack_trace_format": "single_line",
        "include_event_id": True,
        "include_component": True,
        "include_log_template": True,
        "include_structured_parameters": True,
        "include_scopes": False,
        "first_line_signifier": ZERO_WIDTH_SPACE,
    },
    "handler": {
        "stream": "stderr",
        "level": "INFO",
    },
    "levels": {
        "root": "INFO",
        "enable_trace": False,
        "overrides": {},
    },
    "capture_warnings": True,
}


def default_config() -> Dict[str, Any]:
    """Return a deep copy of the default configuration mapping."""

    return deepcopy(DEFAULT_CONFIG)


@dataclass(slots=True)
class HandlerConfig:
    stream: str = "stderr"
    level: str | int = "INFO"


@dataclass(slots=True)
class LevelsConfig:
    root_level: str | int
    enable_trace: bool
    overrides: Dict[str, str | int] = field(default_factory=dict)


@dataclass(slots=True)
class LogfmtConfig:
    formatter: FormatterOptions
    handler: HandlerConfig
    levels: LevelsConfig
    capture_warnings: bool
    raw: Dict[str, Any] = field(repr=False)


def _to_enum(enum_type: Any, value: Any, setting: str) -> Any:
    if isinstance(value, enum_type):
        return value
    text = str(value).strip().lower().replace("-", "_")
    aliases = {"singleline": "single_line", "auto": "default", "true": "enabled", "false": "disabled"}
    text = aliases.get(text, text)
    try:
        return enum_type(text)
    except ValueError:
        choices = ", ".join(member.value for member in enum_type)
        raise ConfigurationError(f"Invalid {setting} {value!r}; expected one of: {choices}") from None


def _to_color_pair(severity: str, payload: Any) -> ColorPair:
    if isinstance(payload, ColorPair):
        return payload
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Colors for '{severity}' must be a mapping with foreground/background")
    try:
        return ColorPair(
            foreground=parse_color(payload.get("foreground")),
            background=parse_color(payload.get("background")),
        )
    except ValueError as exc:
        raise ConfigurationError(f"Colors for '{severity}': {exc}") from None


def _to_level_colors(data: Any) -> Dict[Severity, ColorPair] | None:
    if not data:
        return None
    if not isinstance(data, Mapping):
        raise ConfigurationError("log_level_colors must be a mapping of severity to colors")
    colors: Dict[Severity, ColorPair] = {}
    for name, payload in data.items():
        try:
            severity = parse_severity(name)
        except ValueError:
            raise ConfigurationError(f"log_level_colors references unknown severity '{name}'") from None
        colors[severity] = _to_color_pair(str(name), payload)
    return colors


def _to_bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def build_options(data: Mapping[str, Any]) -> FormatterOptions:
    """Translate the ``formatter`` section into :class:`FormatterOptions`."""

    signifier = data.get("first_line_signifier", ZERO_WIDTH_SPACE)
    if signifier is not None and not isinstance(signifier, str):
        raise ConfigurationError("first_line_signifier must be a string or null")
    timestamp_format = data.get("timestamp_format")
    if timestamp_format is not None and not isinstance(timestamp_format, str):
        raise ConfigurationError("timestamp_format must be a string or null")

    return FormatterOptions(
        color_behavior=_to_enum(ColorBehavior, data.get("color_behavior", "default"), "color_behavior"),
        log_level_colors=_to_level_colors(data.get("log_level_colors")),
        timestamp_format=timestamp_format or None,
        use_utc_timestamp=_to_bool(data, "use_utc_timestamp", False),
        stack_trace_format=_to_enum(
            StackTraceFormat, data.get("stack_trace_format", "single_line"), "stack_trace_format"
        ),
        include_event_id=_to_bool(data, "include_event_id", True),
        include_component=_to_bool(data, "include_component", True),
        include_log_template=_to_bool(data, "include_log_template", True),
        include_structured_parameters=_to_bool(data, "include_structured_parameters", True),
        include_scopes=_to_bool(data, "include_scopes", False),
        first_line_signifier=signifier,
    )


def _to_handler(data: Mapping[str, Any]) -> HandlerConfig:
    return HandlerConfig(
        stream=str(data.get("stream", "stderr")),
        level=data.get("level", "INFO"),
    )


def _to_levels(data: Mapping[str, Any]) -> LevelsConfig:
    root_level = data.get("root", "INFO")
    enable_trace = bool(data.get("enable_trace", False))
    overrides_raw = data.get("overrides", {})
    overrides: Dict[str, str | int] = {}
    if isinstance(overrides_raw, Mapping):
        for name, value in overrides_raw.items():
            overrides[name] = value
    return LevelsConfig(root_level=root_level, enable_trace=enable_trace, overrides=overrides)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name, {})
    return section if isinstance(section, Mapping) else {}


def build_config(data: Mapping[str, Any]) -> LogfmtConfig:
    raw_copy: Dict[str, Any] = deepcopy({k: v for k, v in data.items()})
    return LogfmtConfig(
        formatter=build_options(_section(data, "formatter")),
        handler=_to_handler(_section(data, "handler")),
        levels=_to_levels(_section(data, "levels")),
        capture_warnings=bool(data.get("capture_warnings", True)),
        raw=raw_copy,
    )
