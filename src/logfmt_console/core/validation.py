"""Configuration validation helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config.schema import LogfmtConfig

_STREAMS = {"stdout", "stderr"}


class ConfigurationError(ValueError):
    """Raised when configuration validation fails."""


def _check_level(label: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigurationError(f"Invalid {label}: {value!r}")
    if isinstance(value, str) and not value.strip():
        raise ConfigurationError(f"Invalid {label}: empty string")


def validate_configuration(config: "LogfmtConfig") -> None:
    """Ensure the handler and level settings are usable."""

    if config.handler.stream not in _STREAMS:
        raise ConfigurationError(
            f"Handler stream must be one of {', '.join(sorted(_STREAMS))}, got '{config.handler.stream}'"
        )

    _check_level("handler level", config.handler.level)
    _check_level("root level", config.levels.root_level)
    for name, value in config.levels.overrides.items():
        _check_level(f"level override for '{name}'", value)

    signifier = config.formatter.first_line_signifier
    if signifier is not None and ("\n" in signifier or "\r" in signifier):
        raise ConfigurationError("first_line_signifier must not contain line breaks")
