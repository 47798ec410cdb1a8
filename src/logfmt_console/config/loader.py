"""Configuration loading pipeline.

Sources are merged lowest precedence first: the user config directory,
``logfmt_console.{toml,yaml,yml}`` in the working directory, the
``[tool.logfmt_console]`` table of ``pyproject.toml``, ``LOGFMT_CONSOLE__*``
environment variables and finally explicit overrides.
"""

from __future__ import annotations

import importlib
import json
import logging
import os
from pathlib import Path
from types import ModuleType
from typing import Any, Callable, Dict, Mapping, Tuple, cast

from platformdirs import user_config_dir

from .schema import DEFAULT_CONFIG, LogfmtConfig, build_config, default_config
from ..core.validation import ConfigurationError

try:  # pragma: no cover
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

try:  # pragma: no cover
    yaml_module = importlib.import_module("yaml")
except ModuleNotFoundError:  # pragma: no cover
    yaml_module = None

yaml: ModuleType | None = yaml_module


logger = logging.getLogger(__name__)

APP_NAME = "logfmt_console"
_ENV_PREFIX = "LOGFMT_CONSOLE__"
_CONFIG_STEM = "logfmt_console"

# Values written to the line verbatim; whitespace and digits are meaningful.
_VERBATIM_ENV_KEYS = {
    ("formatter", "timestamp_format"),
    ("formatter", "first_line_signifier"),
}
_NULL_WORDS = {"null", "none"}


def _read_toml(path: Path) -> Dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _read_yaml(path: Path) -> Dict[str, Any]:
    if yaml is None:
        logger.debug("PyYAML not installed, ignoring %s", path)
        return {}
    with path.open("r", encoding="utf-8") as fh:
        safe_load = cast(Callable[[Any], Any], getattr(yaml, "safe_load"))
        data = safe_load(fh)
    if isinstance(data, Mapping):
        return {str(key): value for key, value in data.items()}
    return {}


_READERS: Dict[str, Callable[[Path], Dict[str, Any]]] = {
    ".toml": _read_toml,
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
}


def _merge(base: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in incoming.items():
        existing = base.get(key)
        if isinstance(value, Mapping):
            nested = dict(existing) if isinstance(existing, Mapping) else {}
            base[key] = _merge(nested, value)
        else:
            base[key] = value
    return base


def _load_directory(directory: Path) -> Dict[str, Any]:
    """Merge every ``logfmt_console.*`` file found in ``directory``."""

    data: Dict[str, Any] = {}
    if not directory.is_dir():
        return data
    for suffix, reader in _READERS.items():
        path = directory / f"{_CONFIG_STEM}{suffix}"
        if not path.is_file():
            continue
        payload = reader(path)
        if payload:
            logger.debug("loaded configuration file %s", path)
            _merge(data, payload)
    return data


def _load_pyproject(directory: Path) -> Dict[str, Any]:
    path = directory / "pyproject.toml"
    if not path.is_file():
        return {}
    tool = _read_toml(path).get("tool", {})
    section = tool.get(APP_NAME, {}) if isinstance(tool, Mapping) else {}
    if isinstance(section, Mapping):
        return {str(key): value for key, value in section.items()}
    return {}


def _default_for(path: Tuple[str, ...]) -> Any:
    node: Any = DEFAULT_CONFIG
    for segment in path:
        if not isinstance(node, Mapping) or segment not in node:
            return None
        node = node[segment]
    return node


def _parse_env_value(path: Tuple[str, ...], raw: str) -> Any:
    """Convert an environment string using the type of the setting's default."""

    stripped = raw.strip()
    if stripped.lower() in _NULL_WORDS:
        return None
    if path in _VERBATIM_ENV_KEYS:
        return raw

    default = _default_for(path)
    env_key = _ENV_PREFIX + "__".join(segment.upper() for segment in path)
    if isinstance(default, bool):
        lowered = stripped.lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ConfigurationError(f"{env_key} expects a boolean, got {raw!r}")
    if isinstance(default, Mapping):
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{env_key} expects a JSON object: {exc}") from None
        if not isinstance(parsed, Mapping):
            raise ConfigurationError(f"{env_key} expects a JSON object, got {raw!r}")
        return parsed
    # level names also accept numeric levels
    if stripped.isdigit():
        return int(stripped)
    return stripped


def _env_config(environ: Mapping[str, str] | None = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    source = os.environ if environ is None else environ
    for env_key, raw_value in source.items():
        if not env_key.startswith(_ENV_PREFIX):
            continue
        path = tuple(segment.lower() for segment in env_key[len(_ENV_PREFIX) :].split("__"))
        target = data
        for segment in path[:-1]:
            target = target.setdefault(segment, {})
        target[path[-1]] = _parse_env_value(path, raw_value)
    return data


def load_configuration(overrides: Dict[str, Any] | None = None) -> LogfmtConfig:
    """Load configuration from supported sources in precedence order."""

    cwd = Path.cwd()
    sources = {
        "user": _load_directory(Path(user_config_dir(APP_NAME))),
        "local": _load_directory(cwd),
        "pyproject": _load_pyproject(cwd),
        "env": _env_config(),
        "overrides": overrides or {},
    }
    logger.debug("configuration sources applied: %s", [name for name, data in sources.items() if data])

    merged = default_config()
    for payload in sources.values():
        _merge(merged, payload)
    return build_config(merged)
