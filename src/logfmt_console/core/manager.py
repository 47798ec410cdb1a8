"""Logging manager responsible for runtime configuration and lifecycle."""

from __future__ import annotations

import logging
from typing import Any

from ..config.schema import LogfmtConfig
from ..handlers.console import ConsoleHandlerConfig, build_console_handler
from .context import ContextAdapter, inject_context
from .levels import ensure_level, register_trace_level
from .options import FormatterOptions, OptionsMonitor
from .validation import validate_configuration

logger = logging.getLogger(__name__)


class LogManager:
    """Central coordinator for logfmt_console configuration.

    The options monitor outlives individual ``configure`` calls so formatters
    already attached to handlers pick up reloaded options on their next line.
    """

    def __init__(self) -> None:
        self._config: LogfmtConfig | None = None
        self._handler: logging.Handler | None = None
        self.monitor = OptionsMonitor()

    # ------------------------------------------------------------------
    def configure(self, config: LogfmtConfig) -> None:
        """Apply the supplied configuration."""

        validate_configuration(config)
        self._teardown()

        self._config = config
        register_trace_level(config.levels.enable_trace)
        logging.captureWarnings(config.capture_warnings)
        self.monitor.set(config.formatter)

        handler_cfg = ConsoleHandlerConfig(
            stream=config.handler.stream,
            level=ensure_level(config.handler.level),
        )
        self._handler = build_console_handler(handler_cfg, self.monitor)

        self._configure_root_logger()
        self._apply_level_overrides()

    def reload(self, config: LogfmtConfig) -> None:
        """Swap formatter options and levels without rebuilding the handler."""

        if self._handler is None or self._config is None:
            self.configure(config)
            return
        validate_configuration(config)
        if config.handler.stream != self._config.handler.stream:
            self.configure(config)
            return

        self._config = config
        register_trace_level(config.levels.enable_trace)
        self._handler.setLevel(ensure_level(config.handler.level))
        logging.getLogger().setLevel(ensure_level(config.levels.root_level))
        self._apply_level_overrides()
        self.monitor.set(config.formatter)
        logger.debug("configuration reloaded")

    # ------------------------------------------------------------------
    def shutdown(self) -> None:
        """Flush and detach the console handler."""

        self._teardown()
        self._config = None
        self.monitor.set(FormatterOptions())

    # ------------------------------------------------------------------
    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def get_context_logger(self, name: str, **context_kv: Any) -> ContextAdapter:
        return inject_context(self.get_logger(name), base_context=context_kv)

    # ------------------------------------------------------------------
    def _teardown(self) -> None:
        if self._handler is None:
            return
        root_logger = logging.getLogger()
        if self._handler in root_logger.handlers:
            root_logger.removeHandler(self._handler)
        try:
            self._handler.flush()
        except (OSError, ValueError) as exc:
            # stream already closed by its owner
            logger.debug("console handler flush failed: %s", exc)
        self._handler.close()
        self._handler = None

    def _configure_root_logger(self) -> None:
        assert self._config is not None
        assert self._handler is not None
        root_logger = logging.getLogger()
        root_logger.handlers = []
        root_logger.setLevel(ensure_level(self._config.levels.root_level))
        root_logger.addHandler(self._handler)

    def _apply_level_overrides(self) -> None:
        assert self._config is not None
        for name, level in self._config.levels.overrides.items():
            logging.getLogger(name).setLevel(ensure_level(level))


GLOBAL_MANAGER = LogManager()
