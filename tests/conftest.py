from __future__ import annotations

import logging
from typing import Iterator

import pytest

import logfmt_console.api as logfmt_api
from logfmt_console.core.colors import ColorBehavior
from logfmt_console.core.manager import GLOBAL_MANAGER
from logfmt_console.core.options import FormatterOptions


@pytest.fixture(autouse=True)
def reset_logfmt_console() -> Iterator[None]:
    yield
    GLOBAL_MANAGER.shutdown()
    logfmt_api._CONFIGURED = False
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(logging.NOTSET)
    logging.captureWarnings(False)


@pytest.fixture
def plain_options() -> FormatterOptions:
    """Options producing bare lines: no colours, no signifier, no timestamp."""

    return FormatterOptions(
        color_behavior=ColorBehavior.DISABLED,
        first_line_signifier=None,
        include_scopes=True,
    )
