"""Time utilities for logfmt_console."""

from __future__ import annotations

from datetime import datetime, timezone

__all__ = ["localnow", "utcnow"]


def utcnow() -> datetime:
    """Return a timezone-aware UTC ``datetime`` instance."""

    return datetime.now(timezone.utc)


def localnow() -> datetime:
    """Return a timezone-aware ``datetime`` in the local zone."""

    return datetime.now(timezone.utc).astimezone()
