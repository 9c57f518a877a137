"""Wall-clock access kept in one place so runtime code stays testable."""

from __future__ import annotations

from datetime import datetime, timezone


def now() -> datetime:
    """Return the current time as a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)