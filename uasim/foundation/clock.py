"""Timezone-aware clock utilities.

Every source timestamp in uasim (variable writes, condition transitions,
raised events, historian records) is UTC-aware and comes from here, so
tests can freeze time by patching ``utc_now`` where it is imported.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
