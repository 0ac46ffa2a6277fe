"""Timestamp helpers. Session times are kept as UTC-aware datetimes."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> datetime:
    """
    UTC-aware copy of a timestamp.

    Naive values are read as UTC, aware values are converted, and None
    means now.
    """
    if value is None:
        return utc_now()
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
