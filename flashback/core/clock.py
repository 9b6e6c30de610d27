"""
Time source used by the scheduler and the review session lifecycle.

All timestamps are naive UTC datetimes, matching what the database stores.
"""
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current wall-clock time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_clock() -> Clock:
    """Dependency for getting the current time source."""
    return utcnow


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC; naive values are assumed to be UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
