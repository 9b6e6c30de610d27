"""
SRS (Spaced Repetition System) service.

The stage table maps an item's SRS stage to the number of hours to wait before
the item is due again. ``advance`` moves an item between stages after a review
bout and ``next_streak`` tracks consecutive clean bouts.

Stage indices are always clamped into the table; an out-of-range stage is never
an error.
"""
import logging
from datetime import datetime, timedelta
from typing import NamedTuple, Optional, Sequence, Tuple

from flashback.core.clock import Clock, utcnow
from flashback.core.config import settings

logger = logging.getLogger(__name__)


class StageAdvance(NamedTuple):
    """Result of moving an item through the stage table."""
    new_stage: int
    next_available_at: datetime


def _table(intervals: Optional[Sequence[int]]) -> Sequence[int]:
    return settings.srs_intervals if intervals is None else intervals


def max_stage(intervals: Optional[Sequence[int]] = None) -> int:
    """Highest valid stage index for the stage table."""
    return len(_table(intervals)) - 1


def clamp_stage(stage: int, intervals: Optional[Sequence[int]] = None) -> int:
    """Clamp any integer into the valid stage range [0, len(table) - 1]."""
    return max(0, min(max_stage(intervals), stage))


def interval_hours(stage: int, intervals: Optional[Sequence[int]] = None) -> int:
    """
    Hours until an item at the given stage is due again.

    Args:
        stage: SRS stage; clamped before lookup
        intervals: Stage table to use (defaults to the configured table)

    Returns:
        Interval in hours (0 means due immediately)
    """
    table = _table(intervals)
    return table[clamp_stage(stage, table)]


def calculate_next_available(
    stage: int,
    clock: Clock = utcnow,
    intervals: Optional[Sequence[int]] = None
) -> datetime:
    """
    Calculate when an item at the given stage becomes available for review.

    Args:
        stage: SRS stage; clamped before lookup
        clock: Time source the interval is added to
        intervals: Stage table to use (defaults to the configured table)

    Returns:
        Absolute naive-UTC timestamp
    """
    return clock() + timedelta(hours=interval_hours(stage, intervals))


def advance(
    current_stage: int,
    times_incorrect: int,
    clock: Clock = utcnow,
    intervals: Optional[Sequence[int]] = None
) -> StageAdvance:
    """
    Compute an item's new stage and next availability after one review bout.

    A clean bout (no incorrect answers) moves the item up one stage. Otherwise it
    drops one stage per incorrect answer. The result is clamped to the table.

    Args:
        current_stage: Stage the item was in when the bout started
        times_incorrect: Incorrect answers given during the bout (>= 0)
        clock: Time source for the next-available timestamp
        intervals: Stage table to use (defaults to the configured table)

    Returns:
        StageAdvance(new_stage, next_available_at)

    Raises:
        ValueError: If times_incorrect is negative
    """
    if times_incorrect < 0:
        raise ValueError(f"times_incorrect must be non-negative, got {times_incorrect}")

    table = _table(intervals)
    if times_incorrect == 0:
        new_stage = clamp_stage(current_stage + 1, table)
    else:
        new_stage = clamp_stage(current_stage - times_incorrect, table)

    return StageAdvance(new_stage, calculate_next_available(new_stage, clock, table))


def next_streak(current_streak: int, max_streak: int, times_incorrect: int) -> Tuple[int, int]:
    """
    Apply the streak policy for one review bout.

    Returns:
        (new_streak, new_max_streak): a clean bout extends the streak, any
        incorrect answer restarts it at 1.
    """
    if times_incorrect == 0:
        new_streak = current_streak + 1
    else:
        new_streak = 1
    return new_streak, max(max_streak, new_streak)
