"""
Model enums.
"""
from enum import Enum


class ReviewSessionStatus(str, Enum):
    """Status enum for ReviewSession. COMPLETE and CANCELLED are terminal."""
    STARTED = "STARTED"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not ReviewSessionStatus.STARTED
