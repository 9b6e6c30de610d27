"""
ReviewSession model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from flashback.core.clock import utcnow
from flashback.models.enums import ReviewSessionStatus
from flashback.models.review_session_item import ReviewSessionItem

if TYPE_CHECKING:
    from flashback.models.item import Item
    from flashback.models.review import Review


class ReviewSession(SQLModel, table=True):
    """ReviewSession table - a bounded batch of items selected for review."""
    __tablename__ = "review_session"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    started_at: NaiveDatetime = Field(default_factory=utcnow, sa_type=DateTime)
    ended_at: Optional[NaiveDatetime] = Field(default=None, sa_type=DateTime)  # Set once the session reaches a terminal status
    status: ReviewSessionStatus = Field(default=ReviewSessionStatus.STARTED)
    
    # Relationships
    items: List["Item"] = Relationship(
        back_populates="review_sessions",
        link_model=ReviewSessionItem
    )
    reviews: List["Review"] = Relationship(back_populates="review_session")
