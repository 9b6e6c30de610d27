"""
Review model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from flashback.core.clock import utcnow

if TYPE_CHECKING:
    from flashback.models.card import Card
    from flashback.models.item import Item
    from flashback.models.review_session import ReviewSession


class Review(SQLModel, table=True):
    """Review table - immutable outcome of one item within one review session."""
    __tablename__ = "review"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: NaiveDatetime = Field(default_factory=utcnow, sa_type=DateTime)
    starting_srs_stage: int
    ending_srs_stage: int  # Already clamped to the stage table
    seconds_elapsed: int = Field(default=0)
    times_incorrect: int = Field(default=0)
    item_id: int = Field(foreign_key="item.id", index=True)
    card_id: int = Field(foreign_key="card.id")
    review_session_id: int = Field(foreign_key="review_session.id", index=True)
    
    # Relationships
    item: "Item" = Relationship(back_populates="reviews")
    card: "Card" = Relationship()
    review_session: "ReviewSession" = Relationship(back_populates="reviews")
