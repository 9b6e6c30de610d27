"""
Item model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from pydantic import NaiveDatetime
from sqlalchemy import DateTime, UniqueConstraint
from flashback.core.clock import utcnow
from flashback.models.review_session_item import ReviewSessionItem

if TYPE_CHECKING:
    from flashback.models.card import Card
    from flashback.models.review import Review
    from flashback.models.review_session import ReviewSession


class Item(SQLModel, table=True):
    """Item table - a reviewer's scheduling record for one card."""
    __tablename__ = "item"
    __table_args__ = (
        UniqueConstraint("user_id", "card_id", name="item_user_id_card_id_key"),
    )
    
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    card_id: int = Field(foreign_key="card.id")
    created_at: NaiveDatetime = Field(default_factory=utcnow, sa_type=DateTime)
    current_srs_stage: int = Field(default=0)
    next_available: NaiveDatetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)  # Cached from the stage table
    times_reviewed: int = Field(default=0)
    times_correct: int = Field(default=0)
    times_incorrect: int = Field(default=0)
    current_streak: int = Field(default=0)
    max_streak: int = Field(default=0)
    
    # Relationships
    card: "Card" = Relationship(back_populates="items")
    reviews: List["Review"] = Relationship(
        back_populates="item",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    review_sessions: List["ReviewSession"] = Relationship(
        back_populates="items",
        link_model=ReviewSessionItem
    )
