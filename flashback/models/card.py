"""
Card model.
"""
from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from pydantic import NaiveDatetime
from sqlalchemy import DateTime
from flashback.core.clock import utcnow

if TYPE_CHECKING:
    from flashback.models.item import Item


class Card(SQLModel, table=True):
    """Card table - front/back content shared by items and reviews."""
    __tablename__ = "card"
    
    id: Optional[int] = Field(default=None, primary_key=True)
    front: str
    back: str
    notes: Optional[str] = None  # Free-form notes shown next to the answer
    created_at: NaiveDatetime = Field(default_factory=utcnow, sa_type=DateTime)
    updated_at: Optional[NaiveDatetime] = Field(default=None, sa_type=DateTime)
    
    # Relationships
    items: List["Item"] = Relationship(
        back_populates="card",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
