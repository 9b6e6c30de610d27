"""
ReviewSessionItem model - junction table between review sessions and the items they were started with.
"""
from sqlmodel import SQLModel, Field


class ReviewSessionItem(SQLModel, table=True):
    """ReviewSessionItem junction table - the item set a session was created with."""
    __tablename__ = "review_session_item"
    
    review_session_id: int = Field(foreign_key="review_session.id", primary_key=True)
    item_id: int = Field(foreign_key="item.id", primary_key=True)
