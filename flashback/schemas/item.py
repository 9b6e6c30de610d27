"""
Item schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from flashback.core.clock import to_naive_utc
from flashback.schemas.card import CardResponse


class ItemResponse(BaseModel):
    """Item response schema, with its card embedded."""
    id: int
    card_id: int
    current_srs_stage: int
    next_available: datetime
    times_reviewed: int
    times_correct: int
    times_incorrect: int
    current_streak: int
    max_streak: int
    card: Optional[CardResponse] = None
    
    class Config:
        from_attributes = True


class CreateItemRequest(BaseModel):
    """Request schema for adding a card to the reviewer's queue."""
    card_id: int = Field(..., description="Card to track")
    current_srs_stage: Optional[int] = Field(None, description="Initial SRS stage (clamped to the stage table, default 0)")
    next_available: Optional[datetime] = Field(None, description="Defaults to now plus the stage's interval")
    
    class Config:
        json_schema_extra = {
            "example": {
                "card_id": 1,
                "current_srs_stage": 0
            }
        }

    @field_validator('next_available')
    @classmethod
    def normalize_next_available(cls, v):
        return to_naive_utc(v)


class ItemsResponse(BaseModel):
    """Response schema for item list."""
    items: List[ItemResponse]


class ItemIdsResponse(BaseModel):
    """Response schema for due item ids."""
    item_ids: List[int]
