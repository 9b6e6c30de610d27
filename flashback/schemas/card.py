"""
Card schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime


class CardResponse(BaseModel):
    """Card response schema."""
    id: int
    front: str
    back: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True


class CreateCardRequest(BaseModel):
    """Request schema for creating a card."""
    front: str = Field(..., min_length=1, description="Prompt shown during review")
    back: str = Field(..., min_length=1, description="Expected answer")
    notes: Optional[str] = Field(None, description="Notes shown alongside the answer")
    
    class Config:
        json_schema_extra = {
            "example": {
                "front": "猫",
                "back": "cat",
                "notes": "Reading: ねこ"
            }
        }

    @field_validator('front', 'back')
    @classmethod
    def validate_not_blank(cls, v):
        """Validate card sides are not just whitespace."""
        if not v.strip():
            raise ValueError("card front and back cannot be empty")
        return v


class UpdateCardRequest(BaseModel):
    """Request schema for editing a card."""
    front: Optional[str] = Field(None, min_length=1)
    back: Optional[str] = Field(None, min_length=1)
    notes: Optional[str] = None


class CardsResponse(BaseModel):
    """Response schema for card list."""
    cards: List[CardResponse]


class DeletedResponse(BaseModel):
    """Response schema for delete operations."""
    id: int
