"""
Review session schemas.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from flashback.core.clock import to_naive_utc
from flashback.models.enums import ReviewSessionStatus
from flashback.schemas.card import CardResponse
from flashback.schemas.item import ItemResponse
from flashback.schemas.review import ReviewResponse


class ReviewSessionResponse(BaseModel):
    """Review session response schema."""
    id: int
    started_at: datetime
    ended_at: Optional[datetime] = None
    status: ReviewSessionStatus
    
    class Config:
        from_attributes = True


class ReviewSessionDetailResponse(ReviewSessionResponse):
    """Review session with the items it was started with and the reviews it produced."""
    items: List[ItemResponse] = []
    reviews: List[ReviewResponse] = []


class ReviewSessionsResponse(BaseModel):
    """Response schema for review session list."""
    review_sessions: List[ReviewSessionResponse]


class CreateReviewSessionRequest(BaseModel):
    """Request to start a review session."""
    item_ids: List[int] = Field(..., min_length=1, description="Items to review")
    started_at: Optional[datetime] = Field(None, description="Defaults to now")
    
    class Config:
        json_schema_extra = {
            "example": {
                "item_ids": [1, 2, 3]
            }
        }

    @field_validator('started_at')
    @classmethod
    def normalize_started_at(cls, v):
        return to_naive_utc(v)


class BoutData(BaseModel):
    """One item's accumulated result for the session."""
    item_id: int = Field(..., description="Reviewed item")
    starting_srs_stage: int = Field(..., description="Item's SRS stage when the session started")
    seconds_elapsed: int = Field(..., ge=0, description="Total seconds spent on the item, across passes")
    times_incorrect: int = Field(..., ge=0, description="Incorrect answers given for the item")
    current_streak: int = Field(..., ge=0, description="Item's streak before the session")
    max_streak: int = Field(..., ge=0, description="Item's max streak before the session")


class FinishReviewSessionRequest(BaseModel):
    """Request to complete or cancel a review session."""
    ended_at: Optional[datetime] = Field(None, description="Defaults to now")
    reviews: List[BoutData] = Field(default_factory=list, description="Per-item results")
    
    class Config:
        json_schema_extra = {
            "example": {
                "ended_at": "2024-01-01T10:05:00Z",
                "reviews": [
                    {
                        "item_id": 1,
                        "starting_srs_stage": 1,
                        "seconds_elapsed": 12,
                        "times_incorrect": 0,
                        "current_streak": 2,
                        "max_streak": 4
                    }
                ]
            }
        }

    @field_validator('ended_at')
    @classmethod
    def normalize_ended_at(cls, v):
        return to_naive_utc(v)


class SummaryItemResponse(BaseModel):
    """Item as shown in a session summary."""
    id: int
    current_srs_stage: int
    current_streak: int
    max_streak: int
    card: CardResponse
    
    class Config:
        from_attributes = True


class SummaryReviewResponse(BaseModel):
    """Review row of a session summary."""
    id: int
    starting_srs_stage: int
    ending_srs_stage: int
    seconds_elapsed: int
    times_incorrect: int
    item: SummaryItemResponse
    
    class Config:
        from_attributes = True


class ReviewSessionSummaryResponse(ReviewSessionResponse):
    """Summary view of a finished review session."""
    percent_correct: Optional[float] = Field(None, description="Share of reviews with no incorrect answers")
    reviews: List[SummaryReviewResponse] = []
