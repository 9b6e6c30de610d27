"""
Review schemas.
"""
from pydantic import BaseModel
from typing import List
from datetime import datetime


class ReviewResponse(BaseModel):
    """Review response schema."""
    id: int
    created_at: datetime
    starting_srs_stage: int
    ending_srs_stage: int
    seconds_elapsed: int
    times_incorrect: int
    item_id: int
    card_id: int
    review_session_id: int
    
    class Config:
        from_attributes = True


class ReviewsResponse(BaseModel):
    """Response schema for review list."""
    reviews: List[ReviewResponse]
