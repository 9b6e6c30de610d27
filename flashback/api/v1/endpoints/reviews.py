"""
Reviews endpoint. Reviews are only created by finishing a review session.
"""
from fastapi import APIRouter, Depends
from typing import Optional
from sqlmodel import Session, select
from flashback.core.database import get_session
from flashback.core.exceptions import NotFoundError
from flashback.models import Review
from flashback.schemas.review import ReviewResponse, ReviewsResponse

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("", response_model=ReviewsResponse)
async def get_reviews(
    item_id: Optional[int] = None,
    session: Session = Depends(get_session)
):
    """Get reviews, optionally filtered by item_id."""
    query = select(Review)
    if item_id is not None:
        query = query.where(Review.item_id == item_id)
    reviews = session.exec(query.order_by(Review.id)).all()  # type: ignore
    return ReviewsResponse(reviews=[ReviewResponse.model_validate(review) for review in reviews])


@router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(review_id: int, session: Session = Depends(get_session)):
    """Get a review by ID."""
    review = session.get(Review, review_id)
    if not review:
        raise NotFoundError(f"Review with id {review_id} not found")
    return ReviewResponse.model_validate(review)
