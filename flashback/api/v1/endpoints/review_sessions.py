"""
Review session endpoints.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
import logging

from flashback.core.clock import Clock, get_clock
from flashback.core.database import get_session
from flashback.models import ReviewSession
from flashback.schemas.review_session import (
    BoutData,
    CreateReviewSessionRequest,
    FinishReviewSessionRequest,
    ReviewSessionDetailResponse,
    ReviewSessionResponse,
    ReviewSessionsResponse,
    ReviewSessionSummaryResponse,
)
from flashback.services.review_session_service import (
    cancel_review_session,
    complete_review_session,
    create_review_session,
    get_review_session,
    summarize_review_session,
)
from flashback.services.session_queue import ReviewBout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/review-sessions", tags=["review-sessions"])


def _to_bout(data: BoutData) -> ReviewBout:
    return ReviewBout(
        item_id=data.item_id,
        starting_srs_stage=data.starting_srs_stage,
        seconds_elapsed=data.seconds_elapsed,
        times_incorrect=data.times_incorrect,
        current_streak=data.current_streak,
        max_streak=data.max_streak,
    )


@router.get("", response_model=ReviewSessionsResponse)
async def get_review_sessions(session: Session = Depends(get_session)):
    """Get all review sessions, most recent first."""
    review_sessions = session.exec(
        select(ReviewSession).order_by(ReviewSession.started_at.desc())  # type: ignore
    ).all()
    return ReviewSessionsResponse(
        review_sessions=[ReviewSessionResponse.model_validate(rs) for rs in review_sessions]
    )


@router.post("", response_model=ReviewSessionResponse, status_code=status.HTTP_201_CREATED)
async def post_review_session(
    request: CreateReviewSessionRequest,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Start a review session over the given items."""
    review_session = create_review_session(
        session,
        request.item_ids,
        started_at=request.started_at,
        clock=clock
    )
    return ReviewSessionResponse.model_validate(review_session)


@router.get("/{session_id}", response_model=ReviewSessionDetailResponse)
async def get_review_session_by_id(session_id: int, session: Session = Depends(get_session)):
    """Get a review session with its items and reviews."""
    return ReviewSessionDetailResponse.model_validate(get_review_session(session, session_id))


@router.get("/{session_id}/summary", response_model=ReviewSessionSummaryResponse)
async def get_review_session_summary(session_id: int, session: Session = Depends(get_session)):
    """Get the summary view of a review session."""
    return summarize_review_session(session, session_id)


@router.post("/{session_id}/complete", response_model=ReviewSessionResponse)
async def complete(
    session_id: int,
    request: FinishReviewSessionRequest,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """
    Complete a review session.

    Creates one review per entry in `reviews`, advances each item through the
    SRS stages and marks the session COMPLETE, all in one transaction.
    """
    review_session = complete_review_session(
        session,
        session_id,
        [_to_bout(bout) for bout in request.reviews],
        ended_at=request.ended_at,
        clock=clock
    )
    return ReviewSessionResponse.model_validate(review_session)


@router.post("/{session_id}/cancel", response_model=ReviewSessionResponse)
async def cancel(
    session_id: int,
    request: FinishReviewSessionRequest,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """
    Cancel a review session.

    Items reached before the session was abandoned are recorded the same way
    as on completion; the session is marked CANCELLED.
    """
    review_session = cancel_review_session(
        session,
        session_id,
        [_to_bout(bout) for bout in request.reviews],
        ended_at=request.ended_at,
        clock=clock
    )
    return ReviewSessionResponse.model_validate(review_session)
