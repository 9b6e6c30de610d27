"""
Review session lifecycle.

A session is created STARTED with a fixed set of items and ends exactly once,
either COMPLETE (every item answered correctly) or CANCELLED (abandoned part
way through). Ending a session writes one Review per reviewed item, moves each
item through the stage table and records the terminal status, all in a single
database transaction.
"""
import logging
import random
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import update
from sqlmodel import Session, select

from flashback.core.clock import Clock, utcnow
from flashback.core.config import settings
from flashback.core.exceptions import (
    CommitFailureError,
    FlashbackException,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from flashback.models import Item, Review, ReviewSession, ReviewSessionStatus
from flashback.schemas.review_session import (
    ReviewSessionSummaryResponse,
    SummaryReviewResponse,
)
from flashback.services.session_queue import QueuedItem, ReviewBout, SessionQueue
from flashback.services.srs_service import advance, clamp_stage, next_streak

logger = logging.getLogger(__name__)


def get_review_session(session: Session, session_id: int) -> ReviewSession:
    """
    Fetch a review session by ID.

    Raises:
        NotFoundError: If the session does not exist
    """
    review_session = session.get(ReviewSession, session_id)
    if not review_session:
        raise NotFoundError(f"Review session with id {session_id} not found")
    return review_session


def get_due_items(
    session: Session,
    as_of: Optional[datetime] = None,
    clock: Clock = utcnow
) -> List[Item]:
    """Items of the current reviewer whose next_available is at or before as_of (default: now)."""
    as_of = as_of or clock()
    query = (
        select(Item)
        .where(Item.user_id == settings.reviewer_id, Item.next_available <= as_of)
        .order_by(Item.next_available)  # type: ignore
    )
    return list(session.exec(query).all())


def create_review_session(
    session: Session,
    item_ids: Sequence[int],
    started_at: Optional[datetime] = None,
    clock: Clock = utcnow
) -> ReviewSession:
    """
    Start a review session over the given items.

    Args:
        session: Database session
        item_ids: Non-empty list of item IDs; duplicates are collapsed
        started_at: Start timestamp (defaults to now)
        clock: Time source

    Raises:
        ValidationError: If item_ids is empty
        NotFoundError: If any item does not exist
    """
    unique_ids = list(dict.fromkeys(item_ids))
    if not unique_ids:
        raise ValidationError("A review session needs at least one item")

    items = []
    for item_id in unique_ids:
        item = session.get(Item, item_id)
        if not item:
            raise NotFoundError(f"Item with id {item_id} not found")
        items.append(item)

    review_session = ReviewSession(
        started_at=started_at or clock(),
        status=ReviewSessionStatus.STARTED,
        items=items,
    )
    session.add(review_session)
    session.commit()
    session.refresh(review_session)

    logger.info(f"Started review session {review_session.id} with {len(items)} item(s)")
    return review_session


def load_session_queue(
    session: Session,
    session_id: int,
    clock: Clock = utcnow,
    rng: Optional[random.Random] = None
) -> SessionQueue:
    """
    Build the in-memory queue for a STARTED session.

    Raises:
        NotFoundError: If the session does not exist
        InvalidTransitionError: If the session already ended
    """
    review_session = get_review_session(session, session_id)
    if review_session.status.is_terminal:
        raise InvalidTransitionError(
            f"Review session {session_id} is {review_session.status.value} and cannot be reviewed"
        )

    queued = [
        QueuedItem(
            item_id=item.id,
            card_id=item.card_id,
            front=item.card.front,
            back=item.card.back,
            notes=item.card.notes,
            current_srs_stage=item.current_srs_stage,
            current_streak=item.current_streak,
            max_streak=item.max_streak,
        )
        for item in review_session.items
    ]
    return SessionQueue(session_id, queued, clock=clock, rng=rng)


def complete_review_session(
    session: Session,
    session_id: int,
    bouts: Iterable[ReviewBout],
    ended_at: Optional[datetime] = None,
    clock: Clock = utcnow,
    intervals: Optional[Sequence[int]] = None
) -> ReviewSession:
    """Finish a session normally. See ``_finish_review_session``."""
    return _finish_review_session(
        session, session_id, ReviewSessionStatus.COMPLETE, bouts, ended_at, clock, intervals
    )


def cancel_review_session(
    session: Session,
    session_id: int,
    bouts: Iterable[ReviewBout],
    ended_at: Optional[datetime] = None,
    clock: Clock = utcnow,
    intervals: Optional[Sequence[int]] = None
) -> ReviewSession:
    """Abandon a session, still recording the bouts reached so far. See ``_finish_review_session``."""
    return _finish_review_session(
        session, session_id, ReviewSessionStatus.CANCELLED, bouts, ended_at, clock, intervals
    )


def _finish_review_session(
    session: Session,
    session_id: int,
    status: ReviewSessionStatus,
    bouts: Iterable[ReviewBout],
    ended_at: Optional[datetime],
    clock: Clock,
    intervals: Optional[Sequence[int]]
) -> ReviewSession:
    """
    Move a STARTED session to a terminal status and apply its bouts.

    For each bout this:
    1. Computes the item's new stage and next availability
    2. Computes the new current/max streak
    3. Creates a Review with starting stage, clamped ending stage, seconds
       elapsed and times incorrect
    4. Updates the item's stage, next_available, counters and streaks

    Everything, including the session status and ended_at, is committed in a
    single transaction. The status change is a conditional UPDATE on
    status = STARTED, so of two overlapping finishes only one commits. On any
    failure the transaction is rolled back and the session stays STARTED.

    Note: times_correct is incremented for every reviewed item, even when the
    bout had incorrect answers.

    Raises:
        NotFoundError: If the session does not exist
        InvalidTransitionError: If the session already ended
        ValidationError: If a bout is duplicated or its item is not part of the session
        CommitFailureError: If an item no longer exists or the transaction fails
    """
    review_session = get_review_session(session, session_id)
    if review_session.status.is_terminal:
        logger.warning(
            f"Rejected {status.value} for review session {session_id}: "
            f"already {review_session.status.value}"
        )
        raise InvalidTransitionError(
            f"Review session {session_id} is already {review_session.status.value}"
        )

    session_item_ids = {item.id for item in review_session.items}
    seen_item_ids = set()
    reviews_created = 0
    ended_at = ended_at or clock()

    try:
        # Only one finish can move the row out of STARTED
        claimed = session.connection().execute(
            update(ReviewSession)
            .where(ReviewSession.id == session_id, ReviewSession.status == ReviewSessionStatus.STARTED)
            .values(status=status, ended_at=ended_at)
        )
        if claimed.rowcount != 1:
            logger.warning(f"Rejected {status.value} for review session {session_id}: already finished")
            raise InvalidTransitionError(f"Review session {session_id} is already finished")

        for bout in bouts:
            if bout.item_id in seen_item_ids:
                raise ValidationError(f"Item {bout.item_id} appears more than once in the session results")
            seen_item_ids.add(bout.item_id)

            item = session.get(Item, bout.item_id)
            if not item:
                raise CommitFailureError(
                    f"Item {bout.item_id} no longer exists; review session {session_id} was not saved"
                )
            if item.id not in session_item_ids:
                raise ValidationError(f"Item {item.id} is not part of review session {session_id}")

            starting_stage = clamp_stage(bout.starting_srs_stage, intervals)
            new_stage, next_available = advance(starting_stage, bout.times_incorrect, clock, intervals)
            new_streak, new_max_streak = next_streak(bout.current_streak, bout.max_streak, bout.times_incorrect)

            session.add(Review(
                created_at=clock(),
                starting_srs_stage=starting_stage,
                ending_srs_stage=new_stage,
                seconds_elapsed=bout.seconds_elapsed,
                times_incorrect=bout.times_incorrect,
                item_id=item.id,
                card_id=item.card_id,
                review_session_id=review_session.id,
            ))
            reviews_created += 1

            item.current_srs_stage = new_stage
            item.next_available = next_available
            item.times_reviewed += 1
            item.times_correct += 1
            item.times_incorrect += bout.times_incorrect
            item.current_streak = new_streak
            item.max_streak = new_max_streak
            session.add(item)

        session.commit()
    except FlashbackException:
        session.rollback()
        raise
    except Exception as e:
        session.rollback()
        logger.error(f"Error committing review session {session_id}: {str(e)}")
        raise CommitFailureError(f"Failed to save review session {session_id}: {str(e)}") from e

    session.refresh(review_session)
    logger.info(
        f"Review session {session_id} {status.value}: "
        f"{reviews_created} review(s) created at {review_session.ended_at}"
    )
    return review_session


def percent_correct(reviews: Sequence[Review]) -> Optional[float]:
    """Share of reviews answered without any incorrect attempt, or None when there are none."""
    if not reviews:
        return None
    return sum(1 for review in reviews if review.times_incorrect == 0) / len(reviews)


def summarize_review_session(session: Session, session_id: int) -> ReviewSessionSummaryResponse:
    """
    Build the summary view of a review session.

    Raises:
        NotFoundError: If the session does not exist
    """
    review_session = get_review_session(session, session_id)
    reviews = sorted(review_session.reviews, key=lambda review: review.id)
    return ReviewSessionSummaryResponse(
        id=review_session.id,
        started_at=review_session.started_at,
        ended_at=review_session.ended_at,
        status=review_session.status,
        percent_correct=percent_correct(reviews),
        reviews=[SummaryReviewResponse.model_validate(review) for review in reviews],
    )
