"""
Integration tests for the review session lifecycle against an in-memory database.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import event
from sqlmodel import Session, select

from flashback.core.exceptions import (
    CommitFailureError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from flashback.models import Item, Review, ReviewSession, ReviewSessionStatus
from flashback.services.review_session_service import (
    cancel_review_session,
    complete_review_session,
    create_review_session,
    get_due_items,
    load_session_queue,
    percent_correct,
    summarize_review_session,
)
from flashback.services.session_queue import ReviewBout

NOW = datetime(2024, 1, 1, 12, 0, 0)

TABLE = [0, 4, 8]


def bout_for(item, seconds=5, times_incorrect=0, starting_stage=None):
    return ReviewBout(
        item_id=item.id,
        starting_srs_stage=item.current_srs_stage if starting_stage is None else starting_stage,
        seconds_elapsed=seconds,
        times_incorrect=times_incorrect,
        current_streak=item.current_streak,
        max_streak=item.max_streak,
    )


def reviews_in(session, session_id):
    return session.exec(select(Review).where(Review.review_session_id == session_id)).all()


class TestCreateReviewSession:

    def test_starts_session(self, session, make_item, clock):
        item = make_item()

        review_session = create_review_session(session, [item.id], clock=clock)

        assert review_session.status == ReviewSessionStatus.STARTED
        assert review_session.started_at == NOW
        assert review_session.ended_at is None
        assert [i.id for i in review_session.items] == [item.id]

    def test_duplicate_ids_collapsed(self, session, make_item, clock):
        item = make_item()

        review_session = create_review_session(session, [item.id, item.id], clock=clock)

        assert len(review_session.items) == 1

    def test_empty_item_list_rejected(self, session, clock):
        with pytest.raises(ValidationError):
            create_review_session(session, [], clock=clock)

    def test_missing_item_rejected(self, session, clock):
        with pytest.raises(NotFoundError):
            create_review_session(session, [999], clock=clock)


class TestDueItems:

    def test_due_items_ordered_by_availability(self, session, make_item, clock):
        later = make_item(front="犬", back="dog", next_available=NOW - timedelta(hours=1))
        earlier = make_item(front="鳥", back="bird", next_available=NOW - timedelta(days=1))
        make_item(front="魚", back="fish", next_available=NOW + timedelta(hours=1))

        due = get_due_items(session, clock=clock)

        assert [item.id for item in due] == [earlier.id, later.id]

    def test_item_due_exactly_now_is_included(self, session, make_item, clock):
        item = make_item(next_available=NOW)

        assert [i.id for i in get_due_items(session, clock=clock)] == [item.id]

    def test_other_reviewers_items_excluded(self, session, make_item, clock):
        make_item(user_id="someoneElse")

        assert get_due_items(session, clock=clock) == []

    def test_explicit_as_of(self, session, make_item, clock):
        item = make_item(next_available=NOW + timedelta(hours=5))

        due = get_due_items(session, as_of=NOW + timedelta(hours=6), clock=clock)

        assert [i.id for i in due] == [item.id]


class TestCompleteReviewSession:

    def test_clean_bout_moves_item_up(self, session, make_item, clock):
        item = make_item(stage=1, streak=2, max_streak=2)
        review_session = create_review_session(session, [item.id], clock=clock)

        clock.advance(minutes=1)
        result = complete_review_session(
            session, review_session.id, [bout_for(item, seconds=12)], clock=clock, intervals=TABLE
        )

        assert result.status == ReviewSessionStatus.COMPLETE
        assert result.ended_at == NOW + timedelta(minutes=1)

        session.refresh(item)
        assert item.current_srs_stage == 2
        assert item.next_available == NOW + timedelta(minutes=1, hours=8)
        assert item.times_reviewed == 1
        assert item.times_correct == 1
        assert item.times_incorrect == 0
        assert item.current_streak == 3
        assert item.max_streak == 3

        (review,) = reviews_in(session, review_session.id)
        assert review.starting_srs_stage == 1
        assert review.ending_srs_stage == 2
        assert review.seconds_elapsed == 12
        assert review.times_incorrect == 0
        assert review.card_id == item.card_id

    def test_incorrect_bout_moves_item_down(self, session, make_item, clock):
        item = make_item(stage=1, streak=4, max_streak=5)
        review_session = create_review_session(session, [item.id], clock=clock)

        complete_review_session(
            session, review_session.id, [bout_for(item, times_incorrect=2)], clock=clock, intervals=TABLE
        )

        session.refresh(item)
        assert item.current_srs_stage == 0
        assert item.next_available == NOW
        assert item.times_incorrect == 2
        assert item.current_streak == 1
        assert item.max_streak == 5
        # counted as correct once the bout ends, whatever the misses
        assert item.times_correct == 1

    def test_starting_stage_clamped(self, session, make_item, clock):
        item = make_item(stage=2)
        review_session = create_review_session(session, [item.id], clock=clock)

        complete_review_session(
            session, review_session.id, [bout_for(item, starting_stage=99)], clock=clock, intervals=TABLE
        )

        (review,) = reviews_in(session, review_session.id)
        assert review.starting_srs_stage == 2
        assert review.ending_srs_stage == 2

    def test_driven_by_session_queue(self, session, make_item, clock, no_shuffle):
        first = make_item(front="猫", back="cat", stage=1)
        second = make_item(front="犬", back="dog", stage=2)
        review_session = create_review_session(session, [first.id, second.id], clock=clock)

        queue = load_session_queue(session, review_session.id, clock=clock, rng=no_shuffle)
        missed = False
        while not queue.is_exhausted:
            clock.advance(seconds=4)
            if queue.current.item_id == second.id and not missed:
                queue.submit_guess("wolf")
                missed = True
            else:
                queue.submit_guess(queue.current.back.upper())
            queue.continue_()

        complete_review_session(session, review_session.id, queue.bouts(), clock=clock, intervals=TABLE)

        reviews = {review.item_id: review for review in reviews_in(session, review_session.id)}
        assert reviews[first.id].times_incorrect == 0
        assert reviews[first.id].seconds_elapsed == 4
        assert reviews[first.id].ending_srs_stage == 2
        assert reviews[second.id].times_incorrect == 1
        assert reviews[second.id].seconds_elapsed == 8
        assert reviews[second.id].ending_srs_stage == 1

    def test_cannot_finish_twice(self, session, make_item, clock):
        item = make_item()
        review_session = create_review_session(session, [item.id], clock=clock)
        complete_review_session(session, review_session.id, [bout_for(item)], clock=clock)

        with pytest.raises(InvalidTransitionError):
            complete_review_session(session, review_session.id, [bout_for(item)], clock=clock)
        with pytest.raises(InvalidTransitionError):
            cancel_review_session(session, review_session.id, [], clock=clock)

        assert len(reviews_in(session, review_session.id)) == 1

    def test_missing_session(self, session, clock):
        with pytest.raises(NotFoundError):
            complete_review_session(session, 404, [], clock=clock)

    def test_item_outside_session_rejected(self, session, make_item, clock):
        item = make_item()
        stranger = make_item(front="犬", back="dog")
        review_session = create_review_session(session, [item.id], clock=clock)

        with pytest.raises(ValidationError):
            complete_review_session(session, review_session.id, [bout_for(stranger)], clock=clock)

        assert session.get(ReviewSession, review_session.id).status == ReviewSessionStatus.STARTED

    def test_duplicate_bouts_rejected(self, session, make_item, clock):
        item = make_item()
        review_session = create_review_session(session, [item.id], clock=clock)

        with pytest.raises(ValidationError):
            complete_review_session(session, review_session.id, [bout_for(item), bout_for(item)], clock=clock)

        assert reviews_in(session, review_session.id) == []


class TestCommitAtomicity:

    def test_deleted_item_aborts_commit(self, session, make_item, clock):
        kept = make_item(stage=1)
        doomed = make_item(front="犬", back="dog")
        review_session = create_review_session(session, [kept.id, doomed.id], clock=clock)
        bouts = [bout_for(kept), bout_for(doomed)]

        session.delete(doomed)
        session.commit()

        with pytest.raises(CommitFailureError):
            complete_review_session(session, review_session.id, bouts, clock=clock, intervals=TABLE)

        assert session.get(ReviewSession, review_session.id).status == ReviewSessionStatus.STARTED
        assert session.exec(select(Review)).all() == []
        assert session.get(Item, kept.id).current_srs_stage == 1

    def test_storage_fault_rolls_back_everything(self, session, make_item, clock):
        first = make_item(stage=1)
        second = make_item(front="犬", back="dog", stage=1)
        review_session = create_review_session(session, [first.id, second.id], clock=clock)
        inserts = []

        def fail_on_second_insert(mapper, connection, target):
            inserts.append(target)
            if len(inserts) == 2:
                raise RuntimeError("disk full")

        event.listen(Review, "before_insert", fail_on_second_insert)
        try:
            with pytest.raises(CommitFailureError):
                complete_review_session(
                    session, review_session.id, [bout_for(first), bout_for(second)], clock=clock, intervals=TABLE
                )
        finally:
            event.remove(Review, "before_insert", fail_on_second_insert)

        assert session.exec(select(Review)).all() == []
        for item_id in (first.id, second.id):
            item = session.get(Item, item_id)
            assert item.current_srs_stage == 1
            assert item.times_reviewed == 0
        stored = session.get(ReviewSession, review_session.id)
        assert stored.status == ReviewSessionStatus.STARTED
        assert stored.ended_at is None

    def test_session_can_be_finished_after_failed_commit(self, session, make_item, clock):
        item = make_item()
        review_session = create_review_session(session, [item.id], clock=clock)

        with pytest.raises(ValidationError):
            complete_review_session(session, review_session.id, [bout_for(item), bout_for(item)], clock=clock)

        result = complete_review_session(session, review_session.id, [bout_for(item)], clock=clock)
        assert result.status == ReviewSessionStatus.COMPLETE


    def test_overlapping_finish_commits_once(self, engine, session, make_item, clock):
        item = make_item(stage=1)
        review_session = create_review_session(session, [item.id], clock=clock)
        # this session still holds the STARTED row in its identity map
        assert session.get(ReviewSession, review_session.id).status == ReviewSessionStatus.STARTED

        with Session(engine) as other:
            complete_review_session(other, review_session.id, [bout_for(item)], clock=clock, intervals=TABLE)

        with pytest.raises(InvalidTransitionError):
            complete_review_session(session, review_session.id, [bout_for(item)], clock=clock, intervals=TABLE)

        assert len(reviews_in(session, review_session.id)) == 1
        session.refresh(item)
        assert item.current_srs_stage == 2
        assert item.times_reviewed == 1


class TestCancelReviewSession:

    def test_cancel_records_attempted_items_only(self, session, make_item, clock, no_shuffle):
        first = make_item(stage=1)
        second = make_item(front="犬", back="dog", stage=1)
        review_session = create_review_session(session, [first.id, second.id], clock=clock)

        queue = load_session_queue(session, review_session.id, clock=clock, rng=no_shuffle)
        skipped_id = queue.current.item_id
        queue.skip()
        queue.continue_()
        shown_id = queue.current.item_id

        result = cancel_review_session(session, review_session.id, queue.bouts(), clock=clock, intervals=TABLE)

        assert result.status == ReviewSessionStatus.CANCELLED
        assert result.ended_at == NOW
        reviews = reviews_in(session, review_session.id)
        assert [review.item_id for review in reviews] == [skipped_id]
        shown = session.get(Item, shown_id)
        assert shown.current_srs_stage == 1
        assert shown.times_reviewed == 0

    def test_immediate_cancel_leaves_item_schedule(self, session, make_item, clock):
        item = make_item(stage=3, streak=2, max_streak=2)
        review_session = create_review_session(session, [item.id], clock=clock)

        queue = load_session_queue(session, review_session.id, clock=clock)
        cancel_review_session(session, review_session.id, queue.bouts(), clock=clock)

        session.refresh(item)
        assert item.current_srs_stage == 3
        assert item.current_streak == 2
        assert item.times_correct == 0
        assert item.next_available == NOW
        assert reviews_in(session, review_session.id) == []

    def test_cancel_without_reviews(self, session, make_item, clock):
        item = make_item(stage=1)
        review_session = create_review_session(session, [item.id], clock=clock)

        result = cancel_review_session(session, review_session.id, [], clock=clock)

        assert result.status == ReviewSessionStatus.CANCELLED
        assert reviews_in(session, review_session.id) == []
        session.refresh(item)
        assert item.current_srs_stage == 1

    def test_explicit_ended_at(self, session, make_item, clock):
        item = make_item()
        review_session = create_review_session(session, [item.id], clock=clock)
        ended_at = datetime(2024, 1, 1, 12, 30)

        result = cancel_review_session(session, review_session.id, [], ended_at=ended_at, clock=clock)

        assert result.ended_at == ended_at

    def test_finished_session_cannot_be_loaded(self, session, make_item, clock):
        item = make_item()
        review_session = create_review_session(session, [item.id], clock=clock)
        cancel_review_session(session, review_session.id, [], clock=clock)

        with pytest.raises(InvalidTransitionError):
            load_session_queue(session, review_session.id, clock=clock)


class TestSummary:

    def test_percent_correct(self, session, make_item, clock):
        clean = make_item()
        missed = make_item(front="犬", back="dog")
        review_session = create_review_session(session, [clean.id, missed.id], clock=clock)
        complete_review_session(
            session,
            review_session.id,
            [bout_for(clean), bout_for(missed, times_incorrect=3)],
            clock=clock,
        )

        summary = summarize_review_session(session, review_session.id)

        assert summary.status == ReviewSessionStatus.COMPLETE
        assert summary.percent_correct == 0.5
        assert [review.item.id for review in summary.reviews] == [clean.id, missed.id]
        assert summary.reviews[0].item.card.front == "猫"

    def test_no_reviews(self, session, make_item, clock):
        item = make_item()
        review_session = create_review_session(session, [item.id], clock=clock)

        assert summarize_review_session(session, review_session.id).percent_correct is None
        assert percent_correct([]) is None
