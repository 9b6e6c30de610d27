"""
In-memory working set for one active review session.

The queue holds the items still to be reviewed, in presentation order, and an
immutable per-item bout record. Every transition builds a new ``QueueState``
instead of mutating the previous one, so a state can be kept around for
inspection or undo.

Per-item sub-status, for one presentation pass:

    UNSTARTED --submit_guess--> ANSWERED_CORRECT | ANSWERED_INCORRECT
    UNSTARTED --skip--> SKIPPED
    ANSWERED_INCORRECT --retry--> UNSTARTED
    ANSWERED_CORRECT --continue--> removed from the queue
    ANSWERED_INCORRECT | SKIPPED --continue--> back of the queue, UNSTARTED

Seconds elapsed and times incorrect accumulate across passes.
"""
import logging
import math
import random
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from flashback.core.clock import Clock, utcnow
from flashback.core.exceptions import InvalidTransitionError, ValidationError

logger = logging.getLogger(__name__)


class ReviewStatus(str, Enum):
    """Sub-status of an item within its current presentation pass."""
    UNSTARTED = "unstarted"
    ANSWERED_CORRECT = "answered-correct"
    ANSWERED_INCORRECT = "answered-incorrect"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class QueuedItem:
    """Snapshot of an item (and its card) taken when the session is loaded."""
    item_id: int
    card_id: int
    front: str
    back: str
    current_srs_stage: int
    current_streak: int
    max_streak: int
    notes: Optional[str] = None


@dataclass(frozen=True)
class BoutRecord:
    """Accumulated in-session progress for one item."""
    item: QueuedItem
    status: ReviewStatus = ReviewStatus.UNSTARTED
    seconds_elapsed: int = 0
    times_incorrect: int = 0
    passes: int = 0  # times the item has been presented
    attempted: bool = False  # guessed or skipped at least once


@dataclass(frozen=True)
class ReviewBout:
    """One item's outcome handed to the session commit."""
    item_id: int
    starting_srs_stage: int
    seconds_elapsed: int
    times_incorrect: int
    current_streak: int  # pre-session value
    max_streak: int  # pre-session value


@dataclass(frozen=True)
class QueueState:
    """Remaining item ids (front first) plus every item's bout record."""
    remaining: Tuple[int, ...] = ()
    bouts: Mapping[int, BoutRecord] = field(default_factory=lambda: MappingProxyType({}))


def normalize_answer(text: str) -> str:
    """Normalize an answer for comparison: trim surrounding whitespace, ignore case."""
    return text.strip().casefold()


def is_correct_guess(guess: str, answer: str) -> bool:
    return normalize_answer(guess) == normalize_answer(answer)


def seconds_since(start, end) -> int:
    """Whole seconds between two timestamps, rounded up."""
    return max(0, math.ceil((end - start).total_seconds()))


class SessionQueue:
    """
    Drives a single review session's items for one reviewer.

    Not thread-safe; a session is driven by exactly one actor.
    """

    def __init__(
        self,
        session_id: int,
        items: Iterable[QueuedItem],
        clock: Clock = utcnow,
        rng: Optional[random.Random] = None
    ):
        items = list(items)
        item_ids = [item.item_id for item in items]
        if len(set(item_ids)) != len(item_ids):
            raise ValidationError(f"Review session {session_id} contains duplicate items")

        shuffled = items[:]
        (rng or random).shuffle(shuffled)

        self.session_id = session_id
        self._clock = clock
        self._presented_at = clock()
        self.history: List[QueueState] = []
        self.state = QueueState(
            remaining=tuple(item.item_id for item in shuffled),
            bouts=MappingProxyType({item.item_id: BoutRecord(item=item) for item in shuffled}),
        )
        if shuffled:
            self._present(shuffled[0].item_id)

    # ------------------------------------------------------------------ #
    # Inspection
    # ------------------------------------------------------------------ #

    @property
    def is_exhausted(self) -> bool:
        return not self.state.remaining

    @property
    def remaining_count(self) -> int:
        return len(self.state.remaining)

    @property
    def current_bout(self) -> Optional[BoutRecord]:
        if self.is_exhausted:
            return None
        return self.state.bouts[self.state.remaining[0]]

    @property
    def current(self) -> Optional[QueuedItem]:
        bout = self.current_bout
        return bout.item if bout else None

    @property
    def status(self) -> Optional[ReviewStatus]:
        bout = self.current_bout
        return bout.status if bout else None

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def submit_guess(self, guess: str) -> bool:
        """
        Grade a guess for the item at the front of the queue.

        Returns:
            True if the guess matched the card's back text
        """
        bout = self._require(ReviewStatus.UNSTARTED, "submit a guess")
        correct = is_correct_guess(guess, bout.item.back)
        if correct:
            updated = replace(
                bout,
                status=ReviewStatus.ANSWERED_CORRECT,
                seconds_elapsed=bout.seconds_elapsed + self._elapsed(),
                attempted=True,
            )
        else:
            updated = replace(
                bout,
                status=ReviewStatus.ANSWERED_INCORRECT,
                seconds_elapsed=bout.seconds_elapsed + self._elapsed(),
                times_incorrect=bout.times_incorrect + 1,
                attempted=True,
            )
        self._set_state(self.state.remaining, self._with_bout(updated))
        return correct

    def retry(self) -> None:
        """Allow another guess after an incorrect answer, keeping the accumulated totals."""
        bout = self._require(ReviewStatus.ANSWERED_INCORRECT, "retry")
        self._set_state(self.state.remaining, self._with_bout(replace(bout, status=ReviewStatus.UNSTARTED)))
        self._presented_at = self._clock()

    def skip(self) -> None:
        bout = self._require(ReviewStatus.UNSTARTED, "skip")
        updated = replace(
            bout,
            status=ReviewStatus.SKIPPED,
            seconds_elapsed=bout.seconds_elapsed + self._elapsed(),
            attempted=True,
        )
        self._set_state(self.state.remaining, self._with_bout(updated))

    def continue_(self) -> Optional[QueuedItem]:
        """
        Move past the item at the front of the queue.

        A correctly answered item leaves the queue. An incorrectly answered or
        skipped item goes to the back of the queue for another pass.

        Returns:
            The item now at the front, or None once the session is exhausted
        """
        bout = self._require(
            (ReviewStatus.ANSWERED_CORRECT, ReviewStatus.ANSWERED_INCORRECT, ReviewStatus.SKIPPED),
            "continue",
        )
        head, rest = self.state.remaining[0], self.state.remaining[1:]
        if bout.status is ReviewStatus.ANSWERED_CORRECT:
            remaining = rest
            bouts = self.state.bouts
        else:
            remaining = rest + (head,)
            bouts = self._with_bout(replace(bout, status=ReviewStatus.UNSTARTED))
            logger.debug(f"Session {self.session_id}: requeued item {head} ({bout.status.value})")

        self._set_state(remaining, bouts)
        if remaining:
            self._present(remaining[0])
            return self.current
        logger.info(f"Session {self.session_id}: all items answered correctly")
        return None

    def undo(self) -> None:
        """Restore the state before the most recent transition."""
        if not self.history:
            raise InvalidTransitionError(f"Session {self.session_id}: nothing to undo")
        self.state = self.history.pop()
        self._presented_at = self._clock()

    # ------------------------------------------------------------------ #
    # Commit payload
    # ------------------------------------------------------------------ #

    def bouts(self) -> List[ReviewBout]:
        """
        Outcomes for every item guessed at or skipped at least once.

        On an exhausted queue this covers every item; after an early exit it
        covers the skipped or partially attempted items. An item that was
        shown but never answered is left out and keeps its schedule.
        """
        return [
            ReviewBout(
                item_id=record.item.item_id,
                starting_srs_stage=record.item.current_srs_stage,
                seconds_elapsed=record.seconds_elapsed,
                times_incorrect=record.times_incorrect,
                current_streak=record.item.current_streak,
                max_streak=record.item.max_streak,
            )
            for record in self.state.bouts.values()
            if record.attempted
        ]

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _require(self, allowed, action: str) -> BoutRecord:
        if not isinstance(allowed, tuple):
            allowed = (allowed,)
        bout = self.current_bout
        if bout is None:
            raise InvalidTransitionError(f"Session {self.session_id}: cannot {action}, no items remaining")
        if bout.status not in allowed:
            raise InvalidTransitionError(
                f"Session {self.session_id}: cannot {action} item {bout.item.item_id} "
                f"while it is {bout.status.value}"
            )
        return bout

    def _elapsed(self) -> int:
        return seconds_since(self._presented_at, self._clock())

    def _with_bout(self, bout: BoutRecord) -> Mapping[int, BoutRecord]:
        return MappingProxyType({**self.state.bouts, bout.item.item_id: bout})

    def _set_state(self, remaining: Tuple[int, ...], bouts: Mapping[int, BoutRecord]) -> None:
        self.history.append(self.state)
        self.state = QueueState(remaining=remaining, bouts=bouts)

    def _present(self, item_id: int) -> None:
        bout = self.state.bouts[item_id]
        self.state = QueueState(
            remaining=self.state.remaining,
            bouts=self._with_bout(replace(bout, passes=bout.passes + 1)),
        )
        self._presented_at = self._clock()
