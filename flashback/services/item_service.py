"""
Item service for adding cards to the reviewer's queue and looking items up.

Items are only moved between SRS stages by a review session commit; there is
no direct update operation.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlmodel import Session, select

from flashback.core.clock import Clock, utcnow
from flashback.core.config import settings
from flashback.core.exceptions import ConflictError, NotFoundError
from flashback.models import Item
from flashback.services.card_service import get_card
from flashback.services.srs_service import calculate_next_available, clamp_stage

logger = logging.getLogger(__name__)


def get_item(session: Session, item_id: int) -> Item:
    """
    Fetch an item by ID.

    Raises:
        NotFoundError: If the item does not exist
    """
    item = session.get(Item, item_id)
    if not item:
        raise NotFoundError(f"Item with id {item_id} not found")
    return item


def get_item_by_card(session: Session, card_id: int) -> Item:
    """
    Fetch the current reviewer's item for a card.

    Raises:
        NotFoundError: If the reviewer does not track the card
    """
    item = session.exec(
        select(Item).where(
            Item.user_id == settings.reviewer_id,
            Item.card_id == card_id
        )
    ).first()
    if not item:
        raise NotFoundError(f"No item with card_id {card_id}")
    return item


def create_item(
    session: Session,
    card_id: int,
    current_srs_stage: Optional[int] = None,
    next_available: Optional[datetime] = None,
    clock: Clock = utcnow
) -> Item:
    """
    Add a card to the current reviewer's queue.

    Args:
        session: Database session
        card_id: Card to track
        current_srs_stage: Initial stage, clamped to the stage table (default 0)
        next_available: Defaults to now plus the stage's interval
        clock: Time source

    Raises:
        NotFoundError: If the card does not exist
        ConflictError: If the reviewer already tracks the card
    """
    get_card(session, card_id)

    existing = session.exec(
        select(Item).where(
            Item.user_id == settings.reviewer_id,
            Item.card_id == card_id
        )
    ).first()
    if existing:
        raise ConflictError(f"Card {card_id} already has item {existing.id}")

    stage = clamp_stage(current_srs_stage or 0)
    item = Item(
        user_id=settings.reviewer_id,
        card_id=card_id,
        current_srs_stage=stage,
        next_available=next_available or calculate_next_available(stage, clock),
    )
    session.add(item)
    session.commit()
    session.refresh(item)
    logger.info(f"Created item {item.id} for card {card_id} at stage {stage}")
    return item


def delete_item(session: Session, item_id: int) -> int:
    """
    Delete an item and its reviews.

    Returns:
        ID of the deleted item
    """
    item = get_item(session, item_id)
    session.delete(item)
    session.commit()
    logger.info(f"Deleted item {item_id}")
    return item_id
