"""
Card service for creating, editing and deleting cards.
"""
import logging
from typing import Optional
from sqlmodel import Session

from flashback.core.clock import Clock, utcnow
from flashback.core.exceptions import NotFoundError
from flashback.models import Card

logger = logging.getLogger(__name__)


def get_card(session: Session, card_id: int) -> Card:
    """
    Fetch a card by ID.

    Raises:
        NotFoundError: If the card does not exist
    """
    card = session.get(Card, card_id)
    if not card:
        raise NotFoundError(f"Card with id {card_id} not found")
    return card


def create_card(session: Session, front: str, back: str, notes: Optional[str] = None) -> Card:
    card = Card(front=front, back=back, notes=notes)
    session.add(card)
    session.commit()
    session.refresh(card)
    logger.info(f"Created card {card.id}")
    return card


def update_card(
    session: Session,
    card_id: int,
    front: Optional[str] = None,
    back: Optional[str] = None,
    notes: Optional[str] = None,
    clock: Clock = utcnow
) -> Card:
    """Edit the provided fields of a card. Items and past reviews keep pointing at it."""
    card = get_card(session, card_id)
    if front is not None:
        card.front = front
    if back is not None:
        card.back = back
    if notes is not None:
        card.notes = notes if notes.strip() else None
    card.updated_at = clock()

    session.add(card)
    session.commit()
    session.refresh(card)
    return card


def delete_card(session: Session, card_id: int) -> int:
    """
    Delete a card along with the items tracking it and their reviews.

    Returns:
        ID of the deleted card
    """
    card = get_card(session, card_id)
    items_deleted = len(card.items)
    session.delete(card)
    session.commit()
    logger.info(f"Deleted card {card_id} and {items_deleted} item(s)")
    return card_id
