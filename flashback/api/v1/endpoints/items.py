"""
Items endpoint.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from datetime import datetime
from typing import Optional
from flashback.core.clock import Clock, get_clock, to_naive_utc
from flashback.core.database import get_session
from flashback.models import Item
from flashback.schemas.card import DeletedResponse
from flashback.schemas.item import (
    CreateItemRequest,
    ItemIdsResponse,
    ItemResponse,
    ItemsResponse,
)
from flashback.services.item_service import create_item, delete_item, get_item, get_item_by_card
from flashback.services.review_session_service import get_due_items

router = APIRouter(prefix="/items", tags=["items"])


@router.get("", response_model=ItemsResponse)
async def get_items(session: Session = Depends(get_session)):
    """Get all items with their cards."""
    items = session.exec(select(Item).order_by(Item.id)).all()  # type: ignore
    return ItemsResponse(items=[ItemResponse.model_validate(item) for item in items])


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def post_item(
    request: CreateItemRequest,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Add a card to the reviewer's queue."""
    item = create_item(
        session,
        request.card_id,
        current_srs_stage=request.current_srs_stage,
        next_available=request.next_available,
        clock=clock
    )
    return ItemResponse.model_validate(item)


@router.get("/due", response_model=ItemsResponse)
async def get_due(
    as_of: Optional[datetime] = None,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Get items ready for review at as_of (defaults to now)."""
    items = get_due_items(session, as_of=to_naive_utc(as_of), clock=clock)
    return ItemsResponse(items=[ItemResponse.model_validate(item) for item in items])


@router.get("/due/ids", response_model=ItemIdsResponse)
async def get_due_ids(
    as_of: Optional[datetime] = None,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Get the IDs of items ready for review at as_of (defaults to now)."""
    items = get_due_items(session, as_of=to_naive_utc(as_of), clock=clock)
    return ItemIdsResponse(item_ids=[item.id for item in items])


@router.get("/by-card/{card_id}", response_model=ItemResponse)
async def get_by_card(card_id: int, session: Session = Depends(get_session)):
    """Get the reviewer's item for a card."""
    return ItemResponse.model_validate(get_item_by_card(session, card_id))


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item_by_id(item_id: int, session: Session = Depends(get_session)):
    """Get an item by ID."""
    return ItemResponse.model_validate(get_item(session, item_id))


@router.delete("/{item_id}", response_model=DeletedResponse)
async def remove_item(item_id: int, session: Session = Depends(get_session)):
    """Delete an item and its reviews."""
    return DeletedResponse(id=delete_item(session, item_id))
