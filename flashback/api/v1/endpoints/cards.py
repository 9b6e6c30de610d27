"""
Cards endpoint.
"""
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select
from flashback.core.clock import Clock, get_clock
from flashback.core.database import get_session
from flashback.models import Card
from flashback.schemas.card import (
    CardResponse,
    CardsResponse,
    CreateCardRequest,
    DeletedResponse,
    UpdateCardRequest,
)
from flashback.services.card_service import create_card, delete_card, get_card, update_card

router = APIRouter(prefix="/cards", tags=["cards"])


@router.get("", response_model=CardsResponse)
async def get_cards(session: Session = Depends(get_session)):
    """Get all cards, oldest first."""
    cards = session.exec(select(Card).order_by(Card.id)).all()  # type: ignore
    return CardsResponse(cards=[CardResponse.model_validate(card) for card in cards])


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def post_card(
    request: CreateCardRequest,
    session: Session = Depends(get_session)
):
    """Create a new card."""
    card = create_card(session, request.front, request.back, request.notes)
    return CardResponse.model_validate(card)


@router.get("/{card_id}", response_model=CardResponse)
async def get_card_by_id(card_id: int, session: Session = Depends(get_session)):
    """Get a card by ID."""
    return CardResponse.model_validate(get_card(session, card_id))


@router.put("/{card_id}", response_model=CardResponse)
async def put_card(
    card_id: int,
    request: UpdateCardRequest,
    session: Session = Depends(get_session),
    clock: Clock = Depends(get_clock)
):
    """Edit a card by ID. Only provided fields are changed."""
    card = update_card(
        session,
        card_id,
        front=request.front,
        back=request.back,
        notes=request.notes,
        clock=clock
    )
    return CardResponse.model_validate(card)


@router.delete("/{card_id}", response_model=DeletedResponse)
async def remove_card(card_id: int, session: Session = Depends(get_session)):
    """Delete a card together with its items and their reviews."""
    return DeletedResponse(id=delete_card(session, card_id))
