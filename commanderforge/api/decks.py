"""
Deck API endpoints.

Saved decks are per user: list, create, read, rename/edit and delete.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from commanderforge.db import (
    create_deck,
    deck_to_model,
    delete_deck,
    get_deck,
    list_decks,
    update_deck,
)
from commanderforge.db.database import get_session
from commanderforge.models.card import sort_colors
from commanderforge.models.deck import SavedDeck

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckCard(BaseModel):
    """One deck slot."""

    name: str
    owned_id: str | None = None


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    id: int
    user_id: str
    name: str
    commander_ids: list[str] = Field(default_factory=list)
    cards: list[DeckCard] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)
    card_count: int = 0


class DeckListResponse(BaseModel):
    """Response model for a list of decks."""

    user_id: str
    decks: list[DeckResponse]
    count: int


class DeckCreateRequest(BaseModel):
    name: str
    commander_ids: list[str] = Field(default_factory=list)
    cards: list[DeckCard] = Field(default_factory=list)
    colors: list[str] = Field(default_factory=list)


class DeckUpdateRequest(BaseModel):
    """Fields left out are unchanged."""

    name: str | None = None
    commander_ids: list[str] | None = None
    cards: list[DeckCard] | None = None
    colors: list[str] | None = None


class DeckDeleteResponse(BaseModel):
    id: int
    deleted: bool


def _deck_response(deck: SavedDeck) -> DeckResponse:
    return DeckResponse(
        id=deck.id or 0,
        user_id=deck.user_id,
        name=deck.name,
        commander_ids=deck.commander_ids,
        cards=[
            DeckCard(name=str(card["name"]), owned_id=card.get("owned_id")) for card in deck.cards
        ],
        colors=deck.colors,
        card_count=deck.card_count(),
    )


def _card_records(cards: list[DeckCard]) -> list[dict[str, str | None]]:
    return [{"name": card.name, "owned_id": card.owned_id} for card in cards]


def _require_name(name: str) -> str:
    if not name or not name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deck name cannot be empty",
        )
    return name.strip()


def _not_found(deck_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Deck {deck_id} not found",
    )


@router.get("/{user_id}", response_model=DeckListResponse)
async def get_user_decks(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckListResponse:
    """List a user's saved decks, oldest first."""
    db_decks = await list_decks(session, user_id)
    decks = [_deck_response(deck_to_model(d)) for d in db_decks]
    return DeckListResponse(user_id=user_id, decks=decks, count=len(decks))


@router.post("/{user_id}", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_user_deck(
    user_id: str,
    request: DeckCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Save a new deck for a user."""
    deck = SavedDeck(
        user_id=user_id,
        name=_require_name(request.name),
        commander_ids=request.commander_ids,
        cards=_card_records(request.cards),
        colors=list(sort_colors(request.colors)),
    )
    db_deck = await create_deck(session, deck)
    return _deck_response(deck_to_model(db_deck))


@router.get("/{user_id}/{deck_id}", response_model=DeckResponse)
async def get_user_deck(
    user_id: str,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """
    Get one saved deck.

    Returns 404 if the deck does not exist or belongs to another user.
    """
    db_deck = await get_deck(session, user_id, deck_id)
    if db_deck is None:
        raise _not_found(deck_id)
    return _deck_response(deck_to_model(db_deck))


@router.patch("/{user_id}/{deck_id}", response_model=DeckResponse)
async def update_user_deck(
    user_id: str,
    deck_id: int,
    request: DeckUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Update the given fields of a saved deck."""
    db_deck = await update_deck(
        session,
        user_id,
        deck_id,
        name=_require_name(request.name) if request.name is not None else None,
        commander_ids=request.commander_ids,
        cards=_card_records(request.cards) if request.cards is not None else None,
        colors=list(sort_colors(request.colors)) if request.colors is not None else None,
    )
    if db_deck is None:
        raise _not_found(deck_id)
    return _deck_response(deck_to_model(db_deck))


@router.delete("/{user_id}/{deck_id}", response_model=DeckDeleteResponse)
async def delete_user_deck(
    user_id: str,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckDeleteResponse:
    """Delete a saved deck. Returns 404 if it does not exist."""
    deleted = await delete_deck(session, user_id, deck_id)
    if not deleted:
        raise _not_found(deck_id)
    return DeckDeleteResponse(id=deck_id, deleted=True)
