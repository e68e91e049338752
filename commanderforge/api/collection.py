"""
Collection API endpoints.

Provides CRUD operations for user card collections. Uploads are lists of
Scryfall ids; metadata is looked up once and kept in the card cache.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from commanderforge.api.dependencies import get_card_provider
from commanderforge.db import (
    delete_collection,
    get_cached_cards,
    load_collection,
    replace_collection_cards,
    upsert_cached_cards,
)
from commanderforge.db.database import get_session
from commanderforge.models.card import CardIdentifier
from commanderforge.models.collection import Collection
from commanderforge.services.collection_enrichment import EnrichmentResult, enrich_collection
from commanderforge.services.scryfall_client import CardProvider

router = APIRouter(prefix="/collection", tags=["collection"])


class CardIdentifierRequest(BaseModel):
    """One uploaded printing."""

    id: str = Field(..., description="Scryfall card id")
    quantity: int = Field(default=1, description="Copies owned")
    set_code: str | None = None
    collector_number: str | None = None


class OwnedCardResponse(BaseModel):
    """One owned printing with its card name."""

    id: str
    name: str
    quantity: int
    set_code: str | None = None
    collector_number: str | None = None


class CollectionResponse(BaseModel):
    """Response model for collection data."""

    user_id: str
    cards: list[OwnedCardResponse] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0
    not_found: list[str] = Field(
        default_factory=list,
        description="Uploaded ids Scryfall did not recognise (not stored)",
    )


class CollectionUpdateRequest(BaseModel):
    """Request model for replacing a collection."""

    cards: list[CardIdentifierRequest] = Field(
        ...,
        description="Owned printings by Scryfall id",
        examples=[[{"id": "bd8fa327-dd41-4737-8f19-2cf5eb1f7cdd", "quantity": 1}]],
    )


class DeleteResponse(BaseModel):
    """Response model for delete operations."""

    user_id: str
    deleted: bool
    message: str = ""


def validate_identifiers(cards: list[CardIdentifierRequest]) -> list[CardIdentifier]:
    """Reject blank ids and non-positive quantities with HTTP 400."""
    identifiers: list[CardIdentifier] = []
    for card in cards:
        if not card.id or not card.id.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Card ids cannot be empty",
            )
        if card.quantity <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Quantity for '{card.id}' must be positive",
            )
        identifiers.append(
            CardIdentifier(
                id=card.id.strip(),
                quantity=card.quantity,
                set_code=card.set_code,
                collector_number=card.collector_number,
            )
        )
    return identifiers


async def enrich_and_cache(
    session: AsyncSession,
    provider: CardProvider,
    identifiers: list[CardIdentifier],
) -> EnrichmentResult:
    """Enrich identifiers from the cache first, then Scryfall, caching new lookups."""
    cached = await get_cached_cards(session, [identifier.id for identifier in identifiers])
    result = await enrich_collection(provider, identifiers, cached=cached)
    await upsert_cached_cards(session, result.fetched)
    return result


def _collection_response(
    user_id: str, collection: Collection, not_found: list[str] | None = None
) -> CollectionResponse:
    return CollectionResponse(
        user_id=user_id,
        cards=[
            OwnedCardResponse(
                id=owned.id,
                name=owned.name,
                quantity=owned.quantity,
                set_code=owned.set_code,
                collector_number=owned.collector_number,
            )
            for owned in collection.cards
        ],
        total_cards=collection.total_cards(),
        unique_cards=collection.unique_cards(),
        not_found=not_found or [],
    )


@router.get("/{user_id}", response_model=CollectionResponse)
async def get_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """
    Get a user's card collection.

    Returns an empty collection if the user has none.
    """
    collection = await load_collection(session, user_id)
    return _collection_response(user_id, collection or Collection())


@router.put("/{user_id}", response_model=CollectionResponse)
async def update_user_collection(
    user_id: str,
    request: CollectionUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    provider: Annotated[CardProvider, Depends(get_card_provider)],
) -> CollectionResponse:
    """
    Replace a user's card collection.

    Ids are enriched through Scryfall; unknown ids are reported in
    not_found and left out of the stored collection.
    """
    if not request.cards:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cards cannot be empty",
        )

    identifiers = validate_identifiers(request.cards)
    result = await enrich_and_cache(session, provider, identifiers)
    await replace_collection_cards(session, user_id, result.collection.cards)

    return _collection_response(user_id, result.collection, result.not_found)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a user's card collection."""
    deleted = await delete_collection(session, user_id)

    if deleted:
        message = "Your collection has been deleted."
    else:
        message = "No collection found to delete."

    return DeleteResponse(user_id=user_id, deleted=deleted, message=message)
