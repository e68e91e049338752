"""
Auto-build API endpoint.

Builds a Commander deck for one or two commanders from either an inline
collection or the collection stored for a user.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from commanderforge.api.collection import (
    CardIdentifierRequest,
    enrich_and_cache,
    validate_identifiers,
)
from commanderforge.api.dependencies import get_card_provider
from commanderforge.db import load_collection
from commanderforge.db.database import get_session
from commanderforge.models.collection import Collection
from commanderforge.models.deck import AutoBuildResult
from commanderforge.models.failure import KnownError
from commanderforge.services.auto_builder import (
    BuildOptions,
    auto_build,
    clean_commander_names,
)
from commanderforge.services.scryfall_client import CardProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auto-build", tags=["auto-build"])


class AutoBuildRequest(BaseModel):
    """Request model for building a deck."""

    commander_names: list[str] = Field(
        default_factory=list,
        description="One commander, or two partners",
        examples=[["Atraxa, Praetors' Voice"]],
    )
    commander_name: str | None = Field(
        default=None,
        description="Single-commander shorthand for commander_names",
    )
    collection: list[CardIdentifierRequest] | None = Field(
        default=None,
        description="Owned printings; omit to use the stored collection for user_id",
    )
    user_id: str | None = None


class DeckEntryResponse(BaseModel):
    name: str
    owned_id: str | None = None
    is_land: bool = False
    suggested: bool = False


class SuggestedCardResponse(BaseModel):
    """A card the user does not own, proposed for the deck."""

    id: str
    name: str
    type_line: str = ""
    mana_cost: str = ""
    price_usd: float | None = None
    image_url: str | None = None


class SynergyResponse(BaseModel):
    strategies: list[str] = Field(default_factory=list)
    primary_strategy: str | None = None
    land_subtypes: list[str] = Field(default_factory=list)
    tribal_types: list[str] = Field(default_factory=list)


class AutoBuildResponse(BaseModel):
    """Response model for a built deck."""

    deck_name: str
    color_identity: list[str]
    card_names: list[str]
    deck_list: list[DeckEntryResponse]
    suggested: list[SuggestedCardResponse] = Field(default_factory=list)
    reference_url: str
    synergy: SynergyResponse
    total_cards: int
    land_count: int
    non_land_count: int
    unfilled_slots: int = 0
    not_found: list[str] = Field(
        default_factory=list,
        description="Collection ids Scryfall did not recognise",
    )


def requested_commanders(request: AutoBuildRequest) -> list[str]:
    """Merge commander_names and commander_name, dropping blanks and repeats."""
    return clean_commander_names([*request.commander_names, request.commander_name or ""])


def _build_response(result: AutoBuildResult, not_found: list[str]) -> AutoBuildResponse:
    return AutoBuildResponse(
        deck_name=result.deck_name,
        color_identity=list(result.color_identity),
        card_names=result.card_names,
        deck_list=[
            DeckEntryResponse(
                name=entry.name,
                owned_id=entry.owned_id,
                is_land=entry.is_land,
                suggested=entry.suggested,
            )
            for entry in result.deck_list
        ],
        suggested=[
            SuggestedCardResponse(
                id=card.id,
                name=card.name,
                type_line=card.type_line,
                mana_cost=card.mana_cost,
                price_usd=card.price_usd,
                image_url=card.image_url,
            )
            for card in result.suggested_details
        ],
        reference_url=result.reference_url,
        synergy=SynergyResponse(
            strategies=list(result.profile.strategies),
            primary_strategy=result.profile.primary_strategy,
            land_subtypes=list(result.profile.land_subtypes),
            tribal_types=list(result.profile.tribal_types),
        ),
        total_cards=result.total_cards,
        land_count=result.land_count,
        non_land_count=result.non_land_count,
        unfilled_slots=result.unfilled_slots,
        not_found=not_found,
    )


@router.post("", response_model=AutoBuildResponse)
async def build_deck(
    request: AutoBuildRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
    provider: Annotated[CardProvider, Depends(get_card_provider)],
) -> AutoBuildResponse:
    """
    Build a 100-card Commander deck.

    Uses the inline collection when given, otherwise the stored collection
    for user_id, otherwise an empty collection (every card suggested).
    Returns 400 when no commander is named and 404 when a commander name
    does not resolve. Builder failures carry a FailureDetail body (kind,
    message, detail, suggestion).
    """
    names = requested_commanders(request)
    if not names:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one commander name is required",
        )

    not_found: list[str] = []
    if request.collection is not None:
        identifiers = validate_identifiers(request.collection)
        enriched = await enrich_and_cache(session, provider, identifiers)
        collection = enriched.collection
        not_found = enriched.not_found
    elif request.user_id:
        stored = await load_collection(session, request.user_id)
        if stored is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No collection found for user '{request.user_id}'",
            )
        collection = stored
    else:
        collection = Collection()

    try:
        result = await auto_build(
            names,
            collection,
            provider,
            options=BuildOptions.from_settings(),
        )
    except KnownError as e:
        logger.info("Auto-build rejected: %s", e.message)
        raise HTTPException(
            status_code=e.status_code, detail=e.to_detail().model_dump(mode="json")
        ) from e

    return _build_response(result, not_found)
