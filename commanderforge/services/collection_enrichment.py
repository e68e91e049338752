"""
Collection enrichment.

Turns the identifier list a user uploads ({id, quantity, ...}) into a
Collection of fully described cards. Metadata comes from the card cache
when available and from batched Scryfall lookups otherwise.
"""

import logging
from dataclasses import dataclass, field

from commanderforge.models.card import Card, CardIdentifier, OwnedCard
from commanderforge.models.collection import Collection
from commanderforge.models.failure import CardProviderError
from commanderforge.services.scryfall_client import CardProvider

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentResult:
    """
    Outcome of enriching an identifier list.

    Attributes:
        collection: Owned printings whose metadata was found
        fetched: Cards looked up from the provider (candidates for caching)
        not_found: Identifiers with no metadata
    """

    collection: Collection
    fetched: list[Card] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)


async def enrich_collection(
    provider: CardProvider,
    identifiers: list[CardIdentifier],
    cached: dict[str, Card] | None = None,
) -> EnrichmentResult:
    """
    Attach card metadata to uploaded identifiers.

    Args:
        provider: Card metadata lookup
        identifiers: Uploaded printings, in upload order
        cached: Already-known cards keyed by Scryfall id

    Returns:
        EnrichmentResult; unknown ids are dropped from the collection and
        listed in not_found. A provider failure is logged and every
        uncached id is reported as not found.
    """
    known: dict[str, Card] = dict(cached or {})

    missing: list[str] = []
    for identifier in identifiers:
        if identifier.id not in known and identifier.id not in missing:
            missing.append(identifier.id)

    fetched: list[Card] = []
    not_found: list[str] = []
    if missing:
        try:
            lookup = await provider.lookup_batch(missing)
        except CardProviderError as e:
            logger.warning("Collection enrichment failed for %d ids: %s", len(missing), e)
            not_found = list(missing)
        else:
            fetched = lookup.found
            not_found = list(lookup.not_found)
            for card in fetched:
                known[card.id] = card

    owned: list[OwnedCard] = []
    for identifier in identifiers:
        card = known.get(identifier.id)
        if card is None:
            if identifier.id not in not_found:
                not_found.append(identifier.id)
            continue
        owned.append(
            OwnedCard(
                card=card,
                quantity=identifier.quantity,
                set_code=identifier.set_code or card.set_code,
                collector_number=identifier.collector_number or card.collector_number,
            )
        )

    logger.info(
        "Enriched %d of %d identifiers (%d from cache, %d fetched)",
        len(owned),
        len(identifiers),
        len(identifiers) - len(missing),
        len(fetched),
    )
    return EnrichmentResult(
        collection=Collection(cards=owned), fetched=fetched, not_found=not_found
    )
