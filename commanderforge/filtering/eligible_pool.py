"""
Eligible card pool.

Narrows the owned collection to the cards that may legally and sensibly
go into the deck: not a commander, inside the commander color identity,
and relevant (see filtering.relevance).

Two views are kept:
- printings: every eligible owned printing (duplicates included), used to
  pick which physical copy fills a slot
- unique: one entry per card name (first occurrence wins), used for
  slot allocation
"""

import logging
import random
from dataclasses import dataclass, field

from commanderforge.filtering.relevance import is_card_relevant
from commanderforge.models.card import OwnedCard
from commanderforge.models.collection import Collection
from commanderforge.models.synergy import SynergyProfile
from commanderforge.services.vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)


@dataclass
class EligiblePool:
    """Owned cards that may go into the deck."""

    printings: list[OwnedCard] = field(default_factory=list)
    unique: list[OwnedCard] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._by_name: dict[str, list[OwnedCard]] = {}
        for owned in self.printings:
            self._by_name.setdefault(owned.name.lower(), []).append(owned)

    def __len__(self) -> int:
        return len(self.unique)

    def contains(self, card_name: str) -> bool:
        return card_name.lower() in self._by_name

    def get(self, card_name: str) -> OwnedCard | None:
        """First eligible printing of a card."""
        versions = self._by_name.get(card_name.lower())
        return versions[0] if versions else None

    def pick_printing(self, card_name: str, rng: random.Random) -> OwnedCard | None:
        """
        Choose one owned printing of a card uniformly at random.

        Returns None if the card is not in the pool.
        """
        versions = self._by_name.get(card_name.lower())
        if not versions:
            return None
        if len(versions) == 1:
            return versions[0]
        return rng.choice(versions)


def build_eligible_pool(
    collection: Collection,
    commander_names: list[str],
    color_identity: tuple[str, ...],
    profile: SynergyProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> EligiblePool:
    """
    Filter a collection down to deck candidates.

    Args:
        collection: The user's owned printings
        commander_names: Commander names (excluded, case-insensitive)
        color_identity: Merged commander color identity
        profile: Detected synergies
        vocabulary: Rule tables for the relevance check

    Returns:
        EligiblePool with all eligible printings and a name-unique view
    """
    excluded = {name.lower() for name in commander_names}
    printings: list[OwnedCard] = []
    relevance: dict[str, bool] = {}

    for owned in collection.cards:
        card = owned.card
        if card.name.lower() in excluded:
            continue
        if not card.identity_within(color_identity):
            continue

        # Printings share oracle text, so the verdict is per name
        key = card.name.lower()
        if key not in relevance:
            relevance[key] = is_card_relevant(card, color_identity, profile, vocabulary)
        if not relevance[key]:
            continue

        printings.append(owned)

    seen: set[str] = set()
    unique: list[OwnedCard] = []
    for owned in printings:
        key = owned.name.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(owned)

    logger.info(
        "Eligible pool: %d printings, %d unique cards (from %d owned)",
        len(printings),
        len(unique),
        len(collection.cards),
    )
    return EligiblePool(printings=printings, unique=unique)
