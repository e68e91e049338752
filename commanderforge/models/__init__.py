from commanderforge.models.card import (
    BASIC_LAND_NAMES,
    COLOR_ORDER,
    Card,
    CardFace,
    CardIdentifier,
    OwnedCard,
    sort_colors,
)
from commanderforge.models.collection import Collection
from commanderforge.models.deck import AutoBuildResult, DeckEntry, SavedDeck
from commanderforge.models.failure import (
    CardProviderError,
    CommanderNotFoundError,
    FailureDetail,
    FailureKind,
    KnownError,
)
from commanderforge.models.synergy import SynergyProfile

__all__ = [
    "AutoBuildResult",
    "BASIC_LAND_NAMES",
    "COLOR_ORDER",
    "Card",
    "CardFace",
    "CardIdentifier",
    "CardProviderError",
    "Collection",
    "CommanderNotFoundError",
    "DeckEntry",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "OwnedCard",
    "SavedDeck",
    "SynergyProfile",
    "sort_colors",
]
