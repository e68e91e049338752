from dataclasses import dataclass, field
from datetime import datetime

from commanderforge.models.card import Card
from commanderforge.models.synergy import SynergyProfile


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """
    One slot in a built deck.

    Attributes:
        name: Card name
        owned_id: Scryfall id of the owned printing, None if not owned
        is_land: True for land slots
        suggested: True for missing cards proposed for acquisition
    """

    name: str
    owned_id: str | None = None
    is_land: bool = False
    suggested: bool = False


@dataclass
class AutoBuildResult:
    """A deck produced by the auto-builder."""

    deck_name: str
    card_names: list[str]
    deck_list: list[DeckEntry]
    suggested_details: list[Card]
    reference_url: str
    color_identity: tuple[str, ...]
    profile: SynergyProfile
    land_count: int = 0
    non_land_count: int = 0
    unfilled_slots: int = 0

    @property
    def total_cards(self) -> int:
        """Non-commander cards in the deck."""
        return len(self.card_names)


@dataclass
class SavedDeck:
    """
    A deck saved by a user.

    Attributes:
        name: Display name
        commander_ids: Scryfall ids of the commander(s)
        cards: Deck slots as {"name": ..., "owned_id": ...} records
        colors: Deck color identity
    """

    user_id: str
    name: str
    commander_ids: list[str] = field(default_factory=list)
    cards: list[dict[str, str | None]] = field(default_factory=list)
    colors: list[str] = field(default_factory=list)
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def card_count(self) -> int:
        return len(self.cards)
