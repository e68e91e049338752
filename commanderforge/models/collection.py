from dataclasses import dataclass, field

from commanderforge.models.card import OwnedCard


@dataclass
class Collection:
    """
    A user's card collection.

    Stored as owned printings. The same card name may appear several
    times (different printings) and each printing carries its own quantity.
    """

    cards: list[OwnedCard] = field(default_factory=list)

    def owns(self, card_name: str, quantity: int = 1) -> bool:
        """Check if collection contains at least `quantity` of a card."""
        return self.get_quantity(card_name) >= quantity

    def get_quantity(self, card_name: str) -> int:
        """Get quantity owned of a card across all printings."""
        return sum(owned.quantity for owned in self.printings_of(card_name))

    def printings_of(self, card_name: str) -> list[OwnedCard]:
        """All owned printings of a card, matched case-insensitively."""
        wanted = card_name.lower()
        return [owned for owned in self.cards if owned.name.lower() == wanted]

    def add_card(self, owned: OwnedCard) -> None:
        """Add an owned printing to the collection."""
        self.cards.append(owned)

    def total_cards(self) -> int:
        """Total number of cards in collection."""
        return sum(owned.quantity for owned in self.cards)

    def unique_cards(self) -> int:
        """Number of unique card names in collection."""
        return len({owned.name for owned in self.cards})
