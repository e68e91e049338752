from dataclasses import dataclass

# Canonical WUBRG ordering for color identity
COLOR_ORDER = ("W", "U", "B", "R", "G")

BASIC_LAND_NAMES = frozenset({"Plains", "Island", "Swamp", "Mountain", "Forest"})


def sort_colors(colors: set[str] | list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Return color letters in WUBRG order, dropping unknown symbols."""
    return tuple(c for c in COLOR_ORDER if c in colors)


@dataclass(frozen=True, slots=True)
class CardFace:
    """One face of a split, transform or modal double-faced card."""

    name: str
    mana_cost: str = ""
    type_line: str = ""
    oracle_text: str = ""


@dataclass(frozen=True, slots=True)
class Card:
    """
    Card metadata as reported by Scryfall.

    Attributes:
        id: Scryfall card id (stable identity key)
        name: Card name
        mana_cost: Mana cost string (e.g. "{1}{G}")
        cmc: Mana value
        type_line: Full type line; multi-face cards join faces with " // "
        oracle_text: Rules text; empty for multi-face cards (see card_faces)
        color_identity: WUBRG letters in canonical order
        price_usd: Cheapest non-foil USD price, if known
        card_faces: Per-face data for multi-face cards
    """

    id: str
    name: str
    mana_cost: str = ""
    cmc: float = 0.0
    type_line: str = ""
    oracle_text: str = ""
    color_identity: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    rarity: str = "common"
    price_usd: float | None = None
    keywords: tuple[str, ...] = ()
    card_faces: tuple[CardFace, ...] = ()
    set_code: str | None = None
    collector_number: str | None = None
    image_url: str | None = None

    @property
    def full_oracle_text(self) -> str:
        """Oracle text, falling back to the joined face texts."""
        if self.oracle_text:
            return self.oracle_text
        return "\n".join(face.oracle_text for face in self.card_faces if face.oracle_text)

    @property
    def is_land(self) -> bool:
        return "Land" in self.type_line.split("//")[0]

    @property
    def is_basic_land(self) -> bool:
        return self.is_land and "Basic" in self.type_line

    def identity_within(self, colors: set[str] | tuple[str, ...]) -> bool:
        """True if this card's color identity fits inside `colors`."""
        return all(c in colors for c in self.color_identity)


@dataclass(frozen=True, slots=True)
class OwnedCard:
    """
    A card the user owns.

    The same card name can be owned as several printings (distinct ids),
    each with its own quantity.
    """

    card: Card
    quantity: int = 1
    set_code: str | None = None
    collector_number: str | None = None

    @property
    def id(self) -> str:
        return self.card.id

    @property
    def name(self) -> str:
        return self.card.name


@dataclass(frozen=True, slots=True)
class CardIdentifier:
    """A collection entry before enrichment: an id plus what the user owns."""

    id: str
    quantity: int = 1
    set_code: str | None = None
    collector_number: str | None = None
