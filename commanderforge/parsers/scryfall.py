"""
Scryfall card object parser.

Turns the JSON card objects returned by the Scryfall API into Card
dataclasses.

Card objects: https://scryfall.com/docs/api/cards
"""

from typing import Any, TypedDict

from commanderforge.models.card import Card, CardFace, sort_colors

VALID_RARITIES = frozenset({"common", "uncommon", "rare", "mythic"})


class CardFacePayload(TypedDict, total=False):
    """Subset of a Scryfall card face we read."""

    name: str
    mana_cost: str
    type_line: str
    oracle_text: str


def _normalize_rarity(rarity: str) -> str:
    """Normalize rarity to one of: common, uncommon, rare, mythic."""
    return rarity if rarity in VALID_RARITIES else "common"


def _parse_price(prices: dict[str, Any] | None) -> float | None:
    """Cheapest USD price, preferring non-foil."""
    if not prices:
        return None
    for key in ("usd", "usd_foil", "usd_etched"):
        value = prices.get(key)
        if value:
            try:
                return float(value)
            except (TypeError, ValueError):
                continue
    return None


def _parse_image(payload: dict[str, Any]) -> str | None:
    """Normal-size image URL, falling back to the front face."""
    image_uris = payload.get("image_uris")
    if not image_uris:
        faces = payload.get("card_faces") or []
        if faces:
            image_uris = faces[0].get("image_uris")
    if not image_uris:
        return None
    url = image_uris.get("normal") or image_uris.get("large") or image_uris.get("small")
    return str(url) if url else None


def parse_card_face(face: CardFacePayload | dict[str, Any]) -> CardFace:
    return CardFace(
        name=face.get("name", ""),
        mana_cost=face.get("mana_cost", "") or "",
        type_line=face.get("type_line", "") or "",
        oracle_text=face.get("oracle_text", "") or "",
    )


def parse_card(payload: dict[str, Any]) -> Card:
    """
    Build a Card from a Scryfall card object.

    Args:
        payload: Decoded JSON card object

    Returns:
        Card with metadata copied from the payload

    Raises:
        KeyError: If the payload lacks an id or name
    """
    faces = tuple(parse_card_face(face) for face in payload.get("card_faces") or [])

    mana_cost = payload.get("mana_cost")
    if mana_cost is None and faces:
        mana_cost = " // ".join(face.mana_cost for face in faces)

    type_line = payload.get("type_line")
    if type_line is None and faces:
        type_line = " // ".join(face.type_line for face in faces)

    return Card(
        id=str(payload["id"]),
        name=payload["name"],
        mana_cost=mana_cost or "",
        cmc=float(payload.get("cmc") or 0.0),
        type_line=type_line or "",
        oracle_text=payload.get("oracle_text", "") or "",
        color_identity=sort_colors(payload.get("color_identity") or []),
        colors=sort_colors(payload.get("colors") or []),
        rarity=_normalize_rarity(payload.get("rarity", "common")),
        price_usd=_parse_price(payload.get("prices")),
        keywords=tuple(payload.get("keywords") or ()),
        card_faces=faces,
        set_code=payload.get("set"),
        collector_number=payload.get("collector_number"),
        image_url=_parse_image(payload),
    )


def parse_card_list(payloads: list[dict[str, Any]]) -> list[Card]:
    """Parse a list of card objects, skipping entries without id or name."""
    cards: list[Card] = []
    for payload in payloads:
        if "id" not in payload or "name" not in payload:
            continue
        cards.append(parse_card(payload))
    return cards
