from commanderforge.parsers.scryfall import parse_card, parse_card_face, parse_card_list

__all__ = [
    "parse_card",
    "parse_card_face",
    "parse_card_list",
]
