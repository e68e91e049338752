from commanderforge.db.database import get_session, init_db
from commanderforge.db.operations import (
    cached_card_to_model,
    collection_to_model,
    create_collection,
    create_deck,
    delete_collection,
    delete_deck,
    deck_to_model,
    get_cached_cards,
    get_collection,
    get_deck,
    get_or_create_collection,
    list_decks,
    load_collection,
    replace_collection_cards,
    update_deck,
    upsert_cached_cards,
)

__all__ = [
    "cached_card_to_model",
    "collection_to_model",
    "create_collection",
    "create_deck",
    "deck_to_model",
    "delete_collection",
    "delete_deck",
    "get_cached_cards",
    "get_collection",
    "get_deck",
    "get_or_create_collection",
    "get_session",
    "init_db",
    "list_decks",
    "load_collection",
    "replace_collection_cards",
    "update_deck",
    "upsert_cached_cards",
]
