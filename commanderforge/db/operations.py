"""
Database CRUD operations.

Provides async functions for collections, the shared card metadata cache,
and saved decks.
"""

import logging
from dataclasses import asdict

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from commanderforge.models.card import Card, CardFace, OwnedCard, sort_colors
from commanderforge.models.collection import Collection
from commanderforge.models.db import CardCacheDB, CardOwnershipDB, DeckDB, UserCollectionDB
from commanderforge.models.deck import SavedDeck

logger = logging.getLogger(__name__)

# --- Collection Operations ---


async def get_collection(session: AsyncSession, user_id: str) -> UserCollectionDB | None:
    """
    Get a user's collection by user_id.

    Returns None if no collection exists for this user.
    """
    result = await session.execute(
        select(UserCollectionDB)
        .where(UserCollectionDB.user_id == user_id)
        .options(selectinload(UserCollectionDB.cards))
    )
    return result.scalar_one_or_none()


async def create_collection(session: AsyncSession, user_id: str) -> UserCollectionDB:
    """
    Create a new collection for a user.

    Raises IntegrityError if collection already exists.
    """
    collection = UserCollectionDB(user_id=user_id)
    session.add(collection)
    await session.flush()
    return collection


async def get_or_create_collection(
    session: AsyncSession, user_id: str
) -> tuple[UserCollectionDB, bool]:
    """
    Get existing collection or create new one.

    Returns:
        Tuple of (collection, created) where created is True if new.
    """
    collection = await get_collection(session, user_id)
    if collection:
        return collection, False

    collection = await create_collection(session, user_id)
    return collection, True


async def replace_collection_cards(
    session: AsyncSession,
    user_id: str,
    cards: list[OwnedCard],
) -> UserCollectionDB:
    """
    Replace a user's collection with new printings.

    Deletes existing ownership records and creates one per Scryfall id;
    repeated ids have their quantities summed.
    """
    await get_or_create_collection(session, user_id)

    # Re-fetch with eager loading to avoid async lazy load issues
    loaded = await get_collection(session, user_id)
    if not loaded:
        msg = f"Collection for user {user_id} not found after creation"
        raise RuntimeError(msg)
    collection = loaded

    await session.execute(
        delete(CardOwnershipDB).where(CardOwnershipDB.collection_id == collection.id)
    )
    collection.cards.clear()

    by_id: dict[str, CardOwnershipDB] = {}
    for owned in cards:
        existing = by_id.get(owned.id)
        if existing is not None:
            existing.quantity += owned.quantity
            continue
        record = CardOwnershipDB(
            card_id=owned.id,
            card_name=owned.name,
            quantity=owned.quantity,
            set_code=owned.set_code,
            collector_number=owned.collector_number,
        )
        by_id[owned.id] = record
        collection.cards.append(record)

    await session.flush()
    return collection


def collection_to_model(collection: UserCollectionDB, cards: dict[str, Card]) -> Collection:
    """
    Convert a database collection to a domain model.

    Args:
        collection: Stored ownership records
        cards: Cached card metadata keyed by Scryfall id

    Printings without cached metadata are left out.
    """
    owned: list[OwnedCard] = []
    for record in collection.cards:
        card = cards.get(record.card_id)
        if card is None:
            logger.warning(
                "No cached metadata for %s (%s), skipping", record.card_name, record.card_id
            )
            continue
        owned.append(
            OwnedCard(
                card=card,
                quantity=record.quantity,
                set_code=record.set_code,
                collector_number=record.collector_number,
            )
        )
    return Collection(cards=owned)


async def load_collection(session: AsyncSession, user_id: str) -> Collection | None:
    """Stored collection joined with cached metadata, or None if the user has none."""
    db_collection = await get_collection(session, user_id)
    if db_collection is None:
        return None
    cached = await get_cached_cards(session, [record.card_id for record in db_collection.cards])
    return collection_to_model(db_collection, cached)


async def delete_collection(session: AsyncSession, user_id: str) -> bool:
    """
    Delete a user's collection.

    Returns True if deleted, False if not found.
    """
    collection = await get_collection(session, user_id)
    if not collection:
        return False

    await session.delete(collection)
    return True


# --- Card Cache Operations ---


def _card_to_row(card: Card, row: CardCacheDB) -> CardCacheDB:
    row.name = card.name
    row.mana_cost = card.mana_cost
    row.cmc = card.cmc
    row.type_line = card.type_line
    row.oracle_text = card.oracle_text
    row.color_identity = list(card.color_identity)
    row.colors = list(card.colors)
    row.rarity = card.rarity
    row.price_usd = card.price_usd
    row.keywords = list(card.keywords)
    row.card_faces = [asdict(face) for face in card.card_faces]
    row.set_code = card.set_code
    row.collector_number = card.collector_number
    row.image_url = card.image_url
    return row


def cached_card_to_model(row: CardCacheDB) -> Card:
    """Convert a cache row back to a Card."""
    return Card(
        id=row.id,
        name=row.name,
        mana_cost=row.mana_cost or "",
        cmc=row.cmc or 0.0,
        type_line=row.type_line or "",
        oracle_text=row.oracle_text or "",
        color_identity=sort_colors(row.color_identity or []),
        colors=sort_colors(row.colors or []),
        rarity=row.rarity or "common",
        price_usd=row.price_usd,
        keywords=tuple(row.keywords or []),
        card_faces=tuple(CardFace(**face) for face in row.card_faces or []),
        set_code=row.set_code,
        collector_number=row.collector_number,
        image_url=row.image_url,
    )


async def upsert_cached_cards(session: AsyncSession, cards: list[Card]) -> int:
    """
    Insert or refresh cached metadata.

    Returns the number of distinct cards written.
    """
    if not cards:
        return 0

    unique = {card.id: card for card in cards}
    result = await session.execute(select(CardCacheDB).where(CardCacheDB.id.in_(list(unique))))
    existing = {row.id: row for row in result.scalars().all()}

    for card_id, card in unique.items():
        row = existing.get(card_id)
        if row is None:
            session.add(_card_to_row(card, CardCacheDB(id=card_id)))
        else:
            _card_to_row(card, row)

    await session.flush()
    return len(unique)


async def get_cached_cards(session: AsyncSession, card_ids: list[str]) -> dict[str, Card]:
    """Cached cards for the given ids; unknown ids are absent from the result."""
    if not card_ids:
        return {}
    result = await session.execute(
        select(CardCacheDB).where(CardCacheDB.id.in_(list(set(card_ids))))
    )
    return {row.id: cached_card_to_model(row) for row in result.scalars().all()}


# --- Deck Operations ---


async def list_decks(session: AsyncSession, user_id: str) -> list[DeckDB]:
    """All decks saved by a user, oldest first."""
    result = await session.execute(
        select(DeckDB).where(DeckDB.user_id == user_id).order_by(DeckDB.id)
    )
    return list(result.scalars().all())


async def get_deck(session: AsyncSession, user_id: str, deck_id: int) -> DeckDB | None:
    """Get a deck by id. Returns None if missing or owned by another user."""
    result = await session.execute(
        select(DeckDB).where(DeckDB.id == deck_id, DeckDB.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def create_deck(session: AsyncSession, deck: SavedDeck) -> DeckDB:
    """Save a new deck."""
    db_deck = DeckDB(
        user_id=deck.user_id,
        name=deck.name,
        commander_ids=list(deck.commander_ids),
        cards=list(deck.cards),
        colors=list(deck.colors),
    )
    session.add(db_deck)
    await session.flush()
    await session.refresh(db_deck)
    return db_deck


async def update_deck(
    session: AsyncSession,
    user_id: str,
    deck_id: int,
    name: str | None = None,
    commander_ids: list[str] | None = None,
    cards: list[dict[str, str | None]] | None = None,
    colors: list[str] | None = None,
) -> DeckDB | None:
    """
    Update the given fields of a deck.

    Fields left as None are unchanged. Returns None if the deck is not found.
    """
    db_deck = await get_deck(session, user_id, deck_id)
    if db_deck is None:
        return None

    if name is not None:
        db_deck.name = name
    if commander_ids is not None:
        db_deck.commander_ids = list(commander_ids)
    if cards is not None:
        db_deck.cards = list(cards)
    if colors is not None:
        db_deck.colors = list(colors)

    await session.flush()
    await session.refresh(db_deck)
    return db_deck


async def delete_deck(session: AsyncSession, user_id: str, deck_id: int) -> bool:
    """
    Delete a deck.

    Returns True if deleted, False if not found.
    """
    db_deck = await get_deck(session, user_id, deck_id)
    if db_deck is None:
        return False

    await session.delete(db_deck)
    return True


def deck_to_model(db_deck: DeckDB) -> SavedDeck:
    """Convert a database deck to a domain model."""
    return SavedDeck(
        id=db_deck.id,
        user_id=db_deck.user_id,
        name=db_deck.name,
        commander_ids=list(db_deck.commander_ids or []),
        cards=list(db_deck.cards or []),
        colors=list(db_deck.colors or []),
        created_at=db_deck.created_at,
        updated_at=db_deck.updated_at,
    )
