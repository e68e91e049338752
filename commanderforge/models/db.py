"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserCollectionDB(Base):
    """
    A user's card collection stored in the database.

    Each user has one collection containing their owned printings.
    """

    __tablename__ = "user_collections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationship to card ownership records
    cards: Mapped[list["CardOwnershipDB"]] = relationship(
        back_populates="collection", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<UserCollectionDB(id={self.id}, user_id={self.user_id})>"


class CardOwnershipDB(Base):
    """
    Individual printing ownership record.

    One row per owned Scryfall id; metadata lives in the card cache.
    """

    __tablename__ = "card_ownership"
    __table_args__ = (UniqueConstraint("collection_id", "card_id", name="uq_collection_card"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("user_collections.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(String(64), index=True)
    card_name: Mapped[str] = mapped_column(String(255), index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    set_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    collector_number: Mapped[str | None] = mapped_column(String(16), nullable=True)

    # Relationship back to collection
    collection: Mapped["UserCollectionDB"] = relationship(back_populates="cards")

    def __repr__(self) -> str:
        return f"<CardOwnershipDB(card={self.card_name}, qty={self.quantity})>"


class CardCacheDB(Base):
    """
    Cached Scryfall metadata for one printing.

    Shared across users so collections load without hitting Scryfall.
    """

    __tablename__ = "card_cache"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    mana_cost: Mapped[str] = mapped_column(String(128), default="")
    cmc: Mapped[float] = mapped_column(Float, default=0.0)
    type_line: Mapped[str] = mapped_column(String(255), default="")
    oracle_text: Mapped[str] = mapped_column(Text, default="")
    color_identity: Mapped[list[str]] = mapped_column(JSON, default=list)
    colors: Mapped[list[str]] = mapped_column(JSON, default=list)
    rarity: Mapped[str] = mapped_column(String(16), default="common")
    price_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    keywords: Mapped[list[str]] = mapped_column(JSON, default=list)
    card_faces: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    set_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    collector_number: Mapped[str | None] = mapped_column(String(16), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<CardCacheDB(id={self.id}, name={self.name})>"


class DeckDB(Base):
    """A deck saved by a user."""

    __tablename__ = "decks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))

    # Deck contents stored as JSON for flexibility
    commander_ids: Mapped[list[str]] = mapped_column(JSON, default=list)
    cards: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    colors: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<DeckDB(id={self.id}, name={self.name})>"
