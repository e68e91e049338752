"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from commanderforge.services.scryfall_client import CardProvider, ScryfallClient


async def get_card_provider() -> AsyncGenerator[CardProvider, None]:
    """
    Dependency that provides a Scryfall-backed card provider.

    The underlying HTTP client is closed when the request finishes.
    """
    async with ScryfallClient() as provider:
        yield provider
