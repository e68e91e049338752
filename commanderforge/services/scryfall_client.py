"""
Scryfall card metadata provider.

Async client for the three Scryfall endpoints the deck builder needs:
exact-name lookup, search, and batched id lookup.

API docs: https://scryfall.com/docs/api
"""

import asyncio
import logging
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Protocol

import httpx

from commanderforge.config import SCRYFALL_BATCH_LIMIT, settings
from commanderforge.models.card import Card
from commanderforge.models.failure import CardProviderError
from commanderforge.parsers.scryfall import parse_card_list

logger = logging.getLogger(__name__)


@dataclass
class SearchPage:
    """One page of search results."""

    cards: list[Card] = field(default_factory=list)
    has_more: bool = False


@dataclass
class BatchLookup:
    """Result of a batched id lookup."""

    found: list[Card] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)


class CardProvider(Protocol):
    """Read-only card metadata lookup used by the auto-builder."""

    async def resolve_by_name(self, name: str) -> Card | None: ...

    async def search(
        self,
        query: str,
        order: str = "edhrec",
        direction: str = "asc",
        page: int = 1,
    ) -> SearchPage: ...

    async def lookup_batch(self, identifiers: list[str]) -> BatchLookup: ...


def chunk_identifiers(identifiers: list[str], size: int = SCRYFALL_BATCH_LIMIT) -> list[list[str]]:
    """Split identifiers into request-sized chunks."""
    return [identifiers[i : i + size] for i in range(0, len(identifiers), size)]


def _json_object(response: httpx.Response, context: str) -> dict[str, Any]:
    """Decoded JSON object body; anything else is a provider failure."""
    try:
        data = response.json()
    except ValueError as e:
        raise CardProviderError(
            f"Scryfall returned malformed JSON: {context}", detail=str(e)
        ) from e
    if not isinstance(data, dict):
        raise CardProviderError(
            f"Scryfall returned unexpected data: {context}",
            detail=f"expected an object, got {type(data).__name__}",
        )
    return data


def _parse_cards(payloads: Any, context: str) -> list[Card]:
    try:
        return parse_card_list(payloads)
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise CardProviderError(
            f"Scryfall returned malformed cards: {context}", detail=repr(e)
        ) from e


class ScryfallClient:
    """
    CardProvider backed by the public Scryfall API.

    Usage:
        async with ScryfallClient() as provider:
            card = await provider.resolve_by_name("Sol Ring")

    An existing httpx.AsyncClient may be passed in; it is then left open
    on exit.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
        request_delay: float | None = None,
    ) -> None:
        self._base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self._request_delay = (
            settings.scryfall_request_delay if request_delay is None else request_delay
        )
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={
                "User-Agent": settings.scryfall_user_agent,
                "Accept": "application/json",
            },
            timeout=settings.scryfall_timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "ScryfallClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            return await self._client.request(method, url, params=params, json=json)
        except httpx.HTTPError as e:
            raise CardProviderError(f"Scryfall request failed: {path}", detail=str(e)) from e

    async def resolve_by_name(self, name: str) -> Card | None:
        """
        Look up a card by exact name.

        Returns:
            The card, or None if Scryfall has no card with that name.

        Raises:
            CardProviderError: On transport errors or unexpected status codes
        """
        response = await self._request("GET", "/cards/named", params={"exact": name})
        if response.status_code == 404:
            return None
        if response.is_error:
            raise CardProviderError(
                f"Scryfall lookup failed for '{name}'",
                detail=f"HTTP {response.status_code}",
            )
        cards = _parse_cards([_json_object(response, "/cards/named")], "/cards/named")
        return cards[0]

    async def search(
        self,
        query: str,
        order: str = "edhrec",
        direction: str = "asc",
        page: int = 1,
    ) -> SearchPage:
        """
        Run a Scryfall full-text search.

        Args:
            query: Scryfall query expression (e.g. "id<=WU t:artifact")
            order: Sort order (edhrec, name, usd, cmc, ...)
            direction: "asc" or "desc"
            page: 1-based page number

        Returns:
            SearchPage; empty when Scryfall reports no matches (HTTP 404).

        Raises:
            CardProviderError: On transport errors or unexpected status codes
        """
        params = {"q": query, "order": order, "dir": direction, "page": page}
        response = await self._request("GET", "/cards/search", params=params)
        if response.status_code == 404:
            return SearchPage()
        if response.is_error:
            raise CardProviderError(
                "Scryfall search failed",
                detail=f"HTTP {response.status_code} for query {query!r}",
            )
        data = _json_object(response, "/cards/search")
        return SearchPage(
            cards=_parse_cards(data.get("data", []), "/cards/search"),
            has_more=bool(data.get("has_more", False)),
        )

    async def lookup_batch(self, identifiers: list[str]) -> BatchLookup:
        """
        Fetch many cards by Scryfall id.

        Requests are chunked to Scryfall's identifier limit with a short
        pause between chunks. A chunk that fails is logged and its ids are
        reported as not found; the remaining chunks still run.
        """
        result = BatchLookup()
        chunks = chunk_identifiers(identifiers)

        for index, chunk in enumerate(chunks):
            if index > 0 and self._request_delay > 0:
                await asyncio.sleep(self._request_delay)

            logger.debug("Fetching chunk %d/%d (%d cards)", index + 1, len(chunks), len(chunk))
            body = {"identifiers": [{"id": identifier} for identifier in chunk]}
            try:
                response = await self._request("POST", "/cards/collection", json=body)
                response.raise_for_status()
                data = _json_object(response, "/cards/collection")
                found = _parse_cards(data.get("data", []), "/cards/collection")
            except (CardProviderError, httpx.HTTPStatusError) as e:
                logger.warning("Failed to fetch chunk %d/%d: %s", index + 1, len(chunks), e)
                result.not_found.extend(chunk)
                continue

            result.found.extend(found)
            missing = data.get("not_found", [])
            if missing:
                logger.warning("%d cards not found in chunk %d", len(missing), index + 1)
                result.not_found.extend(str(entry.get("id", "")) for entry in missing)

        return result
