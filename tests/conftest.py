import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from commanderforge.api.dependencies import get_card_provider
from commanderforge.db.database import get_session
from commanderforge.main import app
from commanderforge.models.card import Card
from commanderforge.models.db import Base
from commanderforge.models.failure import CardProviderError
from commanderforge.services.scryfall_client import BatchLookup, SearchPage


def build_card(
    name: str,
    type_line: str = "Artifact",
    oracle_text: str = "",
    color_identity: tuple[str, ...] = (),
    cmc: float = 2.0,
    card_id: str | None = None,
    **kwargs,
) -> Card:
    """Card with sensible defaults; the id defaults to a slug of the name."""
    return Card(
        id=card_id or name.lower().replace(" ", "-").replace(",", ""),
        name=name,
        type_line=type_line,
        oracle_text=oracle_text,
        color_identity=color_identity,
        cmc=cmc,
        **kwargs,
    )


class FakeCardProvider:
    """
    In-memory CardProvider with a predictable catalogue.

    - resolve_by_name answers from `commanders`
    - search returns `results[fragment]` for the first fragment found in
      the query; otherwise non-land queries page through colorless filler
      artifacts and everything else is empty
    - lookup_batch answers from `catalogue`
    """

    def __init__(self, commanders: list[Card] | None = None, filler_count: int = 150) -> None:
        self.commanders = {card.name.lower(): card for card in commanders or []}
        self.results: dict[str, list[Card]] = {}
        self.catalogue: dict[str, Card] = {}
        self.filler = [
            build_card(
                f"Filler Relic {i}",
                oracle_text="{T}: Scry 1.",
                cmc=1.0,
                card_id=f"filler-{i}",
                price_usd=0.25,
            )
            for i in range(1, filler_count + 1)
        ]
        self.page_size = 50
        self.fail_searches = False
        self.fail_lookups = False
        self.searches: list[str] = []
        self.lookups: list[list[str]] = []

    async def resolve_by_name(self, name: str) -> Card | None:
        return self.commanders.get(name.lower())

    async def search(
        self,
        query: str,
        order: str = "edhrec",
        direction: str = "asc",
        page: int = 1,
    ) -> SearchPage:
        self.searches.append(query)
        if self.fail_searches:
            raise CardProviderError("Scryfall search failed", detail="HTTP 503")

        for fragment, cards in self.results.items():
            if fragment in query:
                return SearchPage(cards=list(cards) if page == 1 else [])

        if "-t:land" not in query:
            return SearchPage()
        start = (page - 1) * self.page_size
        return SearchPage(
            cards=self.filler[start : start + self.page_size],
            has_more=start + self.page_size < len(self.filler),
        )

    async def lookup_batch(self, identifiers: list[str]) -> BatchLookup:
        self.lookups.append(list(identifiers))
        if self.fail_lookups:
            raise CardProviderError("Scryfall lookup failed")
        return BatchLookup(
            found=[self.catalogue[i] for i in identifiers if i in self.catalogue],
            not_found=[i for i in identifiers if i not in self.catalogue],
        )


@pytest.fixture
def card_factory():
    """Factory for Card objects (see build_card)."""
    return build_card


@pytest.fixture
def fake_provider() -> FakeCardProvider:
    return FakeCardProvider()


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine, fake_provider):
    """Async test client with the database and Scryfall overridden."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_card_provider():
        yield fake_provider

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_card_provider] = override_get_card_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
