"""Tests for collection enrichment."""

from commanderforge.models.card import CardIdentifier
from commanderforge.services.collection_enrichment import enrich_collection


class TestEnrichCollection:
    async def test_fetches_unknown_ids(self, fake_provider, card_factory) -> None:
        """Ids missing from the cache are looked up in one batch."""
        sol_ring = card_factory("Sol Ring", card_id="sol-1", set_code="c21", collector_number="263")
        fake_provider.catalogue["sol-1"] = sol_ring

        result = await enrich_collection(fake_provider, [CardIdentifier(id="sol-1", quantity=2)])

        assert fake_provider.lookups == [["sol-1"]]
        assert result.fetched == [sol_ring]
        assert result.not_found == []
        owned = result.collection.cards[0]
        assert owned.quantity == 2
        assert owned.set_code == "c21"
        assert owned.collector_number == "263"

    async def test_uses_cache(self, fake_provider, card_factory) -> None:
        """Cached ids never reach the provider."""
        cached = {"stp": card_factory("Swords to Plowshares", "Instant", card_id="stp")}

        result = await enrich_collection(fake_provider, [CardIdentifier(id="stp")], cached)

        assert fake_provider.lookups == []
        assert result.fetched == []
        assert result.collection.cards[0].name == "Swords to Plowshares"

    async def test_identifier_printing_wins(self, fake_provider, card_factory) -> None:
        fake_provider.catalogue["sol-1"] = card_factory("Sol Ring", card_id="sol-1", set_code="c21")

        result = await enrich_collection(
            fake_provider, [CardIdentifier(id="sol-1", set_code="ltc", collector_number="1")]
        )

        assert result.collection.cards[0].set_code == "ltc"
        assert result.collection.cards[0].collector_number == "1"

    async def test_unknown_ids_reported(self, fake_provider, card_factory) -> None:
        fake_provider.catalogue["sol-1"] = card_factory("Sol Ring", card_id="sol-1")

        result = await enrich_collection(
            fake_provider, [CardIdentifier(id="sol-1"), CardIdentifier(id="bogus")]
        )

        assert result.not_found == ["bogus"]
        assert [owned.id for owned in result.collection.cards] == ["sol-1"]

    async def test_duplicate_ids_looked_up_once(self, fake_provider, card_factory) -> None:
        fake_provider.catalogue["sol-1"] = card_factory("Sol Ring", card_id="sol-1")

        result = await enrich_collection(
            fake_provider,
            [CardIdentifier(id="sol-1"), CardIdentifier(id="sol-1", quantity=3)],
        )

        assert fake_provider.lookups == [["sol-1"]]
        assert [owned.quantity for owned in result.collection.cards] == [1, 3]

    async def test_provider_failure_marks_missing(self, fake_provider, card_factory) -> None:
        """A failed lookup keeps cached cards and reports the rest as not found."""
        fake_provider.fail_lookups = True
        cached = {"stp": card_factory("Swords to Plowshares", "Instant", card_id="stp")}

        result = await enrich_collection(
            fake_provider,
            [CardIdentifier(id="stp"), CardIdentifier(id="sol-1")],
            cached,
        )

        assert result.not_found == ["sol-1"]
        assert [owned.id for owned in result.collection.cards] == ["stp"]

    async def test_empty_upload(self, fake_provider) -> None:
        result = await enrich_collection(fake_provider, [])

        assert result.collection.cards == []
        assert fake_provider.lookups == []
