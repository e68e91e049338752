"""Tests for the eligible pool."""

import random

import pytest

from commanderforge.filtering.eligible_pool import EligiblePool, build_eligible_pool
from commanderforge.models.card import Card, OwnedCard
from commanderforge.models.collection import Collection
from commanderforge.models.synergy import SynergyProfile


@pytest.fixture
def collection() -> Collection:
    sol_ring = Card(id="sol-1", name="Sol Ring", type_line="Artifact")
    sol_ring_promo = Card(id="sol-2", name="Sol Ring", type_line="Artifact")
    bolt = Card(id="bolt", name="Lightning Bolt", type_line="Instant", color_identity=("R",))
    swords = Card(
        id="stp",
        name="Swords to Plowshares",
        type_line="Instant",
        oracle_text="Exile target creature.",
        color_identity=("W",),
    )
    commander = Card(
        id="cmdr",
        name="Thalia, Guardian of Thraben",
        type_line="Legendary Creature — Human Soldier",
        color_identity=("W",),
    )
    skull = Card(id="skull", name="Mystic Skull", type_line="Artifact")
    return Collection(
        cards=[
            OwnedCard(card=sol_ring),
            OwnedCard(card=bolt, quantity=4),
            OwnedCard(card=swords),
            OwnedCard(card=commander),
            OwnedCard(card=skull),
            OwnedCard(card=sol_ring_promo),
        ]
    )


@pytest.fixture
def pool(collection: Collection) -> EligiblePool:
    return build_eligible_pool(
        collection,
        ["thalia, guardian of thraben"],
        ("W",),
        SynergyProfile(),
    )


class TestBuildEligiblePool:
    def test_excludes_off_identity(self, pool: EligiblePool) -> None:
        assert not pool.contains("Lightning Bolt")

    def test_excludes_commander_case_insensitively(self, pool: EligiblePool) -> None:
        assert not pool.contains("Thalia, Guardian of Thraben")

    def test_excludes_irrelevant(self, pool: EligiblePool) -> None:
        assert not pool.contains("Mystic Skull")

    def test_keeps_all_printings(self, pool: EligiblePool) -> None:
        assert [owned.id for owned in pool.printings] == ["sol-1", "stp", "sol-2"]

    def test_unique_view_first_printing_wins(self, pool: EligiblePool) -> None:
        assert [owned.id for owned in pool.unique] == ["sol-1", "stp"]
        assert len(pool) == 2

    def test_empty_collection(self) -> None:
        pool = build_eligible_pool(Collection(), [], ("W",), SynergyProfile())

        assert len(pool) == 0


class TestPickPrinting:
    def test_single_printing(self, pool: EligiblePool) -> None:
        owned = pool.pick_printing("Swords to Plowshares", random.Random(1))

        assert owned is not None
        assert owned.id == "stp"

    def test_missing_card(self, pool: EligiblePool) -> None:
        assert pool.pick_printing("Black Lotus", random.Random(1)) is None

    def test_choice_is_seeded(self, pool: EligiblePool) -> None:
        picks = [pool.pick_printing("Sol Ring", random.Random(7)) for _ in range(3)]

        assert len({owned.id for owned in picks if owned}) == 1

    def test_every_printing_reachable(self, pool: EligiblePool) -> None:
        rng = random.Random(0)
        seen = {pool.pick_printing("sol ring", rng).id for _ in range(50)}

        assert seen == {"sol-1", "sol-2"}
