"""Tests for the Commander deck auto-builder."""

import random
from collections import Counter

import pytest

from commanderforge.filtering.eligible_pool import build_eligible_pool
from commanderforge.models.card import BASIC_LAND_NAMES, Card, OwnedCard
from commanderforge.models.collection import Collection
from commanderforge.models.deck import AutoBuildResult
from commanderforge.models.failure import (
    CardProviderError,
    CommanderNotFoundError,
    FailureKind,
    KnownError,
)
from commanderforge.models.synergy import SynergyProfile
from commanderforge.services.auto_builder import (
    BuildContext,
    BuildOptions,
    BuildState,
    add_basic_lands,
    add_nonbasic_lands,
    auto_build,
    clean_commander_names,
    commander_slug,
    compute_targets,
    merge_color_identity,
    top_up,
)
from commanderforge.services.vocabulary import Vocabulary


def _card(
    name: str,
    type_line: str = "Artifact",
    text: str = "",
    identity: tuple[str, ...] = (),
    card_id: str | None = None,
    cmc: float = 2.0,
) -> Card:
    return Card(
        id=card_id or name.lower(),
        name=name,
        type_line=type_line,
        oracle_text=text,
        color_identity=identity,
        cmc=cmc,
    )


def _collection(*cards: Card) -> Collection:
    return Collection(cards=[OwnedCard(card=card) for card in cards])


def _register(provider, *commanders: Card) -> None:
    for commander in commanders:
        provider.commanders[commander.name.lower()] = commander


def _non_basic_names(result: AutoBuildResult) -> list[str]:
    return [name for name in result.card_names if name not in BASIC_LAND_NAMES]


# =============================================================================
# FIXTURES
# =============================================================================

PARTNER_A = _card(
    "Alena Skyward",
    "Legendary Creature — Human Soldier",
    "Flying\nPartner",
    ("W",),
    card_id="cmdr-a",
)
PARTNER_B = _card(
    "Brine Oracle",
    "Legendary Creature — Merfolk Wizard",
    "Whenever you cast an instant or sorcery spell, draw a card.\nPartner",
    ("U",),
    card_id="cmdr-b",
)
RED_CARDS = (
    _card("Lightning Bolt", "Instant", "Lightning Bolt deals 3 damage to any target.", ("R",)),
    _card("Blood Moon", "Enchantment", "Nonbasic lands are Mountains.", ("R",)),
    _card("Goblin Guide", "Creature — Goblin Scout", "Haste", ("R",)),
)


@pytest.fixture
def azorius_collection() -> Collection:
    return Collection(
        cards=[
            OwnedCard(card=_card("Sol Ring", text="{T}: Add {C}{C}.", card_id="sol-1")),
            OwnedCard(card=_card("Sol Ring", text="{T}: Add {C}{C}.", card_id="sol-2")),
            OwnedCard(card=_card("Arcane Signet", text="{T}: Add one mana of any color.")),
            OwnedCard(
                card=_card(
                    "Swords to Plowshares",
                    "Instant",
                    "Exile target creature. Its controller gains life equal to its power.",
                    ("W",),
                )
            ),
            OwnedCard(card=_card("Counterspell", "Instant", "Counter target spell.", ("U",))),
            OwnedCard(card=_card("Opt", "Instant", "Scry 1. Draw a card.", ("U",))),
            OwnedCard(card=_card("Tundra", "Land — Plains Island", "", ("W", "U"))),
            OwnedCard(
                card=_card("Plains", "Basic Land — Plains", "", ("W",), card_id="plains-1"),
                quantity=20,
            ),
            OwnedCard(card=PARTNER_A),
            *(OwnedCard(card=card) for card in RED_CARDS),
        ]
    )


@pytest.fixture
def azorius_provider(fake_provider):
    _register(fake_provider, PARTNER_A, PARTNER_B)
    return fake_provider


async def _build_azorius(provider, collection: Collection, seed: int = 42) -> AutoBuildResult:
    return await auto_build(
        ["Alena Skyward", "Brine Oracle"],
        collection,
        provider,
        rng=random.Random(seed),
    )


# =============================================================================
# SIZING AND IDENTITY
# =============================================================================


class TestComputeTargets:
    def test_single_commander(self) -> None:
        targets = compute_targets(1)

        assert (targets.total, targets.non_land, targets.lands) == (99, 61, 38)

    def test_partners(self) -> None:
        targets = compute_targets(2)

        assert (targets.total, targets.non_land, targets.lands) == (98, 61, 37)


class TestMergeColorIdentity:
    def test_union_in_wubrg_order(self) -> None:
        first = _card("A", identity=("G", "B"))
        second = _card("B", identity=("W", "B"))

        assert merge_color_identity([first, second]) == ("W", "B", "G")

    def test_colorless(self) -> None:
        assert merge_color_identity([_card("Karn")]) == ()


class TestCommanderSlug:
    def test_slug(self) -> None:
        assert commander_slug("Atraxa, Praetors' Voice") == "atraxa-praetors-voice"


# =============================================================================
# INPUT VALIDATION AND COMMANDER RESOLUTION
# =============================================================================


class TestValidation:
    async def test_no_commander(self, fake_provider) -> None:
        with pytest.raises(KnownError) as exc_info:
            await auto_build(["  "], Collection(), fake_provider)

        assert exc_info.value.kind == FailureKind.MISSING_REQUIRED

    async def test_too_many_commanders(self, fake_provider) -> None:
        with pytest.raises(KnownError) as exc_info:
            await auto_build(["A", "B", "C"], Collection(), fake_provider)

        assert exc_info.value.kind == FailureKind.INVALID_INPUT

    def test_clean_commander_names(self) -> None:
        names = clean_commander_names(["  Teysa the Reaper ", "", "teysa the reaper", "Karn"])

        assert names == ["Teysa the Reaper", "Karn"]


class TestCommanderNotFound:
    async def test_unknown_name_aborts(self, fake_provider) -> None:
        """An unresolvable commander stops the build before any search."""
        with pytest.raises(CommanderNotFoundError) as exc_info:
            await auto_build(["Nobody, the Missing"], Collection(), fake_provider)

        assert exc_info.value.name == "Nobody, the Missing"
        assert exc_info.value.status_code == 404
        assert fake_provider.searches == []

    async def test_one_bad_partner_aborts(self, azorius_provider) -> None:
        with pytest.raises(CommanderNotFoundError) as exc_info:
            await auto_build(["Alena Skyward", "Not A Card"], Collection(), azorius_provider)

        assert exc_info.value.name == "Not A Card"

    async def test_provider_failure_is_not_found(
        self, fake_provider, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        async def broken(name: str) -> Card | None:
            raise CardProviderError("Scryfall request failed", detail="timeout")

        monkeypatch.setattr(fake_provider, "resolve_by_name", broken)

        with pytest.raises(CommanderNotFoundError) as exc_info:
            await auto_build(["Sol Ring"], Collection(), fake_provider)

        assert exc_info.value.detail == "timeout"


# =============================================================================
# PARTNER BUILD WITH OFF-COLOR CARDS
# =============================================================================


class TestPartnerBuild:
    async def test_deck_size_and_split(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)

        assert result.total_cards == 98
        assert result.non_land_count == 61
        assert result.land_count == 37
        assert result.unfilled_slots == 0

    async def test_off_color_cards_excluded(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)

        for red_card in RED_CARDS:
            assert red_card.name not in result.card_names

    async def test_commanders_excluded(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)

        assert "Alena Skyward" not in result.card_names
        assert "Brine Oracle" not in result.card_names

    async def test_singleton(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)

        counts = Counter(_non_basic_names(result))
        assert all(count == 1 for count in counts.values())

    async def test_identity_subset(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)

        known = {owned.name: owned.card for owned in azorius_collection.cards}
        known.update({card.name: card for card in result.suggested_details})
        for name in _non_basic_names(result):
            assert known[name].identity_within(("W", "U")), name

    async def test_owned_cards_and_printings(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)
        entries = {entry.name: entry for entry in result.deck_list}

        assert entries["Sol Ring"].owned_id in {"sol-1", "sol-2"}
        assert entries["Tundra"].owned_id == "tundra"
        assert entries["Swords to Plowshares"].suggested is False

    async def test_basics_split_evenly(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)
        basics = Counter(name for name in result.card_names if name in BASIC_LAND_NAMES)

        assert basics == {"Plains": 18, "Island": 18}

    async def test_owned_basics_use_owned_printing(
        self, azorius_provider, azorius_collection
    ) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)

        plains = [entry for entry in result.deck_list if entry.name == "Plains"]
        islands = [entry for entry in result.deck_list if entry.name == "Island"]
        assert all(entry.owned_id == "plains-1" for entry in plains)
        assert all(entry.owned_id is None for entry in islands)

    async def test_suggestions_are_flagged(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)

        suggested = {entry.name for entry in result.deck_list if entry.suggested}
        assert suggested == {card.name for card in result.suggested_details}
        assert suggested

    async def test_name_and_reference(self, azorius_provider, azorius_collection) -> None:
        result = await _build_azorius(azorius_provider, azorius_collection)

        assert result.deck_name == "Auto-built Alena Skyward & Brine Oracle deck"
        assert result.reference_url == "https://edhrec.com/commanders/alena-skyward"
        assert result.color_identity == ("W", "U")

    async def test_search_failures_fall_back_to_basics(
        self, azorius_provider, azorius_collection
    ) -> None:
        """Scryfall being down never fails the build."""
        azorius_provider.fail_searches = True

        result = await _build_azorius(azorius_provider, azorius_collection)

        assert result.total_cards == 98
        assert result.suggested_details == []
        assert result.unfilled_slots == 0

    async def test_same_seed_same_deck(self, azorius_provider, azorius_collection) -> None:
        first = await _build_azorius(azorius_provider, azorius_collection, seed=7)
        second = await _build_azorius(azorius_provider, azorius_collection, seed=7)

        assert first.deck_list == second.deck_list

    async def test_profile_is_stable_across_builds(
        self, azorius_provider, azorius_collection
    ) -> None:
        first = await _build_azorius(azorius_provider, azorius_collection)
        second = await _build_azorius(azorius_provider, azorius_collection)

        assert first.profile == second.profile


# =============================================================================
# COLORLESS COMMANDER
# =============================================================================

KARN = _card(
    "Karn Construct",
    "Legendary Artifact Creature — Golem",
    "Artifact creatures you control get +1/+1.",
)


@pytest.fixture
def colorless_collection() -> Collection:
    lands = [_card(f"Ruins {i}", "Land", "{T}: Add {C}.") for i in range(1, 7)]
    return _collection(
        _card("Sol Ring", text="{T}: Add {C}{C}."),
        _card("Mind Stone", text="{T}: Add {C}."),
        _card("Plains", "Basic Land — Plains", "", ("W",)),
        _card("Brainstorm", "Instant", "Draw three cards, then put two back.", ("U",)),
        *lands,
    )


class TestColorlessBuild:
    async def test_fills_without_basics(self, fake_provider, colorless_collection) -> None:
        _register(fake_provider, KARN)

        result = await auto_build(
            ["Karn Construct"], colorless_collection, fake_provider, rng=random.Random(1)
        )

        assert result.total_cards == 99
        assert result.unfilled_slots == 0
        assert result.land_count == 6
        assert not set(result.card_names) & BASIC_LAND_NAMES
        assert "Brainstorm" not in result.card_names

    async def test_reports_unfilled_slots(self, fake_provider, colorless_collection) -> None:
        """With no Scryfall filler, a thin colorless collection leaves slots open."""
        _register(fake_provider, KARN)
        options = BuildOptions(
            enable_external_fallbacks=False,
            enable_signature_cards=False,
            enable_finisher_detection=False,
        )

        result = await auto_build(
            ["Karn Construct"], colorless_collection, fake_provider, options=options
        )

        assert result.total_cards == 8
        assert result.unfilled_slots == 91
        assert fake_provider.searches == []


# =============================================================================
# ARISTOCRATS
# =============================================================================

TEYSA = _card(
    "Teysa the Reaper",
    "Legendary Creature — Human Advisor",
    "Sacrifice another creature: Each opponent loses 1 life.\n"
    "Whenever another creature you control dies, scry 1.",
    ("W", "B"),
)
OUTLETS = (
    _card("Viscera Seer", "Creature — Vampire Wizard", "Sacrifice a creature: Scry 1.", ("B",)),
    _card(
        "Carrion Feeder",
        "Creature — Zombie",
        "Sacrifice a creature: Put a +1/+1 counter on Carrion Feeder.",
        ("B",),
    ),
    _card("Ashnod's Altar", "Artifact", "Sacrifice a creature: Add {C}{C}."),
    _card(
        "Bone Splinters",
        "Sorcery",
        "As an additional cost to cast this spell, sacrifice a creature.\n"
        "Destroy target creature.",
        ("B",),
    ),
)


class TestAristocratsBuild:
    @pytest.fixture
    def collection(self) -> Collection:
        return _collection(
            _card("Silvercoat Lion", "Creature — Cat", "", ("W",)),
            _card(
                "Cruel Celebrant",
                "Creature — Vampire",
                "Whenever Cruel Celebrant or another creature you control dies, "
                "each opponent loses 1 life and you gain 1 life.",
                ("W", "B"),
            ),
            *OUTLETS,
        )

    async def test_detects_aristocrats(self, fake_provider, collection) -> None:
        _register(fake_provider, TEYSA)

        result = await auto_build(["Teysa the Reaper"], collection, fake_provider)

        assert result.profile.primary_strategy == "Aristocrats"

    async def test_outlets_and_payoffs_included(self, fake_provider, collection) -> None:
        _register(fake_provider, TEYSA)

        result = await auto_build(["Teysa the Reaper"], collection, fake_provider)

        for outlet in OUTLETS:
            assert outlet.name in result.card_names
        assert result.total_cards == 99

    async def test_payoff_ranked_before_vanilla(self, fake_provider, collection) -> None:
        _register(fake_provider, TEYSA)

        result = await auto_build(["Teysa the Reaper"], collection, fake_provider)

        names = result.card_names
        assert names.index("Cruel Celebrant") < names.index("Silvercoat Lion")


class TestOversizedPool:
    """The owned pool holds more non-lands than the deck has room for."""

    GRAVEDIGGER = _card(
        "Bone Harvester",
        "Creature — Zombie",
        "Sacrifice a creature: Return target creature card from your graveyard to your hand.",
        ("B",),
    )

    @pytest.fixture
    def collection(self) -> Collection:
        bears = [_card(f"Vanilla Bear {i}", "Creature — Bear", "", ("W",)) for i in range(70)]
        return _collection(*bears, self.GRAVEDIGGER)

    @pytest.fixture
    def options(self) -> BuildOptions:
        return BuildOptions(
            enable_external_fallbacks=False,
            enable_signature_cards=False,
            enable_finisher_detection=False,
        )

    async def test_non_land_cap_binds(self, fake_provider, collection, options) -> None:
        _register(fake_provider, TEYSA)

        result = await auto_build(
            ["Teysa the Reaper"], collection, fake_provider, options=options
        )

        assert (result.total_cards, result.non_land_count, result.land_count) == (99, 61, 38)
        assert result.suggested_details == []

    async def test_synergy_card_beats_vanilla(self, fake_provider, collection, options) -> None:
        _register(fake_provider, TEYSA)

        result = await auto_build(
            ["Teysa the Reaper"], collection, fake_provider, options=options
        )

        assert "Bone Harvester" in result.card_names
        bears = [name for name in result.card_names if name.startswith("Vanilla Bear")]
        assert len(bears) == 60


# =============================================================================
# SYNERGY LANDS
# =============================================================================


class TestSynergyLands:
    async def test_owned_and_suggested_gates(self, fake_provider) -> None:
        gatekeeper = _card(
            "Gatewarden",
            "Legendary Creature — Human Soldier",
            "Gates you control have hexproof.",
            ("W",),
        )
        _register(fake_provider, gatekeeper)
        fake_provider.results["(t:Gate)"] = [
            _card("Sunhome Gate", "Land — Gate", "", ("R",)),
            _card("Citadel Gate", "Land — Gate", "", ("W",)),
            _card("Heap Gate", "Land — Gate"),
        ]
        collection = _collection(_card("Basilica Gate", "Land — Gate", "", ("W",)))

        result = await auto_build(["Gatewarden"], collection, fake_provider)
        entries = {entry.name: entry for entry in result.deck_list}

        assert entries["Basilica Gate"].owned_id == "basilica gate"
        assert entries["Citadel Gate"].suggested is True
        assert entries["Heap Gate"].is_land is True
        assert "Sunhome Gate" not in entries
        assert result.land_count == 38

    async def test_blacklisted_gate_not_suggested(self, fake_provider) -> None:
        gatekeeper = _card(
            "Gatewarden",
            "Legendary Creature — Human Soldier",
            "Gates you control have hexproof.",
            ("W",),
        )
        _register(fake_provider, gatekeeper)
        fake_provider.results["(t:Gate)"] = [
            _card("Cursed Gate", "Land — Gate", "", ("W",)),
            _card("Citadel Gate", "Land — Gate", "", ("W",)),
        ]
        vocabulary = Vocabulary(blacklist=("cursed gate",))

        result = await auto_build(
            ["Gatewarden"], Collection(), fake_provider, vocabulary=vocabulary
        )

        assert "Cursed Gate" not in result.card_names
        assert "Citadel Gate" in result.card_names


# =============================================================================
# LAND STAGES
# =============================================================================


def _context(provider, color_identity: tuple[str, ...], *owned: Card) -> BuildContext:
    profile = SynergyProfile()
    return BuildContext(
        commanders=(),
        commander_names=("Test Commander",),
        color_identity=color_identity,
        profile=profile,
        pool=build_eligible_pool(_collection(*owned), [], color_identity, profile),
        provider=provider,
        rng=random.Random(0),
        targets=compute_targets(1),
    )


class TestLandStages:
    def test_basics_remainder_goes_to_first_colors(self, fake_provider) -> None:
        ctx = _context(fake_provider, ("W", "U", "B"))

        state = add_basic_lands(BuildState(), ctx)

        counts = Counter(entry.name for entry in state.entries)
        assert counts == {"Plains": 13, "Island": 13, "Swamp": 12}

    def test_nonbasic_ceiling(self, fake_provider) -> None:
        lands = [_card(f"Ruins {i}", "Land", "{T}: Add {C}.") for i in range(25)]
        ctx = _context(fake_provider, (), *lands)

        state = add_nonbasic_lands(BuildState(), ctx)

        assert state.land_count == 19

    async def test_top_up_round_robin(self, fake_provider) -> None:
        ctx = _context(fake_provider, ("B", "G"))

        state = await top_up(BuildState(), ctx)

        counts = Counter(entry.name for entry in state.entries)
        assert counts == {"Swamp": 50, "Forest": 49}
