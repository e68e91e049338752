"""
Commander deck auto-builder.

Builds a 100-card Commander deck for one or two commanders from the
user's collection, topping up with suggested cards from Scryfall.

Pipeline:
1. Resolve commanders (fatal on a miss) and merge color identity
2. Detect synergies from the commanders' text
3. Filter the collection to the eligible pool
4. Fill non-land slots in stages (staples, signature cards, synergy,
   ramp/draw/removal, synergy permanents, finishers, pool fill,
   Scryfall filler)
5. Fill land slots (synergy lands, non-basics, basics)
6. Top up any shortfall and assemble the result

Each stage takes the running BuildState and the immutable BuildContext
and returns the state. Only commander resolution may raise; every other
Scryfall failure is logged and the stage contributes nothing.
"""

import asyncio
import logging
import math
import random
import re
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field

from commanderforge.config import (
    DECK_SIZE,
    NON_BASIC_LAND_CEILING,
    NON_LAND_RATIO,
    Settings,
    settings,
)
from commanderforge.filtering.eligible_pool import EligiblePool, build_eligible_pool
from commanderforge.filtering.relevance import is_card_relevant
from commanderforge.models.card import Card, sort_colors
from commanderforge.models.collection import Collection
from commanderforge.models.deck import AutoBuildResult, DeckEntry
from commanderforge.models.failure import (
    CardProviderError,
    CommanderNotFoundError,
    FailureKind,
    KnownError,
)
from commanderforge.models.synergy import SynergyProfile
from commanderforge.services import queries
from commanderforge.services.categorizer import (
    CardCategory,
    categorize,
    is_artifact_or_enchantment,
    is_creature,
    is_draw,
    is_finisher,
    is_nonbasic_land,
    is_ramp,
    is_removal,
    is_sacrifice_outlet,
    is_synergy_card,
    rank_candidates,
)
from commanderforge.services.scryfall_client import CardProvider, SearchPage
from commanderforge.services.synergy_detector import detect_synergies
from commanderforge.services.vocabulary import DEFAULT_VOCABULARY, Vocabulary

logger = logging.getLogger(__name__)

COLOR_TO_BASIC_LAND = {
    "W": "Plains",
    "U": "Island",
    "B": "Swamp",
    "R": "Mountain",
    "G": "Forest",
}

ARISTOCRATS = "Aristocrats"

EDHREC_COMMANDER_URL = "https://edhrec.com/commanders/"

MAX_COMMANDERS = 2


@dataclass(frozen=True)
class BuildOptions:
    """Stage toggles and quotas for one build."""

    enable_signature_cards: bool = True
    enable_external_fallbacks: bool = True
    enable_finisher_detection: bool = True
    enable_outlet_density: bool = True
    fetch_generic_staples: bool = False

    staple_cap: int = 15
    generic_staple_cap: int = 10
    signature_fetch_size: int = 30
    signature_owned_cap: int = 20
    signature_missing_cap: int = 10
    secondary_synergy_cap: int = 10
    ramp_target: int = 10
    draw_target: int = 10
    removal_target: int = 10
    finisher_cap: int = 3
    sacrifice_outlet_target: int = 12
    creature_cap: int = 25
    synergy_land_supplement_cap: int = 5

    fallback_max_usd: float = 5.0
    themed_filler_max_usd: float = 5.0
    generic_filler_max_usd: float = 2.0
    max_filler_pages: int = 3

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "BuildOptions":
        return cls(
            enable_signature_cards=config.enable_signature_cards,
            enable_external_fallbacks=config.enable_external_fallbacks,
            enable_finisher_detection=config.enable_finisher_detection,
            enable_outlet_density=config.enable_outlet_density,
            fetch_generic_staples=config.fetch_generic_staples,
        )


@dataclass(frozen=True)
class BuildTargets:
    """Slot counts for the non-commander part of the deck."""

    total: int
    non_land: int
    lands: int


def compute_targets(commander_count: int) -> BuildTargets:
    """
    Split the non-commander slots into lands and non-lands.

    99 slots (one commander) -> 61 non-lands + 38 lands;
    98 slots (partners) -> 61 non-lands + 37 lands.
    """
    total = DECK_SIZE - commander_count
    non_land = round(total * NON_LAND_RATIO)
    return BuildTargets(total=total, non_land=non_land, lands=total - non_land)


@dataclass(frozen=True)
class BuildContext:
    """Everything a stage reads but never changes."""

    commanders: tuple[Card, ...]
    commander_names: tuple[str, ...]
    color_identity: tuple[str, ...]
    profile: SynergyProfile
    pool: EligiblePool
    provider: CardProvider
    rng: random.Random
    targets: BuildTargets
    options: BuildOptions = field(default_factory=BuildOptions)
    vocabulary: Vocabulary = DEFAULT_VOCABULARY

    def is_commander(self, card_name: str) -> bool:
        return card_name.lower() in {name.lower() for name in self.commander_names}


@dataclass
class BuildState:
    """
    Running deck list for one build.

    Attributes:
        entries: Deck slots in the order they were filled
        cards: Non-basic cards added so far, keyed by lower-case name
        suggested: Cards proposed for acquisition
        counts: Non-land cards per matched category
    """

    entries: list[DeckEntry] = field(default_factory=list)
    cards: dict[str, Card] = field(default_factory=dict)
    suggested: list[Card] = field(default_factory=list)
    counts: Counter[CardCategory] = field(default_factory=Counter)
    non_land_count: int = 0
    land_count: int = 0

    @property
    def total(self) -> int:
        return len(self.entries)

    def contains(self, card_name: str) -> bool:
        return card_name.lower() in self.cards

    def non_land_room(self, ctx: BuildContext) -> int:
        return max(0, ctx.targets.non_land - self.non_land_count)

    def land_room(self, ctx: BuildContext) -> int:
        return max(0, ctx.targets.lands - self.land_count)

    def _record(self, card: Card, entry: DeckEntry, ctx: BuildContext) -> None:
        self.entries.append(entry)
        self.cards[card.name.lower()] = card
        if entry.is_land:
            self.land_count += 1
        else:
            self.non_land_count += 1
            self.counts.update(categorize(card, ctx.profile, ctx.vocabulary))

    def add_owned(self, card: Card, ctx: BuildContext) -> bool:
        """Add an owned card, choosing one of its printings. False if already present."""
        if self.contains(card.name) or ctx.is_commander(card.name):
            return False
        printing = ctx.pool.pick_printing(card.name, ctx.rng)
        entry = DeckEntry(
            name=card.name,
            owned_id=printing.id if printing else None,
            is_land=card.is_land,
        )
        self._record(card, entry, ctx)
        return True

    def add_suggestion(self, card: Card, ctx: BuildContext) -> bool:
        """Add a card the user does not own. False if already present."""
        if self.contains(card.name) or ctx.is_commander(card.name):
            return False
        entry = DeckEntry(name=card.name, is_land=card.is_land, suggested=True)
        self._record(card, entry, ctx)
        self.suggested.append(card)
        return True

    def add_basic(self, land_name: str, ctx: BuildContext) -> None:
        """Basic lands are exempt from the singleton rule."""
        printing = ctx.pool.pick_printing(land_name, ctx.rng)
        self.entries.append(
            DeckEntry(name=land_name, owned_id=printing.id if printing else None, is_land=True)
        )
        self.land_count += 1

    def count_matching(self, predicate: Callable[[Card], bool]) -> int:
        return sum(1 for card in self.cards.values() if predicate(card))


# =============================================================================
# COMMANDER RESOLUTION
# =============================================================================


async def _resolve_commander(provider: CardProvider, name: str) -> Card:
    try:
        card = await provider.resolve_by_name(name)
    except CardProviderError as e:
        raise CommanderNotFoundError(name, detail=e.detail or e.message) from e
    if card is None:
        raise CommanderNotFoundError(name)
    return card


async def resolve_commanders(provider: CardProvider, names: list[str]) -> list[Card]:
    """
    Resolve commander names to cards.

    Lookups run concurrently; results keep the input order.

    Raises:
        CommanderNotFoundError: If any name does not resolve
    """
    return list(await asyncio.gather(*(_resolve_commander(provider, name) for name in names)))


def merge_color_identity(commanders: list[Card]) -> tuple[str, ...]:
    """Union of the commanders' color identities in WUBRG order."""
    colors: set[str] = set()
    for commander in commanders:
        colors.update(commander.color_identity)
    return sort_colors(colors)


# =============================================================================
# STAGE HELPERS
# =============================================================================


async def _safe_search(ctx: BuildContext, query: str, stage: str, page: int = 1) -> SearchPage:
    """Search that degrades to an empty page on provider failure."""
    if not query:
        return SearchPage()
    try:
        return await ctx.provider.search(query, order="edhrec", direction="asc", page=page)
    except CardProviderError as e:
        logger.warning("%s search failed, continuing without it: %s", stage, e)
        return SearchPage()


def _pool_cards(
    state: BuildState,
    ctx: BuildContext,
    predicate: Callable[[Card], bool],
) -> list[Card]:
    """Unique eligible cards not yet in the deck that satisfy `predicate`."""
    return [
        owned.card
        for owned in ctx.pool.unique
        if not state.contains(owned.name) and predicate(owned.card)
    ]


def _is_spell(card: Card) -> bool:
    return not card.is_land


def add_owned_cards(
    state: BuildState,
    ctx: BuildContext,
    candidates: list[Card],
    limit: int,
    rank: bool = True,
) -> int:
    """
    Add owned non-land cards up to `limit` and the non-land cap.

    Returns:
        Number of cards added
    """
    if limit <= 0:
        return 0
    if rank:
        candidates = rank_candidates(
            candidates, ctx.profile, list(ctx.commander_names), ctx.vocabulary
        )

    added = 0
    for card in candidates:
        if added >= limit or state.non_land_room(ctx) <= 0:
            break
        if state.add_owned(card, ctx):
            added += 1
    return added


def _acceptable_suggestion(card: Card, state: BuildState, ctx: BuildContext) -> bool:
    if state.contains(card.name) or ctx.is_commander(card.name):
        return False
    if not card.identity_within(ctx.color_identity):
        return False
    return is_card_relevant(card, ctx.color_identity, ctx.profile, ctx.vocabulary)


def add_suggested_cards(
    state: BuildState,
    ctx: BuildContext,
    candidates: list[Card],
    limit: int,
) -> int:
    """
    Add non-land cards from a Scryfall result up to `limit`.

    Cards the user owns are added as owned; the rest become suggestions.
    """
    added = 0
    for card in candidates:
        if added >= limit or state.non_land_room(ctx) <= 0:
            break
        if card.is_land or not _acceptable_suggestion(card, state, ctx):
            continue
        owned = ctx.pool.get(card.name)
        if owned is not None:
            added += int(state.add_owned(owned.card, ctx))
        else:
            added += int(state.add_suggestion(card, ctx))
    return added


# =============================================================================
# NON-LAND STAGES
# =============================================================================


async def add_staples(state: BuildState, ctx: BuildContext) -> BuildState:
    """Owned generic staples, then (optionally) top-ranked generic suggestions."""
    staples: list[Card] = []
    for name in ctx.vocabulary.staple_names:
        owned = ctx.pool.get(name)
        if owned is not None and not owned.card.is_land:
            staples.append(owned.card)

    added = add_owned_cards(state, ctx, staples, ctx.options.staple_cap, rank=False)
    logger.info("Added %d owned staples", added)

    if ctx.options.fetch_generic_staples:
        page = await _safe_search(
            ctx, queries.generic_staples_query(ctx.color_identity), "Generic staples"
        )
        suggested = add_suggested_cards(state, ctx, page.cards, ctx.options.generic_staple_cap)
        logger.info("Added %d generic staple suggestions", suggested)

    return state


async def add_signature_cards(state: BuildState, ctx: BuildContext) -> BuildState:
    """
    Top-ranked strategy and tribal cards from Scryfall.

    Owned matches go in first; unowned results become suggestions.
    """
    if not ctx.options.enable_signature_cards or not ctx.profile.has_theme:
        return state

    query = queries.signature_query(ctx.color_identity, ctx.profile, ctx.vocabulary)
    page = await _safe_search(ctx, query, "Signature card")
    top = page.cards[: ctx.options.signature_fetch_size]

    owned: list[Card] = []
    missing: list[Card] = []
    for card in top:
        printing = ctx.pool.get(card.name)
        if printing is not None:
            owned.append(printing.card)
        elif not ctx.is_commander(card.name):
            missing.append(card)

    owned_added = add_owned_cards(state, ctx, owned, ctx.options.signature_owned_cap)
    missing_added = add_suggested_cards(state, ctx, missing, ctx.options.signature_missing_cap)
    logger.info(
        "Signature cards: %d owned added, %d suggested", owned_added, missing_added
    )
    return state


def add_secondary_synergy(state: BuildState, ctx: BuildContext) -> BuildState:
    """Owned synergy cards the signature search did not surface."""
    if not ctx.profile.has_theme:
        return state

    candidates = _pool_cards(
        state,
        ctx,
        lambda card: _is_spell(card) and is_synergy_card(card, ctx.profile, ctx.vocabulary),
    )
    added = add_owned_cards(state, ctx, candidates, ctx.options.secondary_synergy_cap)
    logger.info("Added %d secondary synergy cards", added)
    return state


async def _fallback_suggestions(
    state: BuildState,
    ctx: BuildContext,
    query: str,
    need: int,
    stage: str,
) -> int:
    if need <= 0 or not ctx.options.enable_external_fallbacks:
        return 0
    page = await _safe_search(ctx, query, stage)
    return add_suggested_cards(state, ctx, page.cards, need)


async def add_essentials(state: BuildState, ctx: BuildContext) -> BuildState:
    """
    Ramp, card draw and removal up to their targets.

    Ramp is taken cheapest first. Ramp and removal fall back to Scryfall
    suggestions when the collection runs short.
    """
    options = ctx.options
    vocabulary = ctx.vocabulary

    ramp = sorted(
        _pool_cards(state, ctx, lambda card: is_ramp(card, vocabulary)),
        key=lambda card: card.cmc,
    )
    add_owned_cards(
        state, ctx, ramp, options.ramp_target - state.counts[CardCategory.RAMP], rank=False
    )
    await _fallback_suggestions(
        state,
        ctx,
        queries.ramp_query(ctx.color_identity, options.fallback_max_usd),
        options.ramp_target - state.counts[CardCategory.RAMP],
        "Ramp fallback",
    )

    draw = _pool_cards(state, ctx, lambda card: is_draw(card, vocabulary))
    add_owned_cards(state, ctx, draw, options.draw_target - state.counts[CardCategory.DRAW])

    removal = _pool_cards(state, ctx, lambda card: is_removal(card, vocabulary))
    add_owned_cards(
        state, ctx, removal, options.removal_target - state.counts[CardCategory.REMOVAL]
    )
    await _fallback_suggestions(
        state,
        ctx,
        queries.removal_query(ctx.color_identity, options.fallback_max_usd),
        options.removal_target - state.counts[CardCategory.REMOVAL],
        "Removal fallback",
    )

    logger.info(
        "Essentials: ramp=%d draw=%d removal=%d",
        state.counts[CardCategory.RAMP],
        state.counts[CardCategory.DRAW],
        state.counts[CardCategory.REMOVAL],
    )
    return state


def add_synergy_permanents(state: BuildState, ctx: BuildContext) -> BuildState:
    """Synergistic artifacts and enchantments before generic creatures."""
    candidates = _pool_cards(
        state,
        ctx,
        lambda card: (
            _is_spell(card)
            and is_artifact_or_enchantment(card)
            and is_synergy_card(card, ctx.profile, ctx.vocabulary)
        ),
    )
    added = add_owned_cards(state, ctx, candidates, state.non_land_room(ctx))
    logger.info("Added %d synergy permanents", added)
    return state


async def add_finishers(state: BuildState, ctx: BuildContext) -> BuildState:
    """Game-ending payoffs; suggests some when the collection has none."""
    if not ctx.options.enable_finisher_detection:
        return state

    def finisher(card: Card) -> bool:
        return is_finisher(card, ctx.vocabulary)

    cap = ctx.options.finisher_cap
    present = state.count_matching(finisher)
    owned = _pool_cards(state, ctx, finisher)
    added = add_owned_cards(state, ctx, owned, cap - present)

    if not owned and present == 0:
        added += await _fallback_suggestions(
            state,
            ctx,
            queries.finisher_query(ctx.color_identity, ctx.options.fallback_max_usd),
            cap,
            "Finisher fallback",
        )
    logger.info("Added %d finishers", added)
    return state


def ensure_sacrifice_outlets(state: BuildState, ctx: BuildContext) -> BuildState:
    """Aristocrats decks need a critical mass of sacrifice outlets."""
    if not ctx.options.enable_outlet_density or not ctx.profile.has_strategy(ARISTOCRATS):
        return state

    def outlet(card: Card) -> bool:
        return _is_spell(card) and is_sacrifice_outlet(card, ctx.vocabulary)

    need = ctx.options.sacrifice_outlet_target - state.count_matching(outlet)
    added = add_owned_cards(state, ctx, _pool_cards(state, ctx, outlet), need)
    logger.info("Added %d sacrifice outlets", added)
    return state


def fill_from_pool(state: BuildState, ctx: BuildContext) -> BuildState:
    """Artifacts and enchantments, then creatures, then anything left."""
    permanents = _pool_cards(
        state, ctx, lambda card: _is_spell(card) and is_artifact_or_enchantment(card)
    )
    add_owned_cards(state, ctx, permanents, state.non_land_room(ctx))

    creature_room = ctx.options.creature_cap - state.counts[CardCategory.CREATURE]
    add_owned_cards(state, ctx, _pool_cards(state, ctx, is_creature), creature_room)

    add_owned_cards(state, ctx, _pool_cards(state, ctx, _is_spell), state.non_land_room(ctx))
    logger.info("Non-land slots after pool fill: %d/%d", state.non_land_count, ctx.targets.non_land)
    return state


async def fill_from_provider(state: BuildState, ctx: BuildContext) -> BuildState:
    """Budget Scryfall filler until the non-land quota is met."""
    if not ctx.options.enable_external_fallbacks or state.non_land_room(ctx) <= 0:
        return state

    query = queries.filler_query(
        ctx.color_identity,
        ctx.profile,
        ctx.options.themed_filler_max_usd,
        ctx.options.generic_filler_max_usd,
        ctx.vocabulary,
    )
    added = 0
    for page_number in range(1, ctx.options.max_filler_pages + 1):
        page = await _safe_search(ctx, query, "Filler", page=page_number)
        added += add_suggested_cards(state, ctx, page.cards, state.non_land_room(ctx))
        if state.non_land_room(ctx) <= 0 or not page.has_more:
            break

    logger.info("Added %d filler suggestions", added)
    return state


# =============================================================================
# LAND STAGES
# =============================================================================


def _has_land_subtype(card: Card, subtypes: tuple[str, ...]) -> bool:
    return any(
        re.search(rf"\b{re.escape(subtype)}\b", card.type_line, re.IGNORECASE)
        for subtype in subtypes
    )


async def add_synergy_lands(state: BuildState, ctx: BuildContext) -> BuildState:
    """Lands with a subtype the commander cares about (Gates, Towns, ...)."""
    subtypes = ctx.profile.land_subtypes
    if not subtypes:
        return state

    owned_added = 0
    for card in _pool_cards(
        state, ctx, lambda card: is_nonbasic_land(card) and _has_land_subtype(card, subtypes)
    ):
        if state.land_room(ctx) <= 0:
            break
        owned_added += int(state.add_owned(card, ctx))

    supplement = ctx.options.synergy_land_supplement_cap - owned_added
    suggested = 0
    if supplement > 0 and ctx.options.enable_external_fallbacks:
        query = queries.synergy_land_query(ctx.color_identity, subtypes)
        page = await _safe_search(ctx, query, "Synergy land")
        for card in page.cards:
            if suggested >= supplement or state.land_room(ctx) <= 0:
                break
            if not is_nonbasic_land(card) or not _has_land_subtype(card, subtypes):
                continue
            if not _acceptable_suggestion(card, state, ctx):
                continue
            owned = ctx.pool.get(card.name)
            if owned is not None:
                owned_added += int(state.add_owned(owned.card, ctx))
            else:
                suggested += int(state.add_suggestion(card, ctx))

    logger.info(
        "Synergy lands (%s): %d owned, %d suggested",
        ", ".join(subtypes),
        owned_added,
        suggested,
    )
    return state


def add_nonbasic_lands(state: BuildState, ctx: BuildContext) -> BuildState:
    """Owned non-basics up to half the land slots, synergy lands included."""
    ceiling = math.floor(ctx.targets.lands * NON_BASIC_LAND_CEILING)
    added = 0
    for card in _pool_cards(state, ctx, is_nonbasic_land):
        if state.land_count >= ceiling or state.land_room(ctx) <= 0:
            break
        added += int(state.add_owned(card, ctx))
    logger.info("Added %d non-basic lands", added)
    return state


def add_basic_lands(state: BuildState, ctx: BuildContext) -> BuildState:
    """
    Split the remaining land slots evenly across the deck's colors.

    The first `remaining % colors` colors (WUBRG order) get one extra.
    A colorless deck gets no basics here.
    """
    colors = [color for color in ctx.color_identity if color in COLOR_TO_BASIC_LAND]
    remaining = state.land_room(ctx)
    if not colors or remaining <= 0:
        return state

    per_color, extra = divmod(remaining, len(colors))
    for index, color in enumerate(colors):
        count = per_color + (1 if index < extra else 0)
        for _ in range(count):
            state.add_basic(COLOR_TO_BASIC_LAND[color], ctx)

    logger.info("Added %d basic lands across %s", remaining, "".join(colors))
    return state


async def top_up(state: BuildState, ctx: BuildContext) -> BuildState:
    """
    Close any remaining gap to the full deck size.

    Colored decks get extra basics round-robin across their colors.
    Colorless decks have no basics to fall back on, so they take, in order:
    more owned non-basic lands past the usual ceiling, any remaining owned
    non-land cards, then budget filler from Scryfall. Whatever is still
    open afterwards is reported through unfilled_slots.
    """
    shortfall = ctx.targets.total - state.total
    if shortfall <= 0:
        return state

    colors = [color for color in ctx.color_identity if color in COLOR_TO_BASIC_LAND]
    if colors:
        for index in range(shortfall):
            state.add_basic(COLOR_TO_BASIC_LAND[colors[index % len(colors)]], ctx)
        logger.info("Topped up %d slots with basic lands", shortfall)
        return state

    def open_slots() -> int:
        return ctx.targets.total - state.total

    for card in _pool_cards(state, ctx, is_nonbasic_land):
        if open_slots() <= 0:
            break
        state.add_owned(card, ctx)

    for card in _pool_cards(state, ctx, _is_spell):
        if open_slots() <= 0:
            break
        state.add_owned(card, ctx)

    if open_slots() > 0 and ctx.options.enable_external_fallbacks:
        query = queries.filler_query(
            ctx.color_identity,
            ctx.profile,
            ctx.options.themed_filler_max_usd,
            ctx.options.generic_filler_max_usd,
            ctx.vocabulary,
        )
        for page_number in range(1, ctx.options.max_filler_pages + 1):
            page = await _safe_search(ctx, query, "Colorless top-up", page=page_number)
            for card in page.cards:
                if open_slots() <= 0:
                    break
                if card.is_land or not _acceptable_suggestion(card, state, ctx):
                    continue
                state.add_suggestion(card, ctx)
            if open_slots() <= 0 or not page.has_more:
                break

    if open_slots() > 0:
        logger.warning("Colorless deck left %d slots unfilled", open_slots())
    return state


# =============================================================================
# OUTPUT
# =============================================================================


def commander_slug(name: str) -> str:
    """EDHREC-style slug: "Atraxa, Praetors' Voice" -> "atraxa-praetors-voice"."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def assemble_result(state: BuildState, ctx: BuildContext) -> AutoBuildResult:
    names = list(ctx.commander_names)
    return AutoBuildResult(
        deck_name=f"Auto-built {' & '.join(names)} deck",
        card_names=[entry.name for entry in state.entries],
        deck_list=list(state.entries),
        suggested_details=list(state.suggested),
        reference_url=f"{EDHREC_COMMANDER_URL}{commander_slug(names[0])}",
        color_identity=ctx.color_identity,
        profile=ctx.profile,
        land_count=state.land_count,
        non_land_count=state.non_land_count,
        unfilled_slots=max(0, ctx.targets.total - state.total),
    )


# =============================================================================
# ENTRY POINT
# =============================================================================


def clean_commander_names(commander_names: list[str]) -> list[str]:
    """Strip blanks and drop case-insensitive repeats, keeping first-seen order."""
    names: list[str] = []
    for name in commander_names:
        cleaned = name.strip()
        if cleaned and cleaned.lower() not in {n.lower() for n in names}:
            names.append(cleaned)
    return names


async def run_stages(state: BuildState, ctx: BuildContext) -> BuildState:
    """Run every allocation stage in order."""
    state = await add_staples(state, ctx)
    state = await add_signature_cards(state, ctx)
    state = add_secondary_synergy(state, ctx)
    state = await add_essentials(state, ctx)
    state = add_synergy_permanents(state, ctx)
    state = await add_finishers(state, ctx)
    state = ensure_sacrifice_outlets(state, ctx)
    state = fill_from_pool(state, ctx)
    state = await fill_from_provider(state, ctx)

    state = await add_synergy_lands(state, ctx)
    state = add_nonbasic_lands(state, ctx)
    state = add_basic_lands(state, ctx)
    return await top_up(state, ctx)


async def auto_build(
    commander_names: list[str],
    collection: Collection,
    provider: CardProvider,
    *,
    options: BuildOptions | None = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    rng: random.Random | None = None,
) -> AutoBuildResult:
    """
    Build a Commander deck from a collection.

    Args:
        commander_names: One or two commander names
        collection: The user's owned cards
        provider: Card metadata lookup (Scryfall in production)
        options: Stage toggles and quotas
        vocabulary: Keyword tables for matching
        rng: Random source for choosing between owned printings

    Returns:
        AutoBuildResult with exactly 100 - len(commanders) cards unless a
        colorless deck runs out of lands (see unfilled_slots)

    Raises:
        KnownError: If no commander (or more than two) is named
        CommanderNotFoundError: If a commander name does not resolve
    """
    names = clean_commander_names(commander_names)
    if not names:
        raise KnownError(FailureKind.MISSING_REQUIRED, "Commander name is required")
    if len(names) > MAX_COMMANDERS:
        raise KnownError(
            FailureKind.INVALID_INPUT,
            f"At most {MAX_COMMANDERS} commanders are allowed, got {len(names)}",
        )

    logger.info("Building deck for commanders: %s", names)
    commanders = await resolve_commanders(provider, names)
    color_identity = merge_color_identity(commanders)
    profile = detect_synergies(commanders, vocabulary)

    excluded = [*names, *(commander.name for commander in commanders)]
    pool = build_eligible_pool(collection, excluded, color_identity, profile, vocabulary)

    targets = compute_targets(len(commanders))
    ctx = BuildContext(
        commanders=tuple(commanders),
        commander_names=tuple(commander.name for commander in commanders),
        color_identity=color_identity,
        profile=profile,
        pool=pool,
        provider=provider,
        rng=rng or random.Random(),
        targets=targets,
        options=options or BuildOptions(),
        vocabulary=vocabulary,
    )
    logger.info(
        "Targets: %d cards (%d non-lands, %d lands), colors %s",
        targets.total,
        targets.non_land,
        targets.lands,
        "".join(color_identity) or "colorless",
    )

    state = await run_stages(BuildState(), ctx)
    result = assemble_result(state, ctx)
    logger.info(
        "Built %s: %d cards (%d suggested)",
        result.deck_name,
        result.total_cards,
        len(result.suggested_details),
    )
    return result
