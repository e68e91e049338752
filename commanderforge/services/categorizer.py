"""
Card categorization and ranking.

Sorts candidates into functional roles (ramp, draw, removal, ...) by
pattern matching over type line, name and oracle text, and scores them
against the commander's synergy profile.

A card can match several categories. Which bucket claims it is decided
by the order in which the allocation stages draw from their candidate
lists; primary_category reports the first claim in that order.
"""

import re
from enum import Enum

from commanderforge.models.card import Card
from commanderforge.models.synergy import SynergyProfile
from commanderforge.services.synergy_detector import LAND_MATTERS
from commanderforge.services.vocabulary import (
    DEFAULT_VOCABULARY,
    Vocabulary,
    contains_keyword,
    matches_any,
)

# Score weights for rank_candidates
COMMANDER_MENTION_WEIGHT = 10
STRATEGY_MATCH_WEIGHT = 3
PRIMARY_STRATEGY_BONUS = 5
TRIBAL_MATCH_WEIGHT = 2
MECHANIC_MATCH_WEIGHT = 1

CHEAP_REMOVAL_MAX_CMC = 2


class CardCategory(str, Enum):
    """Functional role of a card in the deck."""

    LAND = "land"
    SYNERGY = "synergy"
    RAMP = "ramp"
    DRAW = "draw"
    REMOVAL = "removal"
    CREATURE = "creature"
    OTHER = "other"


# Order in which allocation stages claim cards
CATEGORY_PRECEDENCE: tuple[CardCategory, ...] = (
    CardCategory.LAND,
    CardCategory.SYNERGY,
    CardCategory.RAMP,
    CardCategory.DRAW,
    CardCategory.REMOVAL,
    CardCategory.CREATURE,
)


def is_creature(card: Card) -> bool:
    """Non-legendary creature."""
    return "Creature" in card.type_line and "Legendary" not in card.type_line


def is_removal(card: Card, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    if not re.search(r"Instant|Sorcery", card.type_line):
        return False
    return matches_any(card.name, vocabulary.removal_name_patterns) or matches_any(
        card.full_oracle_text, vocabulary.removal_text_patterns
    )


def is_ramp(card: Card, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    if card.is_land:
        return False
    if not re.search(r"Artifact|Enchantment|Sorcery|Creature", card.type_line):
        return False
    return matches_any(card.name, vocabulary.ramp_name_patterns) or matches_any(
        card.full_oracle_text, vocabulary.ramp_text_patterns
    )


def is_draw(card: Card, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    if card.is_land:
        return False
    return matches_any(card.name, vocabulary.draw_name_patterns) or matches_any(
        card.full_oracle_text, vocabulary.draw_text_patterns
    )


def is_nonbasic_land(card: Card) -> bool:
    return card.is_land and not card.is_basic_land


def is_finisher(card: Card, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    return not card.is_land and matches_any(card.full_oracle_text, vocabulary.finisher_patterns)


def is_sacrifice_outlet(card: Card, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    return matches_any(card.full_oracle_text, vocabulary.sacrifice_outlet_patterns)


def is_artifact_or_enchantment(card: Card) -> bool:
    return "Artifact" in card.type_line or "Enchantment" in card.type_line


def matches_tribe(card: Card, profile: SynergyProfile) -> bool:
    return any(
        re.search(rf"\b{re.escape(tribe)}\b", card.type_line, re.IGNORECASE)
        for tribe in profile.tribal_types
    )


def matched_strategies(
    card: Card,
    profile: SynergyProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[str]:
    """Active strategies whose keywords appear in the card's text."""
    text = card.full_oracle_text
    matched: list[str] = []
    for strategy in profile.strategies:
        keywords = vocabulary.strategy_keywords.get(strategy, ())
        if not keywords or not contains_keyword(text, keywords):
            continue
        # Fetch lands mention "land ... enters" without caring about landfall
        if strategy == LAND_MATTERS and "search your library" in text.lower():
            continue
        matched.append(strategy)
    return matched


def is_synergy_card(
    card: Card,
    profile: SynergyProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    """Card shares a tribe with the commander or hits an active strategy."""
    if matches_tribe(card, profile):
        return True
    return bool(matched_strategies(card, profile, vocabulary))


def categorize(
    card: Card,
    profile: SynergyProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> frozenset[CardCategory]:
    """Every category the card qualifies for (OTHER if none)."""
    categories: set[CardCategory] = set()

    if is_nonbasic_land(card):
        categories.add(CardCategory.LAND)
    if is_synergy_card(card, profile, vocabulary):
        categories.add(CardCategory.SYNERGY)
    if is_ramp(card, vocabulary):
        categories.add(CardCategory.RAMP)
    if is_draw(card, vocabulary):
        categories.add(CardCategory.DRAW)
    if is_removal(card, vocabulary):
        categories.add(CardCategory.REMOVAL)
    if is_creature(card):
        categories.add(CardCategory.CREATURE)

    if not categories:
        categories.add(CardCategory.OTHER)
    return frozenset(categories)


def primary_category(
    card: Card,
    profile: SynergyProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> CardCategory:
    """The category that claims the card first during allocation."""
    categories = categorize(card, profile, vocabulary)
    for category in CATEGORY_PRECEDENCE:
        if category in categories:
            return category
    return CardCategory.OTHER


def _commander_name_variants(commander_names: list[str]) -> set[str]:
    """Full names plus the short form before the comma ("Edgar Markov")."""
    variants: set[str] = set()
    for name in commander_names:
        lowered = name.lower().strip()
        if not lowered:
            continue
        variants.add(lowered)
        short = lowered.split(",")[0].strip()
        if short:
            variants.add(short)
    return variants


def score_candidate(
    card: Card,
    profile: SynergyProfile,
    commander_names: list[str],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> int:
    """
    Synergy score for ranking a candidate.

    - mentions a commander by name: +10
    - each matched active strategy: +3
    - matches the primary strategy: +5
    - shares a tribe with the commander: +2
    - each keyword ability shared with the commanders: +1
    """
    score = 0
    text = card.full_oracle_text.lower()

    if any(name in text for name in _commander_name_variants(commander_names)):
        score += COMMANDER_MENTION_WEIGHT

    strategies = matched_strategies(card, profile, vocabulary)
    score += STRATEGY_MATCH_WEIGHT * len(strategies)
    if profile.primary_strategy and profile.primary_strategy in strategies:
        score += PRIMARY_STRATEGY_BONUS

    if matches_tribe(card, profile):
        score += TRIBAL_MATCH_WEIGHT

    shared = {keyword.lower() for keyword in card.keywords} & profile.mechanics
    score += MECHANIC_MATCH_WEIGHT * len(shared)

    return score


def rank_candidates(
    cards: list[Card],
    profile: SynergyProfile,
    commander_names: list[str],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[Card]:
    """
    Order candidates best-first.

    Sorted by score (descending), then cheap removal first, then synergy
    cards first. The sort is stable, so equal cards keep their input order.
    """

    def sort_key(card: Card) -> tuple[int, int, int]:
        cheap_removal = is_removal(card, vocabulary) and card.cmc <= CHEAP_REMOVAL_MAX_CMC
        return (
            -score_candidate(card, profile, commander_names, vocabulary),
            0 if cheap_removal else 1,
            0 if is_synergy_card(card, profile, vocabulary) else 1,
        )

    return sorted(cards, key=sort_key)
