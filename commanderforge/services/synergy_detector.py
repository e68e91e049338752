"""
Commander synergy detection.

Reads the commanders' own text and type lines to work out what the deck
should be built around: strategies (sacrifice, tokens, landfall, ...),
land subtypes the commander cares about, and creature tribes.
"""

import logging
import re

from commanderforge.models.card import Card
from commanderforge.models.synergy import SynergyProfile
from commanderforge.services.vocabulary import (
    DEFAULT_VOCABULARY,
    Vocabulary,
    count_keyword,
)

logger = logging.getLogger(__name__)

LAND_MATTERS = "LandMatters"

# "Legendary Creature — Human Wizard", "Legendary Artifact Creature - Golem"
_CREATURE_TYPES_PATTERN = re.compile(
    r"legendary\s+(?:\w+\s+)*?creature\s+[—–-]+\s+(.+)$",
    re.IGNORECASE,
)
_EXCLUDED_TYPE_WORDS = frozenset({"legendary", "creature"})


def extract_tribal_types(type_line: str) -> list[str]:
    """
    Creature types from a legendary creature's type line.

    Each face of a double-faced card is read separately.
    """
    types: list[str] = []
    for face_line in type_line.split("//"):
        match = _CREATURE_TYPES_PATTERN.search(face_line.strip())
        if not match:
            continue
        for word in match.group(1).split():
            if word.lower() in _EXCLUDED_TYPE_WORDS:
                continue
            tribe = word[:1].upper() + word[1:]
            if tribe not in types:
                types.append(tribe)
    return types


def detect_land_subtypes(text: str, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> list[str]:
    """Land subtypes mentioned in text as whole words ("Gate", "Gates")."""
    found: list[str] = []
    for subtype in vocabulary.land_subtypes:
        if re.search(rf"\b{re.escape(subtype)}s?\b", text, re.IGNORECASE):
            found.append(subtype)
    return found


def detect_synergies(
    commanders: list[Card],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> SynergyProfile:
    """
    Build a SynergyProfile from the commanders.

    Every keyword occurrence adds one to its strategy's weight. Detected
    land subtypes also count toward LandMatters. The primary strategy is
    the heaviest one; ties go to whichever was detected first.

    Args:
        commanders: Resolved commander cards
        vocabulary: Keyword tables to match against

    Returns:
        SynergyProfile (identical for identical commander metadata)
    """
    weights: dict[str, int] = {}
    land_subtypes: list[str] = []
    tribal_types: list[str] = []
    mechanics: set[str] = set()

    for commander in commanders:
        text = commander.full_oracle_text

        for subtype in detect_land_subtypes(text, vocabulary):
            if subtype not in land_subtypes:
                land_subtypes.append(subtype)
            weights[LAND_MATTERS] = weights.get(LAND_MATTERS, 0) + 1

        for strategy, keywords in vocabulary.strategy_keywords.items():
            hits = sum(count_keyword(text, keyword) for keyword in keywords)
            if hits:
                weights[strategy] = weights.get(strategy, 0) + hits

        for tribe in extract_tribal_types(commander.type_line):
            if tribe not in tribal_types:
                tribal_types.append(tribe)

        mechanics.update(keyword.lower() for keyword in commander.keywords)

    primary: str | None = None
    if weights:
        # max() keeps the first of equal weights, i.e. detection order
        primary = max(weights, key=lambda strategy: weights[strategy])

    profile = SynergyProfile(
        strategies=tuple(weights),
        strategy_weights=dict(weights),
        primary_strategy=primary,
        land_subtypes=tuple(land_subtypes),
        tribal_types=tuple(tribal_types),
        mechanics=frozenset(mechanics),
    )
    logger.info(
        "Detected strategies %s (primary: %s), tribes %s, land subtypes %s",
        list(profile.strategies),
        profile.primary_strategy,
        list(profile.tribal_types),
        list(profile.land_subtypes),
    )
    return profile
