"""
Relevance predicate for deck candidates.

Applied to every candidate, owned or suggested. A card is rejected when
it is on the blacklist, is a narrow combat trick, is a payoff for a theme
the deck is not playing, or asks for a color the commanders cannot make.
"""

import logging
import re

from commanderforge.models.card import Card
from commanderforge.models.synergy import SynergyProfile
from commanderforge.services.vocabulary import DEFAULT_VOCABULARY, Vocabulary, pattern_regex

logger = logging.getLogger(__name__)


def is_blacklisted(card: Card, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    name = card.name.lower()
    return any(entry in name for entry in vocabulary.blacklist)


def is_combat_trick(card: Card, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> bool:
    """Instant or sorcery that only pumps or pings without card advantage."""
    if not re.search(r"Instant|Sorcery", card.type_line):
        return False
    text = card.full_oracle_text
    if not pattern_regex(vocabulary.combat_trick_pattern).search(text):
        return False
    return not pattern_regex(vocabulary.card_advantage_pattern).search(text)


def is_off_theme_payoff(
    card: Card,
    profile: SynergyProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    """Payoff for a theme the deck is not pursuing."""
    text = card.full_oracle_text.lower()
    name = card.name.lower()

    for rule in vocabulary.payoff_rules:
        if profile.has_strategy(rule.strategy):
            continue
        triggered = any(trigger in text for trigger in rule.text_triggers) or any(
            trigger in name for trigger in rule.name_triggers
        )
        if not triggered:
            continue
        if any(card_type in card.type_line for card_type in rule.exempt_types):
            continue
        return True

    return False


def mentions_off_color(
    card: Card,
    color_identity: tuple[str, ...],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    """
    True if the text names a color outside the identity without an excuse.

    Mentions inside hate or removal wording ("protection from red",
    "destroy target black creature", "an opponent controls") are allowed.
    """
    text = card.full_oracle_text
    lower_text = text.lower()

    for color_name, color_code in vocabulary.color_words.items():
        if color_code in color_identity:
            continue
        if not re.search(rf"\b{color_name}\b", text, re.IGNORECASE):
            continue
        if any(excuse in lower_text for excuse in vocabulary.color_word_excuses):
            continue
        return True

    return False


def is_card_relevant(
    card: Card,
    color_identity: tuple[str, ...],
    profile: SynergyProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> bool:
    """
    Decide whether a card belongs in this deck at all.

    Args:
        card: Candidate card
        color_identity: Merged commander color identity
        profile: Detected synergies (controls payoff suppression)
        vocabulary: Rule tables

    Returns:
        False if any rejection rule fires.
    """
    if is_blacklisted(card, vocabulary):
        logger.debug("Rejected %s: blacklisted", card.name)
        return False

    if is_combat_trick(card, vocabulary):
        logger.debug("Rejected %s: combat trick", card.name)
        return False

    if is_off_theme_payoff(card, profile, vocabulary):
        logger.debug("Rejected %s: payoff for a theme not in the deck", card.name)
        return False

    if mentions_off_color(card, color_identity, vocabulary):
        logger.debug("Rejected %s: needs a color outside %s", card.name, color_identity)
        return False

    return True
