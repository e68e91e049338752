"""
Keyword tables used by the auto-builder.

Oracle-text matching is fuzzy by nature. Every table the builder matches
against lives here so it can be tuned or replaced per build by passing a
different Vocabulary instance.

Plain keywords are matched case-insensitively as word prefixes
("die" matches "dies", "create" matches "creates"). Entries in the
*_patterns tables are regular expressions.
"""

import re
from dataclasses import dataclass, field
from functools import lru_cache

# Keywords that raise a strategy's weight when found in a commander's text
STRATEGY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Aristocrats": ("sacrifice", "die", "graveyard", "drain", "death"),
    "Tokens": ("token", "create", "populate"),
    "Artifacts": ("artifact",),
    "Enchantments": ("enchantment", "aura", "constellation"),
    "Spellslinger": ("instant", "sorcery", "magecraft", "prowess"),
    "Counters": ("counter", "proliferate"),
    "Lifegain": ("gain life", "gains life", "lifelink", "life total"),
    "Equipment": ("equip", "equipped", "equipment"),
    "LandMatters": (
        "landfall",
        "lands you control",
        "number of lands",
        "land entering",
        "play an additional land",
    ),
}

# Land subtypes a commander can reference ("Gates you control", ...)
LAND_SUBTYPES: tuple[str, ...] = ("Town", "Gate", "Desert", "Cave", "Lair", "Sphere", "Locus")

# Scryfall query fragments for each strategy
STRATEGY_QUERIES: dict[str, str] = {
    "Aristocrats": "(o:sacrifice OR o:dies)",
    "Tokens": "(o:token OR o:create)",
    "Artifacts": "t:artifact",
    "Enchantments": "t:enchantment",
    "Spellslinger": "(t:instant OR t:sorcery)",
    "Counters": 'o:"+1/+1 counter"',
    "Lifegain": '(o:"gain life" OR o:lifelink)',
    "Equipment": "(t:equipment OR o:equipped)",
    "LandMatters": '(o:landfall OR o:"play an additional land" OR o:"lands you control")',
}

# High-value cards worth including whenever they are owned
STAPLE_NAMES: tuple[str, ...] = (
    "Sol Ring",
    "Arcane Signet",
    "Command Tower",
    "Fellwar Stone",
    "Mind Stone",
    "Thought Vessel",
    "Swiftfoot Boots",
    "Lightning Greaves",
    "Skullclamp",
    "Swords to Plowshares",
    "Path to Exile",
    "Cultivate",
    "Kodama's Reach",
    "Rhystic Study",
    "Viscera Seer",
    "Carrion Feeder",
    "Blood Artist",
    "Zulaport Cutthroat",
    "Ashnod's Altar",
    "Phyrexian Altar",
)

REMOVAL_NAME_PATTERNS: tuple[str, ...] = (
    r"\bkill\b",
    r"terminate",
    r"path to exile",
    r"swords to plowshares",
    r"wrath",
    r"damnation",
    r"\bwipe\b",
    r"doom blade",
    r"beast within",
)

REMOVAL_TEXT_PATTERNS: tuple[str, ...] = (
    r"\bdestroy (?:target|all|each|up to)",
    r"\bexile (?:target|all|each|up to)",
    r"deals? (?:\d+|x) damage to (?:any target|target creature|each creature)",
    r"\bcounter target\b",
    r"return target (?:nonland )?permanent to its owner's hand",
)

RAMP_NAME_PATTERNS: tuple[str, ...] = (
    r"sol ring",
    r"\bmana\b",
    r"\bramp",
    r"cultivate",
    r"kodama",
    r"\breach\b",
    r"signet",
    r"talisman",
    r"arcane",
    r"fellwar",
)

RAMP_TEXT_PATTERNS: tuple[str, ...] = (
    r"\badd (?:\{|one mana|two mana|three mana|\w+ mana)",
    r"\bmana\b(?! value)",
    r"\btreasure",
    r"search your library for (?:up to \w+ )?(?:a |an |two )?(?:basic )?"
    r"(?:land|forest|plains|island|swamp|mountain)",
    r"play an additional land",
)

DRAW_NAME_PATTERNS: tuple[str, ...] = (
    r"\bdraw\b",
    r"rhystic",
    r"\bstudy\b",
    r"mystic remora",
    r"phyrexian arena",
    r"necropotence",
    r"sylvan library",
)

DRAW_TEXT_PATTERNS: tuple[str, ...] = (
    r"\bdraws? (?:a|an|one|two|three|four|x|that many|\w+) cards?\b",
    r"\bdraw cards equal\b",
)

# Game-ending effects
FINISHER_PATTERNS: tuple[str, ...] = (
    r"you win the game",
    r"each opponent loses (?:\d+|x|that much) life",
    r"additional combat phase",
    r"creatures you control get \+\d+/\+\d+",
    r"creatures you control gain (?:double strike|trample)",
    r"double (?:the )?damage",
)

SACRIFICE_OUTLET_PATTERNS: tuple[str, ...] = (
    r"sacrifice (?:a|another) creature",
    r"sacrifice a permanent",
)

# Known-weak cards that dilute a Commander deck
BLACKLIST: tuple[str, ...] = (
    "mystic skull",
    "breaching dragonstorm",
    "monstrosity",
    "kill shot",
    "destroy the evidence",
    "hellish sideswipe",
    "unholy strength",
    "titan's strength",
    "dual shot",
    "ox drover",
    "liberated livestock",
    "wrecking crew",
)

# One-shot pump or burn that does not replace itself
COMBAT_TRICK_PATTERN = (
    r"(gets \+\d+/\+\d+|deals \d damage to target|target creature gets|target creature gains)"
)
CARD_ADVANTAGE_PATTERN = r"draw|sacrifice|token|create|scry|surveil|exile|destroy"

# Off-color mentions in these contexts are hate/removal, not a color requirement
COLOR_WORD_EXCUSES: tuple[str, ...] = (
    "protection from",
    "destroy",
    "exile",
    "opponent",
    "choose a color",
    "any color",
    "landwalk",
)

COLOR_WORDS: dict[str, str] = {
    "White": "W",
    "Blue": "U",
    "Black": "B",
    "Red": "R",
    "Green": "G",
}


@dataclass(frozen=True)
class PayoffRule:
    """
    Suppress theme payoffs when the deck does not play that theme.

    A card whose text or name matches is rejected unless the deck has
    `strategy` or the card's type line contains one of `exempt_types`.
    """

    strategy: str
    text_triggers: tuple[str, ...]
    name_triggers: tuple[str, ...] = ()
    exempt_types: tuple[str, ...] = ()


PAYOFF_RULES: tuple[PayoffRule, ...] = (
    PayoffRule(
        strategy="Enchantments",
        text_triggers=("enchantment spell", "whenever you cast an enchantment"),
        name_triggers=("starfield mystic", "umbra mystic", "ajani's chosen"),
        exempt_types=("Enchantment",),
    ),
    PayoffRule(
        strategy="Spellslinger",
        text_triggers=(
            "whenever you cast an instant or sorcery",
            "whenever you cast a noncreature spell",
        ),
        name_triggers=("kessig flamebreather",),
        exempt_types=("Instant", "Sorcery"),
    ),
)


@dataclass(frozen=True)
class Vocabulary:
    """Bundle of keyword tables consulted during a build."""

    strategy_keywords: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(STRATEGY_KEYWORDS)
    )
    strategy_queries: dict[str, str] = field(default_factory=lambda: dict(STRATEGY_QUERIES))
    land_subtypes: tuple[str, ...] = LAND_SUBTYPES
    staple_names: tuple[str, ...] = STAPLE_NAMES
    removal_name_patterns: tuple[str, ...] = REMOVAL_NAME_PATTERNS
    removal_text_patterns: tuple[str, ...] = REMOVAL_TEXT_PATTERNS
    ramp_name_patterns: tuple[str, ...] = RAMP_NAME_PATTERNS
    ramp_text_patterns: tuple[str, ...] = RAMP_TEXT_PATTERNS
    draw_name_patterns: tuple[str, ...] = DRAW_NAME_PATTERNS
    draw_text_patterns: tuple[str, ...] = DRAW_TEXT_PATTERNS
    finisher_patterns: tuple[str, ...] = FINISHER_PATTERNS
    sacrifice_outlet_patterns: tuple[str, ...] = SACRIFICE_OUTLET_PATTERNS
    blacklist: tuple[str, ...] = BLACKLIST
    combat_trick_pattern: str = COMBAT_TRICK_PATTERN
    card_advantage_pattern: str = CARD_ADVANTAGE_PATTERN
    color_word_excuses: tuple[str, ...] = COLOR_WORD_EXCUSES
    color_words: dict[str, str] = field(default_factory=lambda: dict(COLOR_WORDS))
    payoff_rules: tuple[PayoffRule, ...] = PAYOFF_RULES


DEFAULT_VOCABULARY = Vocabulary()


@lru_cache(maxsize=512)
def keyword_regex(keyword: str) -> re.Pattern[str]:
    """Case-insensitive word-prefix matcher for a plain keyword."""
    return re.compile(r"\b" + re.escape(keyword), re.IGNORECASE)


@lru_cache(maxsize=512)
def pattern_regex(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


def count_keyword(text: str, keyword: str) -> int:
    """Number of times `keyword` occurs in `text`."""
    return len(keyword_regex(keyword).findall(text))


def contains_keyword(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword_regex(keyword).search(text) for keyword in keywords)


def matches_any(text: str, patterns: tuple[str, ...]) -> bool:
    return any(pattern_regex(pattern).search(text) for pattern in patterns)
