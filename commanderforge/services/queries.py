"""
Scryfall query expressions for the auto-builder's searches.

Syntax reference: https://scryfall.com/docs/syntax
"""

from commanderforge.models.synergy import SynergyProfile
from commanderforge.services.vocabulary import DEFAULT_VOCABULARY, Vocabulary

COMMANDER_LEGAL = "legal:commander"

RAMP_QUERY = '(o:"add {" OR o:"search your library for a basic land" OR o:treasure)'
REMOVAL_QUERY = '(o:"destroy target" OR o:"exile target") (t:instant OR t:sorcery)'
FINISHER_QUERY = (
    '(o:"each opponent loses" OR o:"you win the game" OR o:"additional combat phase")'
)


def color_query(color_identity: tuple[str, ...]) -> str:
    """Color identity filter: `id:c` for colorless, else `id<=WU...`."""
    if not color_identity:
        return "id:c"
    return f"id<={''.join(color_identity)}"


def theme_query(profile: SynergyProfile, vocabulary: Vocabulary = DEFAULT_VOCABULARY) -> str:
    """
    OR-combined strategy and tribal terms, or "" if the profile has none.

    Example: "((o:sacrifice OR o:dies)) OR (t:Vampire)"
    """
    strategy_terms = [
        vocabulary.strategy_queries[strategy]
        for strategy in profile.strategies
        if strategy in vocabulary.strategy_queries
    ]
    tribal_terms = [f"t:{tribe}" for tribe in profile.tribal_types]

    parts = [" OR ".join(terms) for terms in (strategy_terms, tribal_terms) if terms]
    return " OR ".join(f"({part})" for part in parts)


def join_terms(*terms: str) -> str:
    return " ".join(term for term in terms if term)


def generic_staples_query(color_identity: tuple[str, ...]) -> str:
    return join_terms(color_query(color_identity), COMMANDER_LEGAL, "-t:land")


def signature_query(
    color_identity: tuple[str, ...],
    profile: SynergyProfile,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> str:
    """Top strategy/tribal non-land cards for this identity, or "" if no theme."""
    themes = theme_query(profile, vocabulary)
    if not themes:
        return ""
    return join_terms(color_query(color_identity), f"({themes})", "-t:land", COMMANDER_LEGAL)


def ramp_query(color_identity: tuple[str, ...], max_usd: float) -> str:
    return join_terms(
        color_query(color_identity), RAMP_QUERY, "-t:land", COMMANDER_LEGAL, f"usd<={max_usd:g}"
    )


def removal_query(color_identity: tuple[str, ...], max_usd: float) -> str:
    return join_terms(
        color_query(color_identity), REMOVAL_QUERY, COMMANDER_LEGAL, f"usd<={max_usd:g}"
    )


def finisher_query(color_identity: tuple[str, ...], max_usd: float) -> str:
    return join_terms(
        color_query(color_identity), FINISHER_QUERY, "-t:land", COMMANDER_LEGAL, f"usd<={max_usd:g}"
    )


def filler_query(
    color_identity: tuple[str, ...],
    profile: SynergyProfile,
    themed_max_usd: float,
    generic_max_usd: float,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> str:
    """Budget filler: theme-filtered when the profile has a theme."""
    themes = theme_query(profile, vocabulary)
    if themes:
        return join_terms(
            color_query(color_identity),
            f"({themes})",
            "-t:land",
            COMMANDER_LEGAL,
            f"usd<={themed_max_usd:g}",
        )
    return join_terms(
        color_query(color_identity), "-t:land", COMMANDER_LEGAL, f"usd<={generic_max_usd:g}"
    )


def synergy_land_query(color_identity: tuple[str, ...], land_subtypes: tuple[str, ...]) -> str:
    """Lands carrying any of the given subtypes, or "" if none."""
    if not land_subtypes:
        return ""
    subtypes = " OR ".join(f"t:{subtype}" for subtype in land_subtypes)
    return join_terms(color_query(color_identity), "t:land", f"({subtypes})", COMMANDER_LEGAL)
