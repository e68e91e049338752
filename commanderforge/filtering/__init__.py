"""
Candidate filtering for the auto-builder.

The eligible pool is the only source of owned cards for slot allocation.
Every owned card reaches the deck through build_eligible_pool, and every
suggested card passes is_card_relevant before it is proposed.
"""

from commanderforge.filtering.eligible_pool import EligiblePool, build_eligible_pool
from commanderforge.filtering.relevance import (
    is_blacklisted,
    is_card_relevant,
    is_combat_trick,
    is_off_theme_payoff,
    mentions_off_color,
)

__all__ = [
    "EligiblePool",
    "build_eligible_pool",
    "is_blacklisted",
    "is_card_relevant",
    "is_combat_trick",
    "is_off_theme_payoff",
    "mentions_off_color",
]
