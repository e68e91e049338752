from dataclasses import dataclass, field


@dataclass(frozen=True)
class SynergyProfile:
    """
    Strategic themes derived from the commanders' own card text.

    Attributes:
        strategies: Active strategies in the order they were detected
        strategy_weights: Keyword hit count per active strategy
        primary_strategy: Heaviest strategy (first detected wins ties)
        land_subtypes: Land subtypes the commanders care about (e.g. "Gate")
        tribal_types: Creature types from the commanders' type lines
        mechanics: Keyword abilities on the commanders, lower-case
    """

    strategies: tuple[str, ...] = ()
    strategy_weights: dict[str, int] = field(default_factory=dict)
    primary_strategy: str | None = None
    land_subtypes: tuple[str, ...] = ()
    tribal_types: tuple[str, ...] = ()
    mechanics: frozenset[str] = frozenset()

    def has_strategy(self, strategy: str) -> bool:
        return strategy in self.strategies

    @property
    def has_theme(self) -> bool:
        """True if there is any strategy or tribe to build around."""
        return bool(self.strategies or self.tribal_types)
