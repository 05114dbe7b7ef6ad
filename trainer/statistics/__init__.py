"""Statistical calculations for blackjack."""

from trainer.statistics.house_edge import (
    RULE_VARIANTS,
    HouseEdgeCalculator,
    RuleVariant,
    player_edge,
    rule_variant_name,
)
from trainer.statistics.kelly import kelly_bet, kelly_edge, optimal_bet_units
from trainer.statistics.session import SessionStatistics

__all__ = [
    "RULE_VARIANTS",
    "HouseEdgeCalculator",
    "RuleVariant",
    "SessionStatistics",
    "kelly_bet",
    "kelly_edge",
    "optimal_bet_units",
    "player_edge",
    "rule_variant_name",
]
