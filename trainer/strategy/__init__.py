"""Strategy tables, deviations, bet sizing and NPC decisions."""

from trainer.strategy.basic import Action, BasicStrategy, StrategyAdvice
from trainer.strategy.betting import (
    BETTING_STYLES,
    BetSuggestion,
    BettingStyle,
    get_betting_style,
    suggest_bet,
)
from trainer.strategy.deviations import (
    FAB_4,
    ILLUSTRIOUS_18,
    INSURANCE_INDEX,
    IndexPlay,
    find_deviation,
    insurance_advised,
    situation_key,
)
from trainer.strategy.npc import npc_action, npc_bet, npc_takes_insurance
from trainer.strategy.rules import GameSettings

__all__ = [
    "Action",
    "BasicStrategy",
    "BETTING_STYLES",
    "BetSuggestion",
    "BettingStyle",
    "FAB_4",
    "GameSettings",
    "ILLUSTRIOUS_18",
    "INSURANCE_INDEX",
    "IndexPlay",
    "StrategyAdvice",
    "find_deviation",
    "get_betting_style",
    "insurance_advised",
    "npc_action",
    "npc_bet",
    "npc_takes_insurance",
    "situation_key",
    "suggest_bet",
]
