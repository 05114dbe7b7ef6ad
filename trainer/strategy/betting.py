"""Bet sizing styles keyed on the count and the previous hand."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Callable, Literal, Mapping

from trainer.errors import InvalidConfiguration
from trainer.statistics.kelly import kelly_bet, kelly_edge

# Wonging sits out below this count
WONG_IN_COUNT = 2


class BettingStyle(Enum):
    """Available bet sizing styles."""

    FLAT = "flat"
    KELLY = "kelly"
    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"
    MARTINGALE = "martingale"
    OSCAR = "oscar"
    WONGING = "wonging"


@dataclass(frozen=True)
class BetSuggestion:
    """A bet amount with the reason behind it (0 means sit out)."""

    amount: int
    rationale: str


Sizer = Callable[[float, int, int, Decimal | int, int, bool], BetSuggestion]


def _tc(true_count: float) -> str:
    return f"{true_count:+.1f}"


def _ramp(
    true_count: float,
    min_bet: int,
    max_bet: int,
    steps: tuple[tuple[float, int, str], ...],
) -> BetSuggestion | None:
    """Return the first (count, units, reason) step the count reaches."""
    for threshold, units, reason in steps:
        if true_count >= threshold:
            return BetSuggestion(min(min_bet * units, max_bet), reason.format(tc=_tc(true_count)))
    return None


def flat_bet(
    true_count: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal | int,
    last_bet: int,
    last_hand_won: bool,
) -> BetSuggestion:
    """Always the table minimum."""
    return BetSuggestion(min_bet, "Flat betting - same amount every hand for low variance")


def kelly_style_bet(
    true_count: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal | int,
    last_bet: int,
    last_hand_won: bool,
) -> BetSuggestion:
    """Variance-adjusted Kelly sizing on a 0.5% per true count edge."""
    edge = kelly_edge(true_count)
    if edge <= 0:
        return BetSuggestion(min_bet, "No advantage - Kelly says minimum bet")
    amount = kelly_bet(bankroll, true_count, min_bet, max_bet)
    return BetSuggestion(amount, f"Kelly Criterion: {edge * 100:.2f}% edge = ${amount} optimal bet")


_AGGRESSIVE_STEPS = (
    (5, 20, "TC {tc} - Aggressive max bet!"),
    (4, 12, "TC {tc} - Large aggressive bet"),
    (3, 8, "TC {tc} - Ramping up aggressively"),
    (2, 4, "TC {tc} - Moderate aggressive bet"),
)


def aggressive_bet(
    true_count: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal | int,
    last_bet: int,
    last_hand_won: bool,
) -> BetSuggestion:
    """1-20 unit spread with rapid escalation."""
    stepped = _ramp(true_count, min_bet, max_bet, _AGGRESSIVE_STEPS)
    if stepped is not None:
        return stepped
    reason = "Negative count - min bet" if true_count < 0 else "Neutral count - min bet"
    return BetSuggestion(min_bet, reason)


_CONSERVATIVE_STEPS = (
    (5, 6, "TC {tc} - Conservative max bet"),
    (4, 5, "TC {tc} - Gradual increase"),
    (3, 4, "TC {tc} - Moderate conservative bet"),
    (2, 2, "TC {tc} - Small increase"),
)


def conservative_bet(
    true_count: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal | int,
    last_bet: int,
    last_hand_won: bool,
) -> BetSuggestion:
    """1-6 unit spread with a slow ramp."""
    stepped = _ramp(true_count, min_bet, max_bet, _CONSERVATIVE_STEPS)
    if stepped is not None:
        return stepped
    return BetSuggestion(min_bet, "Conservative style - keeping bets low")


def martingale_bet(
    true_count: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal | int,
    last_bet: int,
    last_hand_won: bool,
) -> BetSuggestion:
    """Double after a loss, back to the minimum after a win. Ignores the count."""
    if not last_hand_won and last_bet > 0:
        return BetSuggestion(
            min(last_bet * 2, max_bet), "Martingale: doubling after loss (WARNING: high risk!)"
        )
    return BetSuggestion(min_bet, "Martingale: reset to min after win")


def oscar_bet(
    true_count: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal | int,
    last_bet: int,
    last_hand_won: bool,
) -> BetSuggestion:
    """Oscar's Grind: one more unit after a win, hold after a loss."""
    if last_hand_won and last_bet > 0:
        return BetSuggestion(min(last_bet + min_bet, max_bet), "Oscar's Grind: +1 unit after win")
    return BetSuggestion(last_bet if last_bet > 0 else min_bet, "Oscar's Grind: maintain bet after loss")


_WONGING_STEPS = (
    (5, 10, "Wonging: TC {tc} - big bet while here"),
    (3, 6, "Wonging: TC {tc} - solid advantage"),
    (WONG_IN_COUNT, 3, "Wonging: TC {tc} - playing favorable count"),
)


def wonging_bet(
    true_count: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal | int,
    last_bet: int,
    last_hand_won: bool,
) -> BetSuggestion:
    """Play only at +2 or better; bet 0 (sit out) otherwise."""
    stepped = _ramp(true_count, min_bet, max_bet, _WONGING_STEPS)
    if stepped is not None:
        return stepped
    return BetSuggestion(0, f"Count is {_tc(true_count)} - Wong out (sit out) until count improves")


@dataclass(frozen=True)
class BettingStyleConfig:
    """Display metadata and sizing function for a betting style."""

    style: BettingStyle
    name: str
    description: str
    risk_level: Literal["low", "medium", "high"]
    min_count_to_play: float | None
    sizer: Sizer


BETTING_STYLES: Mapping[BettingStyle, BettingStyleConfig] = MappingProxyType(
    {
        BettingStyle.FLAT: BettingStyleConfig(
            BettingStyle.FLAT,
            "Flat Betting",
            "Bet the same amount every hand regardless of count. Safest but lowest edge.",
            "low",
            None,
            flat_bet,
        ),
        BettingStyle.KELLY: BettingStyleConfig(
            BettingStyle.KELLY,
            "Kelly Criterion",
            "Mathematically optimal bet sizing based on your edge from the count.",
            "medium",
            None,
            kelly_style_bet,
        ),
        BettingStyle.AGGRESSIVE: BettingStyleConfig(
            BettingStyle.AGGRESSIVE,
            "Aggressive Ramp",
            "Large bet spreads (1-20 units) with rapid escalation. High variance, high heat.",
            "high",
            None,
            aggressive_bet,
        ),
        BettingStyle.CONSERVATIVE: BettingStyleConfig(
            BettingStyle.CONSERVATIVE,
            "Conservative Spread",
            "Small spread (1-6 units) with slow ramp. Lower risk and less heat, but smaller edge.",
            "low",
            None,
            conservative_bet,
        ),
        BettingStyle.MARTINGALE: BettingStyleConfig(
            BettingStyle.MARTINGALE,
            "Martingale System",
            "Double bet after each loss. NOT RECOMMENDED - high risk of ruin, ignores count.",
            "high",
            None,
            martingale_bet,
        ),
        BettingStyle.OSCAR: BettingStyleConfig(
            BettingStyle.OSCAR,
            "Oscar's Grind",
            "Increase bet by 1 unit after wins, hold after losses. Conservative system.",
            "low",
            None,
            oscar_bet,
        ),
        BettingStyle.WONGING: BettingStyleConfig(
            BettingStyle.WONGING,
            "Wonging (Back-Counting)",
            "Only play when count is favorable (+2 or higher). Sit out on negative counts.",
            "medium",
            WONG_IN_COUNT,
            wonging_bet,
        ),
    }
)


def get_betting_style(style: BettingStyle | str) -> BettingStyleConfig:
    """
    Look up a betting style by enum member or key.

    Raises:
        InvalidConfiguration: If the style is not registered
    """
    try:
        return BETTING_STYLES[BettingStyle(style)]
    except ValueError:
        known = ", ".join(s.value for s in BettingStyle)
        raise InvalidConfiguration(f"Unknown betting style {style!r} (known: {known})") from None


def suggest_bet(
    style: BettingStyle | str,
    true_count: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal | int,
    last_bet: int = 0,
    last_hand_won: bool = False,
) -> BetSuggestion:
    """Size a bet with the given style."""
    sizer = get_betting_style(style).sizer
    return sizer(true_count, min_bet, max_bet, bankroll, last_bet, last_hand_won)
