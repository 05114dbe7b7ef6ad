"""Kelly criterion calculations for optimal bet sizing."""

from decimal import ROUND_FLOOR, Decimal

# Each +1 true count is worth about half a percent to the player
EDGE_PER_TRUE_COUNT = Decimal("0.005")

# Blackjack variance per hand (doubles, splits, 3:2 naturals)
BLACKJACK_VARIANCE = Decimal("1.3")

MAX_BET_UNITS = 20


def kelly_edge(true_count: float) -> Decimal:
    """Estimate the player's edge (as a fraction) from the true count."""
    return Decimal(str(true_count)) * EDGE_PER_TRUE_COUNT


def kelly_bet(
    bankroll: Decimal | int,
    true_count: float,
    min_bet: int,
    max_bet: int,
) -> int:
    """
    Variance-adjusted Kelly bet for a true count.

    Bet ``floor(bankroll * edge / 1.3)`` clamped into the table limits,
    or the minimum when there is no advantage.

    Args:
        bankroll: Current bankroll
        true_count: Current true count
        min_bet: Table minimum
        max_bet: Table maximum

    Returns:
        Bet in whole chips
    """
    edge = kelly_edge(true_count)
    if edge <= 0:
        return min_bet

    raw = (Decimal(bankroll) * edge / BLACKJACK_VARIANCE).to_integral_value(ROUND_FLOOR)
    return max(min_bet, min(int(raw), max_bet))


def optimal_bet_units(
    player_edge: Decimal | float,
    bankroll: Decimal | int,
    unit_size: int,
) -> int:
    """
    Half-Kelly bet expressed in betting units.

    Args:
        player_edge: Player edge in percent (e.g. 1.5 for 1.5%)
        bankroll: Current bankroll
        unit_size: Size of one betting unit

    Returns:
        Units to bet, between 1 and 20
    """
    edge = Decimal(str(player_edge))
    if edge <= 0 or unit_size <= 0:
        return 1

    half_kelly = edge / 100 / BLACKJACK_VARIANCE / 2
    units = (half_kelly * Decimal(bankroll) / unit_size).to_integral_value(ROUND_FLOOR)
    return max(1, min(MAX_BET_UNITS, int(units)))
