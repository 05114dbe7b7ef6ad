"""Session statistics for the human seat."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from trainer.hand import HandOutcome

_LOSSES = (HandOutcome.LOSE, HandOutcome.PLAYER_BUST, HandOutcome.SURRENDER)


@dataclass
class SessionStatistics:
    """
    Running totals for the human seat.

    Updated once per settled round; voided rounds are never recorded.
    """

    rounds_played: int = 0
    hands_played: int = 0
    hands_won: int = 0
    hands_lost: int = 0
    hands_pushed: int = 0
    total_wagered: Decimal = Decimal("0")
    net_profit: Decimal = Decimal("0")
    biggest_win: Decimal = Decimal("0")

    def record_round(
        self,
        hands: Iterable[tuple[HandOutcome, int]],
        profit: Decimal,
    ) -> None:
        """
        Fold one settled round into the totals.

        Args:
            hands: (outcome, final bet) for each of the human's hands
            profit: Bankroll change over the round
        """
        self.rounds_played += 1
        for outcome, bet in hands:
            self.hands_played += 1
            self.total_wagered += Decimal(bet)
            if outcome.is_win:
                self.hands_won += 1
            elif outcome in _LOSSES:
                self.hands_lost += 1
            else:
                self.hands_pushed += 1

        self.net_profit += profit
        self.biggest_win = max(self.biggest_win, profit)

    @property
    def win_rate(self) -> float:
        """Fraction of hands won (0.0 before the first hand)."""
        if self.hands_played == 0:
            return 0.0
        return self.hands_won / self.hands_played

    def reset(self) -> None:
        """Clear all totals."""
        self.rounds_played = 0
        self.hands_played = 0
        self.hands_won = 0
        self.hands_lost = 0
        self.hands_pushed = 0
        self.total_wagered = Decimal("0")
        self.net_profit = Decimal("0")
        self.biggest_win = Decimal("0")
