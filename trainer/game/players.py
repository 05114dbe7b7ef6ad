"""Seats at the table."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from trainer.hand import Hand
from trainer.strategy.betting import BettingStyle


class PlayerType(Enum):
    """Who controls a seat."""

    HUMAN = "human"
    NPC = "npc"


@dataclass
class Player:
    """A seat and its state during a round."""

    id: str
    name: str
    player_type: PlayerType
    seat_number: int
    bankroll: Decimal = Decimal("1000")
    betting_style: BettingStyle = BettingStyle.FLAT
    hands: list[Hand] = field(default_factory=list)
    current_hand_index: int = 0
    current_bet: int = 0
    insurance_bet: Decimal = Decimal("0")
    last_bet: int = 0
    last_hand_won: bool = False
    round_start_bankroll: Decimal = Decimal("0")
    sitting_out: bool = False

    @property
    def is_human(self) -> bool:
        """Check if the human controls this seat."""
        return self.player_type == PlayerType.HUMAN

    @property
    def current_hand(self) -> Hand | None:
        """Get the hand being played."""
        if 0 <= self.current_hand_index < len(self.hands):
            return self.hands[self.current_hand_index]
        return None

    @property
    def in_round(self) -> bool:
        """Check whether the seat was dealt into the current round."""
        return bool(self.hands) and not self.sitting_out

    @property
    def is_done(self) -> bool:
        """Check whether every hand of this seat is finished."""
        return all(hand.is_finished for hand in self.hands)

    def add_hand(self, bet: int = 0) -> Hand:
        """Add a new hand."""
        hand = Hand(bet=bet)
        self.hands.append(hand)
        return hand

    def reset_hands(self) -> None:
        """Reset all hands for a new round."""
        self.hands.clear()
        self.current_hand_index = 0
        self.insurance_bet = Decimal("0")
        self.sitting_out = False

    def can_afford(self, amount: int | Decimal) -> bool:
        """Check the bankroll covers ``amount``."""
        return Decimal(amount) <= self.bankroll
