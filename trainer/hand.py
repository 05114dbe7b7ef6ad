"""Hand evaluation and settlement for blackjack."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterator

from trainer.cards import Card


class HandOutcome(Enum):
    """How a single hand finished against the dealer."""

    BLACKJACK = "blackjack"
    WIN = "win"
    DEALER_BUST = "dealer-bust"
    PUSH = "push"
    LOSE = "lose"
    PLAYER_BUST = "player-bust"
    SURRENDER = "surrender"

    @property
    def is_win(self) -> bool:
        """Check whether the hand was paid."""
        return self in (HandOutcome.BLACKJACK, HandOutcome.WIN, HandOutcome.DEALER_BUST)


@dataclass
class Hand:
    """A hand of cards, its value and its settlement against the dealer."""

    cards: list[Card] = field(default_factory=list)
    bet: int = 0
    is_active: bool = False
    is_doubled: bool = False
    is_split: bool = False
    is_surrendered: bool = False
    is_finished: bool = False
    from_split_aces: bool = False

    def add_card(self, card: Card) -> None:
        """Append a dealt card."""
        self.cards.append(card)

    def clear(self) -> None:
        """Remove all cards and reset the hand flags."""
        self.cards.clear()
        self.bet = 0
        self.is_active = False
        self.is_doubled = False
        self.is_split = False
        self.is_surrendered = False
        self.is_finished = False
        self.from_split_aces = False

    def _evaluate(self) -> tuple[int, int]:
        """Return (total, aces still counted as 11)."""
        total = 0
        soft_aces = 0

        for card in self.cards:
            total += card.value
            if card.is_ace:
                soft_aces += 1

        # Demote aces from 11 to 1 as needed
        while total > 21 and soft_aces > 0:
            total -= 10
            soft_aces -= 1

        return total, soft_aces

    @property
    def value(self) -> int:
        """
        Best total for the hand.

        Aces count 11 until that would bust; a busted hand reports its
        lowest total.
        """
        return self._evaluate()[0]

    @property
    def is_soft(self) -> bool:
        """Check if the hand is soft (an ace still counts as 11)."""
        total, soft_aces = self._evaluate()
        return soft_aces > 0 and total <= 21

    @property
    def is_hard(self) -> bool:
        """No ace is still counted as 11."""
        return not self.is_soft

    @property
    def is_blackjack(self) -> bool:
        """Two-card 21 that did not come from a split."""
        return (
            len(self.cards) == 2
            and self.value == 21
            and not self.is_split
        )

    @property
    def is_busted(self) -> bool:
        """Over 21 even with every ace counted as 1."""
        return self.value > 21

    @property
    def is_pair(self) -> bool:
        """Check if the hand is two cards of equal blackjack value."""
        return (
            len(self.cards) == 2
            and self.cards[0].value == self.cards[1].value
        )

    @property
    def can_double(self) -> bool:
        """Check if the hand shape allows doubling down."""
        return len(self.cards) == 2 and not self.is_doubled and not self.is_finished

    @property
    def is_untouched(self) -> bool:
        """Check if this is the original two-card hand with no action taken."""
        return len(self.cards) == 2 and not self.is_split and not self.is_doubled

    @property
    def num_cards(self) -> int:
        """Cards held, face-down ones included."""
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.value})"
        if self.is_soft:
            value_str = f"(soft {self.value})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_busted:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({self.cards!r}, value={self.value}, bet={self.bet})"


def settle_hand(player_hand: Hand, dealer_hand: Hand) -> tuple[HandOutcome, Decimal]:
    """
    Settle a finished hand against the final dealer hand.

    The stake was taken from the bankroll when it was placed, so the
    returned amount is the total credited back (stake plus winnings).

    Returns:
        (outcome, amount credited to the bankroll)
    """
    bet = Decimal(player_hand.bet)

    # Half the stake was refunded when the hand surrendered
    if player_hand.is_surrendered:
        return HandOutcome.SURRENDER, Decimal("0")

    if player_hand.is_busted:
        return HandOutcome.PLAYER_BUST, Decimal("0")

    player_bj = player_hand.is_blackjack
    dealer_bj = dealer_hand.is_blackjack

    if player_bj and dealer_bj:
        return HandOutcome.PUSH, bet
    if player_bj:
        return HandOutcome.BLACKJACK, bet * Decimal("2.5")
    if dealer_bj:
        return HandOutcome.LOSE, Decimal("0")

    if dealer_hand.is_busted:
        return HandOutcome.DEALER_BUST, bet * 2

    player_value = player_hand.value
    dealer_value = dealer_hand.value
    if player_value > dealer_value:
        return HandOutcome.WIN, bet * 2
    if player_value == dealer_value:
        return HandOutcome.PUSH, bet
    return HandOutcome.LOSE, Decimal("0")


def dealer_should_hit(dealer_hand: Hand, hits_soft_17: bool) -> bool:
    """Hit below 17, and on soft 17 when the house rule says so."""
    value = dealer_hand.value
    if value < 17:
        return True
    if value == 17 and dealer_hand.is_soft and hits_soft_17:
        return True
    return False
