"""Strategy deviations based on true count (Illustrious 18, Fab 4)."""

from dataclasses import dataclass
from typing import Literal, Sequence

from trainer.cards import Card, Rank
from trainer.hand import Hand
from trainer.strategy.basic import Action, dealer_label

# Take insurance at or above this count
INSURANCE_INDEX = 3


@dataclass(frozen=True)
class IndexPlay:
    """
    An index play (strategy deviation based on count).

    Non-negative indices apply at or above the index, negative ones at or
    below it.
    """

    # Situation key, e.g. "16 vs 10", "10,10 vs 5", "A,8 vs 6"
    situation: str

    # Basic strategy action (what you'd normally do)
    basic_action: Action

    # Deviation action (what to do at/beyond the index)
    deviation_action: Action

    # True count threshold
    index: float

    # Description for training
    description: str = ""

    # Approximate edge gained by this play
    edge_gain: str = ""

    @property
    def direction(self) -> Literal["at_or_above", "at_or_below"]:
        """Side of the index on which the deviation applies."""
        return "at_or_above" if self.index >= 0 else "at_or_below"

    def should_deviate(self, true_count: float) -> bool:
        """
        Check if the deviation should be taken at the given true count.

        Args:
            true_count: The current true count

        Returns:
            True if the deviation should be taken
        """
        if self.direction == "at_or_above":
            return true_count >= self.index
        return true_count <= self.index

    def get_action(self, true_count: float) -> Action:
        """Get the correct action for the given true count."""
        if self.should_deviate(true_count):
            return self.deviation_action
        return self.basic_action


# The Illustrious 18 - most valuable playing deviations for Hi-Lo
# Insurance is handled separately through INSURANCE_INDEX

ILLUSTRIOUS_18: tuple[IndexPlay, ...] = (
    IndexPlay("16 vs 10", Action.HIT, Action.STAND, 0,
              description="Stand on 16 vs dealer 10 when TC ≥ 0", edge_gain="+0.10%"),
    IndexPlay("15 vs 10", Action.HIT, Action.STAND, 4,
              description="Stand on 15 vs dealer 10 when TC ≥ +4", edge_gain="+0.08%"),
    IndexPlay("10,10 vs 5", Action.STAND, Action.SPLIT, 5,
              description="Split 10s vs dealer 5 when TC ≥ +5", edge_gain="+0.07%"),
    IndexPlay("10,10 vs 6", Action.STAND, Action.SPLIT, 4,
              description="Split 10s vs dealer 6 when TC ≥ +4", edge_gain="+0.08%"),
    IndexPlay("10 vs 10", Action.HIT, Action.DOUBLE, 4,
              description="Double 10 vs dealer 10 when TC ≥ +4", edge_gain="+0.05%"),
    IndexPlay("12 vs 3", Action.HIT, Action.STAND, 2,
              description="Stand on 12 vs dealer 3 when TC ≥ +2", edge_gain="+0.04%"),
    IndexPlay("12 vs 2", Action.HIT, Action.STAND, 3,
              description="Stand on 12 vs dealer 2 when TC ≥ +3", edge_gain="+0.03%"),
    IndexPlay("11 vs A", Action.HIT, Action.DOUBLE, 1,
              description="Double 11 vs dealer Ace when TC ≥ +1", edge_gain="+0.05%"),
    IndexPlay("9 vs 2", Action.HIT, Action.DOUBLE, 1,
              description="Double 9 vs dealer 2 when TC ≥ +1", edge_gain="+0.03%"),
    IndexPlay("10 vs A", Action.HIT, Action.DOUBLE, 4,
              description="Double 10 vs dealer Ace when TC ≥ +4", edge_gain="+0.04%"),
    IndexPlay("9 vs 7", Action.HIT, Action.DOUBLE, 3,
              description="Double 9 vs dealer 7 when TC ≥ +3", edge_gain="+0.02%"),
    IndexPlay("16 vs 9", Action.HIT, Action.STAND, 5,
              description="Stand on 16 vs dealer 9 when TC ≥ +5", edge_gain="+0.03%"),
    IndexPlay("13 vs 2", Action.STAND, Action.HIT, -1,
              description="Hit 13 vs dealer 2 when TC ≤ -1", edge_gain="+0.02%"),
    IndexPlay("12 vs 4", Action.STAND, Action.HIT, 0,
              description="Hit 12 vs dealer 4 when TC ≥ 0", edge_gain="+0.02%"),
    IndexPlay("12 vs 5", Action.STAND, Action.HIT, -2,
              description="Hit 12 vs dealer 5 when TC ≤ -2", edge_gain="+0.02%"),
    IndexPlay("13 vs 3", Action.STAND, Action.HIT, -2,
              description="Hit 13 vs dealer 3 when TC ≤ -2", edge_gain="+0.02%"),
    IndexPlay("A,8 vs 5", Action.STAND, Action.DOUBLE, 1,
              description="Double soft 19 vs dealer 5 when TC ≥ +1", edge_gain="+0.01%"),
    IndexPlay("A,8 vs 6", Action.STAND, Action.DOUBLE, 1,
              description="Double soft 19 vs dealer 6 when TC ≥ +1", edge_gain="+0.01%"),
)


# The Fab 4 - surrender deviations, only when late surrender is offered

FAB_4: tuple[IndexPlay, ...] = (
    IndexPlay("16 vs 10", Action.HIT, Action.SURRENDER, 0,
              description="Surrender 16 vs dealer 10 when TC ≥ 0", edge_gain="+0.07%"),
    IndexPlay("16 vs 9", Action.HIT, Action.SURRENDER, 2,
              description="Surrender 16 vs dealer 9 when TC ≥ +2", edge_gain="+0.02%"),
    IndexPlay("15 vs 10", Action.HIT, Action.SURRENDER, 0,
              description="Surrender 15 vs dealer 10 when TC ≥ 0", edge_gain="+0.06%"),
    IndexPlay("15 vs A", Action.HIT, Action.SURRENDER, 1,
              description="Surrender 15 vs dealer Ace when TC ≥ +1", edge_gain="+0.03%"),
)


def situation_key(cards: Sequence[Card], dealer_up_rank: Rank) -> str:
    """
    Describe a decision point the way the index tables are keyed.

    Any two ten-value cards give ``"10,10 vs d"``; a two-card hand with an
    ace gives ``"A,x vs d"``; everything else uses the hand total.
    """
    dealer = dealer_label(dealer_up_rank.blackjack_value)

    if len(cards) == 2:
        first, second = cards
        if first.is_ten_value and second.is_ten_value:
            return f"10,10 vs {dealer}"
        if first.is_ace or second.is_ace:
            other = second if first.is_ace else first
            return f"A,{dealer_label(other.value)} vs {dealer}"

    return f"{Hand(list(cards)).value} vs {dealer}"


def insurance_advised(true_count: float) -> bool:
    """Check whether insurance is a positive-expectation bet at this count."""
    return true_count >= INSURANCE_INDEX


def find_deviation(
    cards: Sequence[Card],
    dealer_up_rank: Rank,
    true_count: float,
    surrender_allowed: bool = False,
) -> IndexPlay | None:
    """
    Find the deviation that applies at a decision point, if any.

    Args:
        cards: The player's cards
        dealer_up_rank: Rank of the dealer's face-up card
        true_count: Current true count
        surrender_allowed: Whether surrender is legal for this hand

    Returns:
        The applicable IndexPlay if the count reaches its index, else None
    """
    situation = situation_key(cards, dealer_up_rank)

    if surrender_allowed:
        for play in FAB_4:
            if play.situation == situation and play.should_deviate(true_count):
                return play

    for play in ILLUSTRIOUS_18:
        if play.situation == situation:
            return play if play.should_deviate(true_count) else None

    return None
