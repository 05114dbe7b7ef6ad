"""Immutable read-only views of the table for presentation layers."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict

from trainer.cards import Card
from trainer.hand import Hand


class CardView(BaseModel):
    """A card as a viewer sees it (face-down cards hide rank and suit)."""

    model_config = ConfigDict(frozen=True)

    rank: str | None
    suit: str | None
    value: int | None
    face_up: bool

    @classmethod
    def of(cls, card: Card) -> "CardView":
        if not card.face_up:
            return cls(rank=None, suit=None, value=None, face_up=False)
        return cls(rank=card.rank.symbol, suit=str(card.suit), value=card.value, face_up=True)


class HandView(BaseModel):
    """Hand representation; the value covers face-up cards only."""

    model_config = ConfigDict(frozen=True)

    cards: tuple[CardView, ...]
    value: int
    is_soft: bool
    is_blackjack: bool
    is_busted: bool
    bet: int
    is_active: bool
    is_doubled: bool
    is_split: bool
    is_surrendered: bool
    is_finished: bool

    @classmethod
    def of(cls, hand: Hand) -> "HandView":
        visible = Hand([card for card in hand.cards if card.face_up])
        fully_visible = len(visible.cards) == len(hand.cards)
        return cls(
            cards=tuple(CardView.of(card) for card in hand.cards),
            value=visible.value,
            is_soft=visible.is_soft,
            is_blackjack=fully_visible and hand.is_blackjack,
            is_busted=visible.is_busted,
            bet=hand.bet,
            is_active=hand.is_active,
            is_doubled=hand.is_doubled,
            is_split=hand.is_split,
            is_surrendered=hand.is_surrendered,
            is_finished=hand.is_finished,
        )


class SeatView(BaseModel):
    """One seat at the table."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    player_type: Literal["human", "npc"]
    seat_number: int
    bankroll: Decimal
    current_bet: int
    insurance_bet: Decimal
    betting_style: str
    sitting_out: bool
    is_current: bool
    current_hand_index: int
    hands: tuple[HandView, ...]


class AdviceView(BaseModel):
    """Recommended action with its rationale."""

    model_config = ConfigDict(frozen=True)

    action: str
    rationale: str


class DeviationView(BaseModel):
    """An index play that applies at the current decision."""

    model_config = ConfigDict(frozen=True)

    situation: str
    basic_action: str
    deviation_action: str
    index: float
    description: str
    edge_gain: str


class BetAdviceView(BaseModel):
    """Bet suggested by the human's betting style."""

    model_config = ConfigDict(frozen=True)

    amount: int
    rationale: str


class RoundResultView(BaseModel):
    """Visible result of the human's last round."""

    model_config = ConfigDict(frozen=True)

    outcome: str
    message: str
    profit: Decimal


class StatisticsView(BaseModel):
    """Session statistics of the human seat."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    rounds_played: int
    hands_played: int
    hands_won: int
    hands_lost: int
    hands_pushed: int
    total_wagered: Decimal
    net_profit: Decimal
    biggest_win: Decimal
    win_rate: float


class TableSnapshot(BaseModel):
    """Everything a presentation layer may read about the table."""

    model_config = ConfigDict(frozen=True)

    phase: str
    dealer_hand: HandView
    seats: tuple[SeatView, ...]
    current_seat_number: int | None
    human_seat_number: int

    counting_system: str
    running_count: float
    true_count: float
    count_signal: float
    aces_seen: int

    cards_remaining: int
    decks_remaining: float
    penetration: float
    penetration_marker: float
    needs_reshuffle: bool

    available_actions: tuple[str, ...]
    recommended_action: AdviceView | None
    deviation: DeviationView | None
    recommended_bet: BetAdviceView
    insurance_advised: bool | None

    house_edge: Decimal
    player_edge: Decimal
    rule_variant: str

    last_result: RoundResultView | None
    statistics: StatisticsView
    pending_transitions: int
