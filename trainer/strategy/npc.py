"""Decision making for computer-controlled seats."""

from decimal import Decimal

from trainer.cards import Card
from trainer.hand import Hand
from trainer.strategy.basic import Action, BasicStrategy
from trainer.strategy.betting import BettingStyle, suggest_bet
from trainer.strategy.deviations import insurance_advised

_strategy = BasicStrategy()


def _should_split(hand: Hand, dealer_value: int) -> bool:
    if hand.num_cards != 2:
        return False

    card_value = hand.cards[0].value

    # Always split Aces and 8s
    if card_value in (11, 8):
        return True
    # Never split 5s or tens
    if card_value in (5, 10):
        return False
    if card_value in (2, 3, 7):
        return 2 <= dealer_value <= 7
    if card_value == 6:
        return 2 <= dealer_value <= 6
    if card_value == 9:
        return 2 <= dealer_value <= 9 and dealer_value != 7
    return False


def _should_double(hand: Hand, dealer_value: int) -> bool:
    if hand.num_cards != 2:
        return False

    value = hand.value
    if hand.is_soft:
        return value in (17, 18) and 3 <= dealer_value <= 6
    if value == 11:
        return True
    if value == 10:
        return dealer_value <= 9
    if value == 9:
        return 3 <= dealer_value <= 6
    return False


def npc_action(
    hand: Hand,
    dealer_up: Card | None,
    can_split: bool,
    can_double: bool,
    has_bankroll: bool,
) -> Action:
    """
    Choose an action for an NPC hand.

    Splits and doubles are taken first when legal and affordable, then
    basic strategy decides. NPCs never surrender.

    Returns:
        One of HIT, STAND, DOUBLE or SPLIT
    """
    if dealer_up is None:
        return Action.STAND

    dealer_value = dealer_up.value

    if can_split and has_bankroll and _should_split(hand, dealer_value):
        return Action.SPLIT
    if can_double and has_bankroll and _should_double(hand, dealer_value):
        return Action.DOUBLE

    advice = _strategy.advise(
        hand.cards,
        dealer_up.rank,
        can_double=can_double and has_bankroll,
        can_split=can_split and has_bankroll,
    )
    return advice.action


def npc_takes_insurance(count_signal: float) -> bool:
    """NPCs insure exactly when the count reaches the insurance index."""
    return insurance_advised(count_signal)


def npc_bet(
    style: BettingStyle | str,
    count_signal: float,
    min_bet: int,
    max_bet: int,
    bankroll: Decimal,
    last_bet: int = 0,
    last_hand_won: bool = False,
) -> int:
    """
    Size an NPC bet with its betting style.

    The suggestion is capped by the bankroll and rounded down to whole
    ``min_bet`` chips. Zero means the seat sits out this round.
    """
    suggestion = suggest_bet(
        style, count_signal, min_bet, max_bet, bankroll, last_bet, last_hand_won
    )
    capped = min(Decimal(suggestion.amount), bankroll, Decimal(max_bet))
    chips = int(capped // min_bet)
    return chips * min_bet
