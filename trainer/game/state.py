"""Round phase enumeration."""

from enum import Enum, auto


class RoundPhase(Enum):
    """
    Round state machine states.

    Flow: SETUP → BETTING → DEALING → (INSURANCE) → PLAYER_TURN → DEALER_TURN → ROUND_END → BETTING
    """

    # No shoe yet (or the shoe must be rebuilt)
    SETUP = auto()

    # Waiting for the human's chips
    BETTING = auto()

    # Initial two cards going out
    DEALING = auto()

    # Dealer shows an Ace
    INSURANCE = auto()

    # Seats act in table order
    PLAYER_TURN = auto()

    # Hole card revealed, dealer draws
    DEALER_TURN = auto()

    # Hands settled, result visible
    ROUND_END = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


# Valid phase transitions
VALID_TRANSITIONS: dict[RoundPhase, list[RoundPhase]] = {
    RoundPhase.SETUP: [RoundPhase.BETTING],
    RoundPhase.BETTING: [RoundPhase.DEALING, RoundPhase.SETUP],
    RoundPhase.DEALING: [
        RoundPhase.INSURANCE,
        RoundPhase.PLAYER_TURN,
        RoundPhase.DEALER_TURN,  # Every hand is a natural
    ],
    RoundPhase.INSURANCE: [
        RoundPhase.PLAYER_TURN,
        RoundPhase.DEALER_TURN,
        RoundPhase.ROUND_END,  # Dealer blackjack
    ],
    RoundPhase.PLAYER_TURN: [RoundPhase.DEALER_TURN],
    RoundPhase.DEALER_TURN: [RoundPhase.ROUND_END],
    RoundPhase.ROUND_END: [RoundPhase.BETTING, RoundPhase.SETUP],
}


def is_valid_transition(from_phase: RoundPhase, to_phase: RoundPhase) -> bool:
    """
    Check if a phase transition is valid.

    Resets are not listed: they may leave any phase.

    Args:
        from_phase: Current phase
        to_phase: Desired phase

    Returns:
        True if the transition is allowed
    """
    return to_phase in VALID_TRANSITIONS.get(from_phase, [])
