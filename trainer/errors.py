"""Exception types raised by the training engine."""


class BlackjackError(Exception):
    """Base class for all engine errors."""


class InvalidConfiguration(BlackjackError, ValueError):
    """Settings that cannot produce a playable table (fatal at setup)."""


class IllegalAction(BlackjackError):
    """
    An action the current phase or hand does not permit.

    Raised inside guarded controls and converted into a rejected call,
    so the table state is never touched.
    """

    def __init__(self, message: str, *, insufficient_funds: bool = False) -> None:
        super().__init__(message)
        self.message = message
        self.insufficient_funds = insufficient_funds


class EmptyShoe(BlackjackError, IndexError):
    """A card was requested from a shoe with no cards left."""
