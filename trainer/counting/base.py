"""Running count, true count and the per-shoe count tracker."""

from trainer.cards import CARDS_PER_DECK, Card, Rank
from trainer.counting.systems import CountingSystemConfig

# Never divide by less than half a deck near the end of the shoe
MIN_DECKS_REMAINING = 0.5


def card_point_value(rank: Rank, system: CountingSystemConfig) -> float:
    """Return the tag value of ``rank`` in ``system``."""
    return system.values[rank]


def decks_remaining(cards_remaining: int) -> float:
    """Return decks left in the shoe, floored at half a deck."""
    return max(MIN_DECKS_REMAINING, cards_remaining / CARDS_PER_DECK)


def true_count(running_count: float, cards_remaining: int) -> float:
    """
    Calculate the true count.

    Args:
        running_count: Current running count
        cards_remaining: Cards left in the shoe

    Returns:
        The running count divided by decks remaining
    """
    return running_count / decks_remaining(cards_remaining)


def count_signal(
    running_count: float,
    cards_remaining: int,
    system: CountingSystemConfig,
) -> float:
    """
    Return the count that drives betting and strategy decisions.

    Balanced systems use the true count; unbalanced systems such as KO
    use the running count directly.
    """
    if system.needs_true_count:
        return true_count(running_count, cards_remaining)
    return running_count


class CountTracker:
    """
    Running count for the current shoe.

    Only cards turning face up are counted, in the order they are
    revealed. The tracker has no random or time-dependent input, so the
    same reveal sequence always yields the same count.
    """

    def __init__(self, system: CountingSystemConfig) -> None:
        """Initialize the tracker for a counting system."""
        self.system = system
        self._running_count: float = 0
        self._cards_seen: int = 0
        self._aces_seen: int = 0
        self._seen: list[Rank] = []

    def reveal(self, card: Card) -> float:
        """
        Count a card that has just turned face up.

        Args:
            card: The revealed card (face-down cards are ignored)

        Returns:
            The tag value applied
        """
        if not card.face_up:
            return 0
        tag_value = card_point_value(card.rank, self.system)
        self._running_count += tag_value
        self._cards_seen += 1
        self._seen.append(card.rank)
        if card.is_ace:
            self._aces_seen += 1
        return tag_value

    @property
    def running_count(self) -> float:
        """Return the current running count."""
        return self._running_count

    @property
    def cards_seen(self) -> int:
        """Return the number of cards counted since the last reset."""
        return self._cards_seen

    @property
    def aces_seen(self) -> int:
        """Return the ace side count."""
        return self._aces_seen

    def aces_remaining(self, num_decks: int) -> int:
        """Return the number of aces not yet seen."""
        return num_decks * 4 - self._aces_seen

    def ace_richness(self, num_decks: int, cards_remaining: int) -> float:
        """
        Ratio of aces left to aces expected for the remaining depth.

        > 1.0 means ace-rich, < 1.0 means ace-poor.
        """
        expected_aces = cards_remaining / CARDS_PER_DECK * 4
        if expected_aces <= 0:
            return 1.0
        return self.aces_remaining(num_decks) / expected_aces

    def true_count(self, cards_remaining: int) -> float:
        """Return the true count for the given shoe depth."""
        return true_count(self._running_count, cards_remaining)

    def signal(self, cards_remaining: int) -> float:
        """Return the decision count for the given shoe depth."""
        return count_signal(self._running_count, cards_remaining, self.system)

    def reset(self, system: CountingSystemConfig | None = None) -> None:
        """Reset the count for a new shoe, optionally switching systems."""
        if system is not None:
            self.system = system
        self._running_count = 0
        self._cards_seen = 0
        self._aces_seen = 0
        self._seen = []

    def switch_system(self, system: CountingSystemConfig) -> None:
        """Recount every card seen this shoe under another system."""
        self.system = system
        self._running_count = sum(card_point_value(rank, system) for rank in self._seen)

    def __repr__(self) -> str:
        return (
            f"CountTracker(system={self.system.key!r}, "
            f"running_count={self._running_count}, aces_seen={self._aces_seen})"
        )
