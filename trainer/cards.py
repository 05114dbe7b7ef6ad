"""Card and Shoe classes - the physical shoe lifecycle."""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum, auto
from random import Random, SystemRandom
from typing import Iterator

from trainer.errors import EmptyShoe, InvalidConfiguration

logger = logging.getLogger(__name__)

CARDS_PER_DECK = 52

# Player's cut is clamped into this window
MIN_CUT = 0.10
MAX_CUT = 0.90

# Red cut card sits somewhere in this window (realistic casino range)
MIN_PENETRATION_MARKER = 0.65
MAX_PENETRATION_MARKER = 0.90
DEFAULT_PENETRATION_MARKER = 0.75


class Suit(Enum):
    """Card suits."""

    SPADES = auto()
    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks with blackjack values."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        return self.symbol

    @property
    def symbol(self) -> str:
        """Return the printed rank ("A", "2".."10", "J", "Q", "K")."""
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self == Rank.ACE:
            return 11
        if self.value >= 10:
            return 10
        return self.value

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank has a value of 10."""
        return self.blackjack_value == 10

    @classmethod
    def from_symbol(cls, symbol: str) -> "Rank":
        """Look up a rank by its printed symbol ("T" is accepted for 10)."""
        symbol = symbol.strip().upper()
        if symbol == "T":
            symbol = "10"
        for rank in cls:
            if rank.symbol == symbol:
                return rank
        raise ValueError(f"Invalid rank: {symbol}")


@dataclass(frozen=True, slots=True)
class Card:
    """
    Playing card.

    Rank and suit never change once the shoe is built. Turning a card over
    produces a new Card via ``flipped``; orientation does not take part in
    equality, so a card keeps its identity from shuffle to discard.
    """

    rank: Rank
    suit: Suit
    face_up: bool = field(default=False, compare=False)

    def __str__(self) -> str:
        if not self.face_up:
            return "??"
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        side = "up" if self.face_up else "down"
        return f"Card({self.rank.name}, {self.suit.name}, {side})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        """Check if this card has a value of 10."""
        return self.rank.is_ten_value

    @property
    def key(self) -> tuple[int, int]:
        """Sort key identifying the card regardless of orientation."""
        return (self.suit.value, self.rank.value)

    def flipped(self, face_up: bool = True) -> "Card":
        """Return this card with the given orientation."""
        if self.face_up == face_up:
            return self
        return replace(self, face_up=face_up)

    @classmethod
    def from_string(cls, s: str, face_up: bool = True) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh', '10d'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        suit_map = {
            "C": Suit.CLUBS,
            "♣": Suit.CLUBS,
            "D": Suit.DIAMONDS,
            "♦": Suit.DIAMONDS,
            "H": Suit.HEARTS,
            "♥": Suit.HEARTS,
            "S": Suit.SPADES,
            "♠": Suit.SPADES,
        }

        if suit_str not in suit_map:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(Rank.from_symbol(rank_str), suit_map[suit_str], face_up=face_up)


def build_shoe(deck_count: int) -> list[Card]:
    """
    Build an unshuffled shoe of face-down cards.

    Args:
        deck_count: Number of 52-card decks

    Returns:
        ``deck_count * 52`` cards, every rank and suit once per deck

    Raises:
        InvalidConfiguration: If deck_count is not a positive integer
    """
    if isinstance(deck_count, bool) or not isinstance(deck_count, int) or deck_count < 1:
        raise InvalidConfiguration(f"Shoe must have at least 1 deck, got {deck_count!r}")

    return [
        Card(rank, suit)
        for _ in range(deck_count)
        for suit in Suit
        for rank in Rank
    ]


def shuffle_cards(cards: list[Card], rng: Random | None = None) -> list[Card]:
    """
    Return a uniformly shuffled copy of ``cards`` (Fisher-Yates).

    Walks from the last index down to 1, swapping each position with a
    uniformly chosen index in ``[0, i]``.

    Args:
        cards: Cards to shuffle (left untouched)
        rng: Random source; defaults to the OS CSPRNG
    """
    rng = rng or SystemRandom()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def cut_cards(cards: list[Card], position: float) -> list[Card]:
    """
    Complete a player's cut.

    The position is clamped into [0.10, 0.90]; the cards after
    ``floor(len * position)`` move to the front.
    """
    clamped = max(MIN_CUT, min(MAX_CUT, position))
    cut_index = math.floor(len(cards) * clamped)
    return cards[cut_index:] + cards[:cut_index]


class Shoe:
    """
    A multi-deck dealing shoe.

    Holds the remaining cards in deal order, the burned cards and the
    position of the red penetration marker. The union of remaining,
    burned and dealt cards is always the multiset built at shuffle time.
    """

    def __init__(self, rng: Random | None = None) -> None:
        """
        Initialize an empty shoe.

        Args:
            rng: Random number generator for shuffling (OS CSPRNG if None)
        """
        self._rng = rng
        self._cards: list[Card] = []
        self._burned: list[Card] = []
        self._original_count: int = 0
        self._cut_position: float = 0.0
        self._marker: float = DEFAULT_PENETRATION_MARKER

    def start_new_shoe(self, deck_count: int) -> list[Card]:
        """
        Build and shuffle a fresh shoe.

        Args:
            deck_count: Number of decks (must be positive)

        Returns:
            A copy of the shuffled cards in deal order
        """
        cards = shuffle_cards(build_shoe(deck_count), self._rng)
        self._cards = cards
        self._burned = []
        self._original_count = len(cards)
        self._cut_position = 0.0
        self._marker = DEFAULT_PENETRATION_MARKER
        logger.info("New %d-deck shoe shuffled (%d cards)", deck_count, len(cards))
        return list(cards)

    def cut(self, position: float) -> None:
        """Cut the shoe at ``position`` (clamped into [0.10, 0.90])."""
        if not self._cards:
            return
        self._cards = cut_cards(self._cards, position)
        self._cut_position = max(MIN_CUT, min(MAX_CUT, position))
        logger.debug("Shoe cut at %.2f", self._cut_position)

    def set_penetration_marker(self, fraction: float) -> None:
        """Insert the red cut card at ``fraction`` (clamped into [0.65, 0.90])."""
        self._marker = max(MIN_PENETRATION_MARKER, min(MAX_PENETRATION_MARKER, fraction))
        logger.debug("Penetration marker set at %.2f", self._marker)

    def burn_top_card(self) -> Card:
        """Discard the top card face down and return it."""
        if not self._cards:
            raise EmptyShoe("Cannot burn from an empty shoe")
        card = self._cards.pop(0).flipped(False)
        self._burned.append(card)
        return card

    def deal_next_card(self, face_up: bool = True) -> Card:
        """
        Remove and return the top card with the given orientation.

        Raises:
            EmptyShoe: If no cards remain
        """
        if not self._cards:
            raise EmptyShoe("Cannot deal from an empty shoe")
        return self._cards.pop(0).flipped(face_up)

    def prepare(
        self,
        deck_count: int,
        cut_position: float = 0.5,
        penetration: float = DEFAULT_PENETRATION_MARKER,
    ) -> Card:
        """
        Run the full casino preparation: shuffle, cut, place marker, burn.

        Returns:
            The burned card
        """
        self.start_new_shoe(deck_count)
        self.cut(cut_position)
        self.set_penetration_marker(penetration)
        return self.burn_top_card()

    @property
    def cards(self) -> list[Card]:
        """Return a copy of the remaining cards in deal order."""
        return list(self._cards)

    @property
    def burned_cards(self) -> list[Card]:
        """Return a copy of the burned cards."""
        return list(self._burned)

    @property
    def original_count(self) -> int:
        """Return the number of cards the shoe was built with."""
        return self._original_count

    @property
    def cut_position(self) -> float:
        """Return where the player cut (0 before any cut)."""
        return self._cut_position

    @property
    def penetration_marker_position(self) -> float:
        """Return the fraction at which the red cut card sits."""
        return self._marker

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards)

    @property
    def decks_remaining(self) -> float:
        """Return the raw number of decks remaining."""
        return len(self._cards) / CARDS_PER_DECK

    @property
    def penetration(self) -> float:
        """Return the fraction of the shoe already dealt or burned."""
        if self._original_count == 0:
            return 0.0
        return 1 - len(self._cards) / self._original_count

    @property
    def needs_reshuffle(self) -> bool:
        """Check if the cut card has been reached."""
        return self.penetration >= self._marker

    @property
    def is_loaded(self) -> bool:
        """Check whether a shoe has been built."""
        return self._original_count > 0

    def __len__(self) -> int:
        return len(self._cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)
