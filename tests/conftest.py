"""Pytest fixtures for blackjack trainer tests."""

from decimal import Decimal
from random import Random

import pytest
from hypothesis import strategies as st

from trainer.cards import Card, Rank, Shoe, Suit
from trainer.counting import CountTracker, get_counting_system
from trainer.game import BlackjackTable
from trainer.hand import Hand
from trainer.strategy import BasicStrategy, GameSettings


def make_hand(*cards: str, bet: int = 0) -> Hand:
    """Build a hand from card strings such as "AS", "10H"."""
    return Hand([Card.from_string(card) for card in cards], bet=bet)


def stack(table: BlackjackTable, *cards: str) -> None:
    """
    Put cards on top of the table's shoe in deal order.

    Called once the shoe is prepared; the cards come out before anything
    else and keep the shoe well clear of the cut card.
    """
    table.shoe._cards[:0] = [Card.from_string(card, face_up=False) for card in cards]


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled 6-deck shoe, cut and burned."""
    s = Shoe(rng=rng)
    s.prepare(6)
    return s


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return make_hand("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return make_hand("AS", "6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return make_hand("10S", "6H")


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return make_hand("8S", "8H")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return make_hand("10S", "6H", "KC")


@pytest.fixture
def hilo():
    """Hi-Lo count tracker."""
    return CountTracker(get_counting_system("hi-lo"))


@pytest.fixture
def ko():
    """KO count tracker."""
    return CountTracker(get_counting_system("ko"))


@pytest.fixture
def settings():
    """Default table settings."""
    return GameSettings()


@pytest.fixture
def basic_strategy():
    """Basic strategy lookup."""
    return BasicStrategy()


@pytest.fixture
def table(rng):
    """A single-seat table ready for betting; scheduled steps run immediately."""
    t = BlackjackTable(GameSettings(bankroll=Decimal("1000")), rng=rng, instant=True)
    assert t.prepare_shoe()
    return t


@pytest.fixture
def table_factory(rng):
    """Build prepared tables with custom settings."""

    def factory(instant: bool = True, **overrides) -> BlackjackTable:
        t = BlackjackTable(GameSettings(**overrides), rng=rng, instant=instant)
        assert t.prepare_shoe()
        return t

    return factory


# Hypothesis strategies for property-based testing


@st.composite
def card_strategy(draw):
    """Generate a random face-up card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit, face_up=True)


@st.composite
def hand_strategy(draw, min_cards=2, max_cards=5):
    """Generate a random hand."""
    cards = draw(st.lists(card_strategy(), min_size=min_cards, max_size=max_cards))
    return Hand(cards)
