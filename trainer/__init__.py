"""Blackjack training engine - no UI, no I/O."""

from trainer.cards import Card, Rank, Shoe, Suit
from trainer.hand import Hand, HandOutcome

__all__ = [
    "Card",
    "Hand",
    "HandOutcome",
    "Rank",
    "Shoe",
    "Suit",
]
