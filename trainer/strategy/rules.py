"""Table rules and session settings."""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Literal

from trainer.counting.systems import CountingSystemConfig, get_counting_system
from trainer.errors import InvalidConfiguration
from trainer.strategy.betting import BettingStyle, get_betting_style

MAX_SEATS = 7
PLAY_SPEEDS = ("slow", "normal", "fast")


@dataclass(frozen=True)
class GameSettings:
    """
    Blackjack table rules and session configuration.

    Validated at construction; an invalid combination raises
    InvalidConfiguration before any shoe is built.
    """

    # Deck configuration
    num_decks: int = 6
    penetration: float = 0.75

    # Betting limits
    min_bet: int = 10
    max_bet: int = 500
    bankroll: Decimal = Decimal("1000")

    # Dealer rules
    dealer_hits_soft_17: bool = False  # H17 vs S17

    # Double / split rules
    allow_double: bool = True
    allow_split: bool = True
    double_after_split: bool = True  # DAS
    resplit_aces: bool = False  # RSA
    max_resplit_hands: int = 2

    # Surrender rules
    late_surrender: bool = False

    # Training aids
    counting_system: str = "hi-lo"
    betting_style: str = "kelly"

    # Table layout
    num_seats: int = 1
    player_seat: int = 1
    play_with_npcs: bool = False
    npc_betting_style: str = "conservative"
    play_speed: Literal["slow", "normal", "fast"] = "normal"

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if isinstance(self.num_decks, bool) or not isinstance(self.num_decks, int):
            raise InvalidConfiguration("num_decks must be an integer")
        if self.num_decks < 1 or self.num_decks > 8:
            raise InvalidConfiguration("num_decks must be between 1 and 8")
        if not 0 < self.penetration < 1:
            raise InvalidConfiguration("penetration must be between 0 and 1")
        if self.min_bet <= 0:
            raise InvalidConfiguration("min_bet must be positive")
        if self.min_bet > self.max_bet:
            raise InvalidConfiguration("min_bet cannot exceed max_bet")
        if self.bankroll < 0:
            raise InvalidConfiguration("bankroll cannot be negative")
        if self.max_resplit_hands < 1:
            raise InvalidConfiguration("max_resplit_hands must be at least 1")
        if not 1 <= self.num_seats <= MAX_SEATS:
            raise InvalidConfiguration(f"num_seats must be between 1 and {MAX_SEATS}")
        if not 1 <= self.player_seat <= self.num_seats:
            raise InvalidConfiguration("player_seat must be one of the table's seats")
        if self.play_speed not in PLAY_SPEEDS:
            raise InvalidConfiguration(f"play_speed must be one of {', '.join(PLAY_SPEEDS)}")
        get_counting_system(self.counting_system)
        get_betting_style(self.betting_style)
        get_betting_style(self.npc_betting_style)
        object.__setattr__(self, "bankroll", Decimal(str(self.bankroll)))

    @property
    def counting(self) -> CountingSystemConfig:
        """Return the selected counting system."""
        return get_counting_system(self.counting_system)

    @property
    def style(self) -> BettingStyle:
        """Return the human seat's betting style."""
        return BettingStyle(self.betting_style)

    def with_changes(self, **changes: Any) -> "GameSettings":
        """Return validated settings with some fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_config(cls, game_config: Any, **overrides: Any) -> "GameSettings":
        """
        Build settings from a ``GameConfig``-like object.

        Any attribute matching a settings field is used; ``overrides``
        take precedence.
        """
        values = {
            name: getattr(game_config, name)
            for name in cls.__dataclass_fields__
            if hasattr(game_config, name)
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def vegas_strip(cls) -> "GameSettings":
        """Standard Vegas Strip rules."""
        return cls(
            num_decks=6,
            dealer_hits_soft_17=False,
            double_after_split=True,
            resplit_aces=False,
            late_surrender=True,
        )

    @classmethod
    def downtown_vegas(cls) -> "GameSettings":
        """Downtown Las Vegas rules (typically H17)."""
        return cls(
            num_decks=6,
            dealer_hits_soft_17=True,
            double_after_split=True,
            resplit_aces=False,
            late_surrender=True,
        )

    @classmethod
    def single_deck(cls) -> "GameSettings":
        """Single deck rules."""
        return cls(
            num_decks=1,
            dealer_hits_soft_17=True,
            double_after_split=False,
            resplit_aces=False,
            late_surrender=False,
        )

    @classmethod
    def atlantic_city(cls) -> "GameSettings":
        """Atlantic City rules."""
        return cls(
            num_decks=8,
            dealer_hits_soft_17=False,
            double_after_split=True,
            resplit_aces=False,
            late_surrender=True,
        )
