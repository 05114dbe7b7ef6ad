"""Configuration management with environment variable support."""

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal
from random import Random

from trainer.strategy.rules import GameSettings


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


def _parse_seed() -> int | None:
    """Parse TRAINER_SEED; unset or empty means OS entropy."""
    seed = os.getenv("TRAINER_SEED", "").strip()
    return int(seed) if seed else None


@dataclass(frozen=True)
class GameConfig:
    """Default table configuration."""

    num_decks: int = 6
    penetration: float = 0.75
    min_bet: int = 10
    max_bet: int = 500
    bankroll: Decimal = Decimal("1000")
    dealer_hits_soft_17: bool = False
    allow_double: bool = True
    allow_split: bool = True
    double_after_split: bool = True
    resplit_aces: bool = False
    max_resplit_hands: int = 2
    late_surrender: bool = False
    counting_system: str = "hi-lo"
    betting_style: str = "kelly"
    num_seats: int = 1
    player_seat: int = 1
    play_with_npcs: bool = False
    npc_betting_style: str = "conservative"


@dataclass(frozen=True)
class PacingConfig:
    """Round pacing configuration."""

    play_speed: str = field(default_factory=lambda: os.getenv("PLAY_SPEED", "normal").lower())
    instant: bool = field(default_factory=lambda: _env_flag("INSTANT_PLAY"))


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_flag("DEBUG"))
    seed: int | None = field(default_factory=_parse_seed)

    game: GameConfig = field(default_factory=GameConfig)
    pacing: PacingConfig = field(default_factory=PacingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def settings(self, **overrides) -> GameSettings:
        """Build validated table settings from the configured defaults."""
        overrides.setdefault("play_speed", self.pacing.play_speed)
        return GameSettings.from_config(self.game, **overrides)

    def rng(self) -> Random | None:
        """Seeded generator for reproducible shoes, or None for OS entropy."""
        return Random(self.seed) if self.seed is not None else None


def configure_logging(app_config: AppConfig | None = None) -> None:
    """Install a stream handler at the configured level (DEBUG when debugging)."""
    app_config = app_config or config
    level = logging.DEBUG if app_config.debug else getattr(logging, app_config.logging.level, logging.INFO)
    logging.basicConfig(level=level, format=app_config.logging.format)
    logging.getLogger("trainer").setLevel(level)


# Global configuration instance
config = AppConfig()
