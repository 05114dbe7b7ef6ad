"""House edge calculations."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trainer.strategy.rules import GameSettings


@dataclass(frozen=True)
class RuleVariant:
    """A named table configuration with its basic-strategy house edge."""

    key: str
    name: str
    description: str
    base_house_edge: Decimal


RULE_VARIANTS: tuple[RuleVariant, ...] = (
    RuleVariant(
        "multi-h17-das",
        "4-8 Decks, H17, DAS, No Surrender",
        "Standard multi-deck game, dealer hits soft 17",
        Decimal("0.64"),
    ),
    RuleVariant(
        "strip-s17-ls",
        "4-8 Decks, S17, DAS, Late Surrender",
        "Vegas Strip rules - dealer stands on soft 17",
        Decimal("0.50"),
    ),
    RuleVariant("dd-s17-das", "1-2 Decks, S17, DAS", "Double-deck premium game", Decimal("0.35")),
    RuleVariant("6d-h17-das", "6 Decks, H17, DAS", "Common casino standard", Decimal("0.56")),
    RuleVariant(
        "8d-s17-rsa", "8 Decks, S17, DAS, Resplit Aces", "Liberal 8-deck rules", Decimal("0.40")
    ),
    RuleVariant(
        "dd-h17-das", "2 Decks, H17, DAS", "Double-deck with dealer hits soft 17", Decimal("0.46")
    ),
)

TWO_PLACES = Decimal("0.01")


def _round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class HouseEdgeCalculator:
    """
    Calculate house edge based on rule variations.

    Starts from a 0.50% baseline and applies a fixed adjustment per rule.
    """

    # Rule effects on house edge (in percentage points)
    # Positive = increases house edge (bad for player)
    # Negative = decreases house edge (good for player)
    _RULE_EFFECTS = {
        "single_deck": Decimal("-0.15"),
        "double_deck": Decimal("-0.10"),
        "six_deck": Decimal("+0.02"),
        "eight_deck": Decimal("+0.04"),
        "h17": Decimal("+0.20"),
        "das": Decimal("-0.14"),
        "late_surrender": Decimal("-0.08"),
        "resplit_aces": Decimal("-0.06"),
    }

    _BASELINE = Decimal("0.50")

    def __init__(self, settings: "GameSettings") -> None:
        """
        Initialize calculator with table settings.

        Args:
            settings: The settings to calculate edge for
        """
        self.settings = settings

    def calculate(self) -> Decimal:
        """
        Calculate the house edge for the configured rules.

        Returns:
            House edge as a percentage rounded to 2 places (e.g. 0.38)
        """
        edge = self._BASELINE

        deck_effects = {
            1: self._RULE_EFFECTS["single_deck"],
            2: self._RULE_EFFECTS["double_deck"],
            6: self._RULE_EFFECTS["six_deck"],
            8: self._RULE_EFFECTS["eight_deck"],
        }
        edge += deck_effects.get(self.settings.num_decks, Decimal("0"))

        if self.settings.dealer_hits_soft_17:
            edge += self._RULE_EFFECTS["h17"]
        if self.settings.double_after_split:
            edge += self._RULE_EFFECTS["das"]
        if self.settings.late_surrender:
            edge += self._RULE_EFFECTS["late_surrender"]
        if self.settings.resplit_aces:
            edge += self._RULE_EFFECTS["resplit_aces"]

        return _round2(edge)

    def player_advantage_with_count(
        self,
        true_count: float,
        base_edge: Decimal | None = None,
    ) -> Decimal:
        """
        Calculate player advantage for a given true count.

        Args:
            true_count: The current true count
            base_edge: Base house edge (calculated if not provided)

        Returns:
            Player advantage in percent (positive = player advantage)
        """
        if base_edge is None:
            base_edge = self.calculate()
        return player_edge(true_count, base_edge)


def player_edge(true_count: float, base_house_edge: Decimal | float) -> Decimal:
    """Return ``true_count * 0.5 - base_house_edge`` in percent, rounded to 2 places."""
    count_advantage = Decimal(str(true_count)) * Decimal("0.5")
    return _round2(count_advantage - Decimal(str(base_house_edge)))


def rule_variant_name(settings: "GameSettings") -> str:
    """Describe the table rules, e.g. ``"6 Decks, S17, DAS, LS"``."""
    decks = settings.num_decks
    name = f"{decks} Deck{'s' if decks > 1 else ''}"
    name += ", H17" if settings.dealer_hits_soft_17 else ", S17"
    if settings.double_after_split:
        name += ", DAS"
    if settings.late_surrender:
        name += ", LS"
    if settings.resplit_aces:
        name += ", RSA"
    return name
