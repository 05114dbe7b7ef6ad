"""Basic strategy tables for blackjack."""

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Mapping, Sequence

from trainer.cards import Card, Rank
from trainer.hand import Hand


class Action(Enum):
    """Possible player actions."""

    HIT = auto()
    STAND = auto()
    DOUBLE = auto()
    SPLIT = auto()
    SURRENDER = auto()

    # Conditional actions (fallback if primary not allowed)
    DOUBLE_OR_HIT = auto()  # Double if allowed, else hit
    DOUBLE_OR_STAND = auto()  # Double if allowed, else stand

    def __str__(self) -> str:
        return self.name.replace("_", "/")


@dataclass(frozen=True)
class StrategyAdvice:
    """A recommended action with a short explanation."""

    action: Action
    rationale: str


# Dealer upcards in chart column order: 2..10, A(11)
DEALER_UPCARDS = (2, 3, 4, 5, 6, 7, 8, 9, 10, 11)

_CODES = {
    "H": Action.HIT,
    "S": Action.STAND,
    "D": Action.DOUBLE_OR_HIT,
    "Ds": Action.DOUBLE_OR_STAND,
    "P": Action.SPLIT,
    "-": None,
}


@dataclass(frozen=True)
class ChartRow:
    """One chart row: a cell per dealer upcard plus a reason per resolved action."""

    cells: tuple[Action | None, ...]
    reasons: Mapping[Action, str]

    def cell(self, dealer_upcard: int) -> Action | None:
        return self.cells[DEALER_UPCARDS.index(dealer_upcard)]


def _row(chart: str, **reasons: str) -> ChartRow:
    cells = tuple(_CODES[code] for code in chart.split())
    if len(cells) != len(DEALER_UPCARDS):
        raise ValueError(f"Chart row needs {len(DEALER_UPCARDS)} cells: {chart!r}")
    return ChartRow(cells, MappingProxyType({Action[name]: text for name, text in reasons.items()}))


#                          2  3  4  5  6  7  8  9  10 A
HARD_CHART: Mapping[int, ChartRow] = MappingProxyType(
    {
        8: _row("H  H  H  H  H  H  H  H  H  H",
                HIT="{total} is too low - always hit"),
        9: _row("H  D  D  D  D  H  H  H  H  H",
                DOUBLE="Double 9 against weak dealer 3-6",
                HIT="Hit 9 to build a stronger hand"),
        10: _row("D  D  D  D  D  D  D  D  H  H",
                 DOUBLE="Double 10 against dealer weak/mid cards",
                 HIT="Hit 10 against strong dealer card"),
        11: _row("D  D  D  D  D  D  D  D  D  D",
                 DOUBLE="11 is the best double down hand - high chance of 21",
                 HIT="Hit your 11 to get closer to 21"),
        12: _row("H  H  S  S  S  H  H  H  H  H",
                 STAND="Stand on 12 vs weak dealer 4-6",
                 HIT="Hit 12 - only 4 cards bust you"),
        **{
            total: _row("S  S  S  S  S  H  H  H  H  H",
                        STAND="Stand on {total} - let dealer bust with weak {dealer}",
                        HIT="{total} is too weak against dealer {dealer} - must hit")
            for total in range(13, 17)
        },
        17: _row("S  S  S  S  S  S  S  S  S  S",
                 STAND="{total} is too risky to hit - stand"),
    }
)

#                          2  3  4  5  6  7  8  9  10 A
SOFT_CHART: Mapping[int, ChartRow] = MappingProxyType(
    {
        12: _row("H  H  H  H  H  H  H  H  H  H",
                 HIT="Hit to improve your soft hand"),
        **{
            total: _row("H  H  D  D  D  H  H  H  H  H",
                        DOUBLE="Double soft {total} against dealer's weak {dealer}",
                        HIT="Soft {total} needs improvement - hit")
            for total in range(13, 18)
        },
        18: _row("Ds Ds Ds Ds Ds S  S  H  H  H",
                 DOUBLE="Double soft 18 against weak dealer (or stand)",
                 STAND="Soft 18 is decent against mid-range dealer cards",
                 HIT="Soft 18 is weak against 9, 10, A - hit to improve"),
        19: _row("S  S  S  S  S  S  S  S  S  S",
                 STAND="Soft {total} is very strong - stand"),
    }
)

# Only SPLIT cells; "-" falls through to the soft/hard charts (5s and tens never split)
#                          2  3  4  5  6  7  8  9  10 A
PAIR_CHART: Mapping[int, ChartRow] = MappingProxyType(
    {
        2: _row("P  P  P  P  P  P  -  -  -  -",
                SPLIT="Split small pairs against weak dealer"),
        3: _row("P  P  P  P  P  P  -  -  -  -",
                SPLIT="Split small pairs against weak dealer"),
        6: _row("P  P  P  P  P  -  -  -  -  -",
                SPLIT="Split 6s when dealer shows 2-6"),
        7: _row("P  P  P  P  P  P  -  -  -  -",
                SPLIT="Split 7s against dealer 2-7"),
        8: _row("P  P  P  P  P  P  P  P  P  P",
                SPLIT="16 is a terrible hand. Split 8s to improve your position"),
        9: _row("P  P  P  P  P  -  P  P  -  -",
                SPLIT="Split 9s against weak cards (avoid 7, 10, A)"),
        11: _row("P  P  P  P  P  P  P  P  P  P",
                 SPLIT="Always split Aces - gives you two chances at 21"),
    }
)


def dealer_label(dealer_upcard: int) -> str:
    """Render a dealer upcard value (11 is shown as "A")."""
    return "A" if dealer_upcard == 11 else str(dealer_upcard)


class BasicStrategy:
    """
    Basic strategy lookup.

    Decision order: pair chart (split only), then the soft chart, then
    the hard chart. Every (category, total, dealer upcard) cell maps to
    exactly one action.
    """

    def get_action(
        self,
        player_total: int,
        dealer_upcard: int,
        is_soft: bool = False,
        pair_value: int | None = None,
        can_double: bool = True,
        can_split: bool = True,
    ) -> Action:
        """
        Get the basic strategy action.

        Args:
            player_total: Player's hand total
            dealer_upcard: Dealer's upcard value (2-11, Ace=11)
            is_soft: Whether the hand is soft
            pair_value: Blackjack value of the paired card, if a pair
            can_double: Whether doubling is allowed
            can_split: Whether splitting is allowed

        Returns:
            The recommended action
        """
        return self._lookup(player_total, dealer_upcard, is_soft, pair_value, can_double, can_split)[0]

    def advise(
        self,
        cards: Sequence[Card],
        dealer_up_rank: Rank,
        can_double: bool,
        can_split: bool,
    ) -> StrategyAdvice:
        """
        Recommend an action for a hand with its rationale.

        Args:
            cards: The player's cards
            dealer_up_rank: Rank of the dealer's face-up card
            can_double: Whether doubling is currently allowed
            can_split: Whether splitting is currently allowed
        """
        hand = Hand(list(cards))
        pair_value = cards[0].value if hand.is_pair else None
        dealer_upcard = dealer_up_rank.blackjack_value

        action, row = self._lookup(
            hand.value, dealer_upcard, hand.is_soft, pair_value, can_double, can_split
        )
        template = row.reasons[action]
        rationale = template.format(total=hand.value, dealer=dealer_label(dealer_upcard))
        return StrategyAdvice(action, rationale)

    def _lookup(
        self,
        player_total: int,
        dealer_upcard: int,
        is_soft: bool,
        pair_value: int | None,
        can_double: bool,
        can_split: bool,
    ) -> tuple[Action, ChartRow]:
        if pair_value is not None and can_split:
            row = PAIR_CHART.get(pair_value)
            if row is not None and row.cell(dealer_upcard) is Action.SPLIT:
                return Action.SPLIT, row

        if is_soft:
            row = SOFT_CHART[max(12, min(19, player_total))]
        else:
            row = HARD_CHART[max(8, min(17, player_total))]

        return self._resolve_action(row.cell(dealer_upcard), can_double), row

    def _resolve_action(self, action: Action | None, can_double: bool) -> Action:
        """Resolve conditional actions based on what's allowed."""
        if action == Action.DOUBLE_OR_HIT:
            return Action.DOUBLE if can_double else Action.HIT
        if action == Action.DOUBLE_OR_STAND:
            return Action.DOUBLE if can_double else Action.STAND
        if action is None:
            return Action.HIT
        return action

    @staticmethod
    def _flatten(chart: Mapping[int, ChartRow]) -> Mapping[tuple[int, int], Action]:
        return MappingProxyType(
            {
                (key, dealer): cell
                for key, row in chart.items()
                for dealer, cell in zip(DEALER_UPCARDS, row.cells)
                if cell is not None
            }
        )

    @property
    def hard_table(self) -> Mapping[tuple[int, int], Action]:
        """Return the hard totals table keyed by (total, dealer upcard)."""
        return self._flatten(HARD_CHART)

    @property
    def soft_table(self) -> Mapping[tuple[int, int], Action]:
        """Return the soft totals table keyed by (total, dealer upcard)."""
        return self._flatten(SOFT_CHART)

    @property
    def pair_table(self) -> Mapping[tuple[int, int], Action]:
        """Return the pair splitting table keyed by (pair value, dealer upcard)."""
        return self._flatten(PAIR_CHART)
