"""Registry of supported card counting systems."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from trainer.cards import Rank
from trainer.errors import InvalidConfiguration


@dataclass(frozen=True)
class CountingSystemConfig:
    """
    Static description of a counting system.

    ``values`` maps every rank to its tag. Unbalanced systems (KO) are
    read as a running count; balanced systems are converted to a true
    count before they drive decisions.
    """

    key: str
    name: str
    description: str
    level: int
    needs_true_count: bool
    needs_ace_side_count: bool
    values: Mapping[Rank, float]

    @property
    def full_deck_sum(self) -> float:
        """Sum of tags over one 52-card deck (0 for balanced systems)."""
        return sum(self.values[rank] * 4 for rank in Rank)

    @property
    def is_balanced(self) -> bool:
        """Return whether a full deck counts back to zero."""
        return self.full_deck_sum == 0


def _tags(
    ace: float,
    two: float,
    three: float,
    four: float,
    five: float,
    six: float,
    seven: float,
    eight: float,
    nine: float,
    ten: float,
) -> Mapping[Rank, float]:
    """Spread one tag per blackjack value over all thirteen ranks."""
    by_value = {
        2: two,
        3: three,
        4: four,
        5: five,
        6: six,
        7: seven,
        8: eight,
        9: nine,
        10: ten,
        11: ace,
    }
    return MappingProxyType({rank: by_value[rank.blackjack_value] for rank in Rank})


HI_LO = CountingSystemConfig(
    key="hi-lo",
    name="Hi-Lo",
    description="The most popular level-one count: 2-6 are +1, 10-A are -1.",
    level=1,
    needs_true_count=True,
    needs_ace_side_count=False,
    values=_tags(ace=-1, two=1, three=1, four=1, five=1, six=1, seven=0, eight=0, nine=0, ten=-1),
)

KO = CountingSystemConfig(
    key="ko",
    name="Knock-Out (KO)",
    description="Unbalanced Hi-Lo variant counting 7 as +1; no true count conversion.",
    level=1,
    needs_true_count=False,
    needs_ace_side_count=False,
    values=_tags(ace=-1, two=1, three=1, four=1, five=1, six=1, seven=1, eight=0, nine=0, ten=-1),
)

HI_OPT_I = CountingSystemConfig(
    key="hi-opt-i",
    name="Hi-Opt I",
    description="Ace-neutral level-one count: 3-6 are +1, tens are -1.",
    level=1,
    needs_true_count=True,
    needs_ace_side_count=True,
    values=_tags(ace=0, two=0, three=1, four=1, five=1, six=1, seven=0, eight=0, nine=0, ten=-1),
)

HI_OPT_II = CountingSystemConfig(
    key="hi-opt-ii",
    name="Hi-Opt II",
    description="Level-two ace-neutral count with 4 and 5 worth +2.",
    level=2,
    needs_true_count=True,
    needs_ace_side_count=True,
    values=_tags(ace=0, two=1, three=1, four=2, five=2, six=1, seven=1, eight=0, nine=0, ten=-2),
)

ZEN = CountingSystemConfig(
    key="zen",
    name="Zen Count",
    description="Level-two count that tags the ace at -1 instead of side counting it.",
    level=2,
    needs_true_count=True,
    needs_ace_side_count=False,
    values=_tags(ace=-1, two=1, three=1, four=2, five=2, six=2, seven=1, eight=0, nine=0, ten=-2),
)

OMEGA_II = CountingSystemConfig(
    key="omega-ii",
    name="Omega II",
    description="Level-two balanced count with a separate ace side count.",
    level=2,
    needs_true_count=True,
    needs_ace_side_count=True,
    values=_tags(ace=0, two=1, three=1, four=2, five=2, six=2, seven=1, eight=0, nine=-1, ten=-2),
)

WONG_HALVES = CountingSystemConfig(
    key="halves",
    name="Wong Halves",
    description="Level-three balanced count using half-point tags.",
    level=3,
    needs_true_count=True,
    needs_ace_side_count=False,
    values=_tags(
        ace=-1, two=0.5, three=1, four=1, five=1.5, six=1, seven=0.5, eight=0, nine=-0.5, ten=-1
    ),
)


COUNTING_SYSTEMS: Mapping[str, CountingSystemConfig] = MappingProxyType(
    {
        system.key: system
        for system in (HI_LO, KO, HI_OPT_I, HI_OPT_II, ZEN, OMEGA_II, WONG_HALVES)
    }
)


def get_counting_system(key: str) -> CountingSystemConfig:
    """
    Look up a counting system by key.

    Raises:
        InvalidConfiguration: If the key is not registered
    """
    try:
        return COUNTING_SYSTEMS[key]
    except KeyError:
        known = ", ".join(COUNTING_SYSTEMS)
        raise InvalidConfiguration(f"Unknown counting system {key!r} (known: {known})") from None
