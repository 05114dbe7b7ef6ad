"""Card counting systems."""

from trainer.counting.base import (
    CountTracker,
    card_point_value,
    count_signal,
    decks_remaining,
    true_count,
)
from trainer.counting.systems import (
    COUNTING_SYSTEMS,
    CountingSystemConfig,
    get_counting_system,
)

__all__ = [
    "COUNTING_SYSTEMS",
    "CountingSystemConfig",
    "CountTracker",
    "card_point_value",
    "count_signal",
    "decks_remaining",
    "get_counting_system",
    "true_count",
]
