"""Table events for the event system."""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 1000


class EventType(Enum):
    """Types of table events."""

    # Shoe events
    SHOE_SHUFFLED = auto()
    SHOE_CUT = auto()
    PENETRATION_MARKER_SET = auto()
    CARD_BURNED = auto()
    RESHUFFLE_NEEDED = auto()

    # Round flow events
    PHASE_CHANGED = auto()
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()
    ROUND_VOIDED = auto()
    TURN_CHANGED = auto()

    # Betting events
    BET_PLACED = auto()
    BET_CLEARED = auto()
    SEAT_SITS_OUT = auto()
    HAND_SETTLED = auto()

    # Card events
    CARD_DEALT = auto()

    # Player action events
    PLAYER_HIT = auto()
    PLAYER_STAND = auto()
    PLAYER_DOUBLE = auto()
    PLAYER_SPLIT = auto()
    PLAYER_SURRENDER = auto()
    PLAYER_BLACKJACK = auto()
    PLAYER_BUSTS = auto()

    # Insurance events
    INSURANCE_OFFERED = auto()
    INSURANCE_TAKEN = auto()
    INSURANCE_DECLINED = auto()
    INSURANCE_WINS = auto()
    INSURANCE_LOSES = auto()

    # Dealer events
    DEALER_REVEALS = auto()
    DEALER_HITS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()
    DEALER_BLACKJACK = auto()

    # Error events
    INVALID_ACTION = auto()
    INSUFFICIENT_FUNDS = auto()


@dataclass(frozen=True)
class GameEvent:
    """
    Something that happened at the table.

    The table never calls into a presentation layer; views subscribe to
    these records instead and read ``data`` for the details.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


Handler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Dispatches table events and keeps the most recent ones.

    A handler registered for ``None`` receives all event types, after the
    handlers registered for the specific type. Only the last
    ``history_limit`` events are kept.
    """

    def __init__(self, history_limit: int = HISTORY_LIMIT) -> None:
        self._subscribers: dict[EventType | None, list[Handler]] = {}
        self._log: deque[GameEvent] = deque(maxlen=history_limit)

    def subscribe(self, handler: Handler, event_type: EventType | None = None) -> None:
        """
        Register ``handler`` for one event type.

        Args:
            handler: Called with each matching event
            event_type: Type to listen for; None listens for everything
        """
        self._subscribers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, handler: Handler, event_type: EventType | None = None) -> None:
        """Remove a handler; unknown handlers are ignored."""
        registered = self._subscribers.get(event_type, [])
        if handler in registered:
            registered.remove(handler)

    def emit(self, event: GameEvent) -> None:
        """Record ``event`` and hand it to its subscribers."""
        self._log.append(event)
        logger.debug("%s", event)

        for handler in [*self._subscribers.get(event.event_type, []), *self._subscribers.get(None, [])]:
            handler(event)

    def emit_new(self, event_type: EventType, **data: Any) -> GameEvent:
        """Build an event from keyword data, emit it and return it."""
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    def of_type(self, event_type: EventType) -> list[GameEvent]:
        """Return the recorded events of one type, oldest first."""
        return [event for event in self._log if event.event_type == event_type]

    @property
    def history(self) -> list[GameEvent]:
        """The retained events, oldest first (a copy)."""
        return list(self._log)

    def clear_history(self) -> None:
        self._log.clear()
