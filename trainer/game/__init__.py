"""Round state machine, table events and pacing."""

from trainer.game.engine import BlackjackTable, RoundResult
from trainer.game.events import EventEmitter, EventType, GameEvent
from trainer.game.pacing import PlaySpeed, TransitionKind, TransitionQueue
from trainer.game.players import Player, PlayerType
from trainer.game.snapshot import TableSnapshot
from trainer.game.state import RoundPhase

__all__ = [
    "BlackjackTable",
    "EventEmitter",
    "EventType",
    "GameEvent",
    "PlaySpeed",
    "Player",
    "PlayerType",
    "RoundPhase",
    "RoundResult",
    "TableSnapshot",
    "TransitionKind",
    "TransitionQueue",
]
