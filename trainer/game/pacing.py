"""Scheduled, cancellable round transitions."""

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable

logger = logging.getLogger(__name__)


class TransitionKind(Enum):
    """What a pending step shows, which decides how long it waits."""

    CARD = auto()  # A card leaves the shoe or turns over
    DECISION = auto()  # A seat or the dealer acts
    RESULT = auto()  # Settlement becomes visible


@dataclass(frozen=True)
class PacingPreset:
    """Per-kind delays in seconds."""

    card: float
    decision: float
    result: float

    def delay_for(self, kind: TransitionKind) -> float:
        return {
            TransitionKind.CARD: self.card,
            TransitionKind.DECISION: self.decision,
            TransitionKind.RESULT: self.result,
        }[kind]


class PlaySpeed(Enum):
    """Play speed presets."""

    SLOW = "slow"
    NORMAL = "normal"
    FAST = "fast"

    @property
    def preset(self) -> PacingPreset:
        return _PRESETS[self]


_PRESETS = {
    PlaySpeed.SLOW: PacingPreset(card=1.2, decision=2.0, result=2.5),
    PlaySpeed.NORMAL: PacingPreset(card=0.8, decision=1.2, result=1.5),
    PlaySpeed.FAST: PacingPreset(card=0.4, decision=0.6, result=0.8),
}


class CancellationToken:
    """Shared flag marking every step of one transition chain as stale."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class PendingTransition:
    """A step waiting in the queue."""

    kind: TransitionKind
    delay: float
    step: Callable[[], None]
    token: CancellationToken
    label: str = ""
    waited: float = field(default=0.0, compare=False)


class TransitionQueue:
    """
    FIFO of scheduled round steps.

    A step's delay starts counting once it reaches the head of the queue,
    so steps run strictly in the order they were scheduled. Steps may
    schedule further steps. Cancelling drops every pending step of the
    current chain; steps holding a cancelled token never run.
    """

    def __init__(self, speed: PlaySpeed = PlaySpeed.NORMAL) -> None:
        """
        Initialize an empty queue.

        Args:
            speed: Preset deciding the delay of each kind of step
        """
        self.speed = speed
        self._queue: deque[PendingTransition] = deque()
        self._token = CancellationToken()

    @property
    def token(self) -> CancellationToken:
        """Return the token of the chain currently in flight."""
        return self._token

    def schedule(
        self,
        kind: TransitionKind,
        step: Callable[[], None],
        label: str = "",
    ) -> PendingTransition:
        """
        Append a step to the current chain.

        Args:
            kind: Kind of step (decides the delay)
            step: Callable run when the step is due
            label: Name for logging

        Returns:
            The queued transition
        """
        pending = PendingTransition(
            kind=kind,
            delay=self.speed.preset.delay_for(kind),
            step=step,
            token=self._token,
            label=label,
        )
        self._queue.append(pending)
        return pending

    def update(self, dt: float) -> int:
        """
        Advance time by ``dt`` seconds and run every step that falls due.

        Returns:
            Number of steps run
        """
        budget = dt
        ran = 0
        while self._queue:
            head = self._queue[0]
            if head.token.cancelled:
                self._queue.popleft()
                continue
            remaining = head.delay - head.waited
            if remaining > budget:
                head.waited += budget
                break
            budget -= remaining
            self._queue.popleft()
            self._run(head)
            ran += 1
        return ran

    def drain(self) -> int:
        """
        Run every pending step immediately, including steps they schedule.

        Returns:
            Number of steps run
        """
        ran = 0
        while self._queue:
            head = self._queue.popleft()
            if head.token.cancelled:
                continue
            self._run(head)
            ran += 1
        return ran

    def cancel(self) -> int:
        """
        Cancel the chain in flight and start a fresh token.

        Returns:
            Number of pending steps discarded
        """
        dropped = len(self._queue)
        self._token.cancel()
        self._queue.clear()
        self._token = CancellationToken()
        if dropped:
            logger.debug("Cancelled %d pending transitions", dropped)
        return dropped

    def _run(self, pending: PendingTransition) -> None:
        logger.debug("Running %s step %s", pending.kind.name.lower(), pending.label or "<anonymous>")
        pending.step()

    @property
    def pending(self) -> int:
        """Return the number of queued steps."""
        return len(self._queue)

    @property
    def is_idle(self) -> bool:
        """Check whether nothing is waiting."""
        return not self._queue

    def __len__(self) -> int:
        return len(self._queue)
