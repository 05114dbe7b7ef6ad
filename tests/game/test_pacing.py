"""Tests for the scheduled transition queue."""

import pytest

from trainer.game import PlaySpeed, TransitionKind, TransitionQueue


@pytest.fixture
def queue():
    return TransitionQueue(PlaySpeed.FAST)


class TestTransitionQueue:
    """Tests for ordering, timing and cancellation."""

    def test_steps_run_in_order(self, queue):
        ran = []
        queue.schedule(TransitionKind.CARD, lambda: ran.append("first"))
        queue.schedule(TransitionKind.CARD, lambda: ran.append("second"))
        queue.schedule(TransitionKind.RESULT, lambda: ran.append("third"))
        assert queue.drain() == 3
        assert ran == ["first", "second", "third"]
        assert queue.is_idle

    def test_delay_counts_from_head(self, queue):
        ran = []
        queue.schedule(TransitionKind.CARD, lambda: ran.append(1))
        queue.schedule(TransitionKind.CARD, lambda: ran.append(2))
        # 0.4s per card at fast speed
        assert queue.update(0.3) == 0
        assert queue.update(0.2) == 1
        assert ran == [1]
        assert queue.update(0.25) == 0
        assert queue.update(0.25) == 1
        assert ran == [1, 2]

    def test_one_update_can_run_several_steps(self, queue):
        ran = []
        for n in range(3):
            queue.schedule(TransitionKind.CARD, lambda n=n: ran.append(n))
        assert queue.update(1.0) == 2
        assert queue.pending == 1

    def test_steps_may_schedule_steps(self, queue):
        ran = []

        def first():
            ran.append("first")
            queue.schedule(TransitionKind.DECISION, lambda: ran.append("follow-up"))

        queue.schedule(TransitionKind.CARD, first)
        assert queue.drain() == 2
        assert ran == ["first", "follow-up"]

    def test_cancel_drops_pending(self, queue):
        ran = []
        queue.schedule(TransitionKind.CARD, lambda: ran.append(1))
        queue.schedule(TransitionKind.CARD, lambda: ran.append(2))
        assert queue.cancel() == 2
        assert queue.update(10) == 0
        assert ran == []
        assert len(queue) == 0

    def test_cancel_from_inside_a_step(self, queue):
        ran = []

        def abort():
            ran.append("abort")
            queue.cancel()

        queue.schedule(TransitionKind.CARD, abort)
        queue.schedule(TransitionKind.CARD, lambda: ran.append("stale"))
        queue.drain()
        assert ran == ["abort"]

    def test_stale_token_never_runs(self, queue):
        ran = []
        pending = queue.schedule(TransitionKind.CARD, lambda: ran.append("old"))
        old_token = queue.token
        queue.cancel()
        assert old_token.cancelled
        assert not queue.token.cancelled
        assert pending.token is old_token

    @pytest.mark.parametrize(
        "speed, kind, delay",
        [
            (PlaySpeed.SLOW, TransitionKind.DECISION, 2.0),
            (PlaySpeed.NORMAL, TransitionKind.CARD, 0.8),
            (PlaySpeed.NORMAL, TransitionKind.RESULT, 1.5),
            (PlaySpeed.FAST, TransitionKind.DECISION, 0.6),
        ],
    )
    def test_delays_follow_speed(self, speed, kind, delay):
        queue = TransitionQueue(speed)
        assert queue.schedule(kind, lambda: None).delay == delay

    def test_speed_change_applies_to_new_steps(self, queue):
        queue.schedule(TransitionKind.CARD, lambda: None)
        queue.speed = PlaySpeed.SLOW
        later = queue.schedule(TransitionKind.CARD, lambda: None)
        assert later.delay == 1.2
