"""Tests for the debounced synchronization trigger.

Time is driven with ManualClock and ``poll()``; no test sleeps.
"""

from __future__ import annotations

from nexus.engine.clock import ManualClock
from nexus.sync import SyncTrigger, TriggerState

SMALL = "line 1\nline 2"
BIG = "\n".join(f"line {i}" for i in range(12))


class RecordingDetector:
    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.calls: list[tuple[str, str]] = []

    def __call__(self, previous: str, current: str) -> bool:
        self.calls.append((previous, current))
        return self.answer


def _trigger(detector=None, baseline: str = "", delay: float = 3.0):
    clock = ManualClock()
    runs: list[int] = []
    trigger = SyncTrigger(
        lambda: runs.append(1),
        detector=detector,
        clock=clock,
        delay=delay,
        baseline=baseline,
    )
    return trigger, clock, runs


class TestDebounce:
    def test_burst_coalesces_into_one_check(self) -> None:
        detector = RecordingDetector()
        trigger, clock, runs = _trigger(detector, baseline="v0")

        trigger.notify("v1")
        clock.advance(1.0)
        trigger.notify("v2")
        clock.advance(1.0)
        trigger.notify("v3")
        clock.advance(2.9)
        assert trigger.poll() is False
        clock.advance(0.1)
        assert trigger.poll() is True

        assert detector.calls == [("v0", "v3")]
        assert runs == [1]
        assert trigger.check_count == 1
        assert trigger.baseline == "v3"
        assert trigger.state == TriggerState.IDLE

    def test_notify_equal_to_baseline_is_ignored(self) -> None:
        trigger, clock, runs = _trigger(RecordingDetector(), baseline="same")
        trigger.notify("same")
        assert trigger.state == TriggerState.IDLE
        clock.advance(10)
        assert trigger.poll() is False

    def test_poll_when_idle(self) -> None:
        trigger, _, runs = _trigger()
        assert trigger.poll() is False
        assert trigger.check_count == 0

    def test_fires_once_per_burst(self) -> None:
        detector = RecordingDetector()
        trigger, clock, runs = _trigger(detector)
        trigger.notify(BIG)
        clock.advance(3.0)
        trigger.poll()
        clock.advance(3.0)
        assert trigger.poll() is False
        assert len(detector.calls) == 1


class TestSignificance:
    def test_insignificant_change_keeps_baseline(self) -> None:
        detector = RecordingDetector(answer=False)
        trigger, clock, runs = _trigger(detector, baseline="v0")
        trigger.notify("v1")
        clock.advance(3.0)
        assert trigger.poll() is False
        assert runs == []
        assert trigger.baseline == "v0"
        assert trigger.check_count == 1

        trigger.notify("v2")
        clock.advance(3.0)
        trigger.poll()
        assert detector.calls[-1] == ("v0", "v2")

    def test_empty_artifact_never_reconciles(self) -> None:
        detector = RecordingDetector()
        trigger, clock, runs = _trigger(detector, baseline=BIG)
        trigger.notify("")
        clock.advance(3.0)
        assert trigger.poll() is False
        assert detector.calls == []
        assert runs == []
        assert trigger.check_count == 1

    def test_default_detector_threshold(self) -> None:
        trigger, clock, runs = _trigger()
        trigger.notify(SMALL)
        clock.advance(3.0)
        assert trigger.poll() is False
        trigger.notify(BIG)
        clock.advance(3.0)
        assert trigger.poll() is True
        assert runs == [1]


class TestRunning:
    def test_notify_while_running_rearms(self) -> None:
        clock = ManualClock()
        trigger = None
        states = []

        def reconcile() -> None:
            states.append(trigger.state)
            trigger.notify("v2")

        trigger = SyncTrigger(
            reconcile, detector=RecordingDetector(), clock=clock, delay=3.0, baseline="v0"
        )
        trigger.notify("v1")
        clock.advance(3.0)
        assert trigger.poll() is True

        assert states == [TriggerState.RUNNING]
        assert trigger.state == TriggerState.DEBOUNCE_PENDING
        assert trigger.baseline == "v1"

        clock.advance(3.0)
        assert trigger.poll() is True
        assert trigger.baseline == "v2"
        assert trigger.state == TriggerState.IDLE

    def test_failing_reconcile_still_advances_baseline(self) -> None:
        clock = ManualClock()

        def reconcile() -> None:
            raise RuntimeError("boom")

        trigger = SyncTrigger(reconcile, detector=RecordingDetector(), clock=clock, baseline="v0")
        trigger.notify("v1")
        clock.advance(3.0)
        try:
            trigger.poll()
        except RuntimeError:
            pass
        assert trigger.baseline == "v1"
        assert trigger.state == TriggerState.IDLE


class TestReset:
    def test_reset_drops_pending(self) -> None:
        detector = RecordingDetector()
        trigger, clock, runs = _trigger(detector, baseline="v0")
        trigger.notify("v1")
        trigger.reset("")
        clock.advance(5.0)
        assert trigger.poll() is False
        assert trigger.baseline == ""
        assert detector.calls == []

    def test_mark_reconciled(self) -> None:
        trigger, _, _ = _trigger(baseline="v0")
        trigger.mark_reconciled("v9")
        assert trigger.baseline == "v9"
        trigger.notify("v9")
        assert trigger.state == TriggerState.IDLE
