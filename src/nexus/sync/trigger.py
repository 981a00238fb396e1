"""Synchronization trigger: debounced, change-gated automatic reconciliation.

State machine::

    IDLE --notify(content != baseline)--> DEBOUNCE_PENDING
    DEBOUNCE_PENDING --notify--> DEBOUNCE_PENDING (deadline pushed back)
    DEBOUNCE_PENDING --poll() after deadline--> RUNNING
    RUNNING --done--> IDLE, or DEBOUNCE_PENDING if notified meanwhile

When the debounce fires, the detector compares the baseline (the artifact
as of the last reconciliation attempt) with the latest content. Only a
significant change runs the reconciliation, and only a completed attempt
moves the baseline. Time is read through an injectable Clock, so tests
drive the machine with ``poll()`` and a ManualClock.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import TYPE_CHECKING, Callable

from nexus.engine.change import ChangeDetector
from nexus.engine.clock import BackgroundPoller, Debouncer

if TYPE_CHECKING:
    from nexus.engine.clock import Clock

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 3.0


class TriggerState(str, enum.Enum):
    IDLE = "idle"
    DEBOUNCE_PENDING = "debounce_pending"
    RUNNING = "running"


class SyncTrigger:
    """Watches artifact content and fires reconciliation on significant change.

    Args:
        reconcile: Called with no arguments when a significant change is
            detected. Expected to contain its own failures.
        detector: ``(previous, current) -> bool`` significance check.
        clock: Time source for the debounce timer.
        delay: Debounce quiet period in seconds.
        baseline: Artifact content considered already reconciled.
        poll_interval: Sleep between polls of the background thread.
    """

    def __init__(
        self,
        reconcile: Callable[[], object],
        *,
        detector: Callable[[str, str], bool] | None = None,
        clock: Clock | None = None,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        baseline: str = "",
        poll_interval: float = 0.25,
    ) -> None:
        self._reconcile = reconcile
        self._detector = detector or ChangeDetector()
        self._debouncer = Debouncer(delay, clock)
        self._baseline = baseline
        self._latest = baseline
        self._state = TriggerState.IDLE
        self._checks = 0
        self._lock = threading.Lock()
        self._poller = BackgroundPoller(self.poll, interval=poll_interval, name="nexus-sync")

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> TriggerState:
        with self._lock:
            return self._state

    @property
    def baseline(self) -> str:
        with self._lock:
            return self._baseline

    @property
    def check_count(self) -> int:
        """Number of significance checks performed."""
        with self._lock:
            return self._checks

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def notify(self, content: str) -> None:
        """Report a new artifact value."""
        with self._lock:
            self._latest = content
            if self._state == TriggerState.IDLE and content == self._baseline:
                return
            self._debouncer.touch()
            if self._state == TriggerState.IDLE:
                self._state = TriggerState.DEBOUNCE_PENDING
                logger.debug("Sync debounce armed (%.1fs)", self._debouncer.delay)

    def mark_reconciled(self, content: str) -> None:
        """Move the baseline after a reconciliation run outside the trigger."""
        with self._lock:
            self._baseline = content

    def reset(self, baseline: str = "") -> None:
        """Drop any pending debounce and start over from ``baseline``."""
        with self._lock:
            self._debouncer.cancel()
            self._baseline = baseline
            self._latest = baseline
            if self._state != TriggerState.RUNNING:
                self._state = TriggerState.IDLE

    def poll(self) -> bool:
        """Advance the state machine.

        Returns:
            True if this call ran a reconciliation.
        """
        with self._lock:
            if self._state != TriggerState.DEBOUNCE_PENDING or not self._debouncer.consume():
                return False
            self._state = TriggerState.RUNNING
            previous, current = self._baseline, self._latest
            self._checks += 1

        ran = False
        try:
            # An empty artifact never starts a reconciliation.
            if current and self._detector(previous, current):
                logger.info("Significant artifact change detected; running reconciliation")
                ran = True
                try:
                    self._reconcile()
                finally:
                    with self._lock:
                        self._baseline = current
            else:
                logger.debug("Artifact change below significance threshold")
        finally:
            with self._lock:
                self._state = (
                    TriggerState.DEBOUNCE_PENDING
                    if self._debouncer.pending
                    else TriggerState.IDLE
                )
        return ran

    # ------------------------------------------------------------------
    # Background polling
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Poll from a daemon thread until ``stop()``."""
        self._poller.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._poller.stop(timeout)

    @property
    def running_in_background(self) -> bool:
        return self._poller.alive
