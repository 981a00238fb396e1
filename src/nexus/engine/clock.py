"""Clocks and the debounce timer.

Timer-driven behavior (sync trigger, debounced saves) reads time only
through a Clock, so tests can drive it with ManualClock instead of
sleeping. A Debouncer holds a single deadline that every ``touch()``
pushes forward; ``due()`` reports when the quiet period has elapsed.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Clock(Protocol):
    """Monotonic time source, in seconds."""

    def now(self) -> float: ...


class MonotonicClock:
    """Real clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Deterministic clock for tests. Time moves only via advance()."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("Cannot move a clock backwards")
        self._now += seconds


class Debouncer:
    """Single-deadline debounce timer.

    Thread-safe: touch() may be called from any thread while another
    thread polls due().
    """

    def __init__(self, delay: float, clock: Clock | None = None) -> None:
        self._delay = delay
        self._clock = clock or MonotonicClock()
        self._deadline: float | None = None
        self._lock = threading.Lock()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._deadline is not None

    def touch(self) -> None:
        """(Re)start the quiet period from now."""
        with self._lock:
            self._deadline = self._clock.now() + self._delay

    def cancel(self) -> None:
        with self._lock:
            self._deadline = None

    def due(self) -> bool:
        """True once a pending deadline has passed."""
        with self._lock:
            return self._deadline is not None and self._clock.now() >= self._deadline

    def consume(self) -> bool:
        """If due, clear the deadline and return True (fire at most once)."""
        with self._lock:
            if self._deadline is not None and self._clock.now() >= self._deadline:
                self._deadline = None
                return True
            return False


class BackgroundPoller:
    """Calls ``poll`` from a daemon thread every ``interval`` seconds.

    Exceptions raised by ``poll`` are logged and polling continues.
    """

    def __init__(
        self,
        poll: Callable[[], object],
        *,
        interval: float = 0.25,
        name: str = "nexus-poller",
    ) -> None:
        self._poll = poll
        self._interval = interval
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.alive:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            try:
                self._poll()
            except Exception:
                logger.exception("%s: poll failed", self._name)
