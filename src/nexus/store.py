"""Shared State Store.

The store owns the single ContextState for a session. Callers only ever
receive immutable snapshots; every write goes through ``merge()`` or
``replace()``, which are serialized by a lock so merges apply atomically
and in a total order (last applied merge wins field by field).

Change listeners are notified after the state lock is released, in commit
order: commits queue their change under the state lock and whichever
writer holds the notify lock delivers the queue in sequence.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nexus.models.state import ContextState, StateUpdate

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StateChange:
    """A committed store write.

    Attributes:
        previous: State before the write.
        current: State after the write.
        fields: Names of fields whose values changed.
        source: Label of the writer (agent role, "synthesis", "operator").
        revision: Store revision after the write.
    """

    previous: ContextState
    current: ContextState
    fields: tuple[str, ...]
    source: str
    revision: int

    @property
    def artifact_changed(self) -> bool:
        return "artifact_content" in self.fields


class SharedStateStore:
    """Owner of the shared ContextState.

    Usage::

        store = SharedStateStore()
        store.merge(StateUpdate(scratchpad="1. design"), source="ARCHITECT")
        snapshot = store.snapshot()
    """

    def __init__(self, initial: ContextState | None = None) -> None:
        self._state = initial or ContextState()
        self._revision = 0
        self._lock = threading.RLock()
        self._notify_lock = threading.RLock()
        self._listeners: list[Callable[[StateChange], None]] = []
        self._pending: deque[StateChange] = deque()
        self._delivering = False

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> ContextState:
        """Return the current state. Safe to hold: ContextState is frozen."""
        with self._lock:
            return self._state

    @property
    def revision(self) -> int:
        """Number of committed writes that changed at least one field."""
        with self._lock:
            return self._revision

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def merge(self, update: StateUpdate, *, source: str = "") -> StateChange | None:
        """Atomically merge the update's fields into the state.

        Returns the committed StateChange, or None when the update was
        empty or every provided field already held the given value.
        """
        if update.is_empty():
            return None
        with self._lock:
            previous = self._state
            current = previous.apply(update)
            change = self._commit(previous, current, source)
        if change is not None:
            self._notify()
        return change

    def replace(self, state: ContextState, *, source: str = "") -> StateChange | None:
        """Atomically replace the whole state (used on load and reset)."""
        with self._lock:
            previous = self._state
            change = self._commit(previous, state, source)
        if change is not None:
            self._notify()
        return change

    def _commit(
        self, previous: ContextState, current: ContextState, source: str
    ) -> StateChange | None:
        fields = tuple(previous.changed_fields(current))
        if not fields:
            return None
        self._state = current
        self._revision += 1
        logger.debug(
            "State revision %d from %s: %s", self._revision, source or "?", ", ".join(fields)
        )
        change = StateChange(
            previous=previous,
            current=current,
            fields=fields,
            source=source,
            revision=self._revision,
        )
        self._pending.append(change)
        return change

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: Callable[[StateChange], None]) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[StateChange], None]) -> None:
        self._listeners = [fn for fn in self._listeners if fn != listener]

    def _notify(self) -> None:
        # Listeners never run concurrently with each other. A listener that
        # writes back leaves its change queued for the outer delivery loop.
        with self._notify_lock:
            if self._delivering:
                return
            self._delivering = True
            try:
                while True:
                    with self._lock:
                        if not self._pending:
                            return
                        change = self._pending.popleft()
                    self._deliver(change)
            finally:
                self._delivering = False

    def _deliver(self, change: StateChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.warning("State listener %r failed", listener, exc_info=True)
