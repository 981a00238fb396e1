"""Persistence and error-sink implementations.

- **SqlitePersistence** -- SQLAlchemy-backed; implements both the
  Persistence and ErrorSink protocols.
- **MemoryPersistence** -- in-process equivalent for tests and embedding.
- **StateSaver** -- store listener that debounces saves and never raises.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from nexus.engine.clock import BackgroundPoller, Debouncer
from nexus.exceptions import PersistenceError
from nexus.models.errors import ErrorRecord
from nexus.models.state import ContextState
from nexus.storage.engine import create_nexus_engine, create_session_factory, init_db
from nexus.storage.schema import ContextStateRow, ErrorRecordRow

if TYPE_CHECKING:
    from sqlalchemy import Engine

    from nexus.engine.clock import Clock
    from nexus.protocols import Persistence
    from nexus.store import StateChange

logger = logging.getLogger(__name__)

DEFAULT_ERROR_LOG_SIZE = 5
_STATE_ROW_ID = 1


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class SqlitePersistence:
    """Shared state and rolling error log in one SQLite database.

    Usage::

        persistence = SqlitePersistence.open(".nexus.db")
        state = persistence.load()
        persistence.save(state)
        persistence.record(ErrorRecord(kind=ErrorKind.SERVER, message="503"))
    """

    def __init__(self, engine: Engine, *, max_errors: int = DEFAULT_ERROR_LOG_SIZE) -> None:
        if max_errors < 1:
            raise ValueError("max_errors must be >= 1")
        self._engine = engine
        self._session_factory = create_session_factory(engine)
        self._max_errors = max_errors
        self._lock = threading.Lock()
        init_db(engine)

    @classmethod
    def open(
        cls,
        db_path: str = ":memory:",
        *,
        max_errors: int = DEFAULT_ERROR_LOG_SIZE,
    ) -> SqlitePersistence:
        return cls(create_nexus_engine(db_path), max_errors=max_errors)

    @property
    def engine(self) -> Engine:
        return self._engine

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> ContextState:
        """Return the saved state, or a default ContextState.

        Raises:
            PersistenceError: If the database cannot be read.
        """
        try:
            with self._lock, self._session_factory() as session:
                row = session.get(ContextStateRow, _STATE_ROW_ID)
                if row is None:
                    return ContextState()
                return ContextState(
                    objective=row.objective,
                    scratchpad=row.scratchpad,
                    artifact_name=row.artifact_name,
                    artifact_content=row.artifact_content,
                )
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot load saved state: {exc}") from exc

    def save(self, state: ContextState) -> None:
        """Upsert the single state row.

        Raises:
            PersistenceError: If the write fails.
        """
        try:
            with self._lock, self._session_factory() as session, session.begin():
                row = session.get(ContextStateRow, _STATE_ROW_ID)
                if row is None:
                    row = ContextStateRow(id=_STATE_ROW_ID)
                    session.add(row)
                row.objective = state.objective
                row.scratchpad = state.scratchpad
                row.artifact_name = state.artifact_name
                row.artifact_content = state.artifact_content
                row.updated_at = datetime.now(timezone.utc)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot save state: {exc}") from exc

    def clear(self) -> None:
        """Forget the saved state."""
        try:
            with self._lock, self._session_factory() as session, session.begin():
                session.execute(delete(ContextStateRow))
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot clear saved state: {exc}") from exc

    # ------------------------------------------------------------------
    # ErrorSink
    # ------------------------------------------------------------------

    def record(self, record: ErrorRecord) -> None:
        """Append a record, pruning the oldest beyond ``max_errors``."""
        try:
            with self._lock, self._session_factory() as session, session.begin():
                session.add(
                    ErrorRecordRow(
                        kind=record.kind,
                        message=record.message,
                        context=record.context,
                        hint=record.hint,
                        created_at=record.created_at,
                    )
                )
                session.flush()
                count = session.execute(select(func.count(ErrorRecordRow.id))).scalar_one()
                excess = count - self._max_errors
                if excess > 0:
                    oldest = session.execute(
                        select(ErrorRecordRow.id).order_by(ErrorRecordRow.id).limit(excess)
                    ).scalars().all()
                    session.execute(delete(ErrorRecordRow).where(ErrorRecordRow.id.in_(oldest)))
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot record error: {exc}") from exc

    def errors(self) -> list[ErrorRecord]:
        """Retained records, oldest first, without removing them."""
        try:
            with self._lock, self._session_factory() as session:
                rows = session.execute(
                    select(ErrorRecordRow).order_by(ErrorRecordRow.id)
                ).scalars().all()
                return [self._to_record(row) for row in rows]
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot read error log: {exc}") from exc

    def drain(self) -> list[ErrorRecord]:
        """Return all retained records (oldest first) and delete them."""
        try:
            with self._lock, self._session_factory() as session, session.begin():
                rows = session.execute(
                    select(ErrorRecordRow).order_by(ErrorRecordRow.id)
                ).scalars().all()
                records = [self._to_record(row) for row in rows]
                session.execute(delete(ErrorRecordRow))
                return records
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot drain error log: {exc}") from exc

    def clear_errors(self) -> None:
        try:
            with self._lock, self._session_factory() as session, session.begin():
                session.execute(delete(ErrorRecordRow))
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Cannot clear error log: {exc}") from exc

    def close(self) -> None:
        self._engine.dispose()

    @staticmethod
    def _to_record(row: ErrorRecordRow) -> ErrorRecord:
        return ErrorRecord(
            kind=row.kind,
            message=row.message,
            context=row.context,
            hint=row.hint,
            created_at=_as_utc(row.created_at),
        )


class MemoryPersistence:
    """In-process Persistence + ErrorSink."""

    def __init__(
        self,
        state: ContextState | None = None,
        *,
        max_errors: int = DEFAULT_ERROR_LOG_SIZE,
    ) -> None:
        self._state = state
        self._errors: deque[ErrorRecord] = deque(maxlen=max_errors)
        self._lock = threading.Lock()
        self.save_count = 0

    def load(self) -> ContextState:
        with self._lock:
            return self._state if self._state is not None else ContextState()

    def save(self, state: ContextState) -> None:
        with self._lock:
            self._state = state
            self.save_count += 1

    def clear(self) -> None:
        with self._lock:
            self._state = None

    def record(self, record: ErrorRecord) -> None:
        with self._lock:
            self._errors.append(record)

    def errors(self) -> list[ErrorRecord]:
        with self._lock:
            return list(self._errors)

    def drain(self) -> list[ErrorRecord]:
        with self._lock:
            records = list(self._errors)
            self._errors.clear()
            return records

    def clear_errors(self) -> None:
        with self._lock:
            self._errors.clear()

    def close(self) -> None:
        pass


class StateSaver:
    """Debounced, best-effort saving of committed state.

    Subscribe an instance to the store; each change restarts the quiet
    period and the latest state is written once it elapses. A failed
    save is logged and dropped; the next change tries again.

    Usage::

        saver = StateSaver(persistence, delay=2.0)
        store.subscribe(saver)
        saver.start()
    """

    def __init__(
        self,
        persistence: Persistence,
        *,
        delay: float = 2.0,
        clock: Clock | None = None,
        poll_interval: float = 0.25,
    ) -> None:
        self._persistence = persistence
        self._debouncer = Debouncer(delay, clock)
        self._pending: ContextState | None = None
        self._lock = threading.Lock()
        self._poller = BackgroundPoller(self.poll, interval=poll_interval, name="nexus-saver")

    def __call__(self, change: StateChange) -> None:
        self.schedule(change.current)

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, state: ContextState) -> None:
        with self._lock:
            self._pending = state
        self._debouncer.touch()

    def poll(self) -> bool:
        """Save if the quiet period has elapsed. Returns True if saved."""
        if not self._debouncer.consume():
            return False
        return self.flush()

    def flush(self) -> bool:
        """Save any pending state now. Returns True if a save succeeded."""
        self._debouncer.cancel()
        with self._lock:
            state, self._pending = self._pending, None
        if state is None:
            return False
        try:
            self._persistence.save(state)
        except Exception:
            logger.warning("State save failed; will retry on next change", exc_info=True)
            return False
        logger.debug("State saved")
        return True

    def discard(self) -> None:
        """Drop any pending save."""
        self._debouncer.cancel()
        with self._lock:
            self._pending = None

    def start(self) -> None:
        self._poller.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        self._poller.stop(timeout)
