"""Append-only transcript.

The transcript is the shared conversational memory passed to every agent
turn. Entries are only ever appended; readers get tuples, so a reader
iterating a window is never affected by a concurrent append.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator

from nexus.models.transcript import TranscriptEntry


class Transcript:
    """Thread-safe, append-only sequence of TranscriptEntry."""

    def __init__(self, entries: Iterable[TranscriptEntry] = ()) -> None:
        self._entries: list[TranscriptEntry] = list(entries)
        self._lock = threading.Lock()

    def append(self, entry: TranscriptEntry) -> TranscriptEntry:
        with self._lock:
            self._entries.append(entry)
        return entry

    def entries(self) -> tuple[TranscriptEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def window(self, size: int) -> tuple[TranscriptEntry, ...]:
        """The ``size`` most recent entries, oldest first."""
        if size <= 0:
            return ()
        with self._lock:
            return tuple(self._entries[-size:])

    def since(self, index: int) -> tuple[TranscriptEntry, ...]:
        """Entries appended at or after position ``index``."""
        with self._lock:
            return tuple(self._entries[index:])

    def last(self) -> TranscriptEntry | None:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(self.entries())
