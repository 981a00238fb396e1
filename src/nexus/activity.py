"""Operator-facing activity log.

A bounded, newest-last trail of what the engine did: turns started, tools
applied, failures, synthesis results. Every entry is also forwarded to the
module logger so the trail shows up in regular logging output.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

logger = logging.getLogger(__name__)


class ActivityKind(str, enum.Enum):
    INFO = "INFO"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"
    LOG = "LOG"


_LOG_LEVELS: dict[ActivityKind, int] = {
    ActivityKind.INFO: logging.INFO,
    ActivityKind.ERROR: logging.ERROR,
    ActivityKind.SUCCESS: logging.INFO,
    ActivityKind.LOG: logging.DEBUG,
}


@dataclass(frozen=True)
class ActivityEntry:
    kind: ActivityKind
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def render(self) -> str:
        return f"{self.created_at:%H:%M:%S} [{self.kind.value}] {self.message}"


class ActivityLog:
    """Thread-safe ring buffer of ActivityEntry."""

    def __init__(self, max_entries: int = 100) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._entries: deque[ActivityEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def add(self, kind: ActivityKind | str, message: str) -> ActivityEntry:
        entry = ActivityEntry(kind=ActivityKind(kind), message=message)
        with self._lock:
            self._entries.append(entry)
        logger.log(_LOG_LEVELS[entry.kind], "%s", message)
        return entry

    def info(self, message: str) -> ActivityEntry:
        return self.add(ActivityKind.INFO, message)

    def error(self, message: str) -> ActivityEntry:
        return self.add(ActivityKind.ERROR, message)

    def success(self, message: str) -> ActivityEntry:
        return self.add(ActivityKind.SUCCESS, message)

    def log(self, message: str) -> ActivityEntry:
        return self.add(ActivityKind.LOG, message)

    def entries(self) -> list[ActivityEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
