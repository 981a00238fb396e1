"""Error classification models.

ErrorKind is the closed taxonomy every provider failure is mapped onto.
Each kind carries a fixed remediation hint.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone


class ErrorKind(str, enum.Enum):
    """Classification of a completion failure."""

    AUTH = "AUTH"
    RATE_LIMIT = "RATE_LIMIT"
    SERVER = "SERVER"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN = "UNKNOWN"

    @property
    def hint(self) -> str:
        return REMEDIATION_HINTS[self]


REMEDIATION_HINTS: dict[ErrorKind, str] = {
    ErrorKind.AUTH: "Credential missing or invalid. Set NEXUS_API_KEY and restart.",
    ErrorKind.RATE_LIMIT: (
        "Provider is throttling requests. Try again after a cooldown (about 60s)."
    ),
    ErrorKind.SERVER: (
        "Upstream is temporarily unreachable. Try again after a short cooldown."
    ),
    ErrorKind.INVALID_REQUEST: (
        "Request was blocked by the provider's content policy. Rephrase the prompt."
    ),
    ErrorKind.UNKNOWN: "Check the system logs for details.",
}


@dataclass(frozen=True)
class ErrorRecord:
    """A recorded failure.

    Kept in a bounded rolling log for operator visibility and replayed at
    the next startup.
    """

    kind: ErrorKind
    message: str
    context: str = ""
    hint: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def describe(self) -> str:
        return f"[{self.kind.value}] {self.message}"
