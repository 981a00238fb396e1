"""Transcript entry and tool invocation models.

Entries are immutable records: once appended to the transcript they are
never edited. Tool invocations are created pending and finalized by the
tool executor before the owning entry is built.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone


class ToolStatus(str, enum.Enum):
    """Lifecycle status of a tool invocation."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class EntryKind(str, enum.Enum):
    """What produced a transcript entry."""

    MESSAGE = "message"
    ERROR = "error"
    SYNTHESIS = "synthesis"
    RESTORE = "restore"


@dataclass(frozen=True)
class ToolInvocation:
    """One tool call made during an agent turn.

    Attributes:
        tool_name: Name of the tool the agent asked for.
        arguments: Argument mapping as received from the model.
        status: pending until the executor finalizes it.
        outcome: Human-readable result or failure description.
        call_id: Provider-assigned call id, if any.
    """

    tool_name: str
    arguments: dict = field(default_factory=dict)
    status: ToolStatus = ToolStatus.PENDING
    outcome: str = ""
    call_id: str | None = None

    def succeed(self, outcome: str) -> ToolInvocation:
        return replace(self, status=ToolStatus.SUCCESS, outcome=outcome)

    def fail(self, outcome: str) -> ToolInvocation:
        return replace(self, status=ToolStatus.FAILURE, outcome=outcome)

    @property
    def succeeded(self) -> bool:
        return self.status == ToolStatus.SUCCESS


def _new_entry_id() -> str:
    return uuid.uuid4().hex[:12]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TranscriptEntry:
    """A single transcript message.

    Attributes:
        author: Agent role, ``USER`` or ``SYSTEM``.
        content: Message text.
        kind: What produced the entry.
        tool_invocations: Finalized tool results from the turn, in call order.
        id: Unique entry id.
        created_at: Creation timestamp (UTC).
    """

    author: str
    content: str
    kind: EntryKind = EntryKind.MESSAGE
    tool_invocations: tuple[ToolInvocation, ...] = ()
    id: str = field(default_factory=_new_entry_id)
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if isinstance(self.tool_invocations, list):
            object.__setattr__(self, "tool_invocations", tuple(self.tool_invocations))
        if any(inv.status == ToolStatus.PENDING for inv in self.tool_invocations):
            raise ValueError("Transcript entries cannot carry pending tool invocations")

    def render(self) -> str:
        """Format as ``AUTHOR: content`` for prompt windows."""
        return f"{self.author}: {self.content}"
