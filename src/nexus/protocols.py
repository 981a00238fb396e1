"""Boundary protocols and output types for Nexus.

The core depends on three collaborators only through these interfaces:

- **AgentCompletion** -- one agent turn and one reconciliation call
  against a language model.
- **Persistence** -- load the shared state at startup, save it on change.
- **ErrorSink** -- durable rolling log of recent failures, replayed at
  the next startup.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from nexus.models.agents import AgentDescriptor
    from nexus.models.errors import ErrorRecord
    from nexus.models.state import ContextState
    from nexus.models.transcript import TranscriptEntry
    from nexus.toolkit.models import ToolCall


@dataclass(frozen=True)
class TurnResponse:
    """Output of one agent turn: message text plus requested tool calls."""

    text: str
    tool_calls: tuple[ToolCall, ...] = ()
    usage: dict | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.tool_calls, list):
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))


@dataclass(frozen=True)
class Reconciliation:
    """Structured output of a reconciliation call.

    ``rationale`` is for logging only and is never merged into state.
    """

    objective: str
    scratchpad: str
    rationale: str = ""


@runtime_checkable
class AgentCompletion(Protocol):
    """Language-model service used by the completion gateway."""

    def run(
        self,
        agent: AgentDescriptor,
        window: Sequence[TranscriptEntry],
        state: ContextState,
    ) -> TurnResponse:
        """Produce one agent turn. The persona is ``agent.persona``."""
        ...

    def reconcile(
        self,
        window: Sequence[TranscriptEntry],
        state: ContextState,
    ) -> Reconciliation:
        """Re-derive objective and scratchpad from transcript and state."""
        ...


@runtime_checkable
class Persistence(Protocol):
    """Storage for the shared state between sessions."""

    def load(self) -> ContextState:
        """Return the saved state, or a default ContextState if none."""
        ...

    def save(self, state: ContextState) -> None:
        """Persist the given state."""
        ...

    def clear(self) -> None:
        """Forget any saved state."""
        ...


@runtime_checkable
class ErrorSink(Protocol):
    """Durable rolling log of the last N failures."""

    def record(self, record: ErrorRecord) -> None:
        ...

    def drain(self) -> list[ErrorRecord]:
        """Return all retained records (oldest first) and forget them."""
        ...
