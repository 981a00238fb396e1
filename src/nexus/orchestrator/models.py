"""Turn and round result models.

Provides TurnResult and RoundResult, the frozen records returned by the
orchestrator for each agent turn and for each round.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nexus.models.errors import ErrorRecord
    from nexus.models.transcript import ToolInvocation, TranscriptEntry
    from nexus.store import StateChange

ALL_AGENTS = "all"


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one agent turn.

    Frozen: turn results are immutable records of what happened.

    Attributes:
        role: The agent that ran.
        entry: The transcript entry appended for this turn. On failure
            this is the system-visible failure entry.
        change: The committed store write from the turn's tool calls, if
            any field changed.
        error: The recorded failure, or None on success.
    """

    role: str
    entry: TranscriptEntry
    change: StateChange | None = None
    error: ErrorRecord | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def invocations(self) -> tuple[ToolInvocation, ...]:
        return self.entry.tool_invocations


@dataclass(frozen=True)
class RoundResult:
    """Outcome of one round over the resolved execution queue.

    Attributes:
        target: ``"all"`` or the role the round was addressed to.
        turns: One TurnResult per agent, in execution order.
    """

    target: str = ALL_AGENTS
    turns: list[TurnResult] = field(default_factory=list)

    @property
    def order(self) -> list[str]:
        return [turn.role for turn in self.turns]

    @property
    def succeeded(self) -> list[TurnResult]:
        return [turn for turn in self.turns if turn.success]

    @property
    def failed(self) -> list[TurnResult]:
        return [turn for turn in self.turns if not turn.success]

    @property
    def entries(self) -> list[TranscriptEntry]:
        return [turn.entry for turn in self.turns]
