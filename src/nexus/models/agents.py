"""Agent descriptor models.

An AgentDescriptor is the static configuration of one collaborating agent
(role, persona, display metadata) plus the two operator-controlled knobs
that may change at runtime: priority and mute.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class AgentRole(str, enum.Enum):
    """Built-in agent roles.

    Roles are plain strings on the wire; custom roles are allowed anywhere
    a role is accepted.
    """

    ARCHITECT = "ARCHITECT"
    ENGINEER = "ENGINEER"
    CRITIC = "CRITIC"


# Non-agent transcript authors
USER_AUTHOR = "USER"
SYSTEM_AUTHOR = "SYSTEM"


class AgentPriority(str, enum.Enum):
    """Execution priority within a round. Ordering: LOW < NORMAL < HIGH."""

    HIGH = "HIGH"
    NORMAL = "NORMAL"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    def cycle(self) -> AgentPriority:
        """Next priority in the LOW -> NORMAL -> HIGH -> LOW cycle."""
        return _PRIORITY_CYCLE[self]


_PRIORITY_RANK: dict[AgentPriority, int] = {
    AgentPriority.HIGH: 3,
    AgentPriority.NORMAL: 2,
    AgentPriority.LOW: 1,
}

_PRIORITY_CYCLE: dict[AgentPriority, AgentPriority] = {
    AgentPriority.LOW: AgentPriority.NORMAL,
    AgentPriority.NORMAL: AgentPriority.HIGH,
    AgentPriority.HIGH: AgentPriority.LOW,
}


class AgentStatus(str, enum.Enum):
    """Runtime status of an agent."""

    IDLE = "idle"
    PROCESSING = "processing"
    ERROR = "error"


@dataclass(frozen=True)
class AgentDescriptor:
    """Configuration for one agent.

    Frozen: priority and mute changes go through the roster, which swaps
    in a replaced descriptor.

    Attributes:
        role: Role identifier, also used as the transcript author.
        name: Display name.
        persona: System instruction sent with every turn.
        description: One-line description of the agent's focus.
        avatar: Short display glyph.
        color: Display color hint.
        priority: Execution priority within a round.
        muted: Muted agents are excluded from "all agents" rounds.
        model: Per-agent model override (None = client default).
        temperature: Per-agent sampling temperature override.
    """

    role: str
    name: str
    persona: str
    description: str = ""
    avatar: str = ""
    color: str = ""
    priority: AgentPriority = AgentPriority.NORMAL
    muted: bool = False
    model: str | None = None
    temperature: float | None = None

    def __post_init__(self) -> None:
        if isinstance(self.role, AgentRole):
            object.__setattr__(self, "role", self.role.value)
