"""Data models for Nexus: shared state, agents, transcript, errors, config."""

from nexus.models.agents import (
    SYSTEM_AUTHOR,
    USER_AUTHOR,
    AgentDescriptor,
    AgentPriority,
    AgentRole,
    AgentStatus,
)
from nexus.models.config import NexusConfig
from nexus.models.errors import REMEDIATION_HINTS, ErrorKind, ErrorRecord
from nexus.models.state import (
    UNNAMED_ARTIFACT,
    STATE_FIELDS,
    ContextState,
    StateUpdate,
)
from nexus.models.transcript import (
    EntryKind,
    ToolInvocation,
    ToolStatus,
    TranscriptEntry,
)

__all__ = [
    "AgentDescriptor",
    "AgentPriority",
    "AgentRole",
    "AgentStatus",
    "USER_AUTHOR",
    "SYSTEM_AUTHOR",
    "NexusConfig",
    "ErrorKind",
    "ErrorRecord",
    "REMEDIATION_HINTS",
    "ContextState",
    "StateUpdate",
    "UNNAMED_ARTIFACT",
    "STATE_FIELDS",
    "EntryKind",
    "ToolInvocation",
    "ToolStatus",
    "TranscriptEntry",
]
