"""Nexus: turn orchestration and change-triggered synchronization for agent teams.

Several language-model agents take priority-ordered turns against one
shared project state (objective, scratchpad, active file), mutate it
through tools, and see each other's work within the same round. Artifact
edits that change enough lines trigger an automatic reconciliation pass.
"""

from nexus._version import __version__

# Core entry point
from nexus.session import Nexus, build_completion

# Data models
from nexus.models.agents import (
    SYSTEM_AUTHOR,
    USER_AUTHOR,
    AgentDescriptor,
    AgentPriority,
    AgentRole,
    AgentStatus,
)
from nexus.models.config import NexusConfig
from nexus.models.errors import ErrorKind, ErrorRecord
from nexus.models.state import ContextState, StateUpdate
from nexus.models.transcript import EntryKind, ToolInvocation, ToolStatus, TranscriptEntry

# Protocols and output types
from nexus.protocols import (
    AgentCompletion,
    ErrorSink,
    Persistence,
    Reconciliation,
    TurnResponse,
)

# Components
from nexus.activity import ActivityKind, ActivityLog
from nexus.engine.change import ChangeDetector, is_significant
from nexus.engine.clock import ManualClock, MonotonicClock
from nexus.llm.gateway import CompletionGateway, classify
from nexus.orchestrator import AgentRoster, Orchestrator, RoundResult, TurnResult
from nexus.store import SharedStateStore, StateChange
from nexus.storage import MemoryPersistence, SqlitePersistence, StateSaver
from nexus.sync import SyncSource, SyncTrigger, SynthesisResult, Synthesizer, TriggerState
from nexus.toolkit import ToolCall, ToolExecutor
from nexus.transcript import Transcript

# Exceptions
from nexus.exceptions import (
    CompletionError,
    DuplicateAgentError,
    NexusError,
    PersistenceError,
    UnknownAgentError,
)

__all__ = [
    "__version__",
    # Core
    "Nexus",
    "build_completion",
    # Models
    "AgentDescriptor",
    "AgentPriority",
    "AgentRole",
    "AgentStatus",
    "USER_AUTHOR",
    "SYSTEM_AUTHOR",
    "NexusConfig",
    "ErrorKind",
    "ErrorRecord",
    "ContextState",
    "StateUpdate",
    "EntryKind",
    "ToolInvocation",
    "ToolStatus",
    "TranscriptEntry",
    # Protocols
    "AgentCompletion",
    "ErrorSink",
    "Persistence",
    "Reconciliation",
    "TurnResponse",
    # Components
    "ActivityKind",
    "ActivityLog",
    "ChangeDetector",
    "is_significant",
    "ManualClock",
    "MonotonicClock",
    "CompletionGateway",
    "classify",
    "AgentRoster",
    "Orchestrator",
    "RoundResult",
    "TurnResult",
    "SharedStateStore",
    "StateChange",
    "MemoryPersistence",
    "SqlitePersistence",
    "StateSaver",
    "SyncSource",
    "SyncTrigger",
    "SynthesisResult",
    "Synthesizer",
    "TriggerState",
    "ToolCall",
    "ToolExecutor",
    "Transcript",
    # Exceptions
    "NexusError",
    "CompletionError",
    "DuplicateAgentError",
    "PersistenceError",
    "UnknownAgentError",
]
