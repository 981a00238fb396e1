"""Turn orchestration: agent roster, sequential rounds, and results."""

from nexus.orchestrator.loop import DEFAULT_TURN_WINDOW, Orchestrator
from nexus.orchestrator.models import ALL_AGENTS, RoundResult, TurnResult
from nexus.orchestrator.roster import AgentRoster

__all__ = [
    "Orchestrator",
    "AgentRoster",
    "RoundResult",
    "TurnResult",
    "ALL_AGENTS",
    "DEFAULT_TURN_WINDOW",
]
