"""Tests for AgentRoster scheduling and runtime status."""

from __future__ import annotations

import pytest

from nexus.exceptions import DuplicateAgentError, UnknownAgentError
from nexus.models.agents import AgentDescriptor, AgentPriority, AgentStatus
from nexus.orchestrator import AgentRoster
from nexus.prompts import default_agents


def _agent(role: str, priority: AgentPriority = AgentPriority.NORMAL, muted: bool = False) -> AgentDescriptor:
    return AgentDescriptor(role=role, name=role.title(), persona="p", priority=priority, muted=muted)


def _roles(agents) -> list[str]:
    return [agent.role for agent in agents]


class TestExecutionQueue:
    def test_priority_order(self) -> None:
        roster = AgentRoster([
            _agent("A", AgentPriority.HIGH),
            _agent("B", AgentPriority.LOW),
            _agent("C", AgentPriority.NORMAL),
        ])
        assert _roles(roster.execution_queue()) == ["A", "C", "B"]

    def test_ties_keep_registration_order(self) -> None:
        roster = AgentRoster([_agent("X"), _agent("Y"), _agent("Z")])
        assert _roles(roster.execution_queue()) == ["X", "Y", "Z"]

    def test_muted_excluded(self) -> None:
        roster = AgentRoster([_agent("A"), _agent("B", muted=True)])
        assert _roles(roster.execution_queue()) == ["A"]

    def test_all_muted_is_empty(self) -> None:
        roster = AgentRoster([_agent("A", muted=True)])
        assert roster.execution_queue() == []

    def test_priority_change_reorders_but_keeps_slot(self) -> None:
        roster = AgentRoster([_agent("A"), _agent("B"), _agent("C")])
        roster.set_priority("C", AgentPriority.HIGH)
        roster.set_priority("A", "LOW")
        assert _roles(roster.execution_queue()) == ["C", "B", "A"]
        assert roster.roles() == ["A", "B", "C"]

    def test_default_roster(self) -> None:
        roster = AgentRoster(default_agents())
        assert _roles(roster.execution_queue()) == ["ARCHITECT", "ENGINEER", "CRITIC"]


class TestResolve:
    def test_all(self) -> None:
        roster = AgentRoster([_agent("A"), _agent("B", muted=True)])
        assert _roles(roster.resolve(None)) == ["A"]
        assert _roles(roster.resolve("all")) == ["A"]
        assert _roles(roster.resolve("ALL")) == ["A"]

    def test_named_target_runs_even_if_muted(self) -> None:
        roster = AgentRoster([_agent("A"), _agent("B", muted=True)])
        assert _roles(roster.resolve("B")) == ["B"]

    def test_unknown_target(self) -> None:
        with pytest.raises(UnknownAgentError):
            AgentRoster([_agent("A")]).resolve("NOPE")


class TestControls:
    def test_duplicate_rejected(self) -> None:
        roster = AgentRoster([_agent("A")])
        with pytest.raises(DuplicateAgentError):
            roster.register(_agent("A"))

    def test_unknown_get(self) -> None:
        with pytest.raises(UnknownAgentError) as exc_info:
            AgentRoster().get("GHOST")
        assert exc_info.value.role == "GHOST"

    def test_cycle_priority(self) -> None:
        roster = AgentRoster([_agent("A", AgentPriority.LOW)])
        assert roster.cycle_priority("A").priority == AgentPriority.NORMAL
        assert roster.cycle_priority("A").priority == AgentPriority.HIGH
        assert roster.cycle_priority("A").priority == AgentPriority.LOW

    def test_mute_toggle(self) -> None:
        roster = AgentRoster([_agent("A")])
        assert roster.toggle_mute("A").muted is True
        assert roster.toggle_mute("A").muted is False
        roster.mute("A")
        assert roster.get("A").muted is True
        roster.unmute("A")
        assert roster.get("A").muted is False

    def test_invalid_priority(self) -> None:
        with pytest.raises(ValueError):
            AgentRoster([_agent("A")]).set_priority("A", "URGENT")


class TestStatus:
    def test_starts_idle(self) -> None:
        roster = AgentRoster([_agent("A")])
        assert roster.status("A") == AgentStatus.IDLE

    def test_failed_set(self) -> None:
        roster = AgentRoster([_agent("A", AgentPriority.LOW), _agent("B", AgentPriority.HIGH)])
        roster.set_status("A", AgentStatus.ERROR)
        roster.set_status("B", AgentStatus.ERROR)
        assert _roles(roster.failed()) == ["B", "A"]
        roster.set_status("B", AgentStatus.PROCESSING)
        assert _roles(roster.failed()) == ["B", "A"]
        roster.set_status("B", AgentStatus.IDLE)
        assert _roles(roster.failed()) == ["A"]

    def test_unread(self) -> None:
        roster = AgentRoster([_agent("A"), _agent("B")])
        roster.mark_all_unread()
        roster.mark_read("A")
        assert roster.unread() == {"B"}
