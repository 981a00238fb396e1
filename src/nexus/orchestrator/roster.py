"""Agent roster: registration order, priority, mute, and runtime status.

Descriptors are frozen; priority and mute changes swap in a replaced
descriptor under the same role, keeping its registration slot so ties
in the execution queue stay in registration order.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import TYPE_CHECKING

from nexus.exceptions import DuplicateAgentError, UnknownAgentError
from nexus.models.agents import AgentDescriptor, AgentPriority, AgentStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)


class AgentRoster:
    """Registered agents plus their volatile runtime state.

    Usage::

        roster = AgentRoster(default_agents())
        roster.mute("CRITIC")
        for agent in roster.execution_queue():
            ...
    """

    def __init__(self, agents: Iterable[AgentDescriptor] = ()) -> None:
        self._agents: dict[str, AgentDescriptor] = {}
        self._status: dict[str, AgentStatus] = {}
        self._unread: set[str] = set()
        self._failed: set[str] = set()
        self._lock = threading.RLock()
        for agent in agents:
            self.register(agent)

    # ------------------------------------------------------------------
    # Registration and lookup
    # ------------------------------------------------------------------

    def register(self, agent: AgentDescriptor) -> AgentDescriptor:
        """Add an agent at the end of the registration order.

        Raises:
            DuplicateAgentError: If the role is already registered.
        """
        with self._lock:
            if agent.role in self._agents:
                raise DuplicateAgentError(agent.role)
            self._agents[agent.role] = agent
            self._status[agent.role] = AgentStatus.IDLE
        return agent

    def get(self, role: str) -> AgentDescriptor:
        """Raises UnknownAgentError if ``role`` is not registered."""
        with self._lock:
            try:
                return self._agents[role]
            except KeyError:
                raise UnknownAgentError(role) from None

    def roles(self) -> list[str]:
        with self._lock:
            return list(self._agents)

    def agents(self) -> list[AgentDescriptor]:
        """All agents in registration order."""
        with self._lock:
            return list(self._agents.values())

    def __contains__(self, role: object) -> bool:
        with self._lock:
            return role in self._agents

    def __iter__(self) -> Iterator[AgentDescriptor]:
        return iter(self.agents())

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)

    # ------------------------------------------------------------------
    # Operator controls
    # ------------------------------------------------------------------

    def set_priority(self, role: str, priority: AgentPriority | str) -> AgentDescriptor:
        return self._update(role, priority=AgentPriority(priority))

    def cycle_priority(self, role: str) -> AgentDescriptor:
        """Advance LOW -> NORMAL -> HIGH -> LOW."""
        with self._lock:
            return self._update(role, priority=self.get(role).priority.cycle())

    def mute(self, role: str) -> AgentDescriptor:
        return self._update(role, muted=True)

    def unmute(self, role: str) -> AgentDescriptor:
        return self._update(role, muted=False)

    def toggle_mute(self, role: str) -> AgentDescriptor:
        with self._lock:
            return self._update(role, muted=not self.get(role).muted)

    def _update(self, role: str, **changes: object) -> AgentDescriptor:
        with self._lock:
            agent = replace(self.get(role), **changes)
            self._agents[role] = agent
        logger.debug("Agent %s updated: %s", role, changes)
        return agent

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def execution_queue(self) -> list[AgentDescriptor]:
        """Unmuted agents, highest priority first.

        ``sorted`` is stable, so equal priorities keep registration order.
        """
        with self._lock:
            active = [agent for agent in self._agents.values() if not agent.muted]
        return sorted(active, key=lambda agent: agent.priority.rank, reverse=True)

    def resolve(self, target: str | None) -> list[AgentDescriptor]:
        """Agents a round should run for ``target``.

        None or ``"all"`` selects the execution queue. A role name selects
        that agent alone, muted or not.

        Raises:
            UnknownAgentError: If the role is not registered.
        """
        if target is None or target.lower() == "all":
            return self.execution_queue()
        return [self.get(target)]

    # ------------------------------------------------------------------
    # Runtime status
    # ------------------------------------------------------------------

    def status(self, role: str) -> AgentStatus:
        with self._lock:
            self.get(role)
            return self._status[role]

    def set_status(self, role: str, status: AgentStatus) -> None:
        with self._lock:
            self.get(role)
            self._status[role] = status
            if status == AgentStatus.ERROR:
                self._failed.add(role)
            elif status == AgentStatus.IDLE:
                self._failed.discard(role)

    def statuses(self) -> dict[str, AgentStatus]:
        with self._lock:
            return dict(self._status)

    def failed(self) -> list[AgentDescriptor]:
        """Agents whose last turn failed, in execution order."""
        with self._lock:
            agents = [self._agents[role] for role in self._agents if role in self._failed]
        return sorted(agents, key=lambda agent: agent.priority.rank, reverse=True)

    def mark_all_unread(self) -> None:
        with self._lock:
            self._unread = set(self._agents)

    def mark_read(self, role: str) -> None:
        with self._lock:
            self._unread.discard(role)

    def unread(self) -> set[str]:
        with self._lock:
            return set(self._unread)
