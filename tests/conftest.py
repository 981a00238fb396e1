"""Shared test fixtures for Nexus.

Provides a scripted AgentCompletion, a manual clock, and helpers that
build in-memory sessions. No test touches the network.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from nexus.engine.clock import ManualClock
from nexus.models.config import NexusConfig
from nexus.protocols import Reconciliation, TurnResponse
from nexus.session import Nexus
from nexus.storage.persistence import MemoryPersistence
from nexus.toolkit.models import ToolCall


@dataclass
class RecordedTurn:
    role: str
    window: tuple
    state: object


class FakeCompletion:
    """Scripted AgentCompletion.

    ``turns`` maps a role to a list of scripted results consumed in order.
    Each item is a TurnResponse, an exception to raise, or a callable
    ``(agent, window, state) -> TurnResponse``. A role with nothing left
    answers ``"<ROLE> ok"``.
    """

    def __init__(self, turns: dict | None = None, reconciliations: list | None = None) -> None:
        self.turns = {role: list(items) for role, items in (turns or {}).items()}
        self.reconciliations = list(reconciliations or [])
        self.calls: list[RecordedTurn] = []
        self.reconcile_calls: list[tuple] = []

    def script(self, role: str, *items) -> None:
        self.turns.setdefault(role, []).extend(items)

    def run(self, agent, window, state):
        self.calls.append(RecordedTurn(role=agent.role, window=tuple(window), state=state))
        queue = self.turns.get(agent.role)
        item = queue.pop(0) if queue else TurnResponse(text=f"{agent.role} ok")
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(agent, window, state)
        return item

    def reconcile(self, window, state):
        self.reconcile_calls.append((tuple(window), state))
        item = (
            self.reconciliations.pop(0)
            if self.reconciliations
            else Reconciliation(objective=state.objective, scratchpad=state.scratchpad)
        )
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def order(self) -> list[str]:
        return [call.role for call in self.calls]


def update_call(**arguments) -> ToolCall:
    """An update_nexus_state tool call with the given wire arguments."""
    return ToolCall(name="update_nexus_state", arguments=arguments, id=None)


def make_nexus(
    completion: FakeCompletion | None = None,
    *,
    clock: ManualClock | None = None,
    persistence: MemoryPersistence | None = None,
    **config,
) -> Nexus:
    """Open an in-memory session around a FakeCompletion."""
    config.setdefault("api_key", "test-key")
    return Nexus.open(
        config=NexusConfig(**config),
        completion=completion if completion is not None else FakeCompletion(),
        persistence=persistence if persistence is not None else MemoryPersistence(),
        clock=clock or ManualClock(),
    )


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def persistence() -> MemoryPersistence:
    return MemoryPersistence()


@pytest.fixture
def nexus(completion, clock, persistence):
    n = make_nexus(completion, clock=clock, persistence=persistence)
    yield n
    n.close()
