"""ToolExecutor: turns agent tool calls into state deltas.

``apply()`` handles one call against a state snapshot and returns the
finalized ToolInvocation plus the StateUpdate it contributes.
``apply_all()`` threads a working snapshot through every call of a turn,
so later calls see earlier ones, and returns one combined delta that the
orchestrator merges into the store in a single atomic write.

The executor never raises for a bad tool call: unknown names and invalid
arguments become failure outcomes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nexus.models.state import StateUpdate
from nexus.models.transcript import ToolInvocation
from nexus.toolkit.definitions import get_all_tools, parse_tool_call
from nexus.toolkit.models import (
    InvalidToolCall,
    ReadStateCall,
    UnknownToolCall,
    UpdateStateCall,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nexus.models.state import ContextState
    from nexus.toolkit.models import ToolCall

logger = logging.getLogger(__name__)

_FIELD_LABELS = {
    "objective": "objective",
    "scratchpad": "scratchpad",
    "artifact_name": "activeFileName",
    "artifact_content": "activeFileContent",
}


@dataclass(frozen=True)
class TurnEffects:
    """Combined result of applying every tool call from one turn.

    Attributes:
        invocations: Finalized invocations, in call order.
        update: Combined delta to merge into the store (may be empty).
        state: The working snapshot after all calls.
    """

    invocations: tuple[ToolInvocation, ...]
    update: StateUpdate
    state: ContextState

    @property
    def failures(self) -> list[ToolInvocation]:
        return [inv for inv in self.invocations if not inv.succeeded]


class ToolExecutor:
    """Applies tool calls to state snapshots.

    Usage::

        executor = ToolExecutor()
        invocation, delta = executor.apply(call, store.snapshot())
        if invocation.succeeded:
            store.merge(delta)
    """

    def available_tools(self) -> list[str]:
        return [tool.name for tool in get_all_tools()]

    def definitions(self) -> list[dict]:
        """Tool definitions in OpenAI function-calling format."""
        return [tool.to_openai() for tool in get_all_tools()]

    def apply(self, call: ToolCall, state: ContextState) -> tuple[ToolInvocation, StateUpdate]:
        """Apply one tool call against ``state``.

        Returns:
            (finalized ToolInvocation, StateUpdate). The update is empty
            for read-only and failed calls.
        """
        pending = ToolInvocation(
            tool_name=call.name,
            arguments=dict(call.arguments) if isinstance(call.arguments, dict) else {},
            call_id=call.id,
        )
        parsed = parse_tool_call(call)

        if isinstance(parsed, UpdateStateCall):
            fields = parsed.update.fields()
            if not fields:
                return pending.succeed("No fields provided; nothing changed"), StateUpdate()
            labels = ", ".join(_FIELD_LABELS[name] for name in fields)
            return pending.succeed(f"Nexus state updated: {labels}"), parsed.update

        if isinstance(parsed, ReadStateCall):
            outcome = (
                f"File: {state.artifact_label}\n"
                f"Size: {state.artifact_bytes} bytes\n"
                f"Lines: {state.artifact_lines}"
            )
            return pending.succeed(outcome), StateUpdate()

        if isinstance(parsed, InvalidToolCall):
            logger.debug("Invalid arguments for %s: %s", call.name, parsed.reason)
            return pending.fail(f"Invalid arguments for {call.name}: {parsed.reason}"), StateUpdate()

        if isinstance(parsed, UnknownToolCall):
            logger.debug("Unknown tool requested: %s", call.name)
            available = ", ".join(self.available_tools())
            return (
                pending.fail(f"Unknown tool: {call.name}. Available tools: {available}"),
                StateUpdate(),
            )

        raise TypeError(f"Unhandled tool call variant: {type(parsed).__name__}")

    def apply_all(self, calls: Iterable[ToolCall], state: ContextState) -> TurnEffects:
        """Apply a turn's tool calls in order against a working snapshot."""
        working = state
        combined = StateUpdate()
        invocations: list[ToolInvocation] = []
        for call in calls:
            invocation, delta = self.apply(call, working)
            invocations.append(invocation)
            if not delta.is_empty():
                working = working.apply(delta)
                combined = combined.combine(delta)
        return TurnEffects(invocations=tuple(invocations), update=combined, state=working)
