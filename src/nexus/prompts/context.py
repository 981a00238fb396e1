"""Prompt builders for agent turns."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nexus.models.agents import AgentDescriptor
    from nexus.models.state import ContextState
    from nexus.models.transcript import TranscriptEntry


def build_context_prompt(state: ContextState, role: str) -> str:
    """Render the shared state block shown to an agent."""
    return (
        "=== SHARED NEXUS STATE ===\n"
        f"CURRENT OBJECTIVE: {state.objective or 'No objective set.'}\n"
        f"ACTIVE FILE ({state.artifact_label}):\n"
        "```\n"
        f"{state.artifact_content or '// No content'}\n"
        "```\n"
        "SHARED SCRATCHPAD:\n"
        f"{state.scratchpad or '(Empty)'}\n"
        "==========================\n\n"
        f"You are the {role}.\n"
        "Read the shared state above. To change the objective, scratchpad or "
        "active file, call the 'update_nexus_state' tool. Call "
        "'get_active_file' to check the file's size."
    )


def build_turn_messages(
    agent: AgentDescriptor,
    window: Sequence[TranscriptEntry],
    state: ContextState,
) -> list[dict[str, Any]]:
    """Build the chat messages for one agent turn.

    The persona goes in the system message, each transcript entry becomes
    a user or assistant message prefixed with its author, and a final
    trigger message carries the current shared state.
    """
    messages: list[dict[str, Any]] = [{"role": "system", "content": agent.persona}]
    for entry in window:
        role = "assistant" if entry.author == agent.role else "user"
        messages.append({"role": role, "content": entry.render()})
    messages.append({
        "role": "user",
        "content": (
            "[SYSTEM TRIGGER]: The user or another agent has updated the Nexus.\n"
            f"{build_context_prompt(state, agent.role)}\n\n"
            "Based on the conversation history and this state, provide your "
            f"input as {agent.role}."
        ),
    })
    return messages
