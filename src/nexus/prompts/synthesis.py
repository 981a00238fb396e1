"""Prompts and response schema for the reconciliation pass."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nexus.models.state import ContextState
    from nexus.models.transcript import TranscriptEntry

SYNTHESIS_SYSTEM: str = (
    "You are the Nexus core: the central process monitoring the "
    "communication between collaborating AI agents (Architect, Engineer, "
    "Critic) and the user.\n\n"
    "Your mission:\n"
    "1. Analyze the chat AND the active file content for new decisions, "
    "inconsistencies, or direction changes.\n"
    "2. Resolve conflicting information between agents.\n"
    "3. Update the objective if it has evolved.\n"
    "4. Update the scratchpad to reflect the latest consensus or plan.\n\n"
    "Output JSON only."
)

SYNTHESIS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "objective": {"type": "string", "description": "The refined objective"},
        "scratchpad": {
            "type": "string",
            "description": "The updated shared notes/scratchpad",
        },
        "reasoning": {
            "type": "string",
            "description": "Brief explanation of what was resolved or updated",
        },
    },
    "required": ["objective", "scratchpad", "reasoning"],
    "additionalProperties": False,
}


def build_synthesis_prompt(window: Sequence[TranscriptEntry], state: ContextState) -> str:
    history = "\n".join(entry.render() for entry in window) or "(no messages)"
    return (
        "CURRENT STATE:\n"
        f"Objective: {state.objective}\n"
        f"Scratchpad: {state.scratchpad}\n"
        f"Active File: {state.artifact_label}\n"
        "Active File Content:\n"
        "```\n"
        f"{state.artifact_content}\n"
        "```\n\n"
        "RECENT CHAT LOG:\n"
        f"{history}"
    )


def build_synthesis_messages(
    window: Sequence[TranscriptEntry], state: ContextState
) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": SYNTHESIS_SYSTEM},
        {"role": "user", "content": build_synthesis_prompt(window, state)},
    ]
