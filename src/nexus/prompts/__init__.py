"""Prompt text and builders for agent turns and reconciliation."""

from nexus.prompts.agents import (
    ARCHITECT_PERSONA,
    CRITIC_PERSONA,
    ENGINEER_PERSONA,
    default_agents,
)
from nexus.prompts.context import build_context_prompt, build_turn_messages
from nexus.prompts.synthesis import (
    SYNTHESIS_SCHEMA,
    SYNTHESIS_SYSTEM,
    build_synthesis_messages,
    build_synthesis_prompt,
)

__all__ = [
    "ARCHITECT_PERSONA",
    "ENGINEER_PERSONA",
    "CRITIC_PERSONA",
    "default_agents",
    "build_context_prompt",
    "build_turn_messages",
    "SYNTHESIS_SYSTEM",
    "SYNTHESIS_SCHEMA",
    "build_synthesis_messages",
    "build_synthesis_prompt",
]
