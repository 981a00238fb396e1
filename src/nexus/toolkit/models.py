"""Toolkit data models.

ToolCall is the raw request coming back from a model turn. Before it
touches state it is parsed into one variant of a closed union:

- UpdateStateCall -- merge any subset of the four state fields
- ReadStateCall -- report artifact name, byte length and line count
- UnknownToolCall -- name not in the capability set
- InvalidToolCall -- known name, arguments failed validation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from collections.abc import Callable

    from nexus.models.state import StateUpdate


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation request with its arguments."""

    name: str
    arguments: dict = field(default_factory=dict)
    id: str | None = None


@dataclass(frozen=True)
class UpdateStateCall:
    call: ToolCall
    update: StateUpdate


@dataclass(frozen=True)
class ReadStateCall:
    call: ToolCall


@dataclass(frozen=True)
class UnknownToolCall:
    call: ToolCall


@dataclass(frozen=True)
class InvalidToolCall:
    call: ToolCall
    reason: str


ParsedToolCall = Union[UpdateStateCall, ReadStateCall, UnknownToolCall, InvalidToolCall]


@dataclass(frozen=True)
class ToolDefinition:
    """A single tool definition for LLM consumption.

    Attributes:
        name: Tool name (e.g. "update_nexus_state").
        description: Human-readable description of when/why to use this tool.
        parameters: JSON Schema dict describing tool parameters.
        parse: Callable turning a raw ToolCall into a ParsedToolCall.
    """

    name: str
    description: str
    parameters: dict
    parse: Callable[[ToolCall], ParsedToolCall]

    def to_openai(self) -> dict:
        """Convert to OpenAI function-calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def to_anthropic(self) -> dict:
        """Convert to Anthropic tool-use format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }
