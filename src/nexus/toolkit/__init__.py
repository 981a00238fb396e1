"""Agent toolkit: tool definitions, call parsing, and execution."""

from nexus.toolkit.definitions import (
    READ_STATE_TOOL,
    READ_STATE_TOOL_NAME,
    UPDATE_STATE_TOOL,
    UPDATE_STATE_TOOL_NAME,
    get_all_tools,
    parse_tool_call,
)
from nexus.toolkit.executor import ToolExecutor, TurnEffects
from nexus.toolkit.models import (
    InvalidToolCall,
    ParsedToolCall,
    ReadStateCall,
    ToolCall,
    ToolDefinition,
    UnknownToolCall,
    UpdateStateCall,
)

__all__ = [
    "ToolExecutor",
    "TurnEffects",
    "ToolCall",
    "ToolDefinition",
    "ParsedToolCall",
    "UpdateStateCall",
    "ReadStateCall",
    "UnknownToolCall",
    "InvalidToolCall",
    "UPDATE_STATE_TOOL",
    "READ_STATE_TOOL",
    "UPDATE_STATE_TOOL_NAME",
    "READ_STATE_TOOL_NAME",
    "get_all_tools",
    "parse_tool_call",
]
