"""Tool definitions available to agents.

Two tools make up the whole capability set:

- ``update_nexus_state`` -- merge any subset of objective, scratchpad,
  activeFileName and activeFileContent into the shared state.
- ``get_active_file`` -- read-only summary of the active artifact.
"""

from __future__ import annotations

from pydantic import ValidationError

from nexus.models.state import StateUpdate
from nexus.toolkit.models import (
    InvalidToolCall,
    ParsedToolCall,
    ReadStateCall,
    ToolCall,
    ToolDefinition,
    UnknownToolCall,
    UpdateStateCall,
)

UPDATE_STATE_TOOL_NAME = "update_nexus_state"
READ_STATE_TOOL_NAME = "get_active_file"


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def _parse_update(call: ToolCall) -> ParsedToolCall:
    if not isinstance(call.arguments, dict):
        return InvalidToolCall(call, reason="arguments must be an object")
    try:
        update = StateUpdate.model_validate(call.arguments)
    except ValidationError as exc:
        return InvalidToolCall(call, reason=_format_validation_error(exc))
    return UpdateStateCall(call, update=update)


def _parse_read(call: ToolCall) -> ParsedToolCall:
    # Zero-argument tool; stray arguments are ignored.
    return ReadStateCall(call)


UPDATE_STATE_TOOL = ToolDefinition(
    name=UPDATE_STATE_TOOL_NAME,
    description=(
        "Update the shared Nexus state. Provide only the fields you want to "
        "change; omitted fields are left untouched. Use this to record the "
        "plan in the scratchpad, refine the objective, choose the active "
        "file name, or save code to the active file."
    ),
    parameters={
        "type": "object",
        "properties": {
            "objective": {
                "type": "string",
                "description": "The refined project objective.",
            },
            "scratchpad": {
                "type": "string",
                "description": "Shared notes and task plan (replaces the current scratchpad).",
            },
            "activeFileName": {
                "type": "string",
                "description": "Name of the single active file.",
            },
            "activeFileContent": {
                "type": "string",
                "description": "Complete new content of the active file.",
            },
        },
        "additionalProperties": False,
    },
    parse=_parse_update,
)

READ_STATE_TOOL = ToolDefinition(
    name=READ_STATE_TOOL_NAME,
    description=(
        "Report the active file's name, size in bytes and line count. "
        "Does not change anything."
    ),
    parameters={"type": "object", "properties": {}},
    parse=_parse_read,
)


def get_all_tools() -> list[ToolDefinition]:
    """Return every tool definition, in a stable order."""
    return [UPDATE_STATE_TOOL, READ_STATE_TOOL]


def parse_tool_call(call: ToolCall) -> ParsedToolCall:
    """Parse a raw ToolCall into the closed tool-call union."""
    for tool in get_all_tools():
        if tool.name == call.name:
            return tool.parse(call)
    return UnknownToolCall(call)
