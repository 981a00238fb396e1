"""Tests for tool definitions, call parsing and the ToolExecutor."""

from __future__ import annotations

from nexus.models.state import ContextState
from nexus.models.transcript import ToolStatus
from nexus.toolkit import (
    InvalidToolCall,
    ReadStateCall,
    ToolCall,
    ToolExecutor,
    UnknownToolCall,
    UpdateStateCall,
    get_all_tools,
    parse_tool_call,
)
from tests.conftest import update_call


class TestDefinitions:
    def test_tool_names(self) -> None:
        assert [tool.name for tool in get_all_tools()] == [
            "update_nexus_state",
            "get_active_file",
        ]

    def test_openai_format(self) -> None:
        exported = get_all_tools()[0].to_openai()
        assert exported["type"] == "function"
        assert exported["function"]["name"] == "update_nexus_state"
        assert set(exported["function"]["parameters"]["properties"]) == {
            "objective",
            "scratchpad",
            "activeFileName",
            "activeFileContent",
        }

    def test_anthropic_format(self) -> None:
        exported = get_all_tools()[1].to_anthropic()
        assert exported["name"] == "get_active_file"
        assert "input_schema" in exported


class TestParsing:
    def test_update(self) -> None:
        parsed = parse_tool_call(update_call(objective="x"))
        assert isinstance(parsed, UpdateStateCall)
        assert parsed.update.fields() == {"objective": "x"}

    def test_read(self) -> None:
        assert isinstance(parse_tool_call(ToolCall(name="get_active_file")), ReadStateCall)

    def test_unknown(self) -> None:
        assert isinstance(parse_tool_call(ToolCall(name="rm_rf")), UnknownToolCall)

    def test_invalid_type(self) -> None:
        parsed = parse_tool_call(update_call(scratchpad=42))
        assert isinstance(parsed, InvalidToolCall)
        assert "scratchpad" in parsed.reason

    def test_invalid_extra_field(self) -> None:
        assert isinstance(parse_tool_call(update_call(color="red")), InvalidToolCall)


class TestToolExecutor:
    def test_update_merges_only_provided_fields(self) -> None:
        state = ContextState(objective="goal", scratchpad="old")
        invocation, delta = ToolExecutor().apply(update_call(scratchpad="new"), state)
        assert invocation.status == ToolStatus.SUCCESS
        assert invocation.outcome == "Nexus state updated: scratchpad"
        assert delta.fields() == {"scratchpad": "new"}

    def test_update_with_no_fields(self) -> None:
        invocation, delta = ToolExecutor().apply(update_call(), ContextState())
        assert invocation.succeeded
        assert delta.is_empty()

    def test_read_reports_metrics_without_mutation(self) -> None:
        state = ContextState(artifact_name="app.py", artifact_content="a\nbb\nccc")
        invocation, delta = ToolExecutor().apply(ToolCall(name="get_active_file"), state)
        assert invocation.succeeded
        assert invocation.outcome == "File: app.py\nSize: 9 bytes\nLines: 3"
        assert delta.is_empty()

    def test_read_unnamed_artifact(self) -> None:
        invocation, _ = ToolExecutor().apply(ToolCall(name="get_active_file"), ContextState())
        assert invocation.outcome == "File: (unnamed)\nSize: 0 bytes\nLines: 1"

    def test_unknown_tool_is_failure_not_exception(self) -> None:
        invocation, delta = ToolExecutor().apply(ToolCall(name="deploy"), ContextState())
        assert invocation.status == ToolStatus.FAILURE
        assert "Unknown tool: deploy" in invocation.outcome
        assert "update_nexus_state" in invocation.outcome
        assert delta.is_empty()

    def test_invalid_arguments_are_failure(self) -> None:
        invocation, delta = ToolExecutor().apply(update_call(objective=["x"]), ContextState())
        assert invocation.status == ToolStatus.FAILURE
        assert invocation.outcome.startswith("Invalid arguments for update_nexus_state")
        assert delta.is_empty()

    def test_apply_all_threads_working_snapshot(self) -> None:
        calls = [
            update_call(activeFileContent="line1\nline2"),
            ToolCall(name="get_active_file"),
            update_call(activeFileName="main.ts"),
        ]
        effects = ToolExecutor().apply_all(calls, ContextState())
        assert [inv.succeeded for inv in effects.invocations] == [True, True, True]
        assert "Lines: 2" in effects.invocations[1].outcome
        assert effects.update.fields() == {
            "artifact_name": "main.ts",
            "artifact_content": "line1\nline2",
        }
        assert effects.state.artifact_name == "main.ts"

    def test_apply_all_later_call_wins(self) -> None:
        effects = ToolExecutor().apply_all(
            [update_call(scratchpad="one"), update_call(scratchpad="two")],
            ContextState(),
        )
        assert effects.update.fields() == {"scratchpad": "two"}

    def test_apply_all_collects_failures(self) -> None:
        effects = ToolExecutor().apply_all(
            [ToolCall(name="nope"), update_call(objective="x")],
            ContextState(),
        )
        assert len(effects.failures) == 1
        assert effects.update.fields() == {"objective": "x"}

    def test_invocations_keep_call_ids(self) -> None:
        invocation, _ = ToolExecutor().apply(
            ToolCall(name="get_active_file", id="call_1"), ContextState()
        )
        assert invocation.call_id == "call_1"
