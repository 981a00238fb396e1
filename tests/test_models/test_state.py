"""Tests for ContextState, StateUpdate and the other domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from nexus.models.agents import AgentDescriptor, AgentPriority, AgentRole
from nexus.models.config import NexusConfig
from nexus.models.errors import ErrorKind, ErrorRecord
from nexus.models.state import UNNAMED_ARTIFACT, ContextState, StateUpdate
from nexus.models.transcript import (
    EntryKind,
    ToolInvocation,
    ToolStatus,
    TranscriptEntry,
)


class TestContextState:
    def test_defaults(self) -> None:
        state = ContextState()
        assert state.objective == ""
        assert state.scratchpad == ""
        assert state.artifact_name == ""
        assert state.artifact_label == UNNAMED_ARTIFACT
        assert state.artifact_content == ""

    def test_none_coerced_to_empty(self) -> None:
        state = ContextState(objective=None, scratchpad=None)
        assert state.objective == ""
        assert state.scratchpad == ""

    def test_frozen(self) -> None:
        state = ContextState()
        with pytest.raises(ValidationError):
            state.objective = "changed"  # type: ignore[misc]

    def test_apply_returns_new_instance(self) -> None:
        state = ContextState(objective="a", scratchpad="notes")
        updated = state.apply(StateUpdate(objective="b"))
        assert updated.objective == "b"
        assert updated.scratchpad == "notes"
        assert state.objective == "a"

    def test_apply_empty_update_is_identity(self) -> None:
        state = ContextState(objective="a")
        assert state.apply(StateUpdate()) is state

    def test_changed_fields(self) -> None:
        a = ContextState(objective="a", artifact_content="x")
        b = ContextState(objective="a", artifact_content="y", scratchpad="s")
        assert a.changed_fields(b) == ["scratchpad", "artifact_content"]

    def test_artifact_metrics(self) -> None:
        state = ContextState(artifact_content="héllo\nworld")
        assert state.artifact_lines == 2
        assert state.artifact_bytes == len("héllo\nworld".encode("utf-8"))


class TestStateUpdate:
    def test_wire_aliases(self) -> None:
        update = StateUpdate.model_validate(
            {"activeFileName": "main.py", "activeFileContent": "print(1)"}
        )
        assert update.fields() == {"artifact_name": "main.py", "artifact_content": "print(1)"}

    def test_snake_case_accepted(self) -> None:
        update = StateUpdate(artifact_content="x")
        assert update.fields() == {"artifact_content": "x"}

    def test_empty(self) -> None:
        assert StateUpdate().is_empty() is True
        assert StateUpdate(objective="").is_empty() is False

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StateUpdate.model_validate({"color": "red"})

    def test_combine_later_wins(self) -> None:
        first = StateUpdate(objective="a", scratchpad="s")
        second = StateUpdate(objective="b")
        assert first.combine(second).fields() == {"objective": "b", "scratchpad": "s"}


class TestAgentModels:
    def test_priority_ranks(self) -> None:
        assert AgentPriority.HIGH.rank > AgentPriority.NORMAL.rank > AgentPriority.LOW.rank

    def test_priority_cycle(self) -> None:
        assert AgentPriority.LOW.cycle() == AgentPriority.NORMAL
        assert AgentPriority.NORMAL.cycle() == AgentPriority.HIGH
        assert AgentPriority.HIGH.cycle() == AgentPriority.LOW

    def test_role_enum_normalized_to_string(self) -> None:
        agent = AgentDescriptor(role=AgentRole.CRITIC, name="Critic", persona="p")
        assert agent.role == "CRITIC"
        assert type(agent.role) is str


class TestTranscriptModels:
    def test_render(self) -> None:
        entry = TranscriptEntry(author="ARCHITECT", content="plan")
        assert entry.render() == "ARCHITECT: plan"
        assert entry.kind == EntryKind.MESSAGE

    def test_pending_invocation_rejected(self) -> None:
        with pytest.raises(ValueError):
            TranscriptEntry(
                author="ENGINEER",
                content="",
                tool_invocations=(ToolInvocation(tool_name="update_nexus_state"),),
            )

    def test_invocation_finalize(self) -> None:
        pending = ToolInvocation(tool_name="get_active_file")
        done = pending.succeed("File: a")
        assert done.status == ToolStatus.SUCCESS
        assert pending.status == ToolStatus.PENDING
        assert pending.fail("nope").succeeded is False

    def test_list_invocations_become_tuple(self) -> None:
        entry = TranscriptEntry(
            author="CRITIC",
            content="",
            tool_invocations=[ToolInvocation(tool_name="x").fail("Unknown tool")],
        )
        assert isinstance(entry.tool_invocations, tuple)

    def test_ids_unique(self) -> None:
        assert TranscriptEntry(author="USER", content="a").id != TranscriptEntry(author="USER", content="a").id


class TestErrorModels:
    def test_every_kind_has_hint(self) -> None:
        for kind in ErrorKind:
            assert kind.hint

    def test_cooldown_hints(self) -> None:
        assert "cooldown" in ErrorKind.RATE_LIMIT.hint
        assert "cooldown" in ErrorKind.SERVER.hint

    def test_describe(self) -> None:
        record = ErrorRecord(kind=ErrorKind.AUTH, message="bad key")
        assert record.describe() == "[AUTH] bad key"


class TestNexusConfig:
    def test_defaults(self) -> None:
        config = NexusConfig()
        assert config.turn_window == 15
        assert config.synthesis_window == 30
        assert config.debounce_seconds == 3.0
        assert config.save_debounce_seconds == 2.0
        assert config.line_ceiling == 600
        assert config.edit_threshold == 5
        assert config.error_log_size == 5

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NEXUS_API_KEY", "env-key")
        monkeypatch.setenv("NEXUS_TURN_WINDOW", "7")
        config = NexusConfig.from_env(model="custom-model")
        assert config.api_key == "env-key"
        assert config.turn_window == 7
        assert config.model == "custom-model"

    def test_override_wins_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NEXUS_DB_PATH", "env.db")
        assert NexusConfig.from_env(db_path="cli.db").db_path == "cli.db"

    def test_synthesis_model_falls_back(self) -> None:
        assert NexusConfig(model="m").effective_synthesis_model == "m"
        assert NexusConfig(model="m", synthesis_model="s").effective_synthesis_model == "s"
