"""Tests for the reconciliation pass."""

from __future__ import annotations

from nexus.activity import ActivityLog
from nexus.llm import CompletionGateway, LLMServerError
from nexus.models.errors import ErrorKind
from nexus.models.state import ContextState
from nexus.models.transcript import EntryKind, TranscriptEntry
from nexus.protocols import Reconciliation
from nexus.storage import MemoryPersistence
from nexus.store import SharedStateStore
from nexus.sync import SyncSource, Synthesizer, reconciliation_update
from nexus.sync.synthesis import SYNTHESIS_SOURCE, format_synthesis_summary
from nexus.transcript import Transcript
from tests.conftest import FakeCompletion


def _build(fake: FakeCompletion, state: ContextState | None = None, **kwargs):
    store = SharedStateStore(state or ContextState(objective="goal", scratchpad="notes"))
    transcript = Transcript()
    synthesizer = Synthesizer(store, transcript, CompletionGateway(fake), **kwargs)
    return synthesizer, store, transcript


class TestReconciliationUpdate:
    def test_only_changed_nonblank_fields(self) -> None:
        state = ContextState(objective="goal", scratchpad="notes")
        update = reconciliation_update(
            Reconciliation(objective="goal", scratchpad="new notes"), state
        )
        assert update.fields() == {"scratchpad": "new notes"}

    def test_blank_means_unchanged(self) -> None:
        state = ContextState(objective="goal", scratchpad="notes")
        update = reconciliation_update(Reconciliation(objective="  ", scratchpad=""), state)
        assert update.is_empty()

    def test_summary_text(self) -> None:
        text = format_synthesis_summary(("objective", "scratchpad"), "ship v2")
        assert text.splitlines() == [
            "**NEXUS SYNTHESIS COMPLETE**",
            "► OBJECTIVE UPDATED: ship v2",
            "► SCRATCHPAD REVISED",
        ]
        assert "No state divergence detected." in format_synthesis_summary((), "x")


class TestSynthesizer:
    def test_merges_changed_fields(self) -> None:
        fake = FakeCompletion(reconciliations=[
            Reconciliation(objective="ship v2", scratchpad="notes", rationale="merged"),
        ])
        synthesizer, store, transcript = _build(fake)

        result = synthesizer.synthesize(SyncSource.AUTO)

        assert result.success
        assert result.fields == ("objective",)
        assert result.rationale == "merged"
        assert result.change.source == SYNTHESIS_SOURCE
        assert store.snapshot().objective == "ship v2"
        assert transcript.last().kind == EntryKind.SYNTHESIS
        assert "OBJECTIVE UPDATED: ship v2" in transcript.last().content

    def test_identical_auto_is_silent(self) -> None:
        fake = FakeCompletion()
        synthesizer, store, transcript = _build(fake)
        result = synthesizer.synthesize(SyncSource.AUTO)
        assert result.changed is False
        assert result.entry is None
        assert store.revision == 0
        assert len(transcript) == 0

    def test_identical_manual_appends_entry(self) -> None:
        fake = FakeCompletion()
        synthesizer, store, transcript = _build(fake)
        result = synthesizer.synthesize("MANUAL")
        assert result.source == SyncSource.MANUAL
        assert result.entry is not None
        assert "No state divergence detected." in result.entry.content
        assert store.revision == 0

    def test_artifact_never_touched(self) -> None:
        state = ContextState(artifact_name="a.py", artifact_content="code")
        fake = FakeCompletion(reconciliations=[Reconciliation(objective="o", scratchpad="s")])
        synthesizer, store, _ = _build(fake, state)
        synthesizer.synthesize()
        assert store.snapshot().artifact_content == "code"
        assert store.snapshot().artifact_name == "a.py"

    def test_reads_state_and_window(self) -> None:
        fake = FakeCompletion()
        synthesizer, _, transcript = _build(fake, window=2)
        for i in range(5):
            transcript.append(TranscriptEntry(author="USER", content=str(i)))
        synthesizer.synthesize(SyncSource.AUTO)
        window, state = fake.reconcile_calls[0]
        assert [e.content for e in window] == ["3", "4"]
        assert state.objective == "goal"

    def test_failure_is_contained(self) -> None:
        fake = FakeCompletion(reconciliations=[LLMServerError("HTTP 503")])
        sink = MemoryPersistence()
        activity = ActivityLog()
        synthesizer, store, transcript = _build(fake, error_sink=sink, activity=activity)

        result = synthesizer.synthesize(SyncSource.AUTO)

        assert result.success is False
        assert result.error.kind == ErrorKind.SERVER
        assert result.error.context == "State Synthesis"
        assert store.revision == 0
        assert transcript.last().kind == EntryKind.ERROR
        assert [r.kind for r in sink.errors()] == [ErrorKind.SERVER]
        assert synthesizer.running is False

    def test_unconfigured_gateway(self) -> None:
        store = SharedStateStore()
        synthesizer = Synthesizer(store, Transcript(), CompletionGateway(None))
        result = synthesizer.synthesize()
        assert result.error.kind == ErrorKind.AUTH
