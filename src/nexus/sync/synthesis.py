"""Reconciliation pass: re-derive objective and scratchpad.

One gateway call reads the full shared state plus a bounded transcript
window and returns a structured Reconciliation. Only objective and
scratchpad fields whose returned value is non-blank and differs from the
current state are merged. Artifact fields are never touched.

Entry rules:

- MANUAL: a summary entry is always appended.
- AUTO: an entry is appended only if a field changed; otherwise the pass
  is silent.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nexus.exceptions import CompletionError
from nexus.failures import FailureReporter
from nexus.models.agents import SYSTEM_AUTHOR
from nexus.models.state import StateUpdate
from nexus.models.transcript import EntryKind, TranscriptEntry

if TYPE_CHECKING:
    from nexus.activity import ActivityLog
    from nexus.llm.gateway import CompletionGateway
    from nexus.models.errors import ErrorRecord
    from nexus.models.state import ContextState
    from nexus.protocols import ErrorSink, Reconciliation
    from nexus.store import SharedStateStore, StateChange
    from nexus.transcript import Transcript

logger = logging.getLogger(__name__)

DEFAULT_SYNTHESIS_WINDOW = 30
SYNTHESIS_SOURCE = "synthesis"


class SyncSource(str, enum.Enum):
    """What started a reconciliation pass."""

    MANUAL = "MANUAL"
    AUTO = "AUTO"


@dataclass(frozen=True)
class SynthesisResult:
    """Outcome of one reconciliation pass.

    Attributes:
        source: MANUAL or AUTO.
        fields: Names of state fields the pass changed.
        rationale: Model's explanation, for logging only.
        entry: Transcript entry appended by the pass, if any.
        change: Committed store write, if any.
        error: Recorded failure, or None on success.
    """

    source: SyncSource
    fields: tuple[str, ...] = ()
    rationale: str = ""
    entry: TranscriptEntry | None = None
    change: StateChange | None = None
    error: ErrorRecord | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def changed(self) -> bool:
        return bool(self.fields)


def reconciliation_update(result: Reconciliation, state: ContextState) -> StateUpdate:
    """Fields of ``result`` that should overwrite ``state``.

    Blank values mean "unchanged"; values equal to the current state are
    dropped.
    """
    fields: dict[str, str] = {}
    if result.objective.strip() and result.objective != state.objective:
        fields["objective"] = result.objective
    if result.scratchpad.strip() and result.scratchpad != state.scratchpad:
        fields["scratchpad"] = result.scratchpad
    return StateUpdate(**fields)


def format_synthesis_summary(fields: tuple[str, ...], objective: str) -> str:
    lines = ["**NEXUS SYNTHESIS COMPLETE**"]
    if "objective" in fields:
        lines.append(f"► OBJECTIVE UPDATED: {objective}")
    if "scratchpad" in fields:
        lines.append("► SCRATCHPAD REVISED")
    if not fields:
        lines.append("No state divergence detected.")
    return "\n".join(lines)


class Synthesizer:
    """Runs reconciliation passes against the shared store.

    Passes are serialized; a pass requested while another runs waits for
    it. Failures are contained and leave the state untouched.

    Usage::

        synthesizer = Synthesizer(store, transcript, gateway)
        result = synthesizer.synthesize(SyncSource.MANUAL)
    """

    def __init__(
        self,
        store: SharedStateStore,
        transcript: Transcript,
        gateway: CompletionGateway,
        *,
        error_sink: ErrorSink | None = None,
        activity: ActivityLog | None = None,
        window: int = DEFAULT_SYNTHESIS_WINDOW,
    ) -> None:
        self._store = store
        self._transcript = transcript
        self._gateway = gateway
        self._activity = activity
        self._reporter = FailureReporter(transcript, error_sink, activity)
        self._window = window
        self._lock = threading.Lock()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def synthesize(self, source: SyncSource | str = SyncSource.MANUAL) -> SynthesisResult:
        source = SyncSource(source)
        with self._lock:
            self._running = True
            try:
                return self._synthesize(source)
            finally:
                self._running = False

    def _synthesize(self, source: SyncSource) -> SynthesisResult:
        if self._activity is not None:
            self._activity.info(f"Initiating Nexus State Synthesis ({source.value})...")
        state = self._store.snapshot()
        window = self._transcript.window(self._window)
        try:
            reconciliation = self._gateway.reconcile(window, state)
        except CompletionError as error:
            record, entry = self._reporter.report(error)
            return SynthesisResult(source=source, entry=entry, error=record)

        if reconciliation.rationale:
            logger.info("Synthesis rationale: %s", reconciliation.rationale)

        change = self._store.merge(
            reconciliation_update(reconciliation, state), source=SYNTHESIS_SOURCE
        )
        fields = change.fields if change is not None else ()

        entry = None
        if source == SyncSource.MANUAL or fields:
            objective = change.current.objective if change is not None else state.objective
            entry = self._transcript.append(
                TranscriptEntry(
                    author=SYSTEM_AUTHOR,
                    content=format_synthesis_summary(fields, objective),
                    kind=EntryKind.SYNTHESIS,
                )
            )

        if self._activity is not None:
            if fields:
                self._activity.success("Nexus State successfully synchronized.")
            else:
                self._activity.info("Synthesis complete. No significant state divergence.")
        return SynthesisResult(
            source=source,
            fields=fields,
            rationale=reconciliation.rationale,
            entry=entry,
            change=change,
        )
