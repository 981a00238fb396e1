"""Nexus session: the wired-up engine.

``Nexus`` owns one shared store, one transcript and one agent roster, and
connects the orchestrator, the reconciliation pass, the synchronization
trigger and debounced persistence around them.

Usage::

    with Nexus.open(".nexus.db") as nexus:
        nexus.send("Design a token bucket rate limiter")
        nexus.tick()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nexus.activity import ActivityLog
from nexus.engine.change import ChangeDetector
from nexus.exceptions import PersistenceError
from nexus.failures import FailureReporter
from nexus.llm.client import OpenAIClient
from nexus.llm.completion import OpenAICompletion
from nexus.llm.gateway import CompletionGateway
from nexus.models.config import NexusConfig
from nexus.models.state import ContextState, StateUpdate
from nexus.orchestrator.loop import Orchestrator
from nexus.orchestrator.roster import AgentRoster
from nexus.prompts.agents import default_agents
from nexus.protocols import ErrorSink
from nexus.storage.persistence import SqlitePersistence, StateSaver
from nexus.store import SharedStateStore
from nexus.sync.synthesis import SyncSource, Synthesizer
from nexus.sync.trigger import SyncTrigger
from nexus.transcript import Transcript

if TYPE_CHECKING:
    from collections.abc import Iterable

    from nexus.engine.clock import Clock
    from nexus.models.agents import AgentDescriptor, AgentPriority
    from nexus.models.errors import ErrorRecord
    from nexus.models.transcript import TranscriptEntry
    from nexus.orchestrator.models import RoundResult
    from nexus.protocols import AgentCompletion, Persistence
    from nexus.store import StateChange
    from nexus.sync.synthesis import SynthesisResult

logger = logging.getLogger(__name__)

OPERATOR_SOURCE = "operator"


def build_completion(config: NexusConfig) -> OpenAICompletion | None:
    """The default AgentCompletion, or None when no API key is configured."""
    if not config.api_key:
        return None
    client = OpenAIClient(
        api_key=config.api_key,
        base_url=config.base_url,
        default_model=config.model,
        timeout=config.timeout,
        max_retries=config.max_retries,
    )
    return OpenAICompletion(
        client,
        temperature=config.temperature,
        synthesis_model=config.effective_synthesis_model,
    )


class Nexus:
    """A collaboration session over one shared ContextState.

    Prefer :meth:`open` over calling the constructor directly.
    """

    def __init__(
        self,
        *,
        gateway: CompletionGateway,
        persistence: Persistence | None = None,
        config: NexusConfig | None = None,
        agents: Iterable[AgentDescriptor] | None = None,
        initial: ContextState | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config or NexusConfig()
        self._persistence = persistence
        self._error_sink: ErrorSink | None = (
            persistence if isinstance(persistence, ErrorSink) else None
        )
        self._gateway = gateway
        self._closed = False

        self.activity = ActivityLog(self._config.activity_log_size)
        self.store = SharedStateStore(initial)
        self.transcript = Transcript()
        self.roster = AgentRoster(default_agents() if agents is None else agents)

        self.orchestrator = Orchestrator(
            self.store,
            self.transcript,
            self.roster,
            gateway,
            error_sink=self._error_sink,
            activity=self.activity,
            turn_window=self._config.turn_window,
        )
        self.synthesizer = Synthesizer(
            self.store,
            self.transcript,
            gateway,
            error_sink=self._error_sink,
            activity=self.activity,
            window=self._config.synthesis_window,
        )
        self.trigger = SyncTrigger(
            self._auto_synthesize,
            detector=ChangeDetector(self._config.line_ceiling, self._config.edit_threshold),
            clock=clock,
            delay=self._config.debounce_seconds,
            baseline=self.store.snapshot().artifact_content,
        )
        self.saver: StateSaver | None = None
        if persistence is not None:
            self.saver = StateSaver(
                persistence, delay=self._config.save_debounce_seconds, clock=clock
            )
            self.store.subscribe(self.saver)
        self.store.subscribe(self._on_state_change)

    @classmethod
    def open(
        cls,
        path: str | None = None,
        *,
        config: NexusConfig | None = None,
        completion: AgentCompletion | None = None,
        persistence: Persistence | None = None,
        agents: Iterable[AgentDescriptor] | None = None,
        clock: Clock | None = None,
    ) -> Nexus:
        """Open a session: load saved state and replay carried-over errors.

        Args:
            path: SQLite path. Defaults to ``config.db_path``. Ignored when
                *persistence* is given.
            config: Session configuration. ``NexusConfig.from_env()`` if None.
            completion: Model service. Built from *config* if None; left
                unconfigured (every call fails with AUTH) when there is no
                API key.
            persistence: Storage adapter. SqlitePersistence if None.
            agents: Roster in registration order. Built-in agents if None.
            clock: Time source for debounced behavior.

        Returns:
            A ready-to-use ``Nexus`` instance.
        """
        config = config or NexusConfig.from_env()
        if persistence is None:
            persistence = SqlitePersistence.open(
                path or config.db_path, max_errors=config.error_log_size
            )
        if completion is None:
            completion = build_completion(config)
        if completion is None:
            logger.warning("No API key configured; model calls will fail with AUTH")

        try:
            initial = persistence.load()
        except PersistenceError:
            logger.warning("Saved state unreadable; starting from defaults", exc_info=True)
            initial = ContextState()

        nexus = cls(
            gateway=CompletionGateway(completion, call_timeout=config.timeout),
            persistence=persistence,
            config=config,
            agents=agents,
            initial=initial,
            clock=clock,
        )
        nexus.restore_errors()
        return nexus

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> NexusConfig:
        return self._config

    @property
    def state(self) -> ContextState:
        return self.store.snapshot()

    @property
    def configured(self) -> bool:
        """True when a model service is available."""
        return self._gateway.configured

    def entries(self) -> tuple[TranscriptEntry, ...]:
        return self.transcript.entries()

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def send(self, text: str, target: str | None = None) -> RoundResult:
        """Post an operator message and run a round for *target*."""
        return self.orchestrator.send(text, target)

    def run_round(self, target: str | None = None) -> RoundResult:
        return self.orchestrator.run_round(target)

    def retry_failed(self) -> RoundResult:
        return self.orchestrator.retry_failed()

    def synthesize(self) -> SynthesisResult:
        """Run a manual reconciliation pass. Always appends a summary entry."""
        result = self.synthesizer.synthesize(SyncSource.MANUAL)
        self.trigger.mark_reconciled(self.store.snapshot().artifact_content)
        return result

    def _auto_synthesize(self) -> SynthesisResult:
        return self.synthesizer.synthesize(SyncSource.AUTO)

    # ------------------------------------------------------------------
    # Operator edits and controls
    # ------------------------------------------------------------------

    def update_state(self, update: StateUpdate | None = None, **fields: str) -> StateChange | None:
        """Apply an operator edit to the shared state.

        Accepts a StateUpdate or field keywords (wire aliases included).
        """
        if update is None:
            update = StateUpdate.model_validate(fields)
        change = self.store.merge(update, source=OPERATOR_SOURCE)
        if change is not None:
            self.activity.log(f"Operator updated: {', '.join(change.fields)}")
        return change

    def mute(self, role: str) -> AgentDescriptor:
        agent = self.roster.mute(role)
        self.activity.info(f"{agent.name} muted.")
        return agent

    def unmute(self, role: str) -> AgentDescriptor:
        agent = self.roster.unmute(role)
        self.activity.info(f"{agent.name} unmuted.")
        return agent

    def toggle_mute(self, role: str) -> AgentDescriptor:
        agent = self.roster.toggle_mute(role)
        self.activity.info(f"{agent.name} {'muted' if agent.muted else 'unmuted'}.")
        return agent

    def set_priority(self, role: str, priority: AgentPriority | str) -> AgentDescriptor:
        agent = self.roster.set_priority(role, priority)
        self.activity.info(f"{agent.name} priority set to {agent.priority.value}.")
        return agent

    def cycle_priority(self, role: str) -> AgentDescriptor:
        agent = self.roster.cycle_priority(role)
        self.activity.info(f"{agent.name} priority set to {agent.priority.value}.")
        return agent

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """Advance debounced work once: pending save, then sync trigger.

        Returns:
            True if the sync trigger ran a reconciliation.
        """
        if self.saver is not None:
            self.saver.poll()
        return self.trigger.poll()

    def start_background(self) -> None:
        """Drive debounced saves and the sync trigger from daemon threads."""
        if self.saver is not None:
            self.saver.start()
        self.trigger.start()

    def stop_background(self) -> None:
        self.trigger.stop()
        if self.saver is not None:
            self.saver.stop()

    # ------------------------------------------------------------------
    # Errors and reset
    # ------------------------------------------------------------------

    def restore_errors(self) -> list[ErrorRecord]:
        """Replay failures recorded by a previous session as one entry."""
        if self._error_sink is None:
            return []
        try:
            records = self._error_sink.drain()
        except Exception:
            logger.warning("Cannot read the error log", exc_info=True)
            return []
        FailureReporter(self.transcript, activity=self.activity).restore(records)
        return records

    def recent_errors(self) -> list[ErrorRecord]:
        """Retained error records, oldest first, without draining them."""
        errors = getattr(self._error_sink, "errors", None)
        return list(errors()) if callable(errors) else []

    def factory_reset(self) -> None:
        """Forget saved state and errors and return to a default state."""
        if self.saver is not None:
            self.saver.discard()
        if self._persistence is not None:
            self._persistence.clear()
            clear_errors = getattr(self._persistence, "clear_errors", None)
            if callable(clear_errors):
                clear_errors()
        self.store.replace(ContextState(), source=OPERATOR_SOURCE)
        if self.saver is not None:
            self.saver.discard()
        self.trigger.reset("")
        self.activity.info("Factory reset complete.")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Stop timers, flush any pending save and release resources."""
        if self._closed:
            return
        self._closed = True
        self.stop_background()
        if self.saver is not None:
            self.saver.flush()
        close = getattr(self._persistence, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Nexus:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object) -> None:
        self.close()

    def __repr__(self) -> str:
        if self._closed:
            return "Nexus(closed=True)"
        return f"Nexus(agents={self.roster.roles()}, entries={len(self.transcript)})"

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _on_state_change(self, change: StateChange) -> None:
        if change.artifact_changed:
            self.trigger.notify(change.current.artifact_content)
