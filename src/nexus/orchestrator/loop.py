"""Turn orchestrator: priority-ordered sequential agent rounds.

A round resolves its target to an execution queue and runs each agent
one at a time. Every turn reads the transcript and the shared state as
left by the previous turn, so agents later in a round see what earlier
agents said and wrote. A failed turn is contained: it leaves one
system-visible entry and the round moves on to the next agent.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from nexus.exceptions import CompletionError
from nexus.failures import FailureReporter
from nexus.models.agents import USER_AUTHOR, AgentStatus
from nexus.models.transcript import TranscriptEntry
from nexus.orchestrator.models import ALL_AGENTS, RoundResult, TurnResult
from nexus.toolkit.executor import ToolExecutor

if TYPE_CHECKING:
    from nexus.activity import ActivityLog
    from nexus.llm.gateway import CompletionGateway
    from nexus.models.agents import AgentDescriptor
    from nexus.orchestrator.roster import AgentRoster
    from nexus.protocols import ErrorSink
    from nexus.store import SharedStateStore
    from nexus.transcript import Transcript

logger = logging.getLogger(__name__)

DEFAULT_TURN_WINDOW = 15


class Orchestrator:
    """Runs agent rounds against the shared store and transcript.

    Rounds are serialized: a round requested while another is running
    waits for it to finish. Nothing is retried automatically; agents
    whose last turn failed can be re-run with ``retry_failed()``.

    Usage::

        orchestrator = Orchestrator(store, transcript, roster, gateway)
        result = orchestrator.send("Build a rate limiter")
        print(result.order)
    """

    def __init__(
        self,
        store: SharedStateStore,
        transcript: Transcript,
        roster: AgentRoster,
        gateway: CompletionGateway,
        *,
        executor: ToolExecutor | None = None,
        error_sink: ErrorSink | None = None,
        activity: ActivityLog | None = None,
        turn_window: int = DEFAULT_TURN_WINDOW,
    ) -> None:
        self._store = store
        self._transcript = transcript
        self._roster = roster
        self._gateway = gateway
        self._executor = executor or ToolExecutor()
        self._activity = activity
        self._reporter = FailureReporter(transcript, error_sink, activity)
        self._turn_window = turn_window
        self._round_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def roster(self) -> AgentRoster:
        return self._roster

    def send(self, text: str, target: str | None = None) -> RoundResult:
        """Append an operator message, then run a round for ``target``.

        Raises:
            UnknownAgentError: If ``target`` names an unregistered role.
        """
        with self._round_lock:
            # Resolved under the lock so a queued round sees controls changed
            # while it waited; an unknown target still raises before any write.
            queue = self._roster.resolve(target)
            self._transcript.append(TranscriptEntry(author=USER_AUTHOR, content=text))
            self._roster.mark_all_unread()
            self._log(f'User Input: "{text[:30]}..."')
            return self._run_queue(queue, target)

    def run_round(self, target: str | None = None) -> RoundResult:
        """Run one round without adding an operator message.

        ``target`` is None or ``"all"`` for every unmuted agent in priority
        order, or a role to run that agent alone (even when muted).

        Raises:
            UnknownAgentError: If ``target`` names an unregistered role.
        """
        with self._round_lock:
            return self._run_queue(self._roster.resolve(target), target)

    def retry_failed(self) -> RoundResult:
        """Re-run the agents whose last turn failed, in priority order."""
        with self._round_lock:
            queue = self._roster.failed()
            if queue:
                self._info(f"Retrying {len(queue)} failed agent(s)")
            return self._run_queue(queue, ALL_AGENTS)

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _run_queue(self, queue: list[AgentDescriptor], target: str | None) -> RoundResult:
        result = RoundResult(target=target or ALL_AGENTS)
        if not queue:
            logger.debug("Empty execution queue for target %s", target or ALL_AGENTS)
            return result
        for agent in queue:
            result.turns.append(self._run_turn(agent))
        return result

    def _run_turn(self, agent: AgentDescriptor) -> TurnResult:
        role = agent.role
        self._roster.set_status(role, AgentStatus.PROCESSING)
        self._info(f"Triggering agent: {role}")

        window = self._transcript.window(self._turn_window)
        state = self._store.snapshot()
        try:
            response = self._gateway.run_turn(agent, window, state)
        except CompletionError as error:
            record, entry = self._reporter.report(error)
            self._roster.set_status(role, AgentStatus.ERROR)
            return TurnResult(role=role, entry=entry, error=record)

        if response.tool_calls:
            self._info(f"{role} attempting {len(response.tool_calls)} tool calls...")
        effects = self._executor.apply_all(response.tool_calls, state)
        for invocation in effects.failures:
            self._log(f"{role} tool {invocation.tool_name} failed: {invocation.outcome}")

        change = self._store.merge(effects.update, source=role)
        if change is not None:
            self._success(f"Nexus State updated by {role}.")

        entry = self._transcript.append(
            TranscriptEntry(
                author=role,
                content=response.text,
                tool_invocations=effects.invocations,
            )
        )
        self._roster.set_status(role, AgentStatus.IDLE)
        self._roster.mark_read(role)
        return TurnResult(role=role, entry=entry, change=change)

    def _info(self, message: str) -> None:
        if self._activity is not None:
            self._activity.info(message)
        else:
            logger.info("%s", message)

    def _success(self, message: str) -> None:
        if self._activity is not None:
            self._activity.success(message)
        else:
            logger.info("%s", message)

    def _log(self, message: str) -> None:
        if self._activity is not None:
            self._activity.log(message)
        else:
            logger.debug("%s", message)
