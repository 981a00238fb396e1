"""Completion gateway: the only path from the core to the model.

Wraps every AgentCompletion call and turns any failure into a
CompletionError with a deterministic ErrorKind and its remediation hint.
The gateway never retries; retry policy belongs to the caller.
"""

from __future__ import annotations

import concurrent.futures
import logging
import re
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, Callable, TypeVar

import httpx

from nexus.exceptions import CompletionError
from nexus.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMServerError,
)
from nexus.models.errors import ErrorKind, ErrorRecord
from nexus.protocols import Reconciliation, TurnResponse

if TYPE_CHECKING:
    from nexus.models.agents import AgentDescriptor
    from nexus.models.state import ContextState
    from nexus.models.transcript import TranscriptEntry
    from nexus.protocols import AgentCompletion

logger = logging.getLogger(__name__)

T = TypeVar("T")

_AUTH_PATTERN = re.compile(r"api[ _-]?key|unauthori[sz]ed|permission denied|\b40[13]\b")
_RATE_LIMIT_PATTERN = re.compile(r"\b429\b|rate[ _-]?limit|quota|too many requests")
_SERVER_PATTERN = re.compile(
    r"\b50[0234]\b|timed? ?out|unavailable|overloaded|connection (?:error|failed|reset)"
)
_POLICY_PATTERN = re.compile(r"safety|blocked|content[ _-]?(?:filter|policy)")


def classify(exc: BaseException) -> ErrorKind:
    """Map a failure onto the ErrorKind taxonomy.

    Typed signals (exception class, HTTP status) are checked first, then
    the message text. Anything unmatched is UNKNOWN.
    """
    if isinstance(exc, CompletionError):
        return exc.kind
    if isinstance(exc, (LLMConfigError, LLMAuthError)):
        return ErrorKind.AUTH
    if isinstance(exc, LLMRateLimitError):
        return ErrorKind.RATE_LIMIT
    if isinstance(exc, (LLMServerError, TimeoutError, httpx.TimeoutException, httpx.TransportError)):
        return ErrorKind.SERVER

    status = getattr(exc, "status_code", None)
    if status is None and isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
    if status in (401, 403):
        return ErrorKind.AUTH
    if status == 429:
        return ErrorKind.RATE_LIMIT
    if isinstance(status, int) and status >= 500:
        return ErrorKind.SERVER

    message = str(exc).lower()
    if _AUTH_PATTERN.search(message):
        return ErrorKind.AUTH
    if _RATE_LIMIT_PATTERN.search(message):
        return ErrorKind.RATE_LIMIT
    if _SERVER_PATTERN.search(message):
        return ErrorKind.SERVER
    if _POLICY_PATTERN.search(message):
        return ErrorKind.INVALID_REQUEST
    return ErrorKind.UNKNOWN


def to_completion_error(exc: BaseException, context: str) -> CompletionError:
    """Wrap any exception as a classified CompletionError."""
    if isinstance(exc, CompletionError):
        return exc
    kind = classify(exc)
    message = str(exc) or type(exc).__name__
    return CompletionError(message, kind, hint=kind.hint, context=context)


def error_record(error: CompletionError) -> ErrorRecord:
    return ErrorRecord(
        kind=error.kind,
        message=str(error.args[0]) if error.args else "",
        context=error.context,
        hint=error.hint,
    )


class CompletionGateway:
    """Typed wrapper around an AgentCompletion.

    Args:
        completion: The model service, or None when no credential is
            configured. A None completion fails every call with AUTH
            before anything is sent.
        call_timeout: Upper bound in seconds on one call. The call is not
            cancelled when the bound is hit (it cannot be); its result is
            discarded and the caller gets a SERVER failure.
    """

    def __init__(
        self,
        completion: AgentCompletion | None,
        *,
        call_timeout: float | None = None,
    ) -> None:
        self._completion = completion
        self._call_timeout = call_timeout

    @property
    def configured(self) -> bool:
        return self._completion is not None

    def run_turn(
        self,
        agent: AgentDescriptor,
        window: Sequence[TranscriptEntry],
        state: ContextState,
    ) -> TurnResponse:
        """Run one agent turn.

        Raises:
            CompletionError: On any failure, including an empty response.
        """
        context = f"Agent {agent.name}"
        completion = self._require_completion(context)
        response = self._invoke(context, completion.run, agent, window, state)
        if not isinstance(response, TurnResponse):
            raise self._fail(context, ErrorKind.UNKNOWN, "Empty response from model.")
        if not response.text.strip() and not response.tool_calls:
            raise self._fail(context, ErrorKind.UNKNOWN, "Empty response from model.")
        return response

    def reconcile(
        self,
        window: Sequence[TranscriptEntry],
        state: ContextState,
    ) -> Reconciliation:
        """Run one reconciliation call.

        Raises:
            CompletionError: On any failure, including an empty response.
        """
        context = "State Synthesis"
        completion = self._require_completion(context)
        result = self._invoke(context, completion.reconcile, window, state)
        if not isinstance(result, Reconciliation):
            raise self._fail(context, ErrorKind.UNKNOWN, "Empty response from model.")
        return result

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _require_completion(self, context: str) -> AgentCompletion:
        if self._completion is None:
            raise self._fail(context, ErrorKind.AUTH, "API key not found in environment.")
        return self._completion

    def _fail(self, context: str, kind: ErrorKind, message: str) -> CompletionError:
        logger.error("Completion failure [%s]: %s (%s)", context, message, kind.value)
        return CompletionError(message, kind, hint=kind.hint, context=context)

    def _invoke(self, context: str, fn: Callable[..., T], *args: object) -> T:
        try:
            if self._call_timeout is None:
                return fn(*args)
            return self._invoke_bounded(fn, *args)
        except Exception as exc:
            error = to_completion_error(exc, context)
            logger.error(
                "Completion failure [%s]: %s (%s)", context, exc, error.kind.value,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise error from exc

    def _invoke_bounded(self, fn: Callable[..., T], *args: object) -> T:
        # Daemon worker: a call that never returns must not block interpreter exit.
        future: concurrent.futures.Future[T] = concurrent.futures.Future()

        def work() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                future.set_result(fn(*args))
            except BaseException as exc:
                future.set_exception(exc)

        threading.Thread(target=work, name="nexus-call", daemon=True).start()
        try:
            return future.result(timeout=self._call_timeout)
        except concurrent.futures.TimeoutError as exc:
            raise LLMServerError(
                f"Model call timed out after {self._call_timeout}s"
            ) from exc
