"""Nexus exception hierarchy.

All Nexus-specific exceptions inherit from NexusError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nexus.models.errors import ErrorKind


class NexusError(Exception):
    """Base exception for all Nexus errors."""


class CompletionError(NexusError):
    """Typed failure signal from the completion gateway.

    Every provider failure (HTTP error, timeout, empty response, missing
    credential) reaches callers as a CompletionError carrying a fixed
    classification and remediation hint.

    Attributes:
        kind: The ErrorKind classification.
        hint: Remediation hint shown to the operator.
        context: Label of the call that failed (e.g. "Agent Architect").
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        *,
        hint: str | None = None,
        context: str = "",
    ) -> None:
        self.kind = kind
        self.hint = hint
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.args[0]}"


class UnknownAgentError(NexusError):
    """Raised when a role lookup fails in the agent roster."""

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"Unknown agent: {role}")


class DuplicateAgentError(NexusError):
    """Raised when registering a role that is already on the roster."""

    def __init__(self, role: str) -> None:
        self.role = role
        super().__init__(f"Agent already registered: {role}")


class PersistenceError(NexusError):
    """Raised when persisted state cannot be read or written."""
