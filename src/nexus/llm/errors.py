"""HTTP client error hierarchy.

Raised by OpenAIClient; the completion gateway classifies them into
ErrorKind values. All inherit from NexusError.
"""

from __future__ import annotations

from nexus.exceptions import NexusError


class LLMClientError(NexusError):
    """Base for all LLM client errors.

    Attributes:
        status_code: HTTP status that produced the error, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class LLMConfigError(LLMClientError):
    """Missing or invalid client configuration (e.g., no API key)."""


class LLMAuthError(LLMClientError):
    """Authentication failed (401/403)."""


class LLMRateLimitError(LLMClientError):
    """Rate limited by the API (429).

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message, status_code=429)


class LLMServerError(LLMClientError):
    """Upstream failure: 5xx response, timeout, or connection error."""


class LLMRequestError(LLMClientError):
    """The provider rejected the request (4xx other than auth/rate limit)."""


class LLMResponseError(LLMClientError):
    """Unexpected or empty response from the LLM API."""
