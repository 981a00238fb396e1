"""Built-in OpenAI-compatible httpx client.

Provides a sync HTTP client for OpenAI-compatible chat completion APIs.
Reads configuration from constructor arguments or environment variables.

Every non-success response is translated into the LLMClientError family
so the completion gateway can classify it. Throttling (429) and upstream
failures (5xx) are never retried here; only failures to establish a
connection are, and only when ``max_retries`` > 1.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
import tenacity

from nexus.llm.errors import (
    LLMAuthError,
    LLMConfigError,
    LLMRateLimitError,
    LLMRequestError,
    LLMResponseError,
    LLMServerError,
)

logger = logging.getLogger(__name__)

_AUTH_ERROR_STATUS_CODES = {401, 403}


def _is_retryable(exc: BaseException) -> bool:
    """Only connection establishment failures are retryable."""
    return isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout))


class OpenAIClient:
    """Sync httpx client for OpenAI-compatible chat completions.

    Implements the LLMClient protocol. Fails immediately on
    authentication errors (401, 403), throttling (429) and upstream
    errors (5xx); each request is bounded by ``timeout``.

    Usage::

        with OpenAIClient(api_key="sk-...") as client:
            response = client.chat([{"role": "user", "content": "Hello"}])
            text = OpenAIClient.extract_content(response)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str = "gpt-4o-mini",
        timeout: float = 120.0,
        max_retries: int = 1,
    ) -> None:
        """Initialize the OpenAI-compatible client.

        Args:
            api_key: API key. Falls back to NEXUS_API_KEY env var.
            base_url: API base URL. Falls back to NEXUS_BASE_URL env var,
                then to https://api.openai.com/v1.
            default_model: Default model for chat requests.
            timeout: Request timeout in seconds.
            max_retries: Total attempts for connection failures (1 = no retry).

        Raises:
            LLMConfigError: If no API key is provided or found in environment.
        """
        self._api_key = api_key or os.environ.get("NEXUS_API_KEY", "")
        if not self._api_key:
            raise LLMConfigError(
                "No API key provided. Pass api_key= or set NEXUS_API_KEY "
                "environment variable."
            )
        self._base_url = (
            base_url
            or os.environ.get("NEXUS_BASE_URL", "https://api.openai.com/v1")
        ).rstrip("/")
        self._default_model = default_model
        self._timeout = timeout
        self._max_retries = max(1, max_retries)
        self._client = httpx.Client(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
        )

    @property
    def default_model(self) -> str:
        return self._default_model

    def chat(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Send a chat completion request.

        Uses tenacity.Retrying programmatically (not as decorator) so that
        max_retries is configurable per-instance.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model to use. Falls back to default_model.
            temperature: Sampling temperature.
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional payload parameters forwarded to the API
                (``tools``, ``response_format``, ...).

        Returns:
            Full response dict with 'choices', 'usage', 'model', etc.

        Raises:
            LLMAuthError: On 401/403.
            LLMRateLimitError: On 429.
            LLMServerError: On 5xx, timeouts, or connection failures.
            LLMRequestError: On other 4xx responses.
            LLMResponseError: On unexpected response format.
        """
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=(
                tenacity.wait_exponential(multiplier=1, min=1, max=30)
                + tenacity.wait_random(0, 2)
            ),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            return retryer(
                self._do_chat,
                messages,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except httpx.TimeoutException as exc:
            raise LLMServerError(f"Request timed out after {self._timeout}s: {exc}") from exc
        except httpx.TransportError as exc:
            raise LLMServerError(f"Connection failed: {exc}") from exc

    def _do_chat(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> dict:
        """Execute a single chat completion request (no retry)."""
        payload: dict[str, Any] = {
            "model": model or self._default_model,
            "messages": messages,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        payload.update(kwargs)

        response = self._client.post(
            f"{self._base_url}/chat/completions",
            json=payload,
        )
        status = response.status_code

        if status in _AUTH_ERROR_STATUS_CODES:
            raise LLMAuthError(
                f"Authentication failed: HTTP {status} - {response.text}",
                status_code=status,
            )

        if status == 429:
            retry_after_raw = response.headers.get("Retry-After")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise LLMRateLimitError(
                f"Rate limited: HTTP 429 - {response.text}",
                retry_after=retry_after,
            )

        if status >= 500:
            raise LLMServerError(
                f"Upstream error: HTTP {status} - {response.text}",
                status_code=status,
            )

        if status >= 400:
            raise LLMRequestError(
                f"Request rejected: HTTP {status} - {response.text}",
                status_code=status,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(f"Response is not JSON: {response.text[:200]}") from exc
        if "choices" not in data:
            raise LLMResponseError(
                f"Unexpected response format: missing 'choices' key. "
                f"Response: {data}"
            )
        return data

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @staticmethod
    def extract_message(response: dict) -> dict:
        """Return ``choices[0].message`` from a response dict.

        Raises:
            LLMResponseError: If the response format is unexpected.
        """
        try:
            message = response["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMResponseError(
                f"Cannot extract message from response: {exc}. "
                f"Response: {response}"
            ) from exc
        if not isinstance(message, dict):
            raise LLMResponseError(f"Malformed message in response: {message!r}")
        return message

    @staticmethod
    def extract_content(response: dict) -> str:
        """Extract the assistant's message content ("" when absent)."""
        return OpenAIClient.extract_message(response).get("content") or ""

    @staticmethod
    def extract_finish_reason(response: dict) -> str | None:
        try:
            return response["choices"][0].get("finish_reason")
        except (KeyError, IndexError, TypeError, AttributeError):
            return None
