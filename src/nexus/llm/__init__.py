"""LLM client infrastructure for Nexus.

Provides an OpenAI-compatible HTTP client, the AgentCompletion service
built on it, and the completion gateway that classifies every failure.
"""

from nexus.llm.client import OpenAIClient
from nexus.llm.completion import OpenAICompletion, extract_tool_calls
from nexus.llm.errors import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMRateLimitError,
    LLMRequestError,
    LLMResponseError,
    LLMServerError,
)
from nexus.llm.gateway import CompletionGateway, classify, error_record, to_completion_error
from nexus.llm.protocols import LLMClient

__all__ = [
    "OpenAIClient",
    "OpenAICompletion",
    "LLMClient",
    "CompletionGateway",
    "classify",
    "error_record",
    "to_completion_error",
    "extract_tool_calls",
    "LLMClientError",
    "LLMConfigError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMServerError",
    "LLMRequestError",
    "LLMResponseError",
]
