"""AgentCompletion backed by an OpenAI-compatible LLMClient.

Builds the chat messages for an agent turn (persona, transcript window,
shared-state trigger message), offers the toolkit's tools, and parses
the returned tool calls. Reconciliation requests a JSON object matching
SYNTHESIS_SCHEMA.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Sequence
from typing import TYPE_CHECKING

from nexus.llm.client import OpenAIClient
from nexus.llm.errors import LLMRequestError, LLMResponseError
from nexus.prompts.context import build_turn_messages
from nexus.prompts.synthesis import SYNTHESIS_SCHEMA, build_synthesis_messages
from nexus.protocols import Reconciliation, TurnResponse
from nexus.toolkit.definitions import get_all_tools
from nexus.toolkit.models import ToolCall

if TYPE_CHECKING:
    from nexus.llm.protocols import LLMClient
    from nexus.models.agents import AgentDescriptor
    from nexus.models.state import ContextState
    from nexus.models.transcript import TranscriptEntry

logger = logging.getLogger(__name__)


def extract_tool_calls(message: dict) -> list[ToolCall]:
    """Parse OpenAI-format ``message["tool_calls"]`` into ToolCall objects.

    Malformed JSON arguments are passed on as a non-dict placeholder so the
    executor reports the call as invalid instead of silently running it
    with no arguments.
    """
    raw_calls = message.get("tool_calls") or []
    result: list[ToolCall] = []
    for raw in raw_calls:
        if not isinstance(raw, dict):
            continue
        call_id = raw.get("id") or f"call_{uuid.uuid4().hex[:8]}"
        func = raw.get("function") or {}
        name = func.get("name", "")
        raw_args = func.get("arguments", "{}")
        if isinstance(raw_args, dict):
            arguments = raw_args
        else:
            try:
                arguments = json.loads(raw_args or "{}")
            except (json.JSONDecodeError, TypeError):
                logger.warning("Malformed JSON in tool call arguments for %s", name)
                arguments = {"__malformed__": raw_args}
        if not isinstance(arguments, dict):
            arguments = {"__malformed__": arguments}
        result.append(ToolCall(name=name, arguments=arguments, id=call_id))
    return result


class OpenAICompletion:
    """AgentCompletion implementation over an LLMClient.

    Usage::

        client = OpenAIClient(api_key="sk-...")
        completion = OpenAICompletion(client, temperature=0.7)
        response = completion.run(agent, transcript.window(15), store.snapshot())
    """

    def __init__(
        self,
        client: LLMClient,
        *,
        temperature: float | None = 0.7,
        synthesis_model: str | None = None,
    ) -> None:
        self._client = client
        self._temperature = temperature
        self._synthesis_model = synthesis_model
        self._tools = [tool.to_openai() for tool in get_all_tools()]

    @property
    def client(self) -> LLMClient:
        return self._client

    def run(
        self,
        agent: AgentDescriptor,
        window: Sequence[TranscriptEntry],
        state: ContextState,
    ) -> TurnResponse:
        messages = build_turn_messages(agent, window, state)
        temperature = agent.temperature if agent.temperature is not None else self._temperature
        response = self._client.chat(
            messages,
            model=agent.model,
            temperature=temperature,
            tools=self._tools,
        )
        _check_content_filter(response)
        message = OpenAIClient.extract_message(response)
        text = message.get("content") or ""
        tool_calls = extract_tool_calls(message)
        if not text.strip() and not tool_calls:
            raise LLMResponseError("Empty response from model.")
        return TurnResponse(text=text, tool_calls=tuple(tool_calls), usage=response.get("usage"))

    def reconcile(
        self,
        window: Sequence[TranscriptEntry],
        state: ContextState,
    ) -> Reconciliation:
        response = self._client.chat(
            build_synthesis_messages(window, state),
            model=self._synthesis_model,
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "nexus_synthesis",
                    "schema": SYNTHESIS_SCHEMA,
                    "strict": True,
                },
            },
        )
        _check_content_filter(response)
        text = OpenAIClient.extract_content(response)
        if not text.strip():
            raise LLMResponseError("Empty response from model.")
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LLMResponseError(f"Synthesis response is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise LLMResponseError(f"Synthesis response is not an object: {data!r}")
        return Reconciliation(
            objective=str(data.get("objective") or ""),
            scratchpad=str(data.get("scratchpad") or ""),
            rationale=str(data.get("reasoning") or ""),
        )


def _check_content_filter(response: dict) -> None:
    if OpenAIClient.extract_finish_reason(response) == "content_filter":
        raise LLMRequestError("Response blocked by safety filter (finish_reason=content_filter)")
