"""Chat completion collaborator speaking the OpenAI-compatible wire format."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Sequence

import httpx

from claimbot.core.errors import UpstreamCollaboratorFailure
from claimbot.memory.models import ChatTurn
from claimbot.tools.base import ToolDefinition

TOOL_CHOICE_AUTO = "auto"


class ChatCompletionClient(ABC):
    """Turns a transcript (plus optional tool definitions) into one assistant turn."""

    @abstractmethod
    async def complete(
        self,
        transcript: Sequence[ChatTurn],
        tools: Sequence[ToolDefinition] | None = None,
    ) -> ChatTurn:
        """Return the model's reply, which may carry tool-call requests."""


class OpenAICompatibleClient(ChatCompletionClient):
    """POST /chat/completions against any OpenAI-compatible endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        model: str = "mistral-small-latest",
        max_tokens: int = 200,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._logger = logging.getLogger("claimbot.llm")

    def build_payload(
        self,
        transcript: Sequence[ChatTurn],
        tools: Sequence[ToolDefinition] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [turn.to_payload() for turn in transcript],
            "max_tokens": self._max_tokens,
        }
        if tools:
            payload["tools"] = [definition.to_schema() for definition in tools]
            payload["tool_choice"] = TOOL_CHOICE_AUTO
        return payload

    async def complete(
        self,
        transcript: Sequence[ChatTurn],
        tools: Sequence[ToolDefinition] | None = None,
    ) -> ChatTurn:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        payload = self.build_payload(transcript, tools)
        self._logger.debug("Requesting completion with %d turns and %d tools", len(transcript), len(tools or ()))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._base_url}/chat/completions",
                    headers=headers,
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamCollaboratorFailure("llm", str(exc) or exc.__class__.__name__) from exc
        except ValueError as exc:
            raise UpstreamCollaboratorFailure("llm", "response body was not JSON") from exc

        return parse_completion(data)


def parse_completion(data: dict[str, Any]) -> ChatTurn:
    """Extract the first choice's message from a completion response body."""

    choices = data.get("choices") or []
    if not choices:
        raise UpstreamCollaboratorFailure("llm", "completion contained no choices")
    message = choices[0].get("message") or {}
    return ChatTurn.from_payload(message)
