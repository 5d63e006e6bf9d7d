"""Tool-calling chat engine."""

from __future__ import annotations

import json
import logging
from typing import Any

from claimbot.core.errors import MalformedToolArguments, ToolNotFound, UpstreamCollaboratorFailure
from claimbot.core.metrics import MetricsCollector
from claimbot.dialogue.base import ChatEngine, bounded_call
from claimbot.dialogue.prompts import TOOL_CALLING_PROMPT
from claimbot.llm.client import ChatCompletionClient
from claimbot.memory.models import ChatTurn, Role, SessionState, ToolCallRequest
from claimbot.memory.store import SessionStore
from claimbot.tools.base import ToolResponse
from claimbot.tools.registry import ERROR_PREFIX, ToolRegistry

logger = logging.getLogger("claimbot.orchestrator")

NO_REPLY = "I'm sorry, I couldn't process your request at this time."


class ToolCallOrchestrator(ChatEngine):
    """Let the model decide when to call a registered tool.

    One completion round per turn, plus a second round when the first reply
    asks for a tool. Only the first requested tool call is executed. A tool
    result that closes the session, such as a decided claim, resets it once the
    reply is produced.
    """

    name = "tool_calling"

    def __init__(
        self,
        store: SessionStore,
        llm: ChatCompletionClient,
        registry: ToolRegistry,
        *,
        max_history_size: int = 20,
        llm_timeout: float = 30.0,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._store = store
        self._llm = llm
        self._registry = registry
        self._max_history_size = max_history_size
        self._llm_timeout = llm_timeout
        self._metrics = metrics

    @property
    def system_prompt(self) -> str:
        return TOOL_CALLING_PROMPT

    def describe(self) -> str:
        return "Model-driven tool calling over the tool registry"

    async def handle_turn(self, session_id: str, message: str) -> str:
        async with self._store.session(session_id) as state:
            state.ensure_system_turn(self.system_prompt)
            state.trim(self._max_history_size)
            turn_start = len(state.transcript)
            state.append(ChatTurn(role=Role.USER, content=message))

            closes_session = False
            try:
                reply = await self._complete(state)

                if reply.tool_calls:
                    call = reply.tool_calls[0]
                    if len(reply.tool_calls) > 1:
                        logger.warning(
                            "Model requested %d tool calls; only %s will run",
                            len(reply.tool_calls),
                            call.tool_name,
                        )
                    state.append(reply)
                    response = await self._run_tool_call(call, session_id)
                    closes_session = response.success and response.closes_session
                    state.append(ChatTurn(role=Role.TOOL, content=response.content, tool_call_id=call.id))
                    reply = await self._complete(state)
            except UpstreamCollaboratorFailure:
                if closes_session:
                    state.reset()
                else:
                    state.truncate(turn_start)
                raise

            content = reply.content or NO_REPLY
            if closes_session:
                logger.info("Session %s finished by tool result; resetting", session_id)
                state.reset()
            else:
                state.append(ChatTurn(role=Role.ASSISTANT, content=content))
            return content

    async def _complete(self, state: SessionState) -> ChatTurn:
        return await bounded_call(
            self._llm.complete(list(state.transcript), self._registry.list_definitions()),
            self._llm_timeout,
            "llm",
        )

    async def _run_tool_call(self, call: ToolCallRequest, session_id: str) -> ToolResponse:
        logger.info("Processing tool call %s (%s)", call.tool_name, call.id)
        if self._metrics is not None:
            self._metrics.record_tool_call(call.tool_name)
        try:
            arguments = decode_arguments(call.arguments)
            response = await self._registry.execute(call.tool_name, arguments, session_id=session_id)
        except (MalformedToolArguments, ToolNotFound) as exc:
            logger.warning("Tool call %s rejected: %s", call.tool_name, exc)
            return ToolResponse(content=f"{ERROR_PREFIX}{exc}", success=False)
        logger.info("Tool call %s returned: %s", call.tool_name, response.content)
        return response


def decode_arguments(raw: str) -> dict[str, Any]:
    """Decode a tool call's JSON arguments into a mapping."""

    if not raw or not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedToolArguments(f"arguments are not valid JSON ({exc.msg})") from exc
    if not isinstance(decoded, dict):
        raise MalformedToolArguments("arguments must be a JSON object")
    return decoded
