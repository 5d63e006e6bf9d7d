"""Dataclasses representing conversation turns and per-session state."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from claimbot.claims.models import ClaimRecord


class Role(str, Enum):
    """Transcript roles understood by the completion service."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class DialogueMode(str, Enum):
    """Slot-filling dialogue modes."""

    IDLE = "idle"
    COLLECTING = "collecting"


@dataclass(slots=True, frozen=True)
class ToolCallRequest:
    """A model-issued request to run a tool; ``arguments`` is raw JSON text."""

    id: str
    tool_name: str
    arguments: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.tool_name, "arguments": self.arguments},
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ToolCallRequest":
        function = payload.get("function") or {}
        arguments = function.get("arguments")
        if arguments is None:
            arguments = "{}"
        elif not isinstance(arguments, str):
            # Some providers send already-decoded objects; keep the wire form as text.
            arguments = json.dumps(arguments)
        return cls(
            id=str(payload.get("id") or ""),
            tool_name=str(function.get("name") or ""),
            arguments=arguments,
        )


@dataclass(slots=True, frozen=True)
class ChatTurn:
    """Single conversational turn. Never mutated once appended to a transcript."""

    role: Role
    content: str
    tool_call_id: str | None = None
    tool_calls: tuple[ToolCallRequest, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), compare=False)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.tool_calls:
            payload["tool_calls"] = [call.to_payload() for call in self.tool_calls]
        if self.tool_call_id is not None:
            payload["tool_call_id"] = self.tool_call_id
        return payload

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ChatTurn":
        tool_calls = tuple(ToolCallRequest.from_payload(call) for call in payload.get("tool_calls") or ())
        return cls(
            role=Role(payload.get("role") or Role.ASSISTANT.value),
            content=payload.get("content") or "",
            tool_call_id=payload.get("tool_call_id"),
            tool_calls=tool_calls,
        )


@dataclass(slots=True)
class SessionState:
    """Transcript, claim record and dialogue mode for one session."""

    session_id: str
    transcript: list[ChatTurn] = field(default_factory=list)
    claim: ClaimRecord = field(default_factory=ClaimRecord)
    mode: DialogueMode = DialogueMode.IDLE

    def append(self, turn: ChatTurn) -> None:
        self.transcript.append(turn)

    def ensure_system_turn(self, prompt: str) -> None:
        if not self.transcript or self.transcript[0].role is not Role.SYSTEM:
            self.transcript.insert(0, ChatTurn(role=Role.SYSTEM, content=prompt))

    def trim(self, max_size: int) -> None:
        """Drop everything but the leading system turn once history exceeds ``max_size``."""

        if len(self.transcript) <= max_size:
            return
        head = self.transcript[0]
        self.transcript.clear()
        if head.role is Role.SYSTEM:
            self.transcript.append(head)

    def truncate(self, length: int) -> None:
        """Drop every turn after the first ``length`` ones."""

        del self.transcript[length:]

    def user_turns(self) -> list[ChatTurn]:
        return [turn for turn in self.transcript if turn.role is Role.USER]

    def reset(self) -> None:
        self.transcript.clear()
        self.claim = ClaimRecord()
        self.mode = DialogueMode.IDLE
