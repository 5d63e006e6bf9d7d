from __future__ import annotations

import json
from pathlib import Path

import pytest

from claimbot.claims.decision import CompensationService
from claimbot.claims.models import CompensationRequest
from claimbot.llm.client import ChatCompletionClient
from claimbot.memory.models import ChatTurn, Role


class ScriptedCompletionClient(ChatCompletionClient):
    """Replays queued assistant turns and records every request."""

    def __init__(self) -> None:
        self.replies: list[ChatTurn | Exception] = []
        self.requests: list[dict] = []

    def queue(self, *replies: ChatTurn | Exception) -> None:
        self.replies.extend(replies)

    async def complete(self, transcript, tools=None) -> ChatTurn:
        self.requests.append({"transcript": list(transcript), "tools": list(tools or [])})
        if not self.replies:
            return ChatTurn(role=Role.ASSISTANT, content="Noted.")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class StubCompensationService(CompensationService):
    """Returns a fixed verdict, or raises ``error`` when set."""

    def __init__(self, verdict: str = "Approved compensation of $300.0 for flight AA123") -> None:
        self.verdict = verdict
        self.error: Exception | None = None
        self.requests: list[CompensationRequest] = []

    async def decide(self, request: CompensationRequest) -> str:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.verdict


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def claim_delay_script(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "claim_delay.json").read_text(encoding="utf-8"))


@pytest.fixture
def claim_luggage_script(fixtures_dir: Path) -> dict:
    return json.loads((fixtures_dir / "claim_luggage.json").read_text(encoding="utf-8"))


@pytest.fixture
def llm() -> ScriptedCompletionClient:
    return ScriptedCompletionClient()


@pytest.fixture
def compensation() -> StubCompensationService:
    return StubCompensationService()
