"""Chat engine abstract base class."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, TypeVar

from claimbot.core.errors import UpstreamCollaboratorFailure

T = TypeVar("T")


class ChatEngine(ABC):
    """Answers one user message for one session."""

    name: str

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """System instruction that opens every transcript this engine owns."""

    @abstractmethod
    async def handle_turn(self, session_id: str, message: str) -> str:
        """Process ``message`` and return the reply for the user."""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable summary of engine strategy."""


async def bounded_call(awaitable: Awaitable[T], timeout: float, collaborator: str) -> T:
    """Await a collaborator call, mapping expiry to ``UpstreamCollaboratorFailure``."""

    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except asyncio.TimeoutError as exc:
        raise UpstreamCollaboratorFailure(collaborator, f"no answer within {timeout:g}s") from exc
