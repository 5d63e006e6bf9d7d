"""Compensation decision collaborator and approval parsing."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import httpx

from claimbot.claims.models import CompensationRequest
from claimbot.core.errors import UpstreamCollaboratorFailure

logger = logging.getLogger("claimbot.compensation")

APPROVAL_PHRASE = "Approved compensation of"
APPROVAL_PATTERN = re.compile(r"Approved compensation of \$([0-9.]+)")


@dataclass(slots=True, frozen=True)
class CompensationDecision:
    """Structured reading of the decision service's free-text answer."""

    approved: bool
    amount: Decimal | None
    text: str


def parse_decision(text: str) -> CompensationDecision:
    """Read the ``Approved compensation of $<amount>`` contract out of ``text``.

    ``approved`` is False when the phrase is absent. When the phrase is present
    but no amount follows it, ``amount`` is None. A malformed amount such as
    ``1.2.3`` raises ``ValueError``.
    """

    if APPROVAL_PHRASE not in text:
        return CompensationDecision(approved=False, amount=None, text=text)

    match = APPROVAL_PATTERN.search(text)
    if match is None:
        return CompensationDecision(approved=True, amount=None, text=text)

    try:
        amount = Decimal(match.group(1))
    except InvalidOperation as exc:
        raise ValueError(f"Unreadable approved amount: {match.group(1)!r}") from exc
    return CompensationDecision(approved=True, amount=amount, text=text)


class CompensationService(ABC):
    """Decides how much compensation a complete claim is worth."""

    @abstractmethod
    async def decide(self, request: CompensationRequest) -> str:
        """Return the decision service's free-text verdict for ``request``."""


class HttpCompensationService(CompensationService):
    """Call a remote rules service over HTTP."""

    def __init__(self, base_url: str | None, *, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/") if base_url else None
        self._timeout = timeout

    async def decide(self, request: CompensationRequest) -> str:
        if not self._base_url:
            raise UpstreamCollaboratorFailure("compensation", "service URL is not configured")

        payload = request.to_payload()
        logger.info("Requesting compensation decision", extra={"flight_number": request.flight_number})
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(f"{self._base_url}/compensation", json=payload)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamCollaboratorFailure("compensation", str(exc) or exc.__class__.__name__) from exc

        return response.text
