"""Flight compensation tool backed by the decision service."""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from claimbot.claims.decision import CompensationService, parse_decision
from claimbot.claims.models import CompensationRequest, IssueType, LoyaltyTier
from claimbot.core.errors import ToolInvocationFailure, UpstreamCollaboratorFailure
from claimbot.tools.base import Tool, ToolContext, ToolParameter, ToolResponse

logger = logging.getLogger("claimbot.tools.compensation")

ISSUE_ALIASES = {
    "delay": IssueType.DELAY,
    "delayed": IssueType.DELAY,
    "cancellation": IssueType.CANCELLATION,
    "cancelled": IssueType.CANCELLATION,
    "canceled": IssueType.CANCELLATION,
    "luggage": IssueType.LUGGAGE_ISSUES,
    "luggage issues": IssueType.LUGGAGE_ISSUES,
    "luggage_issues": IssueType.LUGGAGE_ISSUES,
    "lost luggage": IssueType.LUGGAGE_ISSUES,
    "baggage": IssueType.LUGGAGE_ISSUES,
}


class FlightCompensationTool(Tool):
    """Request approval for compensation for a flight issue."""

    name = "flight_compensation"
    description = "Requests approval for compensation for a flight issue"
    parameters = MappingProxyType(
        {
            "flight_number": ToolParameter(
                "string", "The flight number of the flight compensation is requested for"
            ),
            "issue_type": ToolParameter(
                "string", "The issue, valid issues are delay, cancellation, lost luggage"
            ),
            "issue_duration": ToolParameter("integer", "How long the delay lasted in hours"),
            "customer_compensation": ToolParameter("number", "The compensation the customer asks for, in dollars"),
            "customer_loyalty_status": ToolParameter("string", "The customer loyalty tier: basic, silver, gold"),
        }
    )

    def __init__(self, service: CompensationService) -> None:
        self._service = service

    async def run(self, context: ToolContext) -> ToolResponse:
        request = self._build_request(context)
        try:
            verdict = await self._service.decide(request)
        except UpstreamCollaboratorFailure as exc:
            raise ToolInvocationFailure(f"compensation service unavailable ({exc})") from exc

        decision = parse_decision(verdict)
        logger.info(
            "Compensation decided for %s: approved=%s amount=%s",
            request.flight_number,
            decision.approved,
            decision.amount,
        )
        return ToolResponse(
            content=verdict,
            data={"approved": decision.approved, "amount": str(decision.amount) if decision.amount is not None else None},
            success=True,
            closes_session=True,
        )

    @staticmethod
    def _build_request(context: ToolContext) -> CompensationRequest:
        args = context.arguments

        issue_raw = (args.get("issue_type") or "").strip().lower()
        issue_type = ISSUE_ALIASES.get(issue_raw)
        if issue_type is None:
            raise ToolInvocationFailure(f"unknown issue type {args.get('issue_type')!r}")

        tier_raw = (args.get("customer_loyalty_status") or "").strip().lower()
        try:
            loyalty_tier = LoyaltyTier(tier_raw)
        except ValueError as exc:
            raise ToolInvocationFailure(f"unknown loyalty tier {args.get('customer_loyalty_status')!r}") from exc

        # Missing numeric arguments fall back to zero.
        try:
            amount = Decimal(str(args.get("customer_compensation") or 0))
        except InvalidOperation as exc:
            raise ToolInvocationFailure("unreadable compensation amount") from exc

        return CompensationRequest(
            flight_number=args.get("flight_number") or "",
            issue_type=issue_type,
            issue_duration_hours=args.get("issue_duration") or 0,
            requested_compensation=amount,
            loyalty_tier=loyalty_tier,
        )
