"""Claim record accumulated by slot filling."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class IssueType(str, Enum):
    """Kinds of flight issue a claim can be filed for."""

    DELAY = "delay"
    CANCELLATION = "cancellation"
    LUGGAGE_ISSUES = "luggage_issues"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class LoyaltyTier(str, Enum):
    """Customer rewards tiers."""

    BASIC = "basic"
    SILVER = "silver"
    GOLD = "gold"


@dataclass(slots=True, frozen=True)
class CompensationRequest:
    """Input sent to the compensation decision service."""

    flight_number: str
    issue_type: IssueType
    issue_duration_hours: int
    requested_compensation: Decimal
    loyalty_tier: LoyaltyTier

    def to_payload(self) -> dict[str, Any]:
        return {
            "flight_number": self.flight_number,
            "issue_type": self.issue_type.value,
            "issue_duration_hours": self.issue_duration_hours,
            "requested_compensation": float(self.requested_compensation),
            "loyalty_tier": self.loyalty_tier.value,
        }


@dataclass(slots=True, frozen=True)
class ClaimRecord:
    """Structured claim; every field stays unset until extraction finds it."""

    flight_number: str | None = None
    issue_type: IssueType | None = None
    issue_duration_hours: int | None = None
    requested_compensation: Decimal | None = None
    loyalty_tier: LoyaltyTier | None = None

    def is_complete(self) -> bool:
        # Duration only matters for delays and cancellations.
        duration_ok = self.issue_type is IssueType.LUGGAGE_ISSUES or self.issue_duration_hours is not None
        return (
            self.flight_number is not None
            and self.issue_type is not None
            and duration_ok
            and self.requested_compensation is not None
            and self.loyalty_tier is not None
        )

    def to_request(self) -> CompensationRequest:
        if not self.is_complete():
            raise ValueError("claim record is incomplete")
        return CompensationRequest(
            flight_number=self.flight_number,
            issue_type=self.issue_type,
            issue_duration_hours=self.issue_duration_hours if self.issue_duration_hours is not None else 0,
            requested_compensation=self.requested_compensation,
            loyalty_tier=self.loyalty_tier,
        )

    def as_dict(self) -> dict[str, str]:
        return {key: str(getattr(value, "value", value)) for key, value in asdict(self).items() if value is not None}
