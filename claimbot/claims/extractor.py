"""Keyword and pattern based slot extraction for compensation claims.

Extraction is heuristic: each slot is looked for independently on
every message, a slot that is already filled is never overwritten, and a
message that mentions nothing useful leaves the record untouched.
"""

from __future__ import annotations

import dataclasses
import re
from decimal import Decimal, InvalidOperation

from claimbot.claims.models import ClaimRecord, IssueType, LoyaltyTier

# Carrier codes must be upper case; the "flight" prefix is not case sensitive.
FLIGHT_PATTERN = re.compile(
    r"(?:(?i:flight)\s*(?:(?i:number)|#)?\s*:?\s*)?([A-Z]{2}\d{2,4})"
    r"|(?i:flight)\s*#?\s*(\d{2,4})"
)
DURATION_PATTERN = re.compile(r"(\d+)\s*(?:hour|hr|h|day)s?", re.IGNORECASE)
BARE_NUMBER_PATTERN = re.compile(r"\d+")
AMOUNT_PATTERN = re.compile(r"\$?([0-9,]+)(?:\s*dollars?)?", re.IGNORECASE)

LUGGAGE_KEYWORDS = ("luggage", "baggage", "bag", "lost", "damaged", "missing")
MONEY_KEYWORDS = ("$", "dollar", "compensation", "request")
AMOUNT_TRIGGER_KEYWORDS = MONEY_KEYWORDS + ("want", "seeking")

BARE_HOURS_RANGE = (1, 72)
MAX_COMPENSATION = Decimal("10000")

LOYALTY_KEYWORDS = (
    ("gold", LoyaltyTier.GOLD),
    ("silver", LoyaltyTier.SILVER),
    ("basic", LoyaltyTier.BASIC),
)


def extract(text: str, claim: ClaimRecord) -> ClaimRecord:
    """Return ``claim`` with any unset slots that ``text`` mentions filled in."""

    lowered = text.lower()
    updates: dict[str, object] = {}

    if claim.flight_number is None:
        flight_number = _extract_flight_number(text)
        if flight_number is not None:
            updates["flight_number"] = flight_number

    issue_type = claim.issue_type
    if issue_type is None:
        issue_type = _extract_issue_type(lowered)
        if issue_type is not None:
            updates["issue_type"] = issue_type

    if claim.issue_duration_hours is None and issue_type is not IssueType.LUGGAGE_ISSUES:
        if not any(keyword in lowered for keyword in MONEY_KEYWORDS):
            duration = _extract_duration(text)
            if duration is not None:
                updates["issue_duration_hours"] = duration

    if claim.requested_compensation is None:
        if any(keyword in lowered for keyword in AMOUNT_TRIGGER_KEYWORDS):
            amount = _extract_amount(text)
            if amount is not None:
                updates["requested_compensation"] = amount

    if claim.loyalty_tier is None:
        for keyword, tier in LOYALTY_KEYWORDS:
            if keyword in lowered:
                updates["loyalty_tier"] = tier
                break

    if not updates:
        return claim
    return dataclasses.replace(claim, **updates)


def _extract_flight_number(text: str) -> str | None:
    match = FLIGHT_PATTERN.search(text)
    if match is None:
        return None
    if match.group(1):
        return match.group(1)
    return f"FL{match.group(2)}"


def _extract_issue_type(lowered: str) -> IssueType | None:
    if "delay" in lowered:
        return IssueType.DELAY
    if "cancel" in lowered:
        return IssueType.CANCELLATION
    if any(keyword in lowered for keyword in LUGGAGE_KEYWORDS):
        return IssueType.LUGGAGE_ISSUES
    return None


def _extract_duration(text: str) -> int | None:
    match = DURATION_PATTERN.search(text)
    if match:
        return int(match.group(1))

    # A reply that is only a number, e.g. "3" after "how many hours?"
    trimmed = text.strip()
    if BARE_NUMBER_PATTERN.fullmatch(trimmed):
        value = int(trimmed)
        low, high = BARE_HOURS_RANGE
        if low <= value <= high:
            return value
    return None


def _extract_amount(text: str) -> Decimal | None:
    match = AMOUNT_PATTERN.search(text)
    if match is None:
        return None

    digits = match.group(1).replace(",", "")
    if not digits:
        return None
    try:
        amount = Decimal(digits)
    except InvalidOperation:
        return None
    if 0 < amount <= MAX_COMPENSATION:
        return amount
    return None
