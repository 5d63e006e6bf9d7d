from decimal import Decimal

import pytest

from claimbot.claims.decision import parse_decision
from claimbot.claims.models import ClaimRecord, IssueType, LoyaltyTier


def complete_delay(**overrides):
    values = dict(
        flight_number="AA123",
        issue_type=IssueType.DELAY,
        issue_duration_hours=5,
        requested_compensation=Decimal("300"),
        loyalty_tier=LoyaltyTier.GOLD,
    )
    values.update(overrides)
    return ClaimRecord(**values)


def test_delay_claim_without_duration_is_incomplete():
    assert complete_delay().is_complete()
    assert not complete_delay(issue_duration_hours=None).is_complete()


def test_luggage_claim_is_complete_without_duration():
    claim = complete_delay(issue_type=IssueType.LUGGAGE_ISSUES, issue_duration_hours=None)

    assert claim.is_complete()
    assert claim.to_request().issue_duration_hours == 0


@pytest.mark.parametrize(
    "missing",
    ["flight_number", "issue_type", "requested_compensation", "loyalty_tier"],
)
def test_each_core_field_is_required(missing):
    assert not complete_delay(**{missing: None}).is_complete()


def test_incomplete_claim_cannot_become_a_request():
    with pytest.raises(ValueError):
        ClaimRecord(flight_number="AA123").to_request()


def test_request_payload_uses_plain_values():
    payload = complete_delay().to_request().to_payload()

    assert payload == {
        "flight_number": "AA123",
        "issue_type": "delay",
        "issue_duration_hours": 5,
        "requested_compensation": 300.0,
        "loyalty_tier": "gold",
    }


def test_parse_decision_reads_approved_amount():
    decision = parse_decision("Approved compensation of $450.0 for flight AA123\nRules applied: [gold bonus]")

    assert decision.approved is True
    assert decision.amount == Decimal("450.0")


def test_parse_decision_without_approval_phrase():
    decision = parse_decision("No compensation approved for flight AA123.")

    assert decision.approved is False
    assert decision.amount is None


def test_parse_decision_phrase_without_amount():
    decision = parse_decision("Approved compensation of an undisclosed amount")

    assert decision.approved is True
    assert decision.amount is None


def test_parse_decision_rejects_malformed_amount():
    with pytest.raises(ValueError):
        parse_decision("Approved compensation of $1.2.3")
