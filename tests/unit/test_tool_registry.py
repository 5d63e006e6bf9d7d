import asyncio
from types import MappingProxyType

import pytest

from claimbot.core.errors import ToolInvocationFailure, ToolNotFound, UpstreamCollaboratorFailure
from claimbot.tools.base import Tool, ToolContext, ToolParameter, ToolResponse
from claimbot.tools.compensation import FlightCompensationTool
from claimbot.tools.registry import coerce_argument


class EchoTool(Tool):
    """Echo the received arguments."""

    name = "echo"
    description = "Echo arguments back"
    parameters = MappingProxyType(
        {
            "text": ToolParameter("string", "Text to echo"),
            "count": ToolParameter("integer", "How many times"),
            "ratio": ToolParameter("number", "A ratio", required=False),
            "loud": ToolParameter("boolean", "Upper-case the output", required=False),
        }
    )

    def __init__(self) -> None:
        self.seen: list[dict] = []

    async def run(self, context: ToolContext) -> ToolResponse:
        self.seen.append(dict(context.arguments))
        text = (context.arguments["text"] or "") * (context.arguments["count"] or 1)
        return ToolResponse(content=text.upper() if context.arguments["loud"] else text)


class BrokenTool(Tool):
    name = "broken"
    description = "Always fails"

    async def run(self, context: ToolContext) -> ToolResponse:
        raise RuntimeError("backend exploded")


def test_register_derives_definition(registry):
    definition = registry.register(EchoTool())

    assert definition.name == "echo"
    assert list(definition.parameters) == ["text", "count", "ratio", "loud"]
    schema = definition.to_schema()
    assert schema["type"] == "function"
    assert schema["function"]["parameters"]["properties"]["count"] == {
        "type": "integer",
        "description": "How many times",
    }
    assert schema["function"]["parameters"]["required"] == ["text", "count"]


def test_reregistering_replaces_entry(registry):
    first, second = EchoTool(), EchoTool()
    registry.register(first)
    registry.register(second)

    asyncio.run(registry.invoke("echo", {"text": "hi", "count": 1}))

    assert len(registry) == 1
    assert first.seen == []
    assert len(second.seen) == 1


def test_register_defaults_only_installs_once(registry):
    original = EchoTool()

    assert registry.register_defaults([original]) == ["echo"]
    assert registry.register_defaults([EchoTool()]) == []

    asyncio.run(registry.invoke("echo", {"text": "a", "count": 1}))
    assert len(original.seen) == 1


def test_invoke_coerces_declared_types(registry):
    tool = EchoTool()
    registry.register(tool)

    result = asyncio.run(registry.invoke("echo", {"text": "ab", "count": 2.9, "ratio": 3, "loud": "true"}))

    assert result == "ABAB"
    assert tool.seen[0] == {"text": "ab", "count": 2, "ratio": 3.0, "loud": True}


def test_missing_arguments_are_passed_as_none(registry):
    tool = EchoTool()
    registry.register(tool)

    result = asyncio.run(registry.invoke("echo", {}))

    assert result == "Success"
    assert tool.seen[0] == {"text": None, "count": None, "ratio": None, "loud": None}


def test_unknown_tool_raises(registry):
    with pytest.raises(ToolNotFound):
        asyncio.run(registry.invoke("nope", {}))


def test_tool_exception_becomes_error_text(registry):
    registry.register(BrokenTool())

    result = asyncio.run(registry.invoke("broken", {}))

    assert result == "Error processing tool call: backend exploded"


def test_huge_exponent_integer_is_rejected_without_expanding():
    with pytest.raises(ToolInvocationFailure, match="out of range"):
        coerce_argument("1e100000000", "integer")


def test_non_finite_values_are_rejected():
    cases = [
        ("NaN", "integer"),
        ("Infinity", "integer"),
        (float("inf"), "integer"),
        ("inf", "number"),
        (float("nan"), "number"),
    ]
    for value, json_type in cases:
        with pytest.raises(ToolInvocationFailure):
            coerce_argument(value, json_type)


def test_integer_text_within_range_is_accepted():
    assert coerce_argument("12", "integer") == 12
    assert coerce_argument("1e3", "integer") == 1000
    assert coerce_argument("999999999999999999", "integer") == 999999999999999999


def test_execute_returns_failed_response_for_tool_errors(registry):
    registry.register(BrokenTool())

    response = asyncio.run(registry.execute("broken", {}))

    assert response.success is False
    assert response.closes_session is False
    assert response.content == "Error processing tool call: backend exploded"


def test_bad_argument_type_becomes_error_text(registry):
    registry.register(EchoTool())

    result = asyncio.run(registry.invoke("echo", {"text": "x", "count": "many"}))

    assert result.startswith("Error processing tool call:")


def test_compensation_tool_calls_service(registry, compensation):
    registry.register(FlightCompensationTool(compensation))

    result = asyncio.run(
        registry.invoke(
            "flight_compensation",
            {
                "flight_number": "AA123",
                "issue_type": "delay",
                "issue_duration": 5,
                "customer_compensation": 300,
                "customer_loyalty_status": "Gold",
            },
        )
    )

    assert result == compensation.verdict
    request = compensation.requests[0]
    assert request.flight_number == "AA123"
    assert request.issue_duration_hours == 5
    assert request.loyalty_tier.value == "gold"


def test_compensation_tool_defaults_missing_duration_to_zero(registry, compensation):
    registry.register(FlightCompensationTool(compensation))

    asyncio.run(
        registry.invoke(
            "flight_compensation",
            {
                "flight_number": "UA456",
                "issue_type": "lost luggage",
                "customer_compensation": 200,
                "customer_loyalty_status": "silver",
            },
        )
    )

    assert compensation.requests[0].issue_duration_hours == 0
    assert compensation.requests[0].issue_type.value == "luggage_issues"


def test_compensation_tool_reports_unavailable_service(registry, compensation):
    compensation.error = UpstreamCollaboratorFailure("compensation", "connection refused")
    registry.register(FlightCompensationTool(compensation))

    result = asyncio.run(
        registry.invoke(
            "flight_compensation",
            {
                "flight_number": "AA123",
                "issue_type": "delay",
                "issue_duration": 2,
                "customer_compensation": 100,
                "customer_loyalty_status": "basic",
            },
        )
    )

    assert result.startswith("Error processing tool call: compensation service unavailable")


def test_compensation_tool_response_closes_session(registry, compensation):
    registry.register(FlightCompensationTool(compensation))

    response = asyncio.run(
        registry.execute(
            "flight_compensation",
            {
                "flight_number": "AA123",
                "issue_type": "delay",
                "issue_duration": 5,
                "customer_compensation": 300,
                "customer_loyalty_status": "gold",
            },
        )
    )

    assert response.success is True
    assert response.closes_session is True
    assert response.data == {"approved": True, "amount": "300.0"}
