import pytest

from claimbot.core.errors import UpstreamCollaboratorFailure
from claimbot.llm.client import OpenAICompatibleClient, parse_completion
from claimbot.memory.models import ChatTurn, Role
from claimbot.tools.compensation import FlightCompensationTool
from claimbot.tools.registry import derive_definition


def test_payload_without_tools_has_no_tool_choice():
    client = OpenAICompatibleClient("https://llm.example/v1/", model="test-model", max_tokens=50)

    payload = client.build_payload([ChatTurn(role=Role.USER, content="hi")])

    assert payload == {
        "model": "test-model",
        "messages": [{"role": "user", "content": "hi"}],
        "max_tokens": 50,
    }


def test_payload_with_tools_uses_auto_choice(compensation):
    client = OpenAICompatibleClient("https://llm.example/v1")
    definition = derive_definition(FlightCompensationTool(compensation))

    payload = client.build_payload([ChatTurn(role=Role.USER, content="hi")], [definition])

    assert payload["tool_choice"] == "auto"
    assert payload["tools"][0]["function"]["name"] == "flight_compensation"
    assert payload["max_tokens"] == 200


def test_parse_completion_reads_tool_calls():
    turn = parse_completion(
        {
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [
                            {
                                "id": "call-1",
                                "type": "function",
                                "function": {"name": "flight_compensation", "arguments": {"flight_number": "AA123"}},
                            }
                        ],
                    }
                }
            ]
        }
    )

    assert turn.role is Role.ASSISTANT
    assert turn.content == ""
    assert turn.tool_calls[0].id == "call-1"
    assert turn.tool_calls[0].arguments == '{"flight_number": "AA123"}'


def test_tool_result_turn_echoes_call_id():
    payload = ChatTurn(role=Role.TOOL, content="Approved", tool_call_id="call-1").to_payload()

    assert payload == {"role": "tool", "content": "Approved", "tool_call_id": "call-1"}


def test_parse_completion_without_choices_fails():
    with pytest.raises(UpstreamCollaboratorFailure):
        parse_completion({"choices": []})
