"""Base classes and types for executable tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal, Mapping

JsonType = Literal["string", "integer", "number", "boolean"]


@dataclass(slots=True, frozen=True)
class ToolParameter:
    """Declared metadata for one tool argument."""

    json_type: JsonType
    description: str
    required: bool = True


@dataclass(slots=True, frozen=True)
class ToolDefinition:
    """Schema advertised to the model for one registered tool."""

    name: str
    description: str
    parameters: Mapping[str, ToolParameter]

    def to_schema(self) -> dict[str, Any]:
        """Render as an OpenAI-compatible ``function`` tool."""

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        name: {"type": parameter.json_type, "description": parameter.description}
                        for name, parameter in self.parameters.items()
                    },
                    "required": [name for name, parameter in self.parameters.items() if parameter.required],
                },
            },
        }


@dataclass(slots=True)
class ToolContext:
    """Context provided to a tool invocation."""

    arguments: Mapping[str, Any]
    session_id: str | None = None


@dataclass(slots=True)
class ToolResponse:
    """Standard tool response payload.

    ``closes_session`` marks a result that finishes the conversation, such as a
    decided compensation claim; the caller resets the session after replying.
    """

    content: str
    data: dict[str, Any] = field(default_factory=dict)
    success: bool = True
    closes_session: bool = False


class Tool(ABC):
    """Executable tool implementation interface.

    Subclasses declare ``name``, ``description`` and an ordered ``parameters``
    mapping; the registry builds the advertised schema from those declarations.
    """

    name: str
    description: str = ""
    parameters: Mapping[str, ToolParameter] = MappingProxyType({})

    @abstractmethod
    async def run(self, context: ToolContext) -> ToolResponse:
        """Execute the tool given the provided context."""

    def describe(self) -> str:
        """Return a human-readable description for observability dashboards."""

        return self.description or self.__doc__ or self.name
