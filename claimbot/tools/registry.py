"""Registry mapping tool names to executable tools and their schemas."""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from claimbot.core.errors import ToolInvocationFailure, ToolNotFound
from claimbot.tools.base import JsonType, Tool, ToolContext, ToolDefinition, ToolResponse

logger = logging.getLogger("claimbot.tools")

ERROR_PREFIX = "Error processing tool call: "
MAX_INTEGER_DIGITS = 18


@dataclass(slots=True, frozen=True)
class RegisteredTool:
    tool: Tool
    definition: ToolDefinition


def derive_definition(tool: Tool) -> ToolDefinition:
    """Build the advertised schema from a tool's declared metadata."""

    if not getattr(tool, "name", None):
        raise ValueError(f"{type(tool).__name__} does not declare a name")
    return ToolDefinition(
        name=tool.name,
        description=tool.describe(),
        parameters=MappingProxyType(dict(tool.parameters)),
    )


def _integer_from_text(text: str) -> int:
    try:
        number = Decimal(text.strip())
    except InvalidOperation as exc:
        raise ToolInvocationFailure(f"expected integer, got {text[:32]!r}") from exc
    # Bound the magnitude before int() expands the exponent.
    if not number.is_finite() or number.adjusted() > MAX_INTEGER_DIGITS:
        raise ToolInvocationFailure(f"integer out of range: {text[:32]!r}")
    return int(number)


def coerce_argument(value: Any, json_type: JsonType) -> Any:
    """Convert a decoded JSON value to the declared parameter type."""

    if value is None:
        return None
    if json_type == "string":
        return value if isinstance(value, str) else str(value)
    if json_type == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        raise ToolInvocationFailure(f"expected boolean, got {value!r}")
    if isinstance(value, bool):
        raise ToolInvocationFailure(f"expected {json_type}, got {value!r}")
    if json_type == "integer":
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ToolInvocationFailure(f"integer out of range: {value!r}")
            return int(value)
        if isinstance(value, str):
            return _integer_from_text(value)
    if json_type == "number":
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError as exc:
                raise ToolInvocationFailure(f"expected number, got {value!r}") from exc
        else:
            raise ToolInvocationFailure(f"expected number, got {value!r}")
        if not math.isfinite(number):
            raise ToolInvocationFailure(f"number out of range: {value!r}")
        return number
    raise ToolInvocationFailure(f"expected {json_type}, got {value!r}")


class ToolRegistry:
    """Name → tool lookup populated at startup and read on every request.

    Writes replace the whole mapping under a lock; reads use whichever
    immutable snapshot is current and never lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tools: Mapping[str, RegisteredTool] = MappingProxyType({})

    def register(self, tool: Tool) -> ToolDefinition:
        """Register ``tool``, replacing any tool already registered under its name."""

        definition = derive_definition(tool)
        with self._lock:
            updated = dict(self._tools)
            updated[definition.name] = RegisteredTool(tool=tool, definition=definition)
            self._tools = MappingProxyType(updated)
        logger.info("Registered tool %s with %d parameters", definition.name, len(definition.parameters))
        return definition

    def register_defaults(self, tools: Iterable[Tool]) -> list[str]:
        """Register each tool whose name is still free; returns the names added.

        Safe to call from several startup hooks: the check and the swap happen
        under one lock, so a default set is only ever installed once.
        """

        added: list[str] = []
        with self._lock:
            updated = dict(self._tools)
            for tool in tools:
                definition = derive_definition(tool)
                if definition.name in updated:
                    continue
                updated[definition.name] = RegisteredTool(tool=tool, definition=definition)
                added.append(definition.name)
            self._tools = MappingProxyType(updated)
        if added:
            logger.info("Registered default tools: %s", ", ".join(added))
        return added

    def list_definitions(self) -> list[ToolDefinition]:
        return [entry.definition for entry in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    async def execute(
        self,
        name: str,
        arguments: Mapping[str, Any],
        *,
        session_id: str | None = None,
    ) -> ToolResponse:
        """Run a tool and return its full response.

        Raises ``ToolNotFound`` for unknown names. Any failure inside the tool,
        including argument coercion, comes back as an unsuccessful response
        whose content is the error text.
        """

        entry = self._tools.get(name)
        if entry is None:
            raise ToolNotFound(name)

        try:
            coerced = {
                param_name: coerce_argument(arguments.get(param_name), parameter.json_type)
                for param_name, parameter in entry.definition.parameters.items()
            }
            response = await entry.tool.run(ToolContext(arguments=coerced, session_id=session_id))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Tool %s failed", name)
            return ToolResponse(content=f"{ERROR_PREFIX}{exc}", success=False)

        if not response.success:
            logger.warning("Tool %s reported failure: %s", name, response.content)
        if not response.content:
            response = replace(response, content="Success")
        return response

    async def invoke(
        self,
        name: str,
        arguments: Mapping[str, Any],
        *,
        session_id: str | None = None,
    ) -> str:
        """Run a tool and return its result as text."""

        response = await self.execute(name, arguments, session_id=session_id)
        return response.content
