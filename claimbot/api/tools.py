"""API routes for listing and invoking registered tools."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException

from claimbot.core.errors import ToolNotFound
from claimbot.tools.registry import ToolRegistry


def create_tools_router(registry: ToolRegistry) -> APIRouter:
    router = APIRouter(prefix="/tools", tags=["tools"])

    @router.get("")
    async def list_tools() -> list[dict[str, Any]]:
        return [definition.to_schema() for definition in registry.list_definitions()]

    @router.post("/{name}")
    async def invoke_tool(name: str, payload: dict | None = None) -> dict:
        arguments = (payload or {}).get("arguments", payload or {})
        if not isinstance(arguments, dict):
            raise HTTPException(status_code=400, detail="arguments must be an object")

        try:
            response = await registry.execute(name, arguments)
        except ToolNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"tool": name, "result": response.content, "success": response.success, "data": response.data}

    return router
