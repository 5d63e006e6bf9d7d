"""Exception taxonomy and HTTP exception handling utilities."""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("claimbot.errors")


class ClaimbotError(Exception):
    """Base class for errors raised by the chat core."""


class ToolNotFound(ClaimbotError):
    """A tool call named a tool that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool not found: {name}")
        self.name = name


class ToolInvocationFailure(ClaimbotError):
    """A registered tool failed while running."""


class MalformedToolArguments(ClaimbotError):
    """Tool-call arguments were not a JSON object."""


class UpstreamCollaboratorFailure(ClaimbotError):
    """The language model or the compensation service was unreachable or errored."""

    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    """Return a generic JSON error response while logging the exception."""

    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "Something unexpected happened. Please try again later.",
        },
    )
