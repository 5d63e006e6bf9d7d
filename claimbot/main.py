"""FastAPI application entry point for the airline claims assistant."""

import logging
import uuid
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from claimbot.api.tools import create_tools_router
from claimbot.claims.decision import HttpCompensationService
from claimbot.core.config import get_settings
from claimbot.core.errors import UpstreamCollaboratorFailure, unhandled_exception_handler
from claimbot.core.logging import configure_logging, request_id_middleware
from claimbot.core.metrics import MetricsCollector
from claimbot.dialogue.base import ChatEngine
from claimbot.dialogue.controller import DialogueController
from claimbot.dialogue.orchestrator import ToolCallOrchestrator
from claimbot.llm.client import OpenAICompatibleClient
from claimbot.memory.store import InMemorySessionStore
from claimbot.tools.compensation import FlightCompensationTool
from claimbot.tools.registry import ToolRegistry

settings = get_settings()
logger = logging.getLogger("claimbot.app")

UPSTREAM_ERROR_REPLY = "I'm sorry, I couldn't process your request at this time."

session_store = InMemorySessionStore()
metrics = MetricsCollector()
llm_client = OpenAICompatibleClient(
    settings.llm_base_url,
    api_key=settings.llm_api_key,
    model=settings.llm_model,
    max_tokens=settings.llm_max_tokens,
    timeout=settings.llm_timeout_seconds,
)
compensation_service = HttpCompensationService(
    settings.compensation_service_url,
    timeout=settings.compensation_timeout_seconds,
)
tool_registry = ToolRegistry()
tool_registry.register_defaults([FlightCompensationTool(compensation_service)])

dialogue_controller = DialogueController(
    session_store,
    llm_client,
    compensation_service,
    max_history_size=settings.max_history_size,
    llm_timeout=settings.llm_timeout_seconds,
    compensation_timeout=settings.compensation_timeout_seconds,
)
tool_orchestrator = ToolCallOrchestrator(
    session_store,
    llm_client,
    tool_registry,
    max_history_size=settings.max_history_size,
    llm_timeout=settings.llm_timeout_seconds,
    metrics=metrics,
)
engines: dict[str, ChatEngine] = {
    dialogue_controller.name: dialogue_controller,
    tool_orchestrator.name: tool_orchestrator,
}

app = FastAPI(title=settings.app_name, version="0.1.0", docs_url="/docs")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(request_id_middleware)

app.include_router(create_tools_router(tool_registry))


def get_session_store() -> InMemorySessionStore:
    """Dependency injector for the session store."""

    return session_store


def get_engine() -> ChatEngine:
    """Dependency injector for the configured chat engine."""

    return engines[settings.chat_engine]


async def run_turn(engine: ChatEngine, session_id: str, content: str) -> tuple[str, str | None]:
    """Run one turn, mapping upstream failures to a generic reply."""

    try:
        reply = await engine.handle_turn(session_id, content)
    except UpstreamCollaboratorFailure:
        logger.exception("Upstream failure during turn", extra={"session_id": session_id})
        metrics.record_request(engine.name, "upstream_error")
        return UPSTREAM_ERROR_REPLY, "upstream_unavailable"

    metrics.record_request(engine.name, "ok")
    return reply, None


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, Any]:
    """Return basic service status for monitoring."""

    return {
        "status": "ok",
        "engine": settings.chat_engine,
        "tools": len(tool_registry),
        "compensation_configured": settings.compensation_enabled,
    }


@app.post("/chat", tags=["chat"])
async def chat(
    message: dict,
    engine: ChatEngine = Depends(get_engine),
    store: InMemorySessionStore = Depends(get_session_store),
) -> dict:
    """Primary chat endpoint; one call is one turn of the session."""

    session_id = message.get("session_id")
    content = message.get("content")

    if not isinstance(session_id, str) or not isinstance(content, str) or not session_id or not content:
        raise HTTPException(status_code=400, detail="session_id and content must be non-empty strings")

    reply, error = await run_turn(engine, session_id, content)
    snapshot = store.snapshot(session_id)

    payload = {
        "session_id": session_id,
        "engine": engine.name,
        "message": reply,
        "mode": snapshot.mode.value if snapshot else None,
        "claim": snapshot.claim.as_dict() if snapshot else {},
    }
    if error:
        payload["error"] = error
    return payload


@app.post("/sessions", tags=["sessions"], status_code=201)
async def open_session(store: InMemorySessionStore = Depends(get_session_store)) -> dict[str, str]:
    session_id = uuid.uuid4().hex
    store.open(session_id)
    return {"session_id": session_id}


@app.get("/sessions", tags=["sessions"])
async def list_sessions(store: InMemorySessionStore = Depends(get_session_store)) -> list[str]:
    """List live session identifiers (development helper)."""

    return list(store.iter_sessions())


@app.delete("/sessions/{session_id}", tags=["sessions"])
async def close_session(session_id: str, store: InMemorySessionStore = Depends(get_session_store)) -> dict:
    if not store.close(session_id):
        raise HTTPException(status_code=404, detail="unknown session")
    return {"session_id": session_id, "closed": True}


@app.websocket("/websocket-chat")
async def websocket_chat(websocket: WebSocket) -> None:
    """One session per connection; every text frame is one turn."""

    await websocket.accept()
    session_id = uuid.uuid4().hex
    session_store.open(session_id)
    engine = get_engine()
    logger.info("WebSocket connection opened: %s", session_id)

    try:
        while True:
            content = await websocket.receive_text()
            try:
                reply, _ = await run_turn(engine, session_id, content)
            except Exception:  # noqa: BLE001
                logger.exception("WebSocket turn failed for %s", session_id)
                reply = UPSTREAM_ERROR_REPLY
            await websocket.send_text(reply)
    except WebSocketDisconnect:
        logger.info("WebSocket connection closed: %s", session_id)
    finally:
        session_store.close(session_id)


@app.on_event("startup")
async def configure_app_logging() -> None:
    level = configure_logging(settings.log_level)
    logger.info(
        "Logging configured at %s level for %s environment (engine=%s)",
        logging.getLevelName(level),
        settings.environment,
        settings.chat_engine,
    )


app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get("/metrics", tags=["metrics"])
async def metrics_endpoint() -> dict:
    snapshot = metrics.snapshot()
    return {
        "total_requests": snapshot.total_requests,
        "turn_outcomes": snapshot.turn_outcomes,
        "tool_calls": snapshot.tool_calls,
        "active_sessions": len(session_store),
    }
