"""Integration fixtures: the real app wired to scripted collaborators."""

import pytest

from claimbot.dialogue.controller import DialogueController
from claimbot.dialogue.orchestrator import ToolCallOrchestrator


@pytest.fixture()
def app_module():
    from claimbot import main

    return main


@pytest.fixture()
def scripted_engines(monkeypatch, app_module, llm, compensation):
    """Swap both engines for copies backed by the scripted model and stub service."""

    controller = DialogueController(app_module.session_store, llm, compensation)
    orchestrator = ToolCallOrchestrator(
        app_module.session_store,
        llm,
        app_module.tool_registry,
        metrics=app_module.metrics,
    )
    monkeypatch.setitem(app_module.engines, controller.name, controller)
    monkeypatch.setitem(app_module.engines, orchestrator.name, orchestrator)
    return app_module.engines
