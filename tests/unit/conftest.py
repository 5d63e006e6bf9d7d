"""Pytest unit test fixtures."""

import pytest

from claimbot.memory.store import InMemorySessionStore
from claimbot.tools.registry import ToolRegistry


@pytest.fixture()
def session_store():
    return InMemorySessionStore()


@pytest.fixture()
def registry():
    return ToolRegistry()
