"""Session store abstractions and in-process implementation."""

from __future__ import annotations

import asyncio
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Iterable

from .models import SessionState

logger = logging.getLogger("claimbot.sessions")


class SessionStore(ABC):
    """Owns every SessionState; callers only touch state inside ``session()``."""

    @abstractmethod
    def open(self, session_id: str) -> None:
        """Create an empty session if one does not exist yet."""

    @abstractmethod
    def close(self, session_id: str) -> bool:
        """Destroy a session. Returns False when it did not exist."""

    @abstractmethod
    def exists(self, session_id: str) -> bool:
        """Return whether the session is live."""

    @abstractmethod
    def snapshot(self, session_id: str) -> SessionState | None:
        """Return a detached copy of a session for read-only use."""

    @abstractmethod
    def iter_sessions(self) -> Iterable[str]:
        """Iterate over live session identifiers."""

    @abstractmethod
    def session(self, session_id: str):
        """Async context manager yielding the session with its turn lock held."""


@dataclass
class _Entry:
    state: SessionState
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InMemorySessionStore(SessionStore):
    """Process-local store with one turn lock per session.

    The map lock only guards get/create/delete on the mapping and is never held
    across an await, so turns on different sessions never block each other.
    """

    def __init__(self) -> None:
        self._map_lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def _get_or_create(self, session_id: str) -> _Entry:
        with self._map_lock:
            entry = self._entries.get(session_id)
            if entry is None:
                entry = _Entry(state=SessionState(session_id=session_id))
                self._entries[session_id] = entry
                logger.info("Opened session %s", session_id)
            return entry

    def open(self, session_id: str) -> None:
        self._get_or_create(session_id)

    def close(self, session_id: str) -> bool:
        with self._map_lock:
            removed = self._entries.pop(session_id, None)
        if removed is not None:
            logger.info("Closed session %s", session_id)
        return removed is not None

    def exists(self, session_id: str) -> bool:
        with self._map_lock:
            return session_id in self._entries

    def snapshot(self, session_id: str) -> SessionState | None:
        with self._map_lock:
            entry = self._entries.get(session_id)
        if entry is None:
            return None
        state = entry.state
        # Turns and claim records are immutable, so copying the list detaches the view.
        return SessionState(
            session_id=state.session_id,
            transcript=list(state.transcript),
            claim=state.claim,
            mode=state.mode,
        )

    def iter_sessions(self) -> Iterable[str]:
        with self._map_lock:
            return sorted(self._entries)

    def __len__(self) -> int:
        with self._map_lock:
            return len(self._entries)

    @asynccontextmanager
    async def session(self, session_id: str) -> AsyncIterator[SessionState]:
        entry = self._get_or_create(session_id)
        async with entry.lock:
            yield entry.state
