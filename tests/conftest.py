"""
Shared pytest fixtures for Sessiongate tests.

This module provides common fixtures including:
- FakeSessionEngine: In-process session engine with scriptable callbacks
- Redis mocks for the keyed stores
- Coordinator wiring with in-memory stores
"""

import asyncio
import inspect
import os
import sys
from typing import Awaitable, Callable, Dict, List, Optional, Tuple, Union
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessiongate.modules.engine import SessionCallbacks, SessionHandle, SessionSummary
from sessiongate.modules.notify import MemoryKeyedStore
from sessiongate.modules.session import SessionCoordinator, SessionReclaimer


# =============================================================================
# Session Engine Fake
# =============================================================================

StartHook = Callable[[str, SessionCallbacks], Union[None, Awaitable[None]]]


class FakeSessionEngine:
    """
    Session engine double that records every call.

    Usage:
        def test_qr(fake_engine):
            fake_engine.on_start = fire_after(0.01, "qr", "payload")
            outcome = await coordinator.start_or_attach("alice")

            assert fake_engine.call_names() == ["get", "start"]
    """

    def __init__(self):
        self.sessions: Dict[str, SessionHandle] = {}
        self.callbacks: Dict[str, SessionCallbacks] = {}
        self.calls: List[Tuple[str, str]] = []
        self.on_start: Optional[StartHook] = None
        self.start_error: Optional[BaseException] = None
        self.delete_error: Optional[BaseException] = None
        self.disconnect_error: Optional[BaseException] = None

    def add_session(self, session_id: str, authenticated: bool = False) -> SessionHandle:
        handle = SessionHandle(
            session_id=session_id,
            user={"id": f"{session_id}@s.whatsapp.net"} if authenticated else None,
            state="open" if authenticated else "connecting",
        )
        self.sessions[session_id] = handle
        return handle

    def call_names(self, session_id: Optional[str] = None) -> List[str]:
        return [name for name, sid in self.calls if session_id is None or sid == session_id]

    async def list_sessions(self) -> List[SessionSummary]:
        return [
            SessionSummary(h.session_id, h.state, h.is_authenticated)
            for h in self.sessions.values()
        ]

    async def get_session(self, session_id: str) -> Optional[SessionHandle]:
        self.calls.append(("get", session_id))
        return self.sessions.get(session_id)

    async def start_session(self, session_id: str, callbacks: SessionCallbacks) -> None:
        self.calls.append(("start", session_id))
        if self.start_error is not None:
            raise self.start_error

        self.add_session(session_id)
        self.callbacks[session_id] = callbacks

        if self.on_start is not None:
            result = self.on_start(session_id, callbacks)
            if inspect.isawaitable(result):
                await result

    async def disconnect_session(self, session_id: str) -> None:
        self.calls.append(("disconnect", session_id))
        if self.disconnect_error is not None:
            raise self.disconnect_error

    async def delete_session(self, session_id: str) -> None:
        self.calls.append(("delete", session_id))
        if self.delete_error is not None:
            raise self.delete_error
        self.sessions.pop(session_id, None)

    async def close(self) -> None:
        pass


def fire_after(delay: float, event: str, payload: str = "") -> StartHook:
    """Start hook that fires one engine callback after ``delay`` seconds."""

    def hook(session_id: str, callbacks: SessionCallbacks) -> None:
        loop = asyncio.get_running_loop()
        if event == "qr":
            loop.call_later(delay, callbacks.on_qr_updated, payload)
        elif event == "connected":
            loop.call_later(delay, callbacks.on_connected)
        else:
            raise ValueError(f"Unknown event: {event}")

    return hook


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_engine():
    """Fresh fake engine per test."""
    return FakeSessionEngine()


@pytest.fixture
def qr_store():
    return MemoryKeyedStore(ttl=60)


@pytest.fixture
def webhook_registry():
    return MemoryKeyedStore()


@pytest.fixture
def notify_sink():
    """Notify sink recording raw QR payloads."""
    sink = AsyncMock()
    sink.on_qr_issued = AsyncMock()
    return sink


@pytest.fixture
def coordinator(fake_engine, notify_sink, qr_store, webhook_registry):
    """Coordinator with no reclaim settle delay and a short start timeout."""
    return SessionCoordinator(
        fake_engine,
        reclaimer=SessionReclaimer(fake_engine, settle_delay=0),
        notify_sink=notify_sink,
        qr_store=qr_store,
        webhook_registry=webhook_registry,
        start_timeout=1.0,
    )


@pytest.fixture
def mock_redis():
    """
    Create a mock Redis client with in-memory storage.

    Only the commands the keyed stores and the auth audit trail use are
    implemented.
    """
    storage = {}
    redis = AsyncMock()

    async def mock_set(key, value, *args, **kwargs):
        storage[key] = value
        return True

    async def mock_setex(key, ttl, value):
        storage[key] = value
        return True

    async def mock_get(key):
        return storage.get(key)

    async def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                count += 1
        return count

    redis.set = AsyncMock(side_effect=mock_set)
    redis.setex = AsyncMock(side_effect=mock_setex)
    redis.get = AsyncMock(side_effect=mock_get)
    redis.delete = AsyncMock(side_effect=mock_delete)
    redis.lpush = AsyncMock()
    redis.ltrim = AsyncMock()
    redis._storage = storage  # Expose for test assertions

    return redis

