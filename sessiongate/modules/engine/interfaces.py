"""Session engine interfaces following Black Box Design principles."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable


@dataclass
class SessionHandle:
    """
    A session as seen by the engine.

    The engine owns the handle; this service only observes it. ``user`` is the
    authentication indicator and is only present once a device has paired.
    """
    session_id: str
    user: Optional[Dict[str, Any]] = None
    state: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


@dataclass
class SessionSummary:
    """Entry of the engine's session registry."""
    session_id: str
    state: Optional[str] = None
    authenticated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.session_id,
            "state": self.state,
            "authenticated": self.authenticated,
        }


@dataclass
class SessionCallbacks:
    """
    Hooks handed to the engine with a start request.

    The engine fires at most one of on_connected/on_qr_updated per request that
    matters to the caller. on_error reports a start failure that happens after
    start_session has already returned.
    """
    on_connected: Callable[[], None]
    on_qr_updated: Callable[[str], None]
    on_error: Optional[Callable[[BaseException], None]] = field(default=None)


class SessionEngine(Protocol):
    """Protocol for the external multi-session messaging engine."""

    async def list_sessions(self) -> List[SessionSummary]:
        """List every session in the engine registry."""
        ...

    async def get_session(self, session_id: str) -> Optional[SessionHandle]:
        """
        Look up a session.

        Returns:
            SessionHandle, or None if the engine has no such session
        """
        ...

    async def start_session(self, session_id: str, callbacks: SessionCallbacks) -> None:
        """
        Request a new session start.

        Raises:
            EngineError: If the engine rejects the start request
        """
        ...

    async def delete_session(self, session_id: str) -> None:
        """Remove a session from the registry. Absent sessions are not an error."""
        ...

    async def close(self) -> None:
        """Release engine resources."""
        ...


@runtime_checkable
class DisconnectingEngine(Protocol):
    """Optional capability: best-effort teardown of a live connection."""

    async def disconnect_session(self, session_id: str) -> None:
        ...
