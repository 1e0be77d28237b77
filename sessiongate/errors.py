"""
Error taxonomy for Sessiongate.

Every error carries the HTTP status it surfaces as and a short machine
readable code, so callers can tell a timeout from a rejected start.
"""

from typing import Optional

__all__ = (
    "SessionGateError",
    "InvalidRequestError",
    "EngineError",
    "SessionAlreadyConnectedError",
    "SessionStartTimeoutError",
    "SessionStartError",
    "SessionReclaimError",
    "QRNotFoundError",
)


class SessionGateError(Exception):
    """Base error rendered by the API error handler."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, session_id: Optional[str] = None) -> None:
        self.message = message
        self.session_id = session_id
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidRequestError(SessionGateError):
    status_code = 400
    code = "invalid_request"


class EngineError(SessionGateError):
    """The session engine could not be reached or answered with an error."""

    status_code = 502
    code = "engine_error"

    def __init__(
        self,
        message: str,
        session_id: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ) -> None:
        self.upstream_status = upstream_status
        super().__init__(message, session_id)


class SessionAlreadyConnectedError(SessionGateError):
    status_code = 400
    code = "already_connected"

    def __init__(self, session_id: str) -> None:
        super().__init__("Session already connected", session_id)


class SessionStartTimeoutError(SessionGateError):
    status_code = 500
    code = "start_timeout"


class SessionStartError(SessionGateError):
    status_code = 500
    code = "start_failed"


class SessionReclaimError(SessionGateError):
    """A stale session could not be removed from the engine registry."""

    status_code = 500
    code = "reclaim_failed"


class QRNotFoundError(SessionGateError):
    status_code = 404
    code = "qr_not_found"

    def __init__(self, session_id: str) -> None:
        super().__init__(f"No QR code available for session {session_id}", session_id)
