"""
API Module - Black Box Interface

Purpose: HTTP routing and module orchestration
Interface: REST API endpoints
Hidden: Request validation, response shaping, QR image rendering

The API module only orchestrates - it contains no business logic.
All logic is delegated to appropriate modules.
"""

from .models import (
    ConnectedResponse,
    ErrorResponse,
    LogoutRequest,
    LogoutResponse,
    QRResponse,
    SessionInfo,
    SessionListResponse,
    StartSessionRequest,
)
from .session_routes import create_session_router

__all__ = [
    "ConnectedResponse",
    "ErrorResponse",
    "LogoutRequest",
    "LogoutResponse",
    "QRResponse",
    "SessionInfo",
    "SessionListResponse",
    "StartSessionRequest",
    "create_session_router",
]
