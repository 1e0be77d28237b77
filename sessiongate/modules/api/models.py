"""
Sessiongate API data models.

These models define the request and response bodies of the session
endpoints.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


# Request Models (API Input)


class StartSessionRequest(BaseModel):
    """Request to start (or attach to) a session."""

    session: str = Field(..., description="Session identifier", min_length=1, max_length=100)
    default_webhook_url: Optional[str] = Field(
        None, description="Webhook notified with this session's QR codes"
    )

    @field_validator("session")
    @classmethod
    def validate_session(cls, v):
        """Reject identifiers that cannot be used as a path segment."""
        if v.strip() != v or "/" in v:
            raise ValueError("Session must not contain slashes or surrounding whitespace")
        return v

    @field_validator("default_webhook_url")
    @classmethod
    def validate_webhook_url(cls, v):
        """Only plain http(s) webhooks are accepted."""
        if v is None or v == "":
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Webhook URL must be http(s): {v}")
        return v


class LogoutRequest(BaseModel):
    """Request to log a session out."""

    session: str = Field(..., description="Session identifier", min_length=1, max_length=100)


# Response Models (API Output)


class SessionInfo(BaseModel):
    """A session known to the engine."""

    id: str
    state: Optional[str] = None
    authenticated: bool = False


class SessionListResponse(BaseModel):
    data: List[SessionInfo]


class ConnectedMessage(BaseModel):
    message: Literal["Connected"] = "Connected"


class ConnectedResponse(BaseModel):
    """Start result when no QR code is needed."""

    data: ConnectedMessage = Field(default_factory=ConnectedMessage)


class QRResponse(BaseModel):
    """Start result carrying the QR code as an image data URL."""

    qr: str


class LogoutResponse(BaseModel):
    data: Literal["success"] = "success"


class ErrorResponse(BaseModel):
    error: str
    message: str
