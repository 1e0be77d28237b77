"""FastAPI dependencies shared by the session routes."""

from typing import Optional

from fastapi import Header, HTTPException, Request

from ..session import SessionCoordinator


async def verify_api_key(
    request: Request,
    x_api_key: Optional[str] = Header(None, description="API key for authentication"),
) -> Optional[str]:
    """Verify API key and return service identity."""
    auth_service = getattr(request.app.state, "auth_service", None)
    if auth_service is None:
        raise HTTPException(503, "Service not initialized")

    result = await auth_service.authenticate(api_key=x_api_key)
    if not result.ok:
        raise HTTPException(401, result.error or "Invalid API key")

    return result.identity


def get_coordinator(request: Request) -> SessionCoordinator:
    """Return the session coordinator built at startup."""
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(503, "Service not initialized")
    return coordinator
