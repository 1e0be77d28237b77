"""
Session endpoints for the Sessiongate API

Thin HTTP layer over the session coordinator: validates input, turns start
outcomes into responses and renders QR payloads as images.
"""

import asyncio
import json
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from pydantic import ValidationError

from ...errors import InvalidRequestError
from ..qr import qr_to_data_url
from ..session import QRIssued, SessionCoordinator, raise_for_failure
from .dependencies import get_coordinator, verify_api_key
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

logger = logging.getLogger(__name__)


async def _start(
    coordinator: SessionCoordinator, payload: StartSessionRequest
) -> Union[ConnectedResponse, QRResponse]:
    outcome = await coordinator.start_or_attach(
        payload.session, webhook_url=payload.default_webhook_url
    )
    raise_for_failure(outcome, payload.session)

    if isinstance(outcome, QRIssued):
        return QRResponse(qr=await asyncio.to_thread(qr_to_data_url, outcome.payload))
    return ConnectedResponse()


async def _session_from_request(request: Request) -> str:
    """Read ``session`` from the query string, falling back to a JSON body."""
    session = request.query_params.get("session")
    if session:
        return session

    body = await request.body()
    if body:
        try:
            data = json.loads(body)
        except ValueError as e:
            raise InvalidRequestError("Request body must be JSON") from e
        if isinstance(data, dict) and data.get("session"):
            try:
                return LogoutRequest(session=data["session"]).session
            except ValidationError as e:
                raise InvalidRequestError(f"Invalid session: {e.errors()[0]['msg']}") from e

    raise InvalidRequestError("Missing session")


def create_session_router() -> APIRouter:
    """
    Create the session router.

    Every route requires an API key. Services are resolved per request from
    the application state, so the router can be mounted on any app that
    provides them.

    Returns:
        FastAPI router with session endpoints
    """
    router = APIRouter(
        prefix="/sessions",
        tags=["sessions"],
        dependencies=[Depends(verify_api_key)],
        responses={401: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    )

    @router.get("", response_model=SessionListResponse)
    async def list_sessions(coordinator: SessionCoordinator = Depends(get_coordinator)):
        """
        List every session known to the engine.

        Returns:
            200: Session list
            401: Unauthorized
        """
        sessions = await coordinator.list_sessions()
        return SessionListResponse(data=[SessionInfo(**s.to_dict()) for s in sessions])

    @router.post(
        "/start",
        response_model=Union[ConnectedResponse, QRResponse],
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def start_session(
        payload: StartSessionRequest,
        coordinator: SessionCoordinator = Depends(get_coordinator),
    ):
        """
        Start a session and return its QR code.

        Returns:
            200: {"qr": <data URL>} or {"data": {"message": "Connected"}}
            400: Session already connected
            500: No QR code in time, or the engine rejected the start
        """
        return await _start(coordinator, payload)

    @router.get("/start")
    async def start_session_from_query(
        request: Request,
        session: str = Query(..., min_length=1, max_length=100),
        default_webhook_url: Optional[str] = Query(None),
        coordinator: SessionCoordinator = Depends(get_coordinator),
    ):
        """
        Start a session from query parameters.

        Browsers asking for HTML get a page with the QR image, everyone else
        gets the same JSON as POST /sessions/start.
        """
        try:
            payload = StartSessionRequest(session=session, default_webhook_url=default_webhook_url)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid request: {e.errors()[0]['msg']}") from e
        result = await _start(coordinator, payload)

        if isinstance(result, QRResponse) and "text/html" in request.headers.get("accept", ""):
            return HTMLResponse(f'<img src="{result.qr}">')
        return result

    @router.get(
        "/{session_id}/qr", response_model=QRResponse, responses={404: {"model": ErrorResponse}}
    )
    async def get_session_qr(
        session_id: str,
        coordinator: SessionCoordinator = Depends(get_coordinator),
    ):
        """
        Get the last QR code issued for a session.

        Returns:
            200: {"qr": <data URL>}
            404: No QR code cached for this session
        """
        return QRResponse(qr=await coordinator.get_qr(session_id))

    @router.api_route("/logout", methods=["GET", "POST", "DELETE"], response_model=LogoutResponse)
    async def logout(
        request: Request,
        coordinator: SessionCoordinator = Depends(get_coordinator),
    ):
        """
        Log a session out and delete it from the engine.

        ``session`` is read from the query string or a JSON body.
        """
        session_id = await _session_from_request(request)
        await coordinator.logout(session_id)
        return LogoutResponse()

    return router
