"""
Remote session engine.

Drives a multi-session messaging sidecar over HTTP. Session starts answer with
a Server-Sent Events stream that carries QR updates and the connected signal;
each stream is consumed by a background task that dispatches to the
callbacks handed over with the start request.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ...errors import EngineError
from .interfaces import SessionCallbacks, SessionHandle, SessionSummary

logger = logging.getLogger(__name__)


class RemoteSessionEngine:
    """HTTP client for the session engine sidecar."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the remote engine.

        Args:
            base_url: Sidecar base URL, e.g. http://localhost:3000
            timeout: Timeout for plain request/response calls in seconds
            client: Preconfigured client (tests inject one with a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
        self._listeners: Dict[str, asyncio.Task] = {}

    @staticmethod
    def _path(session_id: str, suffix: str = "") -> str:
        return f"/sessions/{quote(session_id, safe='')}{suffix}"

    async def _request(
        self, method: str, path: str, session_id: Optional[str] = None, **kwargs: Any
    ) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise EngineError(f"Engine request {method} {path} failed: {e}", session_id) from e

    @staticmethod
    def _check(response: httpx.Response, action: str, session_id: Optional[str] = None) -> None:
        if response.is_success:
            return
        detail = response.text.strip() or response.reason_phrase
        raise EngineError(
            f"Engine failed to {action}: {response.status_code} {detail}",
            session_id,
            upstream_status=response.status_code,
        )

    @staticmethod
    def _handle_from(session_id: str, data: Dict[str, Any]) -> SessionHandle:
        return SessionHandle(
            session_id=data.get("id", session_id),
            user=data.get("user") or None,
            state=data.get("state"),
        )

    async def list_sessions(self) -> List[SessionSummary]:
        response = await self._request("GET", "/sessions")
        self._check(response, "list sessions")

        payload = response.json()
        items = payload.get("data", []) if isinstance(payload, dict) else payload

        sessions = []
        for item in items:
            if isinstance(item, str):
                sessions.append(SessionSummary(session_id=item))
                continue
            sessions.append(
                SessionSummary(
                    session_id=item["id"],
                    state=item.get("state"),
                    authenticated=bool(item.get("user")),
                )
            )
        return sessions

    async def get_session(self, session_id: str) -> Optional[SessionHandle]:
        response = await self._request("GET", self._path(session_id), session_id)
        if response.status_code == 404:
            return None
        self._check(response, "get session", session_id)
        return self._handle_from(session_id, response.json())

    async def start_session(self, session_id: str, callbacks: SessionCallbacks) -> None:
        """
        Start a session and begin listening to its event stream.

        Returns as soon as the engine accepted the start. Events arriving on
        the stream afterwards are dispatched to ``callbacks``.

        Raises:
            EngineError: If the sidecar is unreachable or rejects the start
        """
        await self._stop_listener(session_id)

        path = self._path(session_id, "/start")
        # The stream may stay quiet for the whole start window; only connect
        # and write are bounded here, the caller owns the overall deadline
        request = self._client.build_request(
            "POST",
            path,
            headers={"Accept": "text/event-stream"},
            timeout=httpx.Timeout(self._timeout, read=None),
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise EngineError(f"Engine request POST {path} failed: {e}", session_id) from e

        if not response.is_success:
            await response.aread()
            await response.aclose()
            self._check(response, "start session", session_id)

        task = asyncio.create_task(self._listen(session_id, response, callbacks))
        self._listeners[session_id] = task

        def _forget(done: asyncio.Task) -> None:
            if self._listeners.get(session_id) is done:
                del self._listeners[session_id]

        task.add_done_callback(_forget)

    async def _listen(
        self, session_id: str, response: httpx.Response, callbacks: SessionCallbacks
    ) -> None:
        """Read the SSE stream of a start request until it ends."""
        try:
            async for line in response.aiter_lines():
                if not line.startswith("data:"):
                    continue
                raw = line[5:].strip()
                if not raw:
                    continue
                try:
                    event = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning(f"Ignoring malformed engine event for {session_id}: {raw[:100]}")
                    continue
                if not isinstance(event, dict):
                    logger.warning(f"Ignoring non-object engine event for {session_id}: {raw[:100]}")
                    continue
                self._dispatch(session_id, event, callbacks)
        except httpx.HTTPError as e:
            logger.error(f"Event stream for session {session_id} failed: {e}")
            if callbacks.on_error:
                callbacks.on_error(
                    EngineError(f"Event stream for session {session_id} failed: {e}", session_id)
                )
        finally:
            await response.aclose()
            logger.debug(f"Event stream for session {session_id} closed")

    @staticmethod
    def _dispatch(session_id: str, event: Dict[str, Any], callbacks: SessionCallbacks) -> None:
        event_type = event.get("type")

        if event_type == "qr":
            callbacks.on_qr_updated(event.get("qr") or "")
        elif event_type == "connected":
            callbacks.on_connected()
        elif event_type == "error":
            message = event.get("message") or "unknown engine error"
            logger.error(f"Engine reported error for session {session_id}: {message}")
            if callbacks.on_error:
                callbacks.on_error(EngineError(message, session_id))
        else:
            logger.debug(f"Session {session_id} event: {event_type}")

    async def _stop_listener(self, session_id: str) -> None:
        task = self._listeners.pop(session_id, None)
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def disconnect_session(self, session_id: str) -> None:
        """Best-effort teardown of the live connection."""
        await self._stop_listener(session_id)
        response = await self._request("POST", self._path(session_id, "/disconnect"), session_id)
        if response.status_code == 404:
            return
        self._check(response, "disconnect session", session_id)

    async def delete_session(self, session_id: str) -> None:
        await self._stop_listener(session_id)
        response = await self._request("DELETE", self._path(session_id), session_id)
        if response.status_code == 404:
            logger.debug(f"Session {session_id} already absent from engine")
            return
        self._check(response, "delete session", session_id)

    async def close(self) -> None:
        for session_id in list(self._listeners):
            await self._stop_listener(session_id)
        if self._owns_client:
            await self._client.aclose()
