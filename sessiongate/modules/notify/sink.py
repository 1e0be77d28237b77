"""
QR notification sinks.

A sink receives every QR payload the coordinator issues. The webhook sink
renders it, caches the image and forwards it to the configured webhooks.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Protocol

import httpx

from ..qr import qr_to_data_url
from .stores import KeyedStore

logger = logging.getLogger(__name__)


class NotifySink(Protocol):
    """Protocol for QR notification sinks."""

    async def on_qr_issued(self, session_id: str, payload: str) -> None:
        ...


class WebhookNotifySink:
    """Caches issued QR codes and posts them to webhooks."""

    def __init__(
        self,
        qr_store: KeyedStore,
        webhook_registry: Optional[KeyedStore] = None,
        webhook_url: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        render: Callable[[str], str] = qr_to_data_url,
    ):
        """
        Initialize sink.

        Args:
            qr_store: Cache receiving the rendered QR per session
            webhook_registry: Per-session webhook URLs
            webhook_url: Webhook notified for every session
            timeout: Webhook request timeout in seconds
            client: Preconfigured HTTP client
            render: Payload -> data URL renderer
        """
        self.qr_store = qr_store
        self.webhook_registry = webhook_registry
        self.webhook_url = webhook_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._render = render

    async def on_qr_issued(self, session_id: str, payload: str) -> None:
        qr = await asyncio.to_thread(self._render, payload)
        await self.qr_store.put(session_id, qr)

        targets = await self._targets(session_id)
        if not targets:
            return

        body = {"session": session_id, "status": "connecting", "qr": qr}
        for url in targets:
            await self._deliver(url, body)

    async def _targets(self, session_id: str) -> List[str]:
        targets = []
        if self.webhook_url:
            targets.append(self.webhook_url)
        if self.webhook_registry is not None:
            custom = await self.webhook_registry.get(session_id)
            if custom and custom not in targets:
                targets.append(custom)
        return targets

    async def _deliver(self, url: str, body: dict) -> None:
        try:
            response = await self._client.post(url, json=body)
            response.raise_for_status()
            logger.debug(f"Delivered QR for session {body['session']} to {url}")
        except httpx.HTTPError as e:
            logger.warning(f"Webhook delivery to {url} failed for session {body['session']}: {e}")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
