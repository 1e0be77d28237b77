import logging
from typing import List, Optional

from ...errors import QRNotFoundError, SessionAlreadyConnectedError
from ..engine import SessionCallbacks, SessionEngine, SessionSummary
from .latch import OutcomeLatch
from .locks import KeyedLock
from .outcome import Connected, Failed, FailureReason, QRIssued, SessionOutcome
from .reclaimer import SessionReclaimer

logger = logging.getLogger(__name__)


class SessionCoordinator:
    def __init__(
        self,
        engine: SessionEngine,
        reclaimer: Optional[SessionReclaimer] = None,
        notify_sink=None,
        qr_store=None,
        webhook_registry=None,
        start_timeout: float = 30.0,
        locks: Optional[KeyedLock] = None,
    ):
        """
        Initialize session coordinator.

        Args:
            engine: External session engine
            reclaimer: Reclaimer for stale sessions (built from engine if omitted)
            notify_sink: Receives raw QR payloads once a QR is issued
            qr_store: Cache of the last QR code per session
            webhook_registry: Per-session webhook URLs
            start_timeout: Seconds to wait for a QR code or connection
            locks: Per-session lock registry
        """
        self.engine = engine
        self.reclaimer = reclaimer or SessionReclaimer(engine)
        self.notify_sink = notify_sink
        self.qr_store = qr_store
        self.webhook_registry = webhook_registry
        self.start_timeout = start_timeout
        self.locks = locks or KeyedLock()

    async def list_sessions(self) -> List[SessionSummary]:
        return await self.engine.list_sessions()

    async def start_or_attach(
        self,
        session_id: str,
        timeout: Optional[float] = None,
        webhook_url: Optional[str] = None,
    ) -> SessionOutcome:
        """
        Start a session, or report that it is already usable.

        Args:
            session_id: Session identifier
            timeout: Seconds to wait for a signal (defaults to start_timeout)
            webhook_url: Webhook to notify about this session's QR codes

        Returns:
            Connected, QRIssued or Failed

        Raises:
            SessionAlreadyConnectedError: If the session is already paired
            SessionReclaimError: If a stale session could not be cleared

        Logic:
        1. Hold the session's lock for the whole sequence
        2. Refuse if the engine already has a paired session
        3. Reclaim an unpaired leftover session
        4. Start and race connected / QR / timeout
        5. Hand an issued QR to the notify sink
        """
        if timeout is None:
            timeout = self.start_timeout

        async with self.locks.acquire(session_id):
            handle = await self.engine.get_session(session_id)

            if handle is not None and handle.is_authenticated:
                raise SessionAlreadyConnectedError(session_id)

            if handle is not None:
                logger.info(f"Session {session_id} exists but is not connected, reclaiming")
                await self.reclaimer.force_reset(session_id)

            outcome = await self._race_start(session_id, timeout)

        if isinstance(outcome, QRIssued):
            await self._publish_qr(session_id, outcome.payload, webhook_url)

        return outcome

    async def _race_start(self, session_id: str, timeout: float) -> SessionOutcome:
        latch: OutcomeLatch[SessionOutcome] = OutcomeLatch()

        def on_connected() -> None:
            if latch.settle(Connected()):
                logger.info(f"Session {session_id} connected callback triggered")

        def on_qr_updated(payload: str) -> None:
            if payload and latch.settle(QRIssued(payload)):
                logger.info(f"Session {session_id} issued a QR code")

        def on_error(error: BaseException) -> None:
            latch.settle(Failed(FailureReason.START_ERROR, str(error) or type(error).__name__, error))

        latch.arm_timeout(
            timeout,
            Failed(
                FailureReason.TIMEOUT,
                f"Session start timeout - no QR code received within {timeout:g} seconds",
            ),
        )

        logger.info(f"Starting session {session_id}...")
        try:
            await self.engine.start_session(
                session_id,
                SessionCallbacks(
                    on_connected=on_connected,
                    on_qr_updated=on_qr_updated,
                    on_error=on_error,
                ),
            )
        except Exception as e:
            logger.error(f"Error in engine start_session for {session_id}: {e}")
            on_error(e)
        except BaseException:
            # Cancelled before wait(); nothing else would drop the timer
            latch.close()
            raise

        outcome = await latch.wait()

        if isinstance(outcome, Failed) and outcome.reason is FailureReason.TIMEOUT:
            logger.error(
                f"Session {session_id} timeout - no QR code received within {timeout:g} seconds"
            )
        return outcome

    async def _publish_qr(self, session_id: str, payload: str, webhook_url: Optional[str]) -> None:
        try:
            if webhook_url and self.webhook_registry is not None:
                await self.webhook_registry.put(session_id, webhook_url)
            if self.notify_sink is not None:
                await self.notify_sink.on_qr_issued(session_id, payload)
        except Exception as e:
            logger.error(f"Failed to publish QR code for session {session_id}: {e}")

    async def get_qr(self, session_id: str) -> str:
        """
        Get the last QR code issued for a session.

        Raises:
            QRNotFoundError: If no QR code is cached
        """
        qr = await self.qr_store.get(session_id) if self.qr_store is not None else None
        if not qr:
            raise QRNotFoundError(session_id)
        return qr

    async def logout(self, session_id: str) -> None:
        """Delete a session and forget its QR code and webhook."""
        await self.engine.delete_session(session_id)

        if self.qr_store is not None:
            await self.qr_store.delete(session_id)
        if self.webhook_registry is not None:
            await self.webhook_registry.delete(session_id)

        logger.info(f"Session {session_id} logged out")
