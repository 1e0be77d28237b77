import asyncio
import logging
from typing import Awaitable, Callable

from ...errors import SessionReclaimError
from ..engine import DisconnectingEngine, SessionEngine

logger = logging.getLogger(__name__)


class SessionReclaimer:
    def __init__(
        self,
        engine: SessionEngine,
        settle_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize session reclaimer.

        Args:
            engine: Session engine holding the registry
            settle_delay: Seconds to wait after delete so the engine can close
                sockets and release files (it has no "closed" acknowledgment)
            sleep: Sleep coroutine, replaceable in tests
        """
        self.engine = engine
        self.settle_delay = settle_delay
        self._sleep = sleep

    async def force_reset(self, session_id: str) -> None:
        """
        Remove a session from the engine so the next start begins clean.

        Args:
            session_id: Session identifier

        Raises:
            SessionReclaimError: If the engine could not look up or delete the session

        Logic:
        1. Look up the session, return if absent
        2. Try to disconnect (advisory, failures are logged)
        3. Delete from the registry (failures propagate)
        4. Wait for the engine to finish its own teardown
        """
        try:
            handle = await self.engine.get_session(session_id)
        except Exception as e:
            raise SessionReclaimError(
                f"Could not look up stale session {session_id}: {e}", session_id
            ) from e
        if handle is None:
            logger.debug(f"Session {session_id} not in engine, nothing to reclaim")
            return

        if isinstance(self.engine, DisconnectingEngine):
            try:
                await self.engine.disconnect_session(session_id)
            except Exception as e:
                logger.warning(f"Disconnect of session {session_id} failed, deleting anyway: {e}")

        try:
            await self.engine.delete_session(session_id)
        except Exception as e:
            logger.error(f"Error during complete session deletion for {session_id}: {e}")
            raise SessionReclaimError(
                f"Could not clear stale session {session_id}: {e}", session_id
            ) from e

        if self.settle_delay > 0:
            await self._sleep(self.settle_delay)

        logger.info(f"Reclaimed stale session {session_id}")
