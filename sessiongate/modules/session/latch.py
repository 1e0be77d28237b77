"""One-shot completion latch for racing start signals."""

import asyncio
import threading
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class OutcomeLatch(Generic[T]):
    """
    Single-consumer latch settled by whichever producer gets there first.

    Producers call settle(); the first call wins and every later call is a
    no-op that returns False. The settled flag is flipped under a lock, so
    engine callbacks running on a foreign thread race safely with the timer.
    Resolution itself always happens on the owning event loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future = self._loop.create_future()
        self._guard = threading.Lock()
        self._settled = False
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def settled(self) -> bool:
        return self._settled

    def settle(self, outcome: T) -> bool:
        """
        Offer an outcome.

        Returns:
            True if this call settled the latch, False if it was already settled
        """
        with self._guard:
            if self._settled:
                return False
            self._settled = True

        if self._on_loop_thread():
            self._resolve(outcome)
        else:
            self._loop.call_soon_threadsafe(self._resolve, outcome)
        return True

    def arm_timeout(self, seconds: float, outcome: T) -> None:
        """Settle with ``outcome`` after ``seconds`` unless something else wins first."""
        if self._settled:
            return
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._loop.call_later(seconds, self.settle, outcome)

    async def wait(self) -> T:
        """Wait for the single outcome."""
        try:
            return await self._future
        except asyncio.CancelledError:
            self.close()
            raise

    def close(self) -> None:
        """Stop accepting outcomes and drop the timer."""
        with self._guard:
            self._settled = True
        self._cancel_timer()

    def _resolve(self, outcome: T) -> None:
        self._cancel_timer()
        if not self._future.done():
            self._future.set_result(outcome)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False
