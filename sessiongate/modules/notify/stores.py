"""
Keyed stores for per-session side channels.

Two stores are kept per session: the last QR code (as a data URL) and the
caller-supplied webhook URL. Both map a session identifier to a string.
"""

import logging
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class KeyedStore(Protocol):
    """Protocol for session identifier -> string stores."""

    async def put(self, session_id: str, value: str) -> None:
        ...

    async def get(self, session_id: str) -> Optional[str]:
        ...

    async def delete(self, session_id: str) -> None:
        ...


class RedisKeyedStore:
    """Redis-backed keyed store."""

    def __init__(self, redis_client, prefix: str, ttl: Optional[int] = None):
        """
        Initialize store.

        Args:
            redis_client: Async Redis client (decode_responses=True)
            prefix: Key prefix, e.g. "session:qr"
            ttl: Expiry in seconds, None keeps entries until deleted
        """
        self.redis = redis_client
        self.prefix = prefix
        self.ttl = ttl

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    async def put(self, session_id: str, value: str) -> None:
        if self.ttl:
            await self.redis.setex(self._key(session_id), self.ttl, value)
        else:
            await self.redis.set(self._key(session_id), value)

    async def get(self, session_id: str) -> Optional[str]:
        value = await self.redis.get(self._key(session_id))
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def delete(self, session_id: str) -> None:
        await self.redis.delete(self._key(session_id))


class MemoryKeyedStore:
    """Process-local keyed store with optional expiry."""

    def __init__(self, ttl: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}

    async def put(self, session_id: str, value: str) -> None:
        expires_at = self._clock() + self.ttl if self.ttl else None
        self._entries[session_id] = (value, expires_at)

    async def get(self, session_id: str) -> Optional[str]:
        entry = self._entries.get(session_id)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._entries[session_id]
            return None
        return value

    async def delete(self, session_id: str) -> None:
        self._entries.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._entries)


def build_stores(backend: str, redis_client=None, qr_ttl: int = 60) -> Tuple[KeyedStore, KeyedStore]:
    """
    Build the QR cache and the webhook registry.

    Args:
        backend: "redis" or "memory"
        redis_client: Required for the redis backend
        qr_ttl: Seconds a QR code stays cached

    Returns:
        Tuple of (qr_store, webhook_registry)
    """
    if backend == "redis":
        if redis_client is None:
            raise ValueError("Redis backend requires a Redis client")
        return (
            RedisKeyedStore(redis_client, "session:qr", ttl=qr_ttl),
            RedisKeyedStore(redis_client, "session:webhook"),
        )

    logger.info("Using in-memory QR cache and webhook registry")
    return MemoryKeyedStore(ttl=qr_ttl), MemoryKeyedStore()
