"""
Authentication module for the Sessiongate API.

This module handles API key authentication for callers of the session
endpoints. It's designed as a black box that can be replaced with any auth
system without affecting other modules.
"""

import json
import logging
import os
import secrets
from datetime import UTC, datetime
from typing import Dict, Iterable, Optional, Tuple

logger = logging.getLogger(__name__)


class AuthModule:
    """
    Authentication module for validating API keys.

    Keys are configured as ``key`` or ``service:key`` entries. The service
    part, when present, is reported as the caller's identity.
    """

    @staticmethod
    def parse_api_keys(entries: Iterable[str]) -> Dict[str, Optional[str]]:
        """
        Parse API key entries into a key -> service identity mapping.

        Args:
            entries: Iterable of ``key`` or ``service:key`` strings

        Returns:
            Mapping of API key to service identity (None for plain keys)

        Example:
            >>> AuthModule.parse_api_keys(["abc123", "orchestrator:def456"])
            {'abc123': None, 'def456': 'orchestrator'}
        """
        keys: Dict[str, Optional[str]] = {}
        for entry in entries:
            entry = entry.strip()
            if not entry:
                continue

            if ":" in entry:
                service, key = entry.split(":", 1)
                keys[key.strip()] = service.strip() or None
            else:
                keys[entry] = None

        return keys

    @classmethod
    def from_entries(cls, entries: Iterable[str], redis_client=None) -> "AuthModule":
        """Build an auth module from already-split API key entries."""
        return cls(redis_client, api_keys=cls.parse_api_keys(entries))

    def __init__(self, redis_client=None, api_keys: Optional[Dict[str, Optional[str]]] = None):
        """
        Initialize auth module.

        Args:
            redis_client: Optional async Redis client used for the audit trail
            api_keys: Key -> service identity mapping. Read from API_KEYS when omitted.
        """
        self.redis = redis_client

        if api_keys is None:
            api_keys = self.parse_api_keys(os.environ.get("API_KEYS", "").split(","))
        self.api_keys: Dict[str, Optional[str]] = api_keys

    async def verify_api_key(self, api_key: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Verify a caller API key.

        Args:
            api_key: API key from X-API-Key header

        Returns:
            Tuple of (is_valid, service_identity)
        """
        if not api_key:
            return False, None

        for known_key, service_identity in self.api_keys.items():
            # Constant-time comparison for every candidate
            if secrets.compare_digest(api_key, known_key):
                await self._log_event(
                    "api_key_verified",
                    {"service_identity": service_identity},
                )
                return True, service_identity

        await self._log_event("api_key_rejected", {})
        return False, None

    async def verify_credentials(
        self,
        api_key: Optional[str] = None,
    ) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Verify credentials.

        Args:
            api_key: API key from X-API-Key header

        Returns:
            Tuple of (is_valid, identity, auth_method)
        """
        if api_key:
            is_valid, service_identity = await self.verify_api_key(api_key)
            if is_valid:
                return True, service_identity, "api_key"

        return False, None, None

    async def _log_event(self, event_type: str, data: dict):
        """
        Log security event for audit.

        Args:
            event_type: Type of security event
            data: Event data
        """
        event = {
            "type": event_type,
            "data": data,
            "timestamp": datetime.now(UTC).isoformat(),
        }

        if self.redis is None:
            logger.debug(f"Auth event: {event_type}")
            return

        try:
            await self.redis.lpush("auth:audit", json.dumps(event))
            # Keep last 10000 events
            await self.redis.ltrim("auth:audit", 0, 9999)
        except Exception as e:
            logger.warning(f"Failed to record auth event {event_type}: {e}")
