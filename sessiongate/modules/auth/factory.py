"""Builds the API key authentication service from configuration."""

import logging
from typing import Any, Optional

from ...config.provider import ConfigProvider
from .auth import AuthModule
from .service import AuthenticationService, DefaultAuthenticationService

logger = logging.getLogger(__name__)


class AuthFactory:
    """Composition root for authentication; callers only see the service."""

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        redis_client: Optional[Any] = None,
    ) -> AuthenticationService:
        """
        Wire an AuthModule behind the authentication facade.

        Args:
            config_provider: Source of API keys and the REQUIRE_AUTH switch
            redis_client: Redis client for the audit trail, if any

        Returns:
            AuthenticationService used by the API key dependency

        Raises:
            ValueError: If auth is required and no API keys are configured
        """
        auth_config = config_provider.get_auth_config()
        auth_module = AuthModule.from_entries(auth_config.api_keys, redis_client=redis_client)

        if not auth_config.require_auth:
            logger.warning("Authentication disabled (REQUIRE_AUTH=false)")
        elif not auth_module.api_keys:
            raise ValueError("REQUIRE_AUTH is set but API_KEYS holds no usable key")
        else:
            logger.info(f"API key authentication enabled with {len(auth_module.api_keys)} key(s)")

        return DefaultAuthenticationService(auth_module, require_auth=auth_config.require_auth)
