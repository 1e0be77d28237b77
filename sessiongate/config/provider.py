"""
Credential configuration following Black Box Design principles.

Only authentication settings live here: they hold secrets and are never
part of the ConfigModule dump. Everything else is read through
sessiongate.modules.config.
"""
import os
from dataclasses import dataclass
from typing import List, Protocol


@dataclass
class AuthConfig:
    """Authentication configuration."""
    require_auth: bool
    api_keys: List[str]


class ConfigProvider(Protocol):
    """Protocol for credential providers."""

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration."""
        ...


class EnvConfigProvider:
    """Environment-based credential provider."""

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration from environment variables."""
        require_auth = os.getenv("REQUIRE_AUTH", "true").strip().lower() in ("1", "true", "yes")

        # API keys are required - no default for security
        api_keys_env = os.getenv("API_KEYS")
        if not api_keys_env and require_auth:
            raise ValueError(
                "API_KEYS environment variable is required. "
                "Format: key or service:key, comma separated. "
                "Example: admin:your-generated-key"
            )

        api_keys = (api_keys_env or "").split(",")

        return AuthConfig(
            require_auth=require_auth,
            api_keys=[key.strip() for key in api_keys if key.strip()],
        )
