"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), ConfigModule.get(), ConfigModule.set()
Hidden: Environment variable names, parsing and validation

Every setting is declared once in SETTINGS; the required/optional contract
and the loader are both derived from it.
"""

import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


def _bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes")


def _port(raw: str) -> int:
    # Kubernetes service links expose ports as tcp://host:port
    if raw.startswith("tcp://"):
        raw = raw.rsplit(":", 1)[-1]
    return int(raw)


@dataclass(frozen=True)
class Setting:
    env: str
    description: str
    default: Any = None
    parse: Callable[[str], Any] = str
    required: bool = False


SETTINGS: Dict[str, Setting] = {
    # API
    "host": Setting("API_HOST", "API server bind address", "0.0.0.0", required=True),
    "port": Setting("API_PORT", "API server port", 5001, int, required=True),
    "log_level": Setting("LOG_LEVEL", "Logging level (DEBUG, INFO, WARNING, ERROR)", "INFO", str.upper, required=True),
    "debug": Setting("DEBUG", "Enable debug mode (auto reload)", False, _bool),
    # Engine and session lifecycle
    "engine_url": Setting("ENGINE_URL", "Base URL of the session engine sidecar", "http://localhost:3000", required=True),
    "engine_timeout": Setting("ENGINE_TIMEOUT", "HTTP timeout for engine calls in seconds", 10.0, float, required=True),
    "start_timeout": Setting("START_TIMEOUT", "Seconds to wait for a QR code or connection after a start", 30.0, float, required=True),
    "reclaim_settle_delay": Setting("RECLAIM_SETTLE_DELAY", "Seconds to wait after deleting a stale session", 1.0, float, required=True),
    # Stores
    "store_backend": Setting("STORE_BACKEND", "Backend for QR cache and webhook registry (redis or memory)", "redis", str.lower, required=True),
    "qr_ttl": Setting("QR_TTL", "Seconds a cached QR code stays available", 60, int, required=True),
    "redis_host": Setting("REDIS_HOST", "Redis server hostname (store_backend=redis)", "localhost"),
    "redis_port": Setting("REDIS_PORT", "Redis server port number", 6379, _port),
    "redis_db": Setting("REDIS_DB", "Redis database number", 0, int),
    "redis_password": Setting("REDIS_PASSWORD", "Redis authentication password"),
    # Webhooks
    "webhook_url": Setting("WEBHOOK_URL", "Webhook receiving QR notifications for every session"),
    "webhook_timeout": Setting("WEBHOOK_TIMEOUT", "HTTP timeout for webhook delivery in seconds", 10.0, float),
}

REQUIRED_CONFIG_KEYS = {key: s.description for key, s in SETTINGS.items() if s.required}

OPTIONAL_CONFIG_KEYS = {
    key: {"description": s.description, "default": s.default}
    for key, s in SETTINGS.items()
    if not s.required
}

STORE_BACKENDS = ("redis", "memory")


class ConfigModule:
    """Configuration read from the environment at construction time."""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._config = self._load(os.environ if environ is None else environ)
        self._validate()

    @staticmethod
    def _load(environ) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        for key, setting in SETTINGS.items():
            raw = environ.get(setting.env)
            if raw is None or raw == "":
                config[key] = setting.default
                continue
            try:
                config[key] = setting.parse(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {setting.env}: {raw!r}") from e
        return config

    def _validate(self) -> None:
        """
        Raises:
            ValueError: If a required key is missing or the store backend is unknown
        """
        missing = [key for key in REQUIRED_CONFIG_KEYS if self._config.get(key) is None]
        if missing:
            raise ValueError(f"Missing required configuration keys: {', '.join(missing)}")

        if self._config["store_backend"] not in STORE_BACKENDS:
            raise ValueError(
                f"Invalid STORE_BACKEND '{self._config['store_backend']}'. "
                f"Expected one of: {', '.join(STORE_BACKENDS)}"
            )

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        return dict(self._config)

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Configuration contract of this module.

        Example:
            >>> ConfigModule.get_config_schema()["required"]["engine_url"]
            'Base URL of the session engine sidecar'
        """
        return {
            "required": dict(REQUIRED_CONFIG_KEYS),
            "optional": {key: dict(spec) for key, spec in OPTIONAL_CONFIG_KEYS.items()},
        }


_instance: Optional[ConfigModule] = None


def get_config() -> ConfigModule:
    """Return the process-wide configuration, loading it on first use."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


def reset_config() -> None:
    """Drop the singleton so the next get_config() re-reads the environment."""
    global _instance
    _instance = None


__all__ = ["get_config", "reset_config", "ConfigModule", "SETTINGS"]
