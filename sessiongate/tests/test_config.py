"""
Unit tests for configuration loading.
"""

import os
from unittest.mock import patch

import pytest

from sessiongate.config.provider import EnvConfigProvider
from sessiongate.modules.config import ConfigModule, get_config, reset_config


@pytest.fixture
def clean_env():
    """Environment without any Sessiongate variables."""
    names = (
        "API_HOST", "API_PORT", "LOG_LEVEL", "DEBUG", "ENGINE_URL", "ENGINE_TIMEOUT",
        "START_TIMEOUT", "RECLAIM_SETTLE_DELAY", "STORE_BACKEND", "QR_TTL",
        "REDIS_HOST", "REDIS_PORT", "REDIS_DB", "REDIS_PASSWORD",
        "WEBHOOK_URL", "WEBHOOK_TIMEOUT", "API_KEYS", "REQUIRE_AUTH",
    )
    env = {k: v for k, v in os.environ.items() if k not in names}
    with patch.dict(os.environ, env, clear=True):
        yield


class TestConfigModule:
    def test_defaults(self, clean_env):
        config = ConfigModule()

        assert config.get("port") == 5001
        assert config.get("start_timeout") == 30.0
        assert config.get("reclaim_settle_delay") == 1.0
        assert config.get("store_backend") == "redis"
        assert config.get("qr_ttl") == 60
        assert config.get("webhook_url") is None
        assert config.get("debug") is False

    def test_environment_overrides(self, clean_env):
        with patch.dict(
            os.environ,
            {"START_TIMEOUT": "12.5", "STORE_BACKEND": "Memory", "ENGINE_URL": "http://engine:3000"},
        ):
            config = ConfigModule()

        assert config.get("start_timeout") == 12.5
        assert config.get("store_backend") == "memory"
        assert config.get("engine_url") == "http://engine:3000"

    def test_kubernetes_style_redis_port(self, clean_env):
        with patch.dict(os.environ, {"REDIS_PORT": "tcp://10.0.0.12:6380"}):
            assert ConfigModule().get("redis_port") == 6380

    def test_invalid_store_backend(self, clean_env):
        with patch.dict(os.environ, {"STORE_BACKEND": "sqlite"}):
            with pytest.raises(ValueError, match="Invalid STORE_BACKEND"):
                ConfigModule()

    def test_explicit_environ(self):
        config = ConfigModule({"QR_TTL": "15", "LOG_LEVEL": "debug", "STORE_BACKEND": "memory"})

        assert config.get("qr_ttl") == 15
        assert config.get("log_level") == "DEBUG"

    def test_unparseable_value(self):
        with pytest.raises(ValueError, match="START_TIMEOUT"):
            ConfigModule({"START_TIMEOUT": "soon"})

    def test_schema_lists_required_keys(self):
        schema = ConfigModule.get_config_schema()

        assert "start_timeout" in schema["required"]
        assert schema["optional"]["redis_port"]["default"] == 6379

    def test_singleton_reset(self, clean_env):
        reset_config()
        first = get_config()
        assert get_config() is first

        reset_config()
        assert get_config() is not first
        reset_config()


class TestEnvConfigProvider:
    def test_api_keys_required(self, clean_env):
        with pytest.raises(ValueError, match="API_KEYS"):
            EnvConfigProvider().get_auth_config()

    def test_api_keys_optional_without_auth(self, clean_env):
        with patch.dict(os.environ, {"REQUIRE_AUTH": "false"}):
            auth_config = EnvConfigProvider().get_auth_config()

        assert auth_config.require_auth is False
        assert auth_config.api_keys == []

    def test_api_keys_split(self, clean_env):
        with patch.dict(os.environ, {"API_KEYS": "admin:one, two ,"}):
            auth_config = EnvConfigProvider().get_auth_config()

        assert auth_config.api_keys == ["admin:one", "two"]

    def test_require_auth_accepts_numeric_flag(self, clean_env):
        with patch.dict(os.environ, {"REQUIRE_AUTH": "0"}):
            assert EnvConfigProvider().get_auth_config().require_auth is False


class TestSessionSettings:
    """Engine and webhook settings are only read by the config module."""

    def test_engine_settings(self):
        config = ConfigModule({"ENGINE_URL": "http://engine:3000", "RECLAIM_SETTLE_DELAY": "0", "STORE_BACKEND": "memory"})

        assert config.get("engine_url") == "http://engine:3000"
        assert config.get("reclaim_settle_delay") == 0.0
        assert config.get("start_timeout") == 30.0

    def test_webhook_settings(self):
        assert ConfigModule({}).get("webhook_url") is None
        assert ConfigModule({"WEBHOOK_URL": "https://hooks.example.com/qr"}).get("webhook_url") == "https://hooks.example.com/qr"

    def test_debug_flag_forms(self):
        assert ConfigModule({"DEBUG": "1"}).get("debug") is True
        assert ConfigModule({"DEBUG": "true"}).get("debug") is True
        assert ConfigModule({"DEBUG": "no"}).get("debug") is False
