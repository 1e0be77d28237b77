"""
Unit tests for the authentication module.
"""

import json
import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sessiongate.config.provider import AuthConfig
from sessiongate.modules.auth import AuthFactory, AuthModule, DefaultAuthenticationService


@pytest.fixture
def redis_mock():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.lpush = AsyncMock()
    redis.ltrim = AsyncMock()
    return redis


@pytest.fixture
def auth_module(redis_mock):
    """Create an AuthModule instance with mocked Redis."""
    with patch.dict(
        os.environ,
        {"API_KEYS": "test-key,orchestrator:service-key,monitoring:monitor-key"},
        clear=False,
    ):
        return AuthModule(redis_mock)


def test_parse_api_keys():
    """Plain keys have no identity, service:key entries carry one."""
    keys = AuthModule.parse_api_keys(["abc123", " orchestrator:def456 ", "", ":ghi789"])

    assert keys == {"abc123": None, "def456": "orchestrator", "ghi789": None}


def test_keys_read_from_environment(auth_module):
    assert auth_module.api_keys == {
        "test-key": None,
        "service-key": "orchestrator",
        "monitor-key": "monitoring",
    }


@pytest.mark.asyncio
async def test_verify_api_key_plain(auth_module):
    is_valid, identity = await auth_module.verify_api_key("test-key")

    assert is_valid is True
    assert identity is None


@pytest.mark.asyncio
async def test_verify_api_key_with_service_identity(auth_module):
    is_valid, identity = await auth_module.verify_api_key("service-key")

    assert is_valid is True
    assert identity == "orchestrator"


@pytest.mark.asyncio
async def test_verify_api_key_invalid(auth_module, redis_mock):
    is_valid, identity = await auth_module.verify_api_key("invalid-key")

    assert is_valid is False
    assert identity is None

    # Rejection is recorded in the audit trail
    event = json.loads(redis_mock.lpush.call_args[0][1])
    assert event["type"] == "api_key_rejected"


@pytest.mark.asyncio
async def test_verify_api_key_empty(auth_module, redis_mock):
    is_valid, identity = await auth_module.verify_api_key("")

    assert is_valid is False
    redis_mock.lpush.assert_not_called()


@pytest.mark.asyncio
async def test_audit_trail_is_capped(auth_module, redis_mock):
    await auth_module.verify_api_key("test-key")

    redis_mock.lpush.assert_called_once()
    assert redis_mock.lpush.call_args[0][0] == "auth:audit"
    redis_mock.ltrim.assert_called_once_with("auth:audit", 0, 9999)


@pytest.mark.asyncio
async def test_audit_failure_does_not_break_auth(auth_module, redis_mock):
    redis_mock.lpush.side_effect = ConnectionError("redis down")

    is_valid, _ = await auth_module.verify_api_key("test-key")

    assert is_valid is True


@pytest.mark.asyncio
async def test_verify_without_redis():
    auth = AuthModule(api_keys={"k": "svc"})

    assert await auth.verify_credentials(api_key="k") == (True, "svc", "api_key")
    assert await auth.verify_credentials(api_key="nope") == (False, None, None)
    assert await auth.verify_credentials() == (False, None, None)


class TestAuthenticationService:
    """Test the authentication facade."""

    @pytest.mark.asyncio
    async def test_valid_key(self):
        service = DefaultAuthenticationService(AuthModule(api_keys={"k": "svc"}))

        result = await service.authenticate(api_key="k")

        assert result.ok
        assert result.identity == "svc"
        assert result.method == "api_key"

    @pytest.mark.asyncio
    async def test_missing_key(self):
        service = DefaultAuthenticationService(AuthModule(api_keys={"k": None}))

        result = await service.authenticate(api_key=None)

        assert not result.ok
        assert result.error == "Missing API key"

    @pytest.mark.asyncio
    async def test_invalid_key(self):
        service = DefaultAuthenticationService(AuthModule(api_keys={"k": None}))

        result = await service.authenticate(api_key="wrong")

        assert not result.ok
        assert result.error == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_auth_not_required(self):
        service = DefaultAuthenticationService(AuthModule(api_keys={}), require_auth=False)

        result = await service.authenticate(api_key=None)

        assert result.ok
        assert result.method == "anonymous"


@pytest.mark.asyncio
async def test_factory_builds_service():
    provider = MagicMock()
    provider.get_auth_config.return_value = AuthConfig(require_auth=True, api_keys=["admin:secret"])

    service = AuthFactory.build(provider)

    result = await service.authenticate(api_key="secret")
    assert result.ok
    assert result.identity == "admin"


def test_factory_rejects_blank_keys():
    provider = MagicMock()
    provider.get_auth_config.return_value = AuthConfig(require_auth=True, api_keys=["admin:"])

    with pytest.raises(ValueError, match="API_KEYS"):
        AuthFactory.build(provider)
