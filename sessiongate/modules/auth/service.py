"""
Authentication Service Facade following Black Box Design principles.

This module provides:
- A clean interface for authentication that hides implementation details
- Standardized authentication results
- Protocol definitions for swappable implementations
"""

from dataclasses import dataclass
from typing import Any, Literal, Optional, Protocol


@dataclass
class AuthResult:
    """Standardized authentication result."""
    ok: bool
    identity: Optional[str]
    method: Optional[Literal["api_key", "anonymous"]]
    error: Optional[str] = None


class AuthenticationService(Protocol):
    """Protocol for authentication services."""

    async def authenticate(self, api_key: Optional[str]) -> AuthResult:
        """
        Authenticate a request.

        Args:
            api_key: API key from X-API-Key header

        Returns:
            AuthResult with authentication status and details
        """
        ...


class DefaultAuthenticationService:
    """
    Default implementation of AuthenticationService.

    This facade hides the complexity of the underlying auth module
    and provides a clean, stable interface for the API layer.
    """

    def __init__(self, auth_module: Any, require_auth: bool = True):
        """
        Initialize with any auth module that has verify_credentials.

        Args:
            auth_module: Module with verify_credentials method
            require_auth: When False every request is let through as anonymous
        """
        self._auth = auth_module
        self._require_auth = require_auth

    async def authenticate(self, api_key: Optional[str]) -> AuthResult:
        """
        Authenticate a request using the underlying auth module.

        Args:
            api_key: API key from X-API-Key header

        Returns:
            AuthResult with authentication status and details
        """
        if not self._require_auth:
            return AuthResult(ok=True, identity=None, method="anonymous")

        ok, identity, method = await self._auth.verify_credentials(api_key=api_key)

        if ok:
            return AuthResult(ok=True, identity=identity, method=method)

        if not api_key:
            return AuthResult(ok=False, identity=None, method=None, error="Missing API key")

        return AuthResult(ok=False, identity=None, method=None, error="Invalid credentials")
