"""
Authentication Module - Black Box Interface

Purpose: Validate API keys presented by callers
Interface: AuthFactory.build(), AuthenticationService.authenticate()
Hidden: Key storage, key formats, audit trail

This module can be completely replaced with any other auth implementation
(OAuth, JWT, external service) without affecting other modules.
"""

from .auth import AuthModule
from .factory import AuthFactory
from .service import AuthenticationService, AuthResult, DefaultAuthenticationService

__all__ = [
    "AuthModule",
    "AuthFactory",
    "AuthenticationService",
    "AuthResult",
    "DefaultAuthenticationService",
]
