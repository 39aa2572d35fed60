"""Authentication abstraction layer."""

from core.auth.clerk_provider import ClerkAuthProvider
from core.auth.interface import (
    AuthContext,
    AuthProvider,
    AuthUser,
    auth_context_from_event,
    get_auth_provider,
)

__all__ = [
    "AuthContext",
    "AuthProvider",
    "AuthUser",
    "ClerkAuthProvider",
    "auth_context_from_event",
    "get_auth_provider",
]
