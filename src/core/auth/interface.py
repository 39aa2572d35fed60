from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """Identity proven by a verified session token."""

    user_id: str
    email: str = ""
    name: str = ""


class AuthContext(BaseModel):
    """Request-scoped identity handed to the core by the authorizer."""

    model_config = ConfigDict(frozen=True)

    user_id: str


class AuthProvider(ABC):
    @abstractmethod
    async def verify_token(self, token: str) -> AuthUser: ...

    @abstractmethod
    async def decode_claims(self, token: str) -> dict[str, object]: ...


def auth_context_from_event(event: dict[str, Any]) -> AuthContext | None:
    """Read the user id the Lambda authorizer placed on the request context."""
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    user_id = authorizer.get("userId")
    if not user_id:
        return None
    return AuthContext(user_id=str(user_id))


def get_auth_provider() -> AuthProvider:
    from core.config import get_config

    config = get_config()
    clerk_secret = config.clerk_secret_key
    if not clerk_secret:
        raise ValueError("CLERK_SECRET_KEY not configured")

    from core.auth.clerk_provider import ClerkAuthProvider

    # Tokens minted for another origin are rejected once the front end is pinned.
    parties = None if config.frontend_url == "*" else [config.frontend_url]
    return ClerkAuthProvider(secret_key=clerk_secret, authorized_parties=parties)
