import jwt
from clerk_backend_api import authenticate_request
from clerk_backend_api.security.types import AuthenticateRequestOptions

from core.errors import AuthenticationError

from .interface import AuthProvider, AuthUser


class _BearerRequest:
    """Adapts a raw Bearer token to the Requestish protocol expected by Clerk SDK."""

    def __init__(self, token: str):
        self.headers = {"Authorization": f"Bearer {token}"}


class ClerkAuthProvider(AuthProvider):
    """Verifies Clerk session tokens.

    Only the verified ``sub`` claim is trusted; display names for travel
    memberships come from the Users table, so no Clerk API call is made
    per request.
    """

    def __init__(self, secret_key: str, authorized_parties: list[str] | None = None):
        self._options = AuthenticateRequestOptions(
            secret_key=secret_key,
            authorized_parties=authorized_parties,
        )

    async def verify_token(self, token: str) -> AuthUser:
        try:
            state = authenticate_request(_BearerRequest(token), self._options)
        except Exception as e:
            raise AuthenticationError(f"Token verification failed: {e}") from e

        if not state.is_signed_in or not state.payload:
            raise AuthenticationError(f"Token verification failed: {state.message or 'unknown'}")

        claims = state.payload
        if not claims.get("sub"):
            raise AuthenticationError("Token verification failed: no subject claim")
        return AuthUser(
            user_id=str(claims["sub"]),
            email=str(claims.get("email") or ""),
            name=str(claims.get("name") or ""),
        )

    async def decode_claims(self, token: str) -> dict[str, object]:
        """Decode JWT claims WITHOUT signature verification. For logging only."""
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e
