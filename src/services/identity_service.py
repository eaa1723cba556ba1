"""Bearer token verification against the identity provider."""

import logging
from typing import Protocol
from uuid import UUID

from supabase import Client

from src.api.middleware.auth import AuthError, AuthErrorCode, decode_jwt
from src.core.config import get_settings
from src.core.supabase import create_auth_client
from src.schemas.auth import UserContext

logger = logging.getLogger(__name__)


class IdentityVerifier(Protocol):
    """Resolves a bearer token to the user it was issued for."""

    async def verify(self, token: str) -> UserContext:
        """Verify a token.

        Args:
            token: Bearer token without the "Bearer " prefix.

        Returns:
            UserContext: The token's user.

        Raises:
            AuthError: If the token is malformed, expired or unknown.
        """
        ...


class JwtIdentityVerifier:
    """Verifies Supabase access tokens locally with the project signing key."""

    async def verify(self, token: str) -> UserContext:
        payload = decode_jwt(token)
        try:
            return payload.to_user_context()
        except ValueError as e:
            raise AuthError(
                "Token subject is not a user ID",
                AuthErrorCode.INVALID_TOKEN,
            ) from e


class SupabaseIdentityVerifier:
    """Verifies tokens by asking the Supabase auth server for their user.

    Revoked sessions are rejected here even if the JWT has not expired yet,
    at the cost of one network call per request.
    """

    def __init__(self, client: Client | None = None) -> None:
        """Initialize verifier.

        Args:
            client: Optional Supabase client for testing.
        """
        self._client = client

    @property
    def client(self) -> Client:
        """Get an isolated Supabase auth client."""
        if self._client is None:
            self._client = create_auth_client()
        return self._client

    async def verify(self, token: str) -> UserContext:
        if not token:
            raise AuthError("Empty bearer token", AuthErrorCode.MISSING_TOKEN)

        try:
            response = self.client.auth.get_user(token)
        except Exception as e:
            raise AuthError(
                f"Token lookup failed: {e}",
                AuthErrorCode.INVALID_TOKEN,
            ) from e

        user = response.user if response else None
        if not user:
            raise AuthError("Token does not belong to a user", AuthErrorCode.UNAUTHORIZED)

        try:
            user_id = UUID(str(user.id))
        except ValueError as e:
            raise AuthError("Token subject is not a user ID", AuthErrorCode.INVALID_TOKEN) from e

        return UserContext(user_id=user_id, email=user.email, role=user.role)


def get_identity_verifier() -> IdentityVerifier:
    """Build the verifier selected by AUTH_VERIFICATION_MODE.

    Returns:
        IdentityVerifier: Local JWT or remote Supabase verifier.
    """
    settings = get_settings()
    if settings.auth_verification_mode == "jwt":
        return JwtIdentityVerifier()
    return SupabaseIdentityVerifier()
