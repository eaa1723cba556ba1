"""JWT authentication middleware and utilities."""

import json
from enum import Enum
from functools import lru_cache
from typing import Any

import jwt
from jwt import PyJWK

from src.core.config import get_settings
from src.schemas.auth import TokenPayload


class AuthErrorCode(str, Enum):
    """Authentication error codes."""

    UNAUTHORIZED = "UNAUTHORIZED"
    MISSING_TOKEN = "MISSING_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class AuthError(Exception):
    """Authentication error with specific error code.

    Raised when a bearer token cannot be resolved to a user for any reason.
    The code is for logs only; callers see a generic message.
    """

    def __init__(self, message: str, code: AuthErrorCode) -> None:
        """Initialize authentication error.

        Args:
            message: Human-readable error description.
            code: Specific error code for programmatic handling.
        """
        self.message = message
        self.code = code
        super().__init__(message)


def parse_bearer_token(authorization: str | None) -> str:
    """Extract the token from an Authorization header value.

    Args:
        authorization: Raw header value, expected as "Bearer <token>".

    Returns:
        str: The bearer token.

    Raises:
        AuthError: If the header is missing or not a single bearer token.
    """
    if not authorization:
        raise AuthError("Authorization header required", AuthErrorCode.MISSING_TOKEN)

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthError(
            "Invalid authorization header format. Expected: Bearer <token>",
            AuthErrorCode.INVALID_TOKEN,
        )

    return parts[1]


@lru_cache
def get_signing_key(jwk_json: str) -> Any:
    """Load the public key from a signing key JWK.

    Args:
        jwk_json: JWK as a JSON string.

    Returns:
        Public key for JWT verification.
    """
    if not jwk_json:
        raise AuthError(
            "Signing key not configured",
            AuthErrorCode.INVALID_TOKEN,
        )

    try:
        jwk_data = json.loads(jwk_json)
    except json.JSONDecodeError as e:
        raise AuthError(
            f"Invalid signing key JWK format: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e

    # Only the public components are used for verification
    jwk = PyJWK.from_dict(jwk_data)
    return jwk.key


def decode_jwt(token: str) -> TokenPayload:
    """Decode and validate a JWT token.

    Validates the token signature, expiration, and structure.
    Uses ES256 algorithm with the configured signing key.

    Args:
        token: The JWT token string to decode.

    Returns:
        TokenPayload: Validated token payload.

    Raises:
        AuthError: If token is invalid, expired, or has wrong signature.
    """
    try:
        public_key = get_signing_key(get_settings().supabase_signing_key_jwk)

        payload: dict[str, Any] = jwt.decode(
            token,
            public_key,
            algorithms=["ES256"],
            options={
                "verify_signature": True,
                "verify_exp": True,
                "verify_iat": True,
                "verify_aud": False,
                "require": ["exp", "iat", "sub"],
            },
        )

        return TokenPayload(
            sub=payload["sub"],
            email=payload.get("email"),
            role=payload.get("role"),
            exp=payload["exp"],
            iat=payload["iat"],
            aud=payload.get("aud"),
            iss=payload.get("iss"),
        )

    except AuthError:
        raise

    except jwt.ExpiredSignatureError as e:
        raise AuthError(
            "Token has expired",
            AuthErrorCode.TOKEN_EXPIRED,
        ) from e

    except jwt.InvalidSignatureError as e:
        raise AuthError(
            "Invalid token signature",
            AuthErrorCode.INVALID_SIGNATURE,
        ) from e

    except jwt.MissingRequiredClaimError as e:
        raise AuthError(
            f"Token missing required claim: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e

    except jwt.DecodeError as e:
        raise AuthError(
            f"Invalid token format: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e

    except Exception as e:
        raise AuthError(
            f"Token validation failed: {e}",
            AuthErrorCode.INVALID_TOKEN,
        ) from e
