"""FastAPI dependency injection functions."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from src.api.middleware.auth import AuthError, AuthErrorCode, parse_bearer_token
from src.core.config import get_settings
from src.schemas.auth import UserContext
from src.services.identity_service import IdentityVerifier, get_identity_verifier
from src.services.order_service import OrderService
from src.services.order_store import OrderStore, SupabaseOrderStore


def get_order_store() -> OrderStore:
    """Build the Supabase-backed order store from settings."""
    return SupabaseOrderStore(order_creation_rpc=get_settings().order_creation_rpc)


Verifier = Annotated[IdentityVerifier, Depends(get_identity_verifier)]
Store = Annotated[OrderStore, Depends(get_order_store)]


def get_order_service(verifier: Verifier, store: Store) -> OrderService:
    """Build the order service with the request's verifier and store."""
    return OrderService(verifier=verifier, store=store)


async def get_current_user(
    verifier: Verifier,
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Extract and validate the current user from the Authorization header.

    Args:
        verifier: Identity verifier for bearer tokens.
        authorization: The Authorization header value (Bearer token).

    Returns:
        UserContext: The authenticated user's context.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    try:
        token = parse_bearer_token(authorization)
        return await verifier.verify(token)

    except AuthError as e:
        if e.code == AuthErrorCode.TOKEN_EXPIRED:
            detail = "Token has expired"
        elif e.code == AuthErrorCode.MISSING_TOKEN:
            detail = "Authorization header required"
        else:
            detail = "Invalid authentication credentials"

        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[UserContext, Depends(get_current_user)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
