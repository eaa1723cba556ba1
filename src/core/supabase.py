"""Supabase client singleton for database operations."""

from functools import lru_cache
from typing import Any

from supabase import Client, create_client
from supabase.lib.client_options import SyncClientOptions
from supabase_auth import SyncMemoryStorage

from src.core.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """Get cached Supabase client singleton for database operations.

    Uses the secret key for backend operations, which bypasses RLS at the
    PostgREST level. Only use it where the caller has already been
    authenticated and the write is scoped to that caller.

    Do NOT use this client for token lookups - use create_auth_client()
    so the singleton's Authorization header is never replaced.

    Returns:
        Client: Supabase client instance.
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_secret_key,
    )


def create_auth_client() -> Client:
    """Create a fresh Supabase client for auth operations.

    Each call creates a new client with isolated session storage and
    no token refresh, matching a stateless per-request handler.

    Returns:
        Client: Fresh Supabase client instance.
    """
    settings = get_settings()
    options = SyncClientOptions(
        storage=SyncMemoryStorage(),
        auto_refresh_token=False,
        persist_session=False,
    )
    return create_client(
        settings.supabase_url,
        settings.supabase_secret_key,
        options=options,
    )


async def check_database_connection() -> dict[str, Any]:
    """Check if database connection is healthy.

    Performs a one-row query against the product catalog.

    Returns:
        dict: Connection status with 'healthy' boolean and optional 'error' message.
    """
    try:
        client = get_supabase_client()
        client.table("products").select("id").limit(1).execute()
        return {"healthy": True}
    except Exception as e:
        return {"healthy": False, "error": str(e)}
