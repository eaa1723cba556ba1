"""Application configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="clickcart-backend", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins, or * for any origin",
    )

    # Supabase
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")
    supabase_signing_key_jwk: str = Field(
        default="",
        description="Supabase signing key JWK (JSON string), required when AUTH_VERIFICATION_MODE=jwt",
    )

    # Auth
    auth_verification_mode: Literal["supabase", "jwt"] = Field(
        default="supabase",
        description="How bearer tokens are verified: remote Supabase lookup or local ES256 JWT check",
    )

    # Orders
    order_creation_rpc: str | None = Field(
        default=None,
        description="Postgres function that writes order, items and audit entry in one transaction",
    )

    # Limits
    max_request_body_size: int = Field(default=1_048_576, description="Maximum request body size in bytes")

    @model_validator(mode="after")
    def normalize_order_creation_rpc(self) -> "Settings":
        """Treat a blank ORDER_CREATION_RPC as unset."""
        if self.order_creation_rpc is not None and not self.order_creation_rpc.strip():
            self.order_creation_rpc = None
        return self

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def allows_any_origin(self) -> bool:
        """Check if CORS is configured to accept every origin."""
        return "*" in self.cors_origins_list

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
