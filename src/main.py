"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.middleware.cors import PathExemptCORSMiddleware
from src.api.middleware.error_handler import error_handler_middleware
from src.api.middleware.latency_logging import latency_logging_middleware
from src.api.middleware.request_size import request_size_limit_middleware
from src.api.routes import health, orders
from src.core.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_V1_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control back to the application.
    """
    settings = get_settings()
    logger.info("Starting %s in %s mode", settings.app_name, settings.app_env)
    logger.info("Bearer tokens verified via %s", settings.auth_verification_mode)
    if settings.order_creation_rpc:
        logger.info("Orders written in one transaction via %s()", settings.order_creation_rpc)
    else:
        logger.info("Orders written with compensating rollback")

    yield

    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="CLICK CART API",
        description="Order intake and order history for the CLICK CART storefront",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Bearer tokens, no cookies: credentials are only allowed for explicit origins
    app.add_middleware(
        PathExemptCORSMiddleware,
        exempt_paths=[f"{API_V1_PREFIX}{orders.CREATE_ORDER_PATH}"],
        allow_origins=settings.cors_origins_list,
        allow_credentials=not settings.allows_any_origin,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    # Error handler is added first so it wraps the route handlers most closely
    app.add_middleware(BaseHTTPMiddleware, dispatch=error_handler_middleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=latency_logging_middleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_size_limit_middleware)

    app.include_router(health.router)

    api_v1_router = APIRouter(prefix=API_V1_PREFIX)
    api_v1_router.include_router(orders.router)
    app.include_router(api_v1_router)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
