"""Error boundary for the order history and health routes.

create-order answers with its own {success, error} body and never lets an
exception reach this middleware.
"""

import logging
from typing import Any, Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from src.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Error a route raises to answer with a given status and ErrorResponse body."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type: str = "api_error",
    ) -> None:
        """Initialize API error.

        Args:
            message: Caller-safe message.
            status_code: HTTP status code to return.
            error_type: Value of the response's error field.
        """
        self.message = message
        self.status_code = status_code
        self.error_type = error_type
        super().__init__(message)


class NotFoundError(APIError):
    """Order missing, or owned by another user."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND, "not_found")


class ServiceUnavailableError(APIError):
    """Supabase could not be read."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE, "service_unavailable")


def create_error_response(
    error_type: str,
    message: str,
    status_code: int,
    request_id: str | None = None,
) -> JSONResponse:
    """Build an ErrorResponse body with the given status.

    Args:
        error_type: Value of the error field.
        message: Caller-safe description.
        status_code: HTTP status code.
        request_id: X-Request-ID of the failed request, echoed when present.

    Returns:
        JSONResponse: Formatted error response.
    """
    error_response = ErrorResponse(error=error_type, message=message, request_id=request_id)
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json", exclude_none=True),
    )


async def error_handler_middleware(request: Request, call_next: Callable[[Request], Any]) -> Response:
    """Turn APIError and unexpected exceptions into ErrorResponse bodies.

    Unexpected exceptions are logged with their traceback and answered with a
    generic 500, so store and driver messages never reach the client.
    HTTPException never gets here; FastAPI answers it first.

    Args:
        request: The incoming request.
        call_next: Next middleware or route handler.

    Returns:
        Response: The route's response, or an ErrorResponse.
    """
    request_id = request.headers.get("X-Request-ID")

    try:
        return await call_next(request)

    except APIError as e:
        logger.warning(
            "%s %s failed: %s - %s",
            request.method,
            request.url.path,
            e.error_type,
            e.message,
            extra={"request_id": request_id, "status_code": e.status_code},
        )
        return create_error_response(e.error_type, e.message, e.status_code, request_id)

    except Exception:
        logger.exception(
            "Unhandled exception in %s %s",
            request.method,
            request.url.path,
            extra={"request_id": request_id},
        )
        return create_error_response(
            "internal_error",
            "An unexpected error occurred",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            request_id,
        )
