"""Request latency logging middleware for performance monitoring."""

import logging
import time
from typing import Callable

from fastapi import Request, Response

logger = logging.getLogger(__name__)

# Thresholds for log levels (in milliseconds)
SLOW_REQUEST_THRESHOLD_MS = 1000
VERY_SLOW_REQUEST_THRESHOLD_MS = 3000

HEALTH_CHECK_PATHS = ("/health", "/health/ready")


async def latency_logging_middleware(request: Request, call_next: Callable) -> Response:
    """Middleware to log request latency.

    Order creation makes several sequential store round-trips, so slow
    requests are logged at elevated levels to spot a degraded store.

    Args:
        request: The incoming request.
        call_next: The next middleware/handler in the chain.

    Returns:
        Response: The response from the handler.
    """
    start_time = time.perf_counter()

    method = request.method
    path = request.url.path
    is_health_check = path in HEALTH_CHECK_PATHS

    response = None
    error_occurred = False

    try:
        response = await call_next(request)
        return response
    except Exception:
        error_occurred = True
        raise
    finally:
        latency_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code if response else 500

        log_msg = "%s %s - %s - %.2fms"
        log_args = (method, path, status_code, latency_ms)

        if is_health_check:
            if latency_ms > 100:
                logger.debug(log_msg, *log_args)
        elif error_occurred or status_code >= 500:
            logger.error(log_msg, *log_args)
        elif latency_ms > VERY_SLOW_REQUEST_THRESHOLD_MS:
            logger.error("VERY SLOW REQUEST: " + log_msg, *log_args)
        elif latency_ms > SLOW_REQUEST_THRESHOLD_MS:
            logger.warning("SLOW REQUEST: " + log_msg, *log_args)
        elif status_code >= 400:
            logger.warning(log_msg, *log_args)
        else:
            logger.info(log_msg, *log_args)
