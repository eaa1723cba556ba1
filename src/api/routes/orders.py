"""Order creation and order history API routes."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Header, Request, Response, status
from fastapi.responses import JSONResponse

from src.api.deps import CurrentUser, OrderServiceDep
from src.api.middleware.error_handler import NotFoundError, ServiceUnavailableError
from src.schemas.order import (
    CreateOrderFailure,
    CreateOrderResponse,
    OrderListResponse,
    OrderResponse,
)
from src.services.order_errors import OrderIntakeError
from src.services.order_store import StoreError

logger = logging.getLogger(__name__)

# Storefront clients call create-order cross-origin with a bearer token
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

CREATE_ORDER_PATH = "/create-order"

router = APIRouter(tags=["orders"])


def _failure(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=CreateOrderFailure(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


@router.options(CREATE_ORDER_PATH, include_in_schema=False)
async def create_order_preflight() -> Response:
    """Answer CORS preflight requests with an empty 200."""
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


@router.post(
    CREATE_ORDER_PATH,
    response_model=CreateOrderResponse,
    responses={400: {"model": CreateOrderFailure, "description": "Order rejected"}},
    summary="Create order from cart",
    description="Validates a cart against the catalog, prices it server-side and stores the order.",
)
async def create_order(
    request: Request,
    service: OrderServiceDep,
    authorization: Annotated[str | None, Header()] = None,
) -> JSONResponse:
    """Create an order for the authenticated caller.

    The body is handed to the service unparsed so that authentication runs
    before the payload is inspected. Every failure, expected or not, is
    returned as a 400 with a caller-safe message.

    Args:
        request: Incoming request carrying the JSON cart.
        service: Order service.
        authorization: Bearer token header.

    Returns:
        JSONResponse: CreateOrderResponse on success, CreateOrderFailure otherwise.
    """
    try:
        body = await request.body()
        result = await service.create_order(authorization, body)
        response = CreateOrderResponse(order_id=result.order_id, total_amount=float(result.total_amount))
        # JSONResponse renders the body in its constructor
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=response.model_dump(),
            headers=CORS_HEADERS,
        )
    except OrderIntakeError as e:
        logger.warning("Order creation failed: %s - %s", e.kind, e.message)
        return _failure(e.message)
    except Exception:
        logger.exception("Error in create-order")
        return _failure("Internal server error")


@router.get(
    "/orders",
    response_model=OrderListResponse,
    summary="List my orders",
    description="Returns the authenticated user's orders with their items, newest first.",
)
async def list_orders(user: CurrentUser, service: OrderServiceDep) -> OrderListResponse:
    """List all orders for the current user.

    Raises:
        ServiceUnavailableError: 503 if the store cannot be read.
    """
    try:
        orders = await service.list_orders(user)
    except StoreError as e:
        logger.error("Error fetching orders for %s: %s", user.user_id, e)
        raise ServiceUnavailableError("Failed to load orders") from e

    return OrderListResponse(items=[OrderResponse.model_validate(order) for order in orders])


@router.get(
    "/orders/{order_id}",
    response_model=OrderResponse,
    summary="Get order by ID",
    description="Returns a single order. Orders owned by other users are reported as not found.",
)
async def get_order(order_id: UUID, user: CurrentUser, service: OrderServiceDep) -> OrderResponse:
    """Get a single order by ID.

    Raises:
        NotFoundError: 404 if the order does not exist or is not the caller's.
        ServiceUnavailableError: 503 if the store cannot be read.
    """
    try:
        order = await service.get_order(user, str(order_id))
    except StoreError as e:
        logger.error("Error fetching order %s: %s", order_id, e)
        raise ServiceUnavailableError("Failed to load order") from e

    if not order:
        raise NotFoundError("Order not found")

    return OrderResponse.model_validate(order)
