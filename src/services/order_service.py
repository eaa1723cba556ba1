"""Order intake and order history business logic."""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError

from src.api.middleware.auth import AuthError, parse_bearer_token
from src.models.order import CASH_ON_DELIVERY, OrderCreate, OrderItemCreate, OrderStatus, OrderWithItems
from src.models.product import CatalogProduct
from src.schemas.auth import UserContext
from src.schemas.order import CreateOrderRequest, OrderItemRequest
from src.services.identity_service import IdentityVerifier
from src.services.order_errors import (
    InsufficientStockError,
    MalformedRequestError,
    PersistenceError,
    ProductNotFoundError,
    RollbackError,
    UnauthenticatedError,
)
from src.services.order_store import OrderStore, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricedLine:
    """A cart line priced from the catalog."""

    product_id: str
    product_name: str
    product_image: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_row(self) -> dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "product_image": self.product_image,
            "quantity": self.quantity,
            "price": float(self.unit_price),
        }


@dataclass(frozen=True)
class CreateOrderResult:
    """Outcome of a successful order creation."""

    order_id: str
    total_amount: Decimal
    status: OrderStatus


def initial_status(payment_method: str) -> OrderStatus:
    """Pick the status a new order starts in.

    Cash on delivery can be fulfilled before payment; every other method
    waits for payment confirmation.
    """
    return "pending" if payment_method == CASH_ON_DELIVERY else "awaiting_payment"


def price_items(
    items: list[OrderItemRequest],
    products: list[CatalogProduct],
) -> tuple[list[PricedLine], Decimal]:
    """Validate requested lines against the catalog and price them.

    Lines are checked in cart order and the first problem rejects the whole
    cart. Client-supplied prices, names and images are never used.

    Args:
        items: Requested cart lines.
        products: Catalog rows fetched for the requested IDs.

    Returns:
        tuple: Priced lines and their total.

    Raises:
        ProductNotFoundError: If a requested product is not in the catalog.
        InsufficientStockError: If a line asks for more than is in stock.
        PersistenceError: If a catalog row has no usable price.
    """
    by_id = {str(product["id"]): product for product in products}
    lines: list[PricedLine] = []
    total = Decimal("0")

    for item in items:
        product = by_id.get(item.product_id)
        if product is None:
            raise ProductNotFoundError(item.product_id)

        stock = int(product.get("stock") or 0)
        if stock < item.quantity:
            raise InsufficientStockError(item.product_id, product["name"], item.quantity, stock)

        try:
            unit_price = Decimal(str(product["current_price"]))
        except (InvalidOperation, KeyError) as e:
            logger.error("Product %s has an invalid price: %r", item.product_id, product.get("current_price"))
            raise PersistenceError("Failed to validate products") from e

        # numeric columns can hold NaN and Infinity
        if not unit_price.is_finite() or unit_price < 0:
            logger.error("Product %s has an unusable price: %s", item.product_id, unit_price)
            raise PersistenceError("Failed to validate products")

        line = PricedLine(
            product_id=str(product["id"]),
            product_name=product["name"],
            product_image=product.get("image_url") or "",
            quantity=item.quantity,
            unit_price=unit_price,
        )
        lines.append(line)
        total += line.line_total

    return lines, total


class OrderService:
    """Creates orders from submitted carts and reads order history.

    Creation authenticates the caller, re-prices the cart from the catalog
    and writes order, lines and audit entry as one unit. Stock is read and
    compared, not reserved: two concurrent carts can both pass the check
    for the last units of a product. Requests carry no idempotency key, so a
    retried submission creates a second order.
    """

    def __init__(self, verifier: IdentityVerifier, store: OrderStore) -> None:
        """Initialize order service.

        Args:
            verifier: Resolves bearer tokens to users.
            store: Catalog and order storage.
        """
        self.verifier = verifier
        self.store = store

    async def create_order(self, authorization: str | None, body: bytes | str | dict[str, Any]) -> CreateOrderResult:
        """Create an order from a cart submission.

        Args:
            authorization: Raw Authorization header value.
            body: Raw JSON body or already decoded payload.

        Returns:
            CreateOrderResult: New order ID, server-computed total and status.

        Raises:
            OrderIntakeError: Subclass naming why the cart was rejected.
        """
        user = await self.authenticate(authorization)
        request = self.parse_request(body)
        logger.info("Creating order for user: %s", user.user_id)

        products = await self._fetch_products(request)
        try:
            lines, total = price_items(request.items, products)
        except (ProductNotFoundError, InsufficientStockError) as e:
            logger.warning("Order rejected for user %s: %s", user.user_id, e.message)
            raise
        logger.info("Validated total amount: %s", total)

        status = initial_status(request.payment_method)
        order_row: OrderCreate = {
            "user_id": str(user.user_id),
            "total_amount": float(total),
            "shipping_address": request.shipping_address.model_dump(by_alias=True),
            "status": status,
            "payment_method": request.payment_method,
            "payment_transaction_id": request.payment_transaction_id,
            "payment_verified": False,
        }
        audit = {
            "user_id": str(user.user_id),
            "old_status": None,
            "new_status": status,
            "changed_by": str(user.user_id),
            "payment_transaction_id": request.payment_transaction_id,
            "notes": f"Order created via {request.payment_method}",
        }

        if self.store.supports_transactions:
            order_id = await self._persist_in_transaction(order_row, lines, audit)
        else:
            order_id = await self._persist_with_rollback(order_row, lines, audit)

        logger.info("Order created successfully: %s", order_id)
        return CreateOrderResult(order_id=order_id, total_amount=total, status=status)

    async def authenticate(self, authorization: str | None) -> UserContext:
        """Resolve the caller, failing closed on any verification problem."""
        try:
            token = parse_bearer_token(authorization)
            return await self.verifier.verify(token)
        except AuthError as e:
            logger.warning("Auth error: %s (%s)", e.message, e.code.value)
            raise UnauthenticatedError() from e

    def parse_request(self, body: bytes | str | dict[str, Any]) -> CreateOrderRequest:
        """Validate the request body shape before any business logic runs."""
        try:
            if isinstance(body, (bytes, str)):
                return CreateOrderRequest.model_validate_json(body)
            return CreateOrderRequest.model_validate(body)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_input=False)
            first = errors[0]
            location = ".".join(str(part) for part in first["loc"])
            reason = f"{location}: {first['msg']}" if location else first["msg"]
            message = f"Invalid order request: {reason}"
            logger.warning("Malformed order request: %s", errors)
            raise MalformedRequestError(message) from e

    async def _fetch_products(self, request: CreateOrderRequest) -> list[CatalogProduct]:
        product_ids = [item.product_id for item in request.items]
        try:
            return await self.store.fetch_products_by_ids(product_ids)
        except StoreError as e:
            logger.error("Error fetching products: %s", e)
            raise PersistenceError("Failed to validate products") from e

    async def _persist_in_transaction(
        self,
        order_row: OrderCreate,
        lines: list[PricedLine],
        audit: dict[str, Any],
    ) -> str:
        try:
            order = await self.store.create_order_transaction(
                order_row, [line.to_row() for line in lines], audit
            )
        except StoreError as e:
            logger.error("Error creating order in transaction: %s", e)
            raise PersistenceError() from e
        return str(order["id"])

    async def _persist_with_rollback(
        self,
        order_row: OrderCreate,
        lines: list[PricedLine],
        audit: dict[str, Any],
    ) -> str:
        try:
            order = await self.store.insert_order(order_row)
        except StoreError as e:
            logger.error("Error creating order: %s", e)
            raise PersistenceError() from e

        order_id = str(order["id"])
        logger.info("Order created: %s", order_id)

        item_rows: list[OrderItemCreate] = [{"order_id": order_id, **line.to_row()} for line in lines]
        try:
            await self.store.insert_order_items(item_rows)
            await self.store.insert_audit_log_entry({"order_id": order_id, **audit})
        except Exception as e:
            logger.error("Error completing order %s, rolling back: %s", order_id, e)
            await self._rollback_order(order_id)
            raise PersistenceError() from e

        return order_id

    async def _rollback_order(self, order_id: str) -> None:
        """Compensating delete for an order whose lines or audit entry failed."""
        try:
            await self.store.delete_order(order_id)
        except StoreError as e:
            logger.critical("Rollback failed, order %s left without its items: %s", order_id, e)
            raise RollbackError(order_id) from e
        logger.info("Rolled back order %s", order_id)

    async def list_orders(self, user: UserContext) -> list[OrderWithItems]:
        """List the user's orders, newest first."""
        return await self.store.list_orders_for_user(str(user.user_id))

    async def get_order(self, user: UserContext, order_id: str) -> OrderWithItems | None:
        """Get one of the user's orders.

        Returns:
            OrderWithItems | None: The order, or None if missing or owned by someone else.
        """
        order = await self.store.get_order(order_id)
        if not order or str(order.get("user_id")) != str(user.user_id):
            return None
        return order
