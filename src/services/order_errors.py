"""Failure kinds raised while turning a cart into an order."""


class OrderIntakeError(Exception):
    """Base class for order creation failures.

    message is safe to return to the caller; anything internal goes to the
    logs through the exception chain.
    """

    kind = "order_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthenticatedError(OrderIntakeError):
    """Bearer credential missing or not resolvable to a user."""

    kind = "unauthenticated"

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class MalformedRequestError(OrderIntakeError):
    """Request body is not a valid order request."""

    kind = "malformed_request"


class ProductNotFoundError(OrderIntakeError):
    kind = "product_not_found"

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class InsufficientStockError(OrderIntakeError):
    kind = "insufficient_stock"

    def __init__(self, product_id: str, product_name: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for {product_name}")


class PersistenceError(OrderIntakeError):
    """The store rejected a read or write needed to create the order."""

    kind = "persistence_failure"

    def __init__(self, message: str = "Failed to create order") -> None:
        super().__init__(message)


class RollbackError(PersistenceError):
    """A partially written order could not be removed.

    The order row may still exist without its lines and needs manual cleanup.
    """

    kind = "rollback_failure"

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__()
