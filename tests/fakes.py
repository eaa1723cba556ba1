"""In-memory stand-ins for the identity verifier and order store."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from src.api.middleware.auth import AuthError, AuthErrorCode
from src.schemas.auth import UserContext
from src.services.order_store import StoreError

TEST_USER_ID = "550e8400-e29b-41d4-a716-446655440000"
OTHER_USER_ID = "660e8400-e29b-41d4-a716-446655440000"
VALID_TOKEN = "valid-token"
OTHER_TOKEN = "other-user-token"


class FakeIdentityVerifier:
    """Identity verifier that knows a fixed set of tokens."""

    def __init__(self, tokens: dict[str, UserContext]) -> None:
        self.tokens = tokens
        self.calls: list[str] = []

    async def verify(self, token: str) -> UserContext:
        self.calls.append(token)
        if token not in self.tokens:
            raise AuthError("Unknown token", AuthErrorCode.INVALID_TOKEN)
        return self.tokens[token]


class InMemoryOrderStore:
    """OrderStore kept in dicts, with switchable failures.

    Operations listed in fail_on raise StoreError; operations listed in
    crash_on raise RuntimeError to simulate unexpected bugs.
    """

    def __init__(self, products: list[dict[str, Any]], supports_transactions: bool = False) -> None:
        self.products = {product["id"]: dict(product) for product in products}
        self.orders: dict[str, dict[str, Any]] = {}
        self.order_items: list[dict[str, Any]] = []
        self.audit_log: list[dict[str, Any]] = []
        self.fail_on: set[str] = set()
        self.crash_on: set[str] = set()
        self.calls: list[str] = []
        self.fetch_calls: list[list[str]] = []
        self._supports_transactions = supports_transactions
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    @property
    def supports_transactions(self) -> bool:
        return self._supports_transactions

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.crash_on:
            raise RuntimeError(f"{operation} crashed")
        if operation in self.fail_on:
            raise StoreError(operation, RuntimeError("connection reset"))

    def _new_order(self, row: dict[str, Any]) -> dict[str, Any]:
        self._clock += timedelta(minutes=1)
        order = {"id": str(uuid4()), **row, "created_at": self._clock.isoformat()}
        self.orders[order["id"]] = order
        return order

    async def fetch_products_by_ids(self, product_ids: list[str]) -> list[dict[str, Any]]:
        self._enter("fetch_products_by_ids")
        self.fetch_calls.append(list(product_ids))
        unique_ids = dict.fromkeys(product_ids)
        return [dict(self.products[pid]) for pid in unique_ids if pid in self.products]

    async def insert_order(self, row: dict[str, Any]) -> dict[str, Any]:
        self._enter("insert_order")
        return dict(self._new_order(dict(row)))

    async def insert_order_items(self, rows: list[dict[str, Any]]) -> None:
        self._enter("insert_order_items")
        self.order_items.extend(dict(row) for row in rows)

    async def delete_order(self, order_id: str) -> None:
        self._enter("delete_order")
        self.order_items = [item for item in self.order_items if item["order_id"] != order_id]
        self.orders.pop(order_id, None)

    async def insert_audit_log_entry(self, row: dict[str, Any]) -> None:
        self._enter("insert_audit_log_entry")
        self.audit_log.append(dict(row))

    async def create_order_transaction(
        self,
        order: dict[str, Any],
        items: list[dict[str, Any]],
        audit: dict[str, Any],
    ) -> dict[str, Any]:
        self._enter("create_order_transaction")
        created = self._new_order(dict(order))
        self.order_items.extend({"order_id": created["id"], **item} for item in items)
        self.audit_log.append({"order_id": created["id"], **audit})
        return dict(created)

    def _with_items(self, order: dict[str, Any]) -> dict[str, Any]:
        items = [
            {key: value for key, value in item.items() if key != "order_id"}
            for item in self.order_items
            if item["order_id"] == order["id"]
        ]
        return {**order, "order_items": items}

    async def list_orders_for_user(self, user_id: str) -> list[dict[str, Any]]:
        self._enter("list_orders_for_user")
        owned = [order for order in self.orders.values() if order["user_id"] == user_id]
        owned.sort(key=lambda order: order["created_at"], reverse=True)
        return [self._with_items(order) for order in owned]

    async def get_order(self, order_id: str) -> dict[str, Any] | None:
        self._enter("get_order")
        order = self.orders.get(order_id)
        return self._with_items(order) if order else None


