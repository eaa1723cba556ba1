"""Product catalog and order persistence backed by Supabase tables."""

import logging
from typing import Any, Protocol

from supabase import Client

from src.core.supabase import get_supabase_client
from src.models.audit_log import AuditLogEntryCreate
from src.models.order import Order, OrderCreate, OrderItemCreate, OrderWithItems
from src.models.product import PRODUCT_ORDER_COLUMNS, CatalogProduct

logger = logging.getLogger(__name__)

ORDER_WITH_ITEMS_COLUMNS = "*, order_items(product_id, product_name, product_image, quantity, price)"


class StoreError(Exception):
    """A store read or write failed.

    The message names the operation; the driver error is kept as the cause
    and never shown to API callers.
    """

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{operation} failed{detail}")


class OrderStore(Protocol):
    """Storage operations used by order intake and order history."""

    @property
    def supports_transactions(self) -> bool:
        """Whether create_order_transaction can be used."""
        ...

    async def fetch_products_by_ids(self, product_ids: list[str]) -> list[CatalogProduct]:
        """Fetch catalog rows for the given IDs in one lookup.

        Unknown IDs are simply absent from the result.
        """
        ...

    async def insert_order(self, row: OrderCreate) -> Order:
        """Insert an order and return the stored row including its ID."""
        ...

    async def insert_order_items(self, rows: list[OrderItemCreate]) -> None:
        """Insert all lines of an order in one write."""
        ...

    async def delete_order(self, order_id: str) -> None:
        """Remove an order and any lines already written for it."""
        ...

    async def insert_audit_log_entry(self, row: AuditLogEntryCreate) -> None:
        """Append an audit log entry."""
        ...

    async def create_order_transaction(
        self,
        order: OrderCreate,
        items: list[dict[str, Any]],
        audit: dict[str, Any],
    ) -> Order:
        """Write order, lines and audit entry atomically.

        items and audit carry no order_id; the store assigns it.
        """
        ...

    async def list_orders_for_user(self, user_id: str) -> list[OrderWithItems]:
        """List a user's orders with their lines, newest first."""
        ...

    async def get_order(self, order_id: str) -> OrderWithItems | None:
        """Get an order with its lines, or None if it does not exist."""
        ...


class SupabaseOrderStore:
    """OrderStore over the products, orders, order_items and order_audit_log tables."""

    def __init__(
        self,
        supabase_client: Client | None = None,
        order_creation_rpc: str | None = None,
    ) -> None:
        """Initialize order store.

        Args:
            supabase_client: Optional Supabase client for testing.
            order_creation_rpc: Optional Postgres function name that creates
                an order, its lines and its audit entry in one transaction.
        """
        self._supabase_client = supabase_client
        self._order_creation_rpc = order_creation_rpc

    @property
    def supabase(self) -> Client:
        """Get Supabase client."""
        if self._supabase_client is None:
            self._supabase_client = get_supabase_client()
        return self._supabase_client

    @property
    def supports_transactions(self) -> bool:
        return self._order_creation_rpc is not None

    async def fetch_products_by_ids(self, product_ids: list[str]) -> list[CatalogProduct]:
        unique_ids = list(dict.fromkeys(product_ids))
        try:
            response = (
                self.supabase.table("products")
                .select(PRODUCT_ORDER_COLUMNS)
                .in_("id", unique_ids)
                .execute()
            )
        except Exception as e:
            raise StoreError("Fetch products", e) from e

        return response.data or []

    async def insert_order(self, row: OrderCreate) -> Order:
        try:
            response = self.supabase.table("orders").insert(dict(row)).execute()
        except Exception as e:
            raise StoreError("Insert order", e) from e

        if not response.data:
            raise StoreError("Insert order")
        return response.data[0]

    async def insert_order_items(self, rows: list[OrderItemCreate]) -> None:
        try:
            self.supabase.table("order_items").insert([dict(row) for row in rows]).execute()
        except Exception as e:
            raise StoreError("Insert order items", e) from e

    async def delete_order(self, order_id: str) -> None:
        try:
            self.supabase.table("order_items").delete().eq("order_id", order_id).execute()
            self.supabase.table("orders").delete().eq("id", order_id).execute()
        except Exception as e:
            raise StoreError(f"Delete order {order_id}", e) from e

    async def insert_audit_log_entry(self, row: AuditLogEntryCreate) -> None:
        try:
            self.supabase.table("order_audit_log").insert(dict(row)).execute()
        except Exception as e:
            raise StoreError("Insert audit log entry", e) from e

    async def create_order_transaction(
        self,
        order: OrderCreate,
        items: list[dict[str, Any]],
        audit: dict[str, Any],
    ) -> Order:
        if self._order_creation_rpc is None:
            raise StoreError("Create order transaction (no ORDER_CREATION_RPC configured)")

        params = {"p_order": dict(order), "p_items": items, "p_audit": audit}
        try:
            response = self.supabase.rpc(self._order_creation_rpc, params).execute()
        except Exception as e:
            raise StoreError("Create order transaction", e) from e

        # Set-returning functions come back as a list, scalar composites as a dict
        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            raise StoreError("Create order transaction")
        return data

    async def list_orders_for_user(self, user_id: str) -> list[OrderWithItems]:
        try:
            response = (
                self.supabase.table("orders")
                .select(ORDER_WITH_ITEMS_COLUMNS)
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise StoreError("List orders", e) from e

        return response.data or []

    async def get_order(self, order_id: str) -> OrderWithItems | None:
        try:
            response = (
                self.supabase.table("orders")
                .select(ORDER_WITH_ITEMS_COLUMNS)
                .eq("id", order_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            raise StoreError("Get order", e) from e

        return response.data if response and response.data else None
