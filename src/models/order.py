"""Order model type definitions for database operations."""

from datetime import datetime
from typing import Literal, TypedDict
from uuid import UUID


# Order status values matching the orders.status column
OrderStatus = Literal[
    "pending",
    "awaiting_payment",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
]

CASH_ON_DELIVERY = "cod"


class ShippingAddress(TypedDict):
    """Structure stored in the orders.shipping_address JSONB column.

    Keys keep the storefront's camelCase naming.
    """

    fullName: str
    address: str
    city: str
    state: str
    zipCode: str
    phone: str


class OrderItem(TypedDict):
    """order_items table row representation.

    product_name, product_image and price are a snapshot taken when the
    order was placed and never change afterwards.
    """

    id: UUID
    order_id: UUID
    product_id: str
    product_name: str
    product_image: str
    quantity: int
    price: float
    created_at: datetime


class OrderItemCreate(TypedDict):
    """Data required to create an order line."""

    order_id: str
    product_id: str
    product_name: str
    product_image: str
    quantity: int
    price: float


class Order(TypedDict):
    """orders table row representation."""

    id: UUID
    user_id: UUID
    total_amount: float
    shipping_address: ShippingAddress
    status: OrderStatus
    payment_method: str
    payment_transaction_id: str | None
    payment_verified: bool
    created_at: datetime
    updated_at: datetime


class OrderCreate(TypedDict):
    """Data required to create a new order."""

    user_id: str
    total_amount: float
    shipping_address: ShippingAddress
    status: OrderStatus
    payment_method: str
    payment_transaction_id: str | None
    payment_verified: bool


class OrderWithItems(Order):
    """Order row joined with its order_items rows."""

    order_items: list[OrderItem]
