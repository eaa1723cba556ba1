"""Database model type definitions."""

from src.models.audit_log import AuditLogEntry, AuditLogEntryCreate
from src.models.order import (
    Order,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderStatus,
    OrderWithItems,
    ShippingAddress,
)
from src.models.product import CatalogProduct

__all__ = [
    "AuditLogEntry",
    "AuditLogEntryCreate",
    "CatalogProduct",
    "Order",
    "OrderCreate",
    "OrderItem",
    "OrderItemCreate",
    "OrderStatus",
    "OrderWithItems",
    "ShippingAddress",
]
