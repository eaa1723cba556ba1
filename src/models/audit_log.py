"""Order audit log type definitions."""

from datetime import datetime
from typing import TypedDict
from uuid import UUID

from src.models.order import OrderStatus


class AuditLogEntry(TypedDict):
    """order_audit_log table row representation.

    Rows are append-only: never updated or deleted by the application.
    """

    id: UUID
    order_id: UUID
    user_id: UUID
    old_status: OrderStatus | None
    new_status: OrderStatus
    changed_by: UUID
    payment_transaction_id: str | None
    notes: str | None
    created_at: datetime


class AuditLogEntryCreate(TypedDict):
    """Data required to append an audit log entry."""

    order_id: str
    user_id: str
    old_status: OrderStatus | None
    new_status: OrderStatus
    changed_by: str
    payment_transaction_id: str | None
    notes: str | None
