"""Order Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ShippingAddressSchema(BaseModel):
    """Shipping address as submitted by the storefront checkout form."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", str_strip_whitespace=True)

    full_name: str = Field(alias="fullName", min_length=1, strict=True, description="Recipient name")
    address: str = Field(min_length=1, strict=True, description="Street address")
    city: str = Field(min_length=1, strict=True, description="City")
    state: str = Field(min_length=1, strict=True, description="State or region")
    zip_code: str = Field(alias="zipCode", min_length=1, strict=True, description="Postal code")
    phone: str = Field(min_length=1, strict=True, description="Contact phone number")


class OrderItemRequest(BaseModel):
    """One requested cart line.

    product_name, product_image and price are accepted because the cart
    sends them, but pricing and the stored snapshot always come from the
    catalog.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: str = Field(min_length=1, strict=True, description="Catalog product ID")
    quantity: int = Field(gt=0, strict=True, description="Requested quantity")
    product_name: str | None = Field(default=None, description="Client-side product name (ignored)")
    product_image: str | None = Field(default=None, description="Client-side product image (ignored)")
    price: float | None = Field(default=None, description="Client-side unit price (ignored)")


class CreateOrderRequest(BaseModel):
    """Schema for POST /create-order request bodies."""

    model_config = ConfigDict(extra="forbid")

    items: list[OrderItemRequest] = Field(min_length=1, description="Requested cart lines, in cart order")
    shipping_address: ShippingAddressSchema = Field(description="Delivery address")
    payment_method: str = Field(min_length=1, strict=True, description="card, upi, wallet, cod, ...")
    payment_transaction_id: str | None = Field(default=None, description="Payment provider reference")


class CreateOrderResponse(BaseModel):
    """Successful order creation response."""

    success: Literal[True] = True
    order_id: str = Field(description="Created order identifier")
    total_amount: float = Field(description="Server-computed order total")


class CreateOrderFailure(BaseModel):
    """Failed order creation response."""

    success: Literal[False] = False
    error: str = Field(description="Caller-safe failure reason")


class OrderItemResponse(BaseModel):
    """Schema for an order line in order API responses."""

    model_config = ConfigDict(from_attributes=True)

    product_id: str = Field(description="Catalog product ID")
    product_name: str = Field(description="Product name at purchase time")
    product_image: str | None = Field(default=None, description="Product image at purchase time")
    quantity: int = Field(ge=1, description="Quantity ordered")
    price: float = Field(ge=0, description="Unit price at purchase time")


class OrderResponse(BaseModel):
    """Schema for order API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Order unique identifier")
    status: str = Field(description="Order status")
    total_amount: float = Field(description="Order total")
    shipping_address: dict = Field(description="Delivery address")
    payment_method: str = Field(description="Payment method tag")
    payment_transaction_id: str | None = Field(default=None, description="Payment provider reference")
    payment_verified: bool = Field(default=False, description="Whether payment has been confirmed")
    order_items: list[OrderItemResponse] = Field(default_factory=list, description="Order lines")
    created_at: datetime = Field(description="Creation timestamp")


class OrderListResponse(BaseModel):
    """Schema for order list API responses."""

    model_config = ConfigDict(from_attributes=True)

    items: list[OrderResponse] = Field(description="List of orders")
