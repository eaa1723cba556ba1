"""Product model type definitions for database operations."""

from typing import TypedDict


# Columns read when validating an order
PRODUCT_ORDER_COLUMNS = "id, name, current_price, stock, image_url"


class CatalogProduct(TypedDict):
    """Subset of a products row consumed by order intake.

    current_price may arrive from PostgREST as a number or a numeric string.
    The catalog owns these rows; order intake only reads them.
    """

    id: str
    name: str
    current_price: float | str
    stock: int
    image_url: str | None
