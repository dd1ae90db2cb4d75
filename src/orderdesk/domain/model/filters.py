"""Optional-field query objects and their results.

Every field of a filter is independently optional. ``None`` means "no
constraint", so ``ProductFilter()`` and ``OrderFilter()`` match every live
record.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from orderdesk.domain.model.order import Order
from orderdesk.domain.model.product import Product


@dataclass(frozen=True)
class ProductFilter:
    name: str | None = None
    description: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_stock: int | None = None
    max_stock: int | None = None
    include_orders: bool = False


@dataclass(frozen=True)
class OrderFilter:
    description: str | None = None
    product_id: int | None = None  # "contains product X"
    include_products: bool = False


@dataclass(frozen=True)
class ProductListing:
    """A matched product, plus its orders when the filter asked for them."""

    product: Product
    orders: list[Order] | None = None


@dataclass(frozen=True)
class OrderListing:
    """A matched order, plus its products when the filter asked for them."""

    order: Order
    products: list[Product] | None = None
