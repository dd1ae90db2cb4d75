"""Data Transfer Objects -- plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.domain.model.association import OrderProduct
from orderdesk.domain.model.order import Order
from orderdesk.domain.model.product import Product

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


@dataclass(frozen=True)
class ProductDTO:
    id: int
    name: str
    description: str
    price: str  # formatted, e.g. "$15.00"
    stock: int
    created_at: str
    updated_at: str
    deleted: bool = False
    orders: list[OrderDTO] | None = None


@dataclass(frozen=True)
class OrderLineDTO:
    """A linked product as displayed on an order."""

    product_id: int
    product_name: str
    quantity: int
    unit_price: str  # snapshot taken at link time
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    id: int
    description: str
    created_at: str
    updated_at: str
    deleted: bool = False
    products: list[ProductDTO] | None = None
    lines: list[OrderLineDTO] | None = None
    total: str | None = None


@dataclass(frozen=True)
class LinkDTO:
    """Output of add-product-to-order."""

    order_id: int
    product_id: int
    quantity: int
    unit_price: str
    line_total: str
    linked_at: str


# --- Mapping ------------------------------------------------------------------


def product_to_dto(product: Product, orders: list[Order] | None = None) -> ProductDTO:
    return ProductDTO(
        id=product.id,  # type: ignore[arg-type]
        name=product.name,
        description=product.description,
        price=str(product.price),
        stock=product.stock,
        created_at=product.created_at.strftime(TIMESTAMP_FORMAT),
        updated_at=product.updated_at.strftime(TIMESTAMP_FORMAT),
        deleted=product.is_deleted,
        orders=[order_to_dto(o) for o in orders] if orders is not None else None,
    )


def order_to_dto(order: Order, products: list[Product] | None = None) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        description=order.description,
        created_at=order.created_at.strftime(TIMESTAMP_FORMAT),
        updated_at=order.updated_at.strftime(TIMESTAMP_FORMAT),
        deleted=order.is_deleted,
        products=[product_to_dto(p) for p in products] if products is not None else None,
    )


def link_to_dto(link: OrderProduct) -> LinkDTO:
    return LinkDTO(
        order_id=link.order_id,
        product_id=link.product_id,
        quantity=link.quantity.value,
        unit_price=str(link.price),
        line_total=str(link.line_total),
        linked_at=link.linked_at.strftime(TIMESTAMP_FORMAT),
    )
