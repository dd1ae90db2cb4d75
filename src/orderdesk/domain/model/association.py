"""The order <-> product link.

An association is a first-class entity with a compound key
``(order_id, product_id)``. It is created only by
``AssociationManager.add_product_to_order`` and destroyed only by
``AssociationManager.remove_product_from_order``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from orderdesk.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class OrderProduct:
    """Captures the quantity and price snapshot of one linked product.

    ``price`` is copied from the product at link time and never follows
    later price changes. ``sequence`` records insertion order.
    """

    order_id: int
    product_id: int
    quantity: Quantity
    price: Money  # locked at link time
    sequence: int
    linked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> tuple[int, int]:
        return (self.order_id, self.product_id)

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity.value
