"""Application services: linking products to orders and walking the links.

Thin wrappers over the AssociationManager that log successful mutations
and map results to DTOs. Errors propagate untouched.
"""

from __future__ import annotations

import structlog

from orderdesk.application.dto import (
    LinkDTO,
    OrderDTO,
    ProductDTO,
    link_to_dto,
    order_to_dto,
    product_to_dto,
)
from orderdesk.domain.service.association_manager import AssociationManager

logger = structlog.get_logger(__name__)


class AddProductToOrderHandler:

    def __init__(self, manager: AssociationManager) -> None:
        self._manager = manager

    def handle(self, order_id: int, product_id: int, quantity: int) -> LinkDTO:
        link = self._manager.add_product_to_order(order_id, product_id, quantity)
        logger.info(
            "product_linked",
            order_id=order_id,
            product_id=product_id,
            quantity=quantity,
            price=str(link.price.amount),
        )
        return link_to_dto(link)


class RemoveProductFromOrderHandler:

    def __init__(self, manager: AssociationManager) -> None:
        self._manager = manager

    def handle(self, order_id: int, product_id: int) -> None:
        self._manager.remove_product_from_order(order_id, product_id)
        logger.info("product_unlinked", order_id=order_id, product_id=product_id)


class ProductsForOrderHandler:

    def __init__(self, manager: AssociationManager) -> None:
        self._manager = manager

    def handle(self, order_id: int) -> list[ProductDTO]:
        return [product_to_dto(p) for p in self._manager.products_for_order(order_id)]


class OrdersForProductHandler:

    def __init__(self, manager: AssociationManager) -> None:
        self._manager = manager

    def handle(self, product_id: int) -> list[OrderDTO]:
        return [order_to_dto(o) for o in self._manager.orders_for_product(product_id)]
