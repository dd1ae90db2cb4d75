"""Application services: order use cases (create, show, list, update, delete)."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

import structlog

from orderdesk.application.dto import OrderDTO, OrderLineDTO, order_to_dto
from orderdesk.domain.model.filters import OrderFilter
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.service.association_manager import AssociationManager
from orderdesk.domain.service.filter_engine import FilterEngine
from orderdesk.domain.service.order_ledger import OrderLedger

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(self, orders: OrderLedger) -> None:
        self._orders = orders

    def handle(self, description: str) -> OrderDTO:
        order = self._orders.create(description)
        logger.info("order_created", order_id=order.id)
        return order_to_dto(order)


class ShowOrderHandler:

    def __init__(self, manager: AssociationManager) -> None:
        self._manager = manager

    def handle(self, order_id: int) -> OrderDTO:
        """Return an order with its lines (quantity and price snapshot)."""
        order, sheet = self._manager.order_sheet(order_id)

        total = Money(Decimal("0.00"))
        line_dtos: list[OrderLineDTO] = []
        for line, product in sheet:
            total = total + line.line_total
            line_dtos.append(
                OrderLineDTO(
                    product_id=line.product_id,
                    product_name=product.name,
                    quantity=line.quantity.value,
                    unit_price=str(line.price),
                    line_total=str(line.line_total),
                )
            )

        return replace(order_to_dto(order), lines=line_dtos, total=str(total))


class ListOrdersHandler:

    def __init__(self, engine: FilterEngine) -> None:
        self._engine = engine

    def handle(self, criteria: OrderFilter | None = None) -> list[OrderDTO]:
        return [
            order_to_dto(listing.order, listing.products)
            for listing in self._engine.list_orders(criteria)
        ]


class UpdateOrderHandler:

    def __init__(self, orders: OrderLedger) -> None:
        self._orders = orders

    def handle(self, order_id: int, description: str) -> OrderDTO:
        order = self._orders.update(order_id, description)
        logger.info("order_updated", order_id=order_id)
        return order_to_dto(order)


class DeleteOrderHandler:

    def __init__(self, orders: OrderLedger) -> None:
        self._orders = orders

    def handle(self, order_id: int) -> None:
        """Tombstone the order. Its product links are kept."""
        self._orders.delete(order_id)
        logger.info("order_deleted", order_id=order_id)
