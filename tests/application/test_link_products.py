"""Integration tests for the linking use cases."""

import pytest

from orderdesk.application.link_products import (
    AddProductToOrderHandler,
    OrdersForProductHandler,
    ProductsForOrderHandler,
    RemoveProductFromOrderHandler,
)
from orderdesk.application.manage_products import ListProductsHandler
from orderdesk.domain.exceptions import ConflictError, NotFoundError
from orderdesk.domain.model.filters import ProductFilter
from tests.fakes import wire


def _setup():
    s = wire()
    p = s.products.create("Widget", "", "5.0", 10)
    o1 = s.orders.create("First order")
    o2 = s.orders.create("Second order")
    return s, p, o1, o2


class TestLinkScenarios:

    def test_link_snapshots_price_and_takes_stock(self):
        s, p, o1, _ = _setup()

        dto = AddProductToOrderHandler(s.manager).handle(o1.id, p.id, 4)

        assert dto.quantity == 4
        assert dto.unit_price == "$5.00"
        assert dto.line_total == "$20.00"
        assert s.products.get(p.id).stock == 6

    def test_unlink_keeps_stock(self):
        s, p, o1, _ = _setup()
        AddProductToOrderHandler(s.manager).handle(o1.id, p.id, 4)

        RemoveProductFromOrderHandler(s.manager).handle(o1.id, p.id)

        assert ProductsForOrderHandler(s.manager).handle(o1.id) == []
        assert s.products.get(p.id).stock == 6

    def test_orders_for_product_in_link_order(self):
        s, p, o1, o2 = _setup()
        add = AddProductToOrderHandler(s.manager)
        add.handle(o1.id, p.id, 1)
        add.handle(o2.id, p.id, 1)
        orders_for = OrdersForProductHandler(s.manager)

        assert [o.id for o in orders_for.handle(p.id)] == [o1.id, o2.id]

        RemoveProductFromOrderHandler(s.manager).handle(o1.id, p.id)

        assert [o.id for o in orders_for.handle(p.id)] == [o2.id]

    def test_second_large_request_conflicts(self):
        s, p, o1, o2 = _setup()
        add = AddProductToOrderHandler(s.manager)
        add.handle(o1.id, p.id, 6)

        with pytest.raises(ConflictError, match="Insufficient stock"):
            add.handle(o2.id, p.id, 6)

        assert s.products.get(p.id).stock == 4

    def test_remove_missing_link_rejected(self):
        s, p, o1, _ = _setup()
        with pytest.raises(NotFoundError):
            RemoveProductFromOrderHandler(s.manager).handle(o1.id, p.id)

    def test_filter_scenario(self):
        s = wire()
        s.products.create("A", "", "2", 5)
        s.products.create("B", "", "5", 0)
        third = s.products.create("C", "", "7", 3)

        found = ListProductsHandler(s.engine).handle(
            ProductFilter(min_price=3, max_price=10, min_stock=1)
        )

        assert [p.id for p in found] == [third.id]
