"""Integration tests for the order use cases."""

import pytest

from orderdesk.application.manage_orders import (
    CreateOrderHandler,
    DeleteOrderHandler,
    ListOrdersHandler,
    ShowOrderHandler,
    UpdateOrderHandler,
)
from orderdesk.domain.exceptions import NotFoundError, ValidationError
from orderdesk.domain.model.filters import OrderFilter
from tests.fakes import CountingEntityStore, wire


def test_create_and_show_empty_order():
    s = wire()
    created = CreateOrderHandler(s.orders).handle("Office supplies")

    dto = ShowOrderHandler(s.manager).handle(created.id)

    assert dto.description == "Office supplies"
    assert dto.lines == []
    assert dto.total == "$0.00"


def test_show_lists_lines_with_snapshot_prices():
    s = wire()
    pen = s.products.create("Pen", "", "1.50", 10)
    pad = s.products.create("Notepad", "", "3.00", 10)
    order = s.orders.create("Office supplies")
    s.manager.add_product_to_order(order.id, pad.id, 2)
    s.manager.add_product_to_order(order.id, pen.id, 4)
    s.products.update(pen.id, "Pen", "", "9.99", 6)

    dto = ShowOrderHandler(s.manager).handle(order.id)

    assert [(line.product_name, line.quantity, line.unit_price) for line in dto.lines] == [
        ("Notepad", 2, "$3.00"),
        ("Pen", 4, "$1.50"),
    ]
    assert dto.total == "$12.00"


def test_show_missing_rejected():
    with pytest.raises(NotFoundError, match="Order #5 not found"):
        s = wire()
        ShowOrderHandler(s.manager).handle(5)


def test_show_reads_order_and_lines_in_one_transaction():
    store = CountingEntityStore()
    s = wire(store)
    pen = s.products.create("Pen", "", "1.50", 10)
    order = s.orders.create("Office supplies")
    s.manager.add_product_to_order(order.id, pen.id, 2)
    s.products.delete(pen.id)
    before = store.begun

    dto = ShowOrderHandler(s.manager).handle(order.id)

    assert store.begun == before + 1
    assert [(line.product_name, line.line_total) for line in dto.lines] == [("Pen", "$3.00")]


def test_update_and_validation():
    s = wire()
    CreateOrderHandler(s.orders).handle("Office supplies")

    assert UpdateOrderHandler(s.orders).handle(1, "Office chairs").description == "Office chairs"
    with pytest.raises(ValidationError):
        UpdateOrderHandler(s.orders).handle(1, "x")


def test_list_filters_and_nested_products():
    s = wire()
    pen = s.products.create("Pen", "", "1.50", 10)
    create = CreateOrderHandler(s.orders)
    first = create.handle("Office supplies")
    create.handle("Gift wrap")
    s.manager.add_product_to_order(first.id, pen.id, 1)
    handler = ListOrdersHandler(s.engine)

    assert [o.description for o in handler.handle()] == ["Office supplies", "Gift wrap"]

    [only] = handler.handle(OrderFilter(product_id=pen.id, include_products=True))
    assert only.id == first.id
    assert [p.name for p in only.products] == ["Pen"]


def test_delete_hides_order():
    s = wire()
    CreateOrderHandler(s.orders).handle("Office supplies")
    DeleteOrderHandler(s.orders).handle(1)
    assert ListOrdersHandler(s.engine).handle() == []
