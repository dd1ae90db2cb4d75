"""Tests for the OrderLedger domain service."""

import pytest

from orderdesk.domain.exceptions import NotFoundError, ValidationError
from tests.fakes import wire


def test_create_and_get():
    s = wire()
    order = s.orders.create("Office supplies")

    loaded = s.orders.get(order.id)

    assert loaded.id == 1
    assert loaded.description == "Office supplies"


def test_get_missing_rejected():
    with pytest.raises(NotFoundError, match="Order #7 not found"):
        wire().orders.get(7)


def test_create_validates_before_writing():
    s = wire()
    with pytest.raises(ValidationError):
        s.orders.create("no")
    assert s.orders.list_all() == []


def test_update_description():
    s = wire()
    order = s.orders.create("Office supplies")
    s.orders.update(order.id, "Office furniture")
    assert s.orders.get(order.id).description == "Office furniture"


def test_update_missing_rejected():
    with pytest.raises(NotFoundError):
        wire().orders.update(1, "Office furniture")


def test_update_validates():
    s = wire()
    order = s.orders.create("Office supplies")
    with pytest.raises(ValidationError):
        s.orders.update(order.id, "")
    assert s.orders.get(order.id).description == "Office supplies"


def test_delete_tombstones_and_hides():
    s = wire()
    a = s.orders.create("First order")
    b = s.orders.create("Second order")

    s.orders.delete(a.id)

    with pytest.raises(NotFoundError):
        s.orders.get(a.id)
    with pytest.raises(NotFoundError):
        s.orders.delete(a.id)
    assert [o.id for o in s.orders.list_all()] == [b.id]
