"""Concurrent linking must never oversell a product."""

import threading

import pytest

from orderdesk.domain.exceptions import ConflictError
from tests.fakes import SlowEntityStore, wire


def _race(calls):
    """Start every call at once; return (results, errors) per call index."""
    barrier = threading.Barrier(len(calls))
    results: dict[int, object] = {}
    errors: dict[int, Exception] = {}

    def run(index, call):
        barrier.wait()
        try:
            results[index] = call()
        except Exception as exc:  # collected for assertions
            errors[index] = exc

    threads = [
        threading.Thread(target=run, args=(i, call)) for i, call in enumerate(calls)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    assert not any(t.is_alive() for t in threads), "deadlock"
    return results, errors


def test_two_requests_for_six_against_ten():
    s = wire(SlowEntityStore())
    p = s.products.create("Widget", "", "5.0", 10)
    o2 = s.orders.create("Second order")
    o3 = s.orders.create("Third order")

    results, errors = _race([
        lambda: s.manager.add_product_to_order(o2.id, p.id, 6),
        lambda: s.manager.add_product_to_order(o3.id, p.id, 6),
    ])

    assert len(results) == 1
    assert len(errors) == 1
    [error] = errors.values()
    assert isinstance(error, ConflictError)
    assert "Insufficient stock" in str(error)
    assert s.products.get(p.id).stock == 4
    linked = s.manager.orders_for_product(p.id)
    assert len(linked) == 1


@pytest.mark.parametrize("stock, requests", [(10, [1] * 15), (20, [3, 7, 5, 4, 6, 2, 8])])
def test_succeeded_quantities_never_exceed_stock(stock, requests):
    s = wire(SlowEntityStore(delay=0.001))
    p = s.products.create("Widget", "", "1.00", stock)
    orders = [s.orders.create(f"Order number {i}") for i in range(len(requests))]

    results, errors = _race([
        (lambda o=o, q=q: s.manager.add_product_to_order(o.id, p.id, q))
        for o, q in zip(orders, requests)
    ])

    assert all(isinstance(e, ConflictError) for e in errors.values())
    taken = sum(link.quantity.value for link in results.values())
    assert taken <= stock
    assert s.products.get(p.id).stock == stock - taken
    assert s.products.get(p.id).stock >= 0
    # Every rejected request really would have overdrawn what was left.
    remaining = stock - taken
    for index in errors:
        assert requests[index] > remaining


def test_duplicate_links_race_to_one_winner():
    s = wire(SlowEntityStore())
    p = s.products.create("Widget", "", "5.0", 100)
    o = s.orders.create("Only order")

    results, errors = _race([
        lambda: s.manager.add_product_to_order(o.id, p.id, 1) for _ in range(5)
    ])

    assert len(results) == 1
    assert all("already linked" in str(e) for e in errors.values())
    assert s.products.get(p.id).stock == 99


def test_concurrent_restock_and_link_lose_no_update():
    s = wire(SlowEntityStore(delay=0.001))
    p = s.products.create("Widget", "", "5.0", 0)
    orders = [s.orders.create(f"Order number {i}") for i in range(5)]

    calls = [lambda: s.products.adjust_stock(p.id, 1) for _ in range(10)]
    results, errors = _race(calls)
    assert not errors
    assert s.products.get(p.id).stock == 10

    results, errors = _race([
        (lambda o=o: s.manager.add_product_to_order(o.id, p.id, 2)) for o in orders
    ] + [lambda: s.products.adjust_stock(p.id, 5)])
    assert not errors
    assert s.products.get(p.id).stock == 5
