"""Domain service: Filter Engine.

Turns an optional-field filter into one predicate. Each supplied field
contributes a small predicate closure; the closures are folded with AND
over a base predicate that hides tombstones. An absent field contributes
nothing, so an empty filter lists exactly what ``list_all()`` lists.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from decimal import Decimal, InvalidOperation
from functools import reduce
from typing import Any

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.filters import (
    OrderFilter,
    OrderListing,
    ProductFilter,
    ProductListing,
)
from orderdesk.domain.repository.entity_store import (
    EntityStore,
    Predicate,
    Record,
    Transaction,
)
from orderdesk.domain.service.association_manager import ORDER_PRODUCTS
from orderdesk.domain.service.order_ledger import ORDERS, OrderLedger
from orderdesk.domain.service.product_ledger import PRODUCTS, ProductLedger

# ---------------------------------------------------------------------------
# Predicate builders
# ---------------------------------------------------------------------------


def is_live(raw: Record) -> bool:
    return raw["deleted_at"] is None


def contains(field: str, needle: str) -> Predicate:
    """Case-insensitive substring match on a text field."""
    folded = needle.casefold()
    return lambda raw: folded in (raw[field] or "").casefold()


def at_least(field: str, bound: Any, convert: Callable[[Any], Any] = int) -> Predicate:
    return lambda raw: convert(raw[field]) >= bound


def at_most(field: str, bound: Any, convert: Callable[[Any], Any] = int) -> Predicate:
    return lambda raw: convert(raw[field]) <= bound


def all_of(predicates: Iterable[Predicate], base: Predicate = is_live) -> Predicate:
    """Fold predicates into their conjunction, starting from *base*."""
    return reduce(lambda left, right: (lambda raw: left(raw) and right(raw)), predicates, base)


def product_predicates(criteria: ProductFilter) -> list[Predicate]:
    predicates: list[Predicate] = []
    if criteria.name:
        predicates.append(contains("name", criteria.name))
    if criteria.description:
        predicates.append(contains("description", criteria.description))
    if criteria.min_price is not None:
        predicates.append(at_least("price", _decimal(criteria.min_price, "min_price"), Decimal))
    if criteria.max_price is not None:
        predicates.append(at_most("price", _decimal(criteria.max_price, "max_price"), Decimal))
    if criteria.min_stock is not None:
        predicates.append(at_least("stock", _integer(criteria.min_stock, "min_stock")))
    if criteria.max_stock is not None:
        predicates.append(at_most("stock", _integer(criteria.max_stock, "max_stock")))
    return predicates


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class FilterEngine:

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def list_products(self, criteria: ProductFilter | None = None) -> list[ProductListing]:
        """Live products matching every supplied field, by identifier ascending."""
        criteria = criteria or ProductFilter()
        predicate = all_of(product_predicates(criteria))

        with self._store.transaction() as tx:
            rows = tx.scan(PRODUCTS, predicate)
            nested = None
            if criteria.include_orders:
                nested = self._linked(tx, [key for key, _ in rows], "product_id", "order_id", ORDERS)

        return [
            ProductListing(
                product=ProductLedger.from_record(raw),
                orders=(
                    [OrderLedger.from_record(o) for o in nested.get(key, [])]
                    if nested is not None
                    else None
                ),
            )
            for key, raw in rows
        ]

    def list_orders(self, criteria: OrderFilter | None = None) -> list[OrderListing]:
        """Live orders matching every supplied field, by identifier ascending."""
        criteria = criteria or OrderFilter()

        with self._store.transaction() as tx:
            predicate = all_of(self._order_predicates(tx, criteria))
            rows = tx.scan(ORDERS, predicate)
            nested = None
            if criteria.include_products:
                nested = self._linked(tx, [key for key, _ in rows], "order_id", "product_id", PRODUCTS)

        return [
            OrderListing(
                order=OrderLedger.from_record(raw),
                products=(
                    [ProductLedger.from_record(p) for p in nested.get(key, [])]
                    if nested is not None
                    else None
                ),
            )
            for key, raw in rows
        ]

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _order_predicates(tx: Transaction, criteria: OrderFilter) -> list[Predicate]:
        predicates: list[Predicate] = []
        if criteria.description:
            predicates.append(contains("description", criteria.description))
        if criteria.product_id is not None:
            product_id = _integer(criteria.product_id, "product_id")
            linked = {
                raw["order_id"]
                for _, raw in tx.scan(ORDER_PRODUCTS, lambda raw: raw["product_id"] == product_id)
            }
            predicates.append(lambda raw: raw["id"] in linked)
        return predicates

    @staticmethod
    def _linked(
        tx: Transaction,
        anchor_ids: list[int],
        anchor_field: str,
        other_field: str,
        other_kind: str,
    ) -> dict[int, list[Record]]:
        """Group the opposite records of each anchor, in link insertion order."""
        anchors = set(anchor_ids)
        links = [raw for _, raw in tx.scan(ORDER_PRODUCTS, lambda raw: raw[anchor_field] in anchors)]
        links.sort(key=lambda raw: raw["sequence"])

        grouped: dict[int, list[Record]] = {anchor: [] for anchor in anchor_ids}
        for link in links:
            other = tx.get(other_kind, link[other_field])
            if other is not None:
                grouped[link[anchor_field]].append(other)
        return grouped


def _decimal(value: Any, label: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{label} must be a number, got {value!r}") from exc
    if not result.is_finite():
        raise ValidationError(f"{label} must be finite, got {value!r}")
    return result


def _integer(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be an integer, got {value!r}")
    return value
