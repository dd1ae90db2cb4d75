"""Composition root -- wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from orderdesk.config.settings import OrderDeskSettings
from orderdesk.domain.exceptions import InternalError
from orderdesk.domain.repository.entity_store import EntityStore, StoreError
from orderdesk.domain.service.association_manager import AssociationManager
from orderdesk.domain.service.filter_engine import FilterEngine
from orderdesk.domain.service.order_ledger import OrderLedger
from orderdesk.domain.service.product_ledger import ProductLedger
from orderdesk.infrastructure.persistence.json_store import JsonFileEntityStore
from orderdesk.infrastructure.persistence.memory_store import InMemoryEntityStore


@dataclass(frozen=True)
class Services:
    store: EntityStore
    orders: OrderLedger
    products: ProductLedger
    manager: AssociationManager
    engine: FilterEngine


def entity_store(settings: OrderDeskSettings) -> EntityStore:
    if settings.store == "memory":
        return InMemoryEntityStore()
    try:
        return JsonFileEntityStore(settings.store_path)
    except StoreError as exc:
        raise InternalError("Cannot open the entity store") from exc


def build_services(settings: OrderDeskSettings) -> Services:
    store = entity_store(settings)
    orders = OrderLedger(store)
    products = ProductLedger(store)
    return Services(
        store=store,
        orders=orders,
        products=products,
        manager=AssociationManager(store, orders, products),
        engine=FilterEngine(store),
    )
