"""Domain service: Order Ledger. Owns order records; no stock concerns."""

from __future__ import annotations

from datetime import datetime

from orderdesk.domain.exceptions import NotFoundError
from orderdesk.domain.model.order import Order
from orderdesk.domain.repository.entity_store import EntityStore, Record, Transaction

ORDERS = "orders"


class OrderLedger:

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def create(self, description: str) -> Order:
        order = Order.create(description)
        with self._store.transaction() as tx:
            order.id = tx.next_id(ORDERS)
            tx.put(ORDERS, order.id, self.to_record(order))
        return order

    def get(self, order_id: int) -> Order:
        with self._store.transaction() as tx:
            return self.load(tx, order_id)

    def list_all(self) -> list[Order]:
        with self._store.transaction() as tx:
            rows = tx.scan(ORDERS, lambda raw: raw["deleted_at"] is None)
        return [self.from_record(raw) for _, raw in rows]

    def update(self, order_id: int, description: str) -> Order:
        with self._store.transaction() as tx:
            order = self.load(tx, order_id, for_update=True)
            order.describe(description)
            tx.put(ORDERS, order_id, self.to_record(order))
        return order

    def delete(self, order_id: int) -> None:
        """Tombstone an order. Its product links are left untouched."""
        with self._store.transaction() as tx:
            order = self.load(tx, order_id, for_update=True)
            order.tombstone()
            tx.put(ORDERS, order_id, self.to_record(order))

    def load(
        self,
        tx: Transaction,
        order_id: int,
        *,
        for_update: bool = False,
    ) -> Order:
        raw = tx.get(ORDERS, order_id, for_update=for_update)
        if raw is None or raw["deleted_at"] is not None:
            raise NotFoundError(f"Order #{order_id} not found")
        return self.from_record(raw)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_record(order: Order) -> Record:
        return {
            "id": order.id,
            "description": order.description,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
            "deleted_at": order.deleted_at.isoformat() if order.deleted_at else None,
        }

    @staticmethod
    def from_record(raw: Record) -> Order:
        return Order(
            id=raw["id"],
            description=raw["description"],
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
            deleted_at=(
                datetime.fromisoformat(raw["deleted_at"]) if raw["deleted_at"] else None
            ),
        )
