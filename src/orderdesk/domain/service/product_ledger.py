"""Domain service: Product Ledger.

Owns product records and their stock counters. Stock never changes
through a read-then-write pair: every adjustment goes through the
store's conditional counter primitive under a row lock, so concurrent
callers cannot lose updates or drive stock below zero.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from orderdesk.domain.exceptions import ConflictError, NotFoundError, ValidationError
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.entity_store import EntityStore, Record, Transaction

PRODUCTS = "products"


class ProductLedger:

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def create(
        self,
        name: str,
        description: str,
        price: str | float | int | Decimal,
        stock: int,
    ) -> Product:
        product = Product.create(name, description, price, stock)
        with self._store.transaction() as tx:
            product.id = tx.next_id(PRODUCTS)
            tx.put(PRODUCTS, product.id, self.to_record(product))
        return product

    def get(self, product_id: int) -> Product:
        with self._store.transaction() as tx:
            return self.load(tx, product_id)

    def list_all(self) -> list[Product]:
        """Every live product, by identifier ascending."""
        with self._store.transaction() as tx:
            rows = tx.scan(PRODUCTS, lambda raw: raw["deleted_at"] is None)
        return [self.from_record(raw) for _, raw in rows]

    def update(
        self,
        product_id: int,
        name: str,
        description: str,
        price: str | float | int | Decimal,
        stock: int,
    ) -> Product:
        """Replace every mutable field of a product."""
        with self._store.transaction() as tx:
            product = self.load(tx, product_id, for_update=True)
            product.revise(name, description, price, stock)
            tx.put(PRODUCTS, product_id, self.to_record(product))
        return product

    def adjust_stock(self, product_id: int, delta: int) -> Product:
        """Atomically apply ``stock += delta``.

        Raises ConflictError, without clamping, if stock would go negative.
        """
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise ValidationError(
                f"Stock delta must be an integer, got {type(delta).__name__}"
            )
        with self._store.transaction() as tx:
            product = self.load(tx, product_id, for_update=True)
            return self._apply_delta(
                tx,
                product,
                delta,
                f"Stock of product #{product_id} cannot go below zero "
                f"(have {product.stock}, delta {delta})",
            )

    def delete(self, product_id: int) -> None:
        """Tombstone a product. Its order links are left untouched."""
        with self._store.transaction() as tx:
            product = self.load(tx, product_id, for_update=True)
            product.tombstone()
            tx.put(PRODUCTS, product_id, self.to_record(product))

    # --- Transaction-scoped helpers (used by AssociationManager) --------------

    def load(
        self,
        tx: Transaction,
        product_id: int,
        *,
        for_update: bool = False,
    ) -> Product:
        raw = tx.get(PRODUCTS, product_id, for_update=for_update)
        if raw is None or raw["deleted_at"] is not None:
            raise NotFoundError(f"Product #{product_id} not found")
        return self.from_record(raw)

    def withdraw(self, tx: Transaction, product: Product, quantity: int) -> Product:
        """Conditionally decrement stock inside the caller's transaction."""
        return self._apply_delta(
            tx,
            product,
            -quantity,
            f"Insufficient stock for {product.name} "
            f"(need {quantity}, have {product.stock} available)",
        )

    def _apply_delta(
        self,
        tx: Transaction,
        product: Product,
        delta: int,
        conflict_message: str,
    ) -> Product:
        raw = tx.adjust_counter(PRODUCTS, product.id, "stock", delta, floor=0)
        if raw is None:
            raise ConflictError(conflict_message)
        raw["updated_at"] = datetime.now(timezone.utc).isoformat()
        tx.put(PRODUCTS, product.id, raw)
        return self.from_record(raw)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_record(product: Product) -> Record:
        return {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "price": str(product.price.amount),
            "stock": product.stock,
            "created_at": product.created_at.isoformat(),
            "updated_at": product.updated_at.isoformat(),
            "deleted_at": product.deleted_at.isoformat() if product.deleted_at else None,
        }

    @staticmethod
    def from_record(raw: Record) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            description=raw["description"],
            price=Money(Decimal(raw["price"])),
            stock=raw["stock"],
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
            deleted_at=(
                datetime.fromisoformat(raw["deleted_at"]) if raw["deleted_at"] else None
            ),
        )
