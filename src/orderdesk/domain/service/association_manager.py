"""Domain service: Association Manager.

Links products to orders and unlinks them. Linking is the only place where
two aggregates change together (product stock and the association table),
so it runs as one store transaction:

  1. lock the order row and check it exists,
  2. lock the product row and check it exists,
  3. lock the association key and refuse duplicates,
  4. conditionally decrement stock (fails if it would go negative),
  5. insert the association with the product's current price.

Rows are always locked in the order order -> product -> association. Two
callers racing for the same product therefore run one after the other, and
the second one sees the stock the first one left behind.

Unlinking deletes the association only. It does NOT give stock back.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from orderdesk.domain.exceptions import ConflictError, NotFoundError
from orderdesk.domain.model.association import OrderProduct
from orderdesk.domain.model.order import Order
from orderdesk.domain.model.product import Product
from orderdesk.domain.model.value_objects import Money, Quantity
from orderdesk.domain.repository.entity_store import EntityStore, Record
from orderdesk.domain.service.order_ledger import ORDERS, OrderLedger
from orderdesk.domain.service.product_ledger import PRODUCTS, ProductLedger

ORDER_PRODUCTS = "order_products"


class AssociationManager:

    def __init__(
        self,
        store: EntityStore,
        orders: OrderLedger,
        products: ProductLedger,
    ) -> None:
        self._store = store
        self._orders = orders
        self._products = products

    # --- Commands -------------------------------------------------------------

    def add_product_to_order(
        self,
        order_id: int,
        product_id: int,
        quantity: int,
    ) -> OrderProduct:
        """Link *product_id* to *order_id*, taking *quantity* out of stock.

        Raises:
            ValidationError: quantity is not a positive integer.
            NotFoundError: the order or the product does not exist.
            ConflictError: already linked, or not enough stock.
        """
        qty = Quantity(quantity)
        key = (order_id, product_id)

        with self._store.transaction() as tx:
            self._orders.load(tx, order_id, for_update=True)
            product = self._products.load(tx, product_id, for_update=True)

            if tx.get(ORDER_PRODUCTS, key, for_update=True) is not None:
                raise ConflictError(
                    f"Product #{product_id} is already linked to order #{order_id}"
                )

            self._products.withdraw(tx, product, qty.value)

            link = OrderProduct(
                order_id=order_id,
                product_id=product_id,
                quantity=qty,
                price=product.price,  # <-- price snapshot
                sequence=tx.next_id(ORDER_PRODUCTS),
            )
            tx.put(ORDER_PRODUCTS, key, self.to_record(link))

        return link

    def remove_product_from_order(self, order_id: int, product_id: int) -> None:
        """Delete the link. Stock is not restored."""
        key = (order_id, product_id)
        with self._store.transaction() as tx:
            if tx.get(ORDER_PRODUCTS, key, for_update=True) is None:
                raise NotFoundError(
                    f"Product #{product_id} is not linked to order #{order_id}"
                )
            tx.delete(ORDER_PRODUCTS, key)

    # --- Joins ----------------------------------------------------------------

    def products_for_order(self, order_id: int) -> list[Product]:
        """Products linked to an order, by product identifier ascending.

        Tombstoned products stay visible here; the order itself must exist.
        """
        with self._store.transaction() as tx:
            self._orders.load(tx, order_id)
            links = tx.scan(ORDER_PRODUCTS, lambda raw: raw["order_id"] == order_id)
            raws = [tx.get(PRODUCTS, raw["product_id"]) for _, raw in links]
        products = [ProductLedger.from_record(raw) for raw in raws if raw is not None]
        return sorted(products, key=lambda p: p.id)

    def orders_for_product(self, product_id: int) -> list[Order]:
        """Orders a product is linked to, by order identifier ascending."""
        with self._store.transaction() as tx:
            self._products.load(tx, product_id)
            links = tx.scan(ORDER_PRODUCTS, lambda raw: raw["product_id"] == product_id)
            raws = [tx.get(ORDERS, raw["order_id"]) for _, raw in links]
        orders = [OrderLedger.from_record(raw) for raw in raws if raw is not None]
        return sorted(orders, key=lambda o: o.id)

    def lines_for_order(self, order_id: int) -> list[OrderProduct]:
        """The association rows of an order, in link order."""
        with self._store.transaction() as tx:
            self._orders.load(tx, order_id)
            links = tx.scan(ORDER_PRODUCTS, lambda raw: raw["order_id"] == order_id)
        lines = [self.from_record(raw) for _, raw in links]
        return sorted(lines, key=lambda line: line.sequence)

    def order_sheet(self, order_id: int) -> tuple[Order, list[tuple[OrderProduct, Product]]]:
        """An order with each line and its product, read in one transaction.

        Lines follow link order. A line's product may be tombstoned.
        """
        with self._store.transaction() as tx:
            order = self._orders.load(tx, order_id)
            links = tx.scan(ORDER_PRODUCTS, lambda raw: raw["order_id"] == order_id)
            pairs = [(raw, tx.get(PRODUCTS, raw["product_id"])) for _, raw in links]
        sheet = [
            (self.from_record(link), ProductLedger.from_record(product))
            for link, product in pairs
            if product is not None
        ]
        return order, sorted(sheet, key=lambda pair: pair[0].sequence)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def to_record(link: OrderProduct) -> Record:
        return {
            "order_id": link.order_id,
            "product_id": link.product_id,
            "quantity": link.quantity.value,
            "price": str(link.price.amount),
            "sequence": link.sequence,
            "linked_at": link.linked_at.isoformat(),
        }

    @staticmethod
    def from_record(raw: Record) -> OrderProduct:
        return OrderProduct(
            order_id=raw["order_id"],
            product_id=raw["product_id"],
            quantity=Quantity(raw["quantity"]),
            price=Money(Decimal(raw["price"])),
            sequence=raw["sequence"],
            linked_at=datetime.fromisoformat(raw["linked_at"]),
        )
