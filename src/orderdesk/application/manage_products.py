"""Application services: product use cases (create, show, list, update,
adjust stock, delete)."""

from __future__ import annotations

from decimal import Decimal

import structlog

from orderdesk.application.dto import ProductDTO, product_to_dto
from orderdesk.domain.model.filters import ProductFilter
from orderdesk.domain.service.filter_engine import FilterEngine
from orderdesk.domain.service.product_ledger import ProductLedger

logger = structlog.get_logger(__name__)


class CreateProductHandler:

    def __init__(self, products: ProductLedger) -> None:
        self._products = products

    def handle(
        self,
        name: str,
        description: str,
        price: str | float | int | Decimal,
        stock: int,
    ) -> ProductDTO:
        product = self._products.create(name, description, price, stock)
        logger.info("product_created", product_id=product.id, stock=product.stock)
        return product_to_dto(product)


class ShowProductHandler:

    def __init__(self, products: ProductLedger) -> None:
        self._products = products

    def handle(self, product_id: int) -> ProductDTO:
        return product_to_dto(self._products.get(product_id))


class ListProductsHandler:

    def __init__(self, engine: FilterEngine) -> None:
        self._engine = engine

    def handle(self, criteria: ProductFilter | None = None) -> list[ProductDTO]:
        return [
            product_to_dto(listing.product, listing.orders)
            for listing in self._engine.list_products(criteria)
        ]


class UpdateProductHandler:

    def __init__(self, products: ProductLedger) -> None:
        self._products = products

    def handle(
        self,
        product_id: int,
        name: str,
        description: str,
        price: str | float | int | Decimal,
        stock: int,
    ) -> ProductDTO:
        """Replace a product's fields.

        Existing order links keep the price they captured at link time.
        """
        product = self._products.update(product_id, name, description, price, stock)
        logger.info("product_updated", product_id=product_id)
        return product_to_dto(product)


class AdjustStockHandler:

    def __init__(self, products: ProductLedger) -> None:
        self._products = products

    def handle(self, product_id: int, delta: int) -> ProductDTO:
        product = self._products.adjust_stock(product_id, delta)
        logger.info("stock_adjusted", product_id=product_id, delta=delta, stock=product.stock)
        return product_to_dto(product)


class DeleteProductHandler:

    def __init__(self, products: ProductLedger) -> None:
        self._products = products

    def handle(self, product_id: int) -> None:
        self._products.delete(product_id)
        logger.info("product_deleted", product_id=product_id)
