"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, stock is counted down as products are linked to orders,
and products are tombstoned rather than removed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.value_objects import Money

MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Product:
    """A product in the catalog.

    Use ``Product.create()`` for new products; ``__init__`` stays simple
    so the ledger can reconstitute stored records without re-validating.
    """

    id: int | None
    name: str
    description: str
    price: Money
    stock: int
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    deleted_at: datetime | None = None

    # --- Factory (used for NEW products only) ---------------------------------

    @staticmethod
    def create(
        name: str,
        description: str,
        price: str | float | int | Money,
        stock: int,
    ) -> Product:
        name, description, money, stock = _validated(name, description, price, stock)
        return Product(
            id=None,
            name=name,
            description=description,
            price=money,
            stock=stock,
        )

    # --- Mutations ------------------------------------------------------------

    def revise(
        self,
        name: str,
        description: str,
        price: str | float | int | Money,
        stock: int,
    ) -> None:
        """Replace every mutable field at once (same rules as ``create``)."""
        self.name, self.description, self.price, self.stock = _validated(
            name, description, price, stock
        )
        self.updated_at = _utcnow()

    def tombstone(self) -> None:
        self.deleted_at = _utcnow()
        self.updated_at = self.deleted_at

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


def _validated(
    name: str,
    description: str,
    price: str | float | int | Money,
    stock: int,
) -> tuple[str, str, Money, int]:
    if not isinstance(name, str):
        raise ValidationError(f"Product name must be text, got {type(name).__name__}")
    if not name.strip():
        raise ValidationError("Product name is required")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Product name must be at most {MAX_NAME_LENGTH} characters"
        )

    description = "" if description is None else description
    if not isinstance(description, str):
        raise ValidationError(
            f"Product description must be text, got {type(description).__name__}"
        )
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Product description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )

    money = price if isinstance(price, Money) else Money.of(price)

    if isinstance(stock, bool) or not isinstance(stock, int):
        raise ValidationError(
            f"Product stock must be an integer, got {type(stock).__name__}"
        )
    if stock < 0:
        raise ValidationError(f"Product stock cannot be negative, got {stock}")

    return name, description, money, stock
