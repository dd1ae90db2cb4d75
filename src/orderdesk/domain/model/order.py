"""Order aggregate.

An order is only a described container. Its products are not stored on
the order itself: they are derived from the association table owned by
the AssociationManager.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from orderdesk.domain.exceptions import ValidationError

# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
MIN_DESCRIPTION_LENGTH = 3
MAX_DESCRIPTION_LENGTH = 255


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """Aggregate root for orders.

    Use the ``Order.create()`` factory for new orders; the ``__init__`` is
    intentionally simple so the ledger can reconstitute stored orders
    without re-validating.
    """

    id: int | None
    description: str
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    deleted_at: datetime | None = None

    @staticmethod
    def create(description: str) -> Order:
        return Order(id=None, description=_validated_description(description))

    def describe(self, description: str) -> None:
        self.description = _validated_description(description)
        self.updated_at = _utcnow()

    def tombstone(self) -> None:
        self.deleted_at = _utcnow()
        self.updated_at = self.deleted_at

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


def _validated_description(description: str) -> str:
    if not isinstance(description, str):
        raise ValidationError(
            f"Order description must be text, got {type(description).__name__}"
        )
    if not description.strip():
        raise ValidationError("Order description is required")
    description = description.strip()
    if not MIN_DESCRIPTION_LENGTH <= len(description) <= MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Order description must be {MIN_DESCRIPTION_LENGTH}-"
            f"{MAX_DESCRIPTION_LENGTH} characters, got {len(description)}"
        )
    return description
