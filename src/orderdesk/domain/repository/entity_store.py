"""Abstract entity store.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete stores (in-memory, JSON file) live in the
infrastructure layer.

Records are plain JSON-compatible dicts grouped by *kind* ("products",
"orders", "order_products"). Keys are ints or tuples of ints for
compound keys.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, Union

from orderdesk.domain.exceptions import InternalError

Key = Union[int, tuple[int, ...]]
Record = dict[str, Any]
Predicate = Callable[[Record], bool]


class StoreError(Exception):
    """Raised by store implementations when persistence itself fails."""


class Transaction(ABC):
    """A unit of work with read-committed visibility.

    Reads see committed records plus this transaction's own writes.
    Writes stay private until ``commit()``, which applies them all or
    none of them.
    """

    @abstractmethod
    def get(self, kind: str, key: Key, *, for_update: bool = False) -> Record | None:
        """Return a copy of the record, or None.

        With ``for_update`` the row is locked until commit/abort, so no
        other transaction can write it in between.
        """

    @abstractmethod
    def put(self, kind: str, key: Key, value: Record) -> None:
        """Insert or replace a record (locks the row)."""

    @abstractmethod
    def delete(self, kind: str, key: Key) -> None:
        """Remove a record (locks the row)."""

    @abstractmethod
    def scan(self, kind: str, predicate: Predicate | None = None) -> list[tuple[Key, Record]]:
        """Return ``(key, record)`` pairs matching *predicate*, ordered by key."""

    @abstractmethod
    def adjust_counter(
        self,
        kind: str,
        key: Key,
        field: str,
        delta: int,
        *,
        floor: int = 0,
    ) -> Record | None:
        """Atomically apply ``record[field] += delta`` under a row lock.

        Returns the updated record, or None without writing anything when
        the result would drop below *floor*. Raises StoreError if the
        record does not exist.
        """

    @abstractmethod
    def next_id(self, kind: str) -> int:
        """Draw the next identifier from the per-kind sequence.

        Sequences are not transactional: an aborted transaction burns
        its identifier.
        """

    @abstractmethod
    def commit(self) -> None:
        """Apply every buffered write and release row locks."""

    @abstractmethod
    def abort(self) -> None:
        """Discard every buffered write and release row locks."""


class EntityStore(ABC):

    @abstractmethod
    def begin(self) -> Transaction:
        """Open a new transaction."""

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Run a block inside a transaction.

        Commits when the block returns, aborts when it raises. Domain
        errors propagate untouched; StoreError is surfaced as
        InternalError with the cause chained.
        """
        try:
            tx = self.begin()
        except StoreError as exc:
            raise InternalError("Could not open a transaction") from exc

        try:
            yield tx
        except StoreError as exc:
            tx.abort()
            raise InternalError("Entity store failure; transaction aborted") from exc
        except BaseException:
            tx.abort()
            raise

        try:
            tx.commit()
        except StoreError as exc:
            tx.abort()
            raise InternalError("Entity store failure; commit aborted") from exc
