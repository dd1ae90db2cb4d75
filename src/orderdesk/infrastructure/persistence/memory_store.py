"""In-memory implementation of EntityStore.

Committed records live in plain dicts. Transactions buffer their writes
and apply them in one step under the store mutex, so other threads see
either none or all of a transaction's writes. Writers serialize on
per-row locks held until commit/abort; readers never wait for them.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable
from operator import itemgetter

import structlog

from orderdesk.domain.repository.entity_store import (
    EntityStore,
    Key,
    Predicate,
    Record,
    StoreError,
    Transaction,
)

logger = structlog.get_logger(__name__)

Row = tuple[str, Key]


class InMemoryEntityStore(EntityStore):

    def __init__(self) -> None:
        self._tables: dict[str, dict[Key, Record]] = {}
        self._sequences: dict[str, int] = {}
        self._mutex = threading.Lock()
        self._row_released = threading.Condition(self._mutex)
        self._row_owners: dict[Row, _MemoryTransaction] = {}

    # --- EntityStore interface ------------------------------------------------

    def begin(self) -> Transaction:
        return _MemoryTransaction(self)

    # --- Committed state ------------------------------------------------------

    def _read(self, kind: str, key: Key) -> Record | None:
        with self._mutex:
            record = self._tables.get(kind, {}).get(key)
            return copy.deepcopy(record) if record is not None else None

    def _read_all(self, kind: str) -> dict[Key, Record]:
        with self._mutex:
            return copy.deepcopy(self._tables.get(kind, {}))

    def _draw_id(self, kind: str) -> int:
        with self._mutex:
            value = self._sequences.get(kind, 0) + 1
            self._sequences[kind] = value
            return value

    def _apply(self, writes: dict[Row, Record | None]) -> None:
        with self._mutex:
            staged = {kind: dict(self._tables.get(kind, {})) for kind, _ in writes}
            for (kind, key), value in writes.items():
                if value is None:
                    staged[kind].pop(key, None)
                else:
                    staged[kind][key] = value
            # Persist first: a failed flush must leave memory untouched.
            self._flush({**self._tables, **staged}, dict(self._sequences))
            self._tables.update(staged)
        logger.debug("transaction_committed", writes=len(writes))

    def _flush(self, tables: dict[str, dict[Key, Record]], sequences: dict[str, int]) -> None:
        """Hook for durable subclasses; called under the mutex before publishing."""

    # --- Row locks ------------------------------------------------------------

    def _acquire_row(self, tx: _MemoryTransaction, row: Row) -> None:
        with self._row_released:
            while True:
                owner = self._row_owners.get(row)
                if owner is None or owner is tx:
                    break
                self._row_released.wait()
            self._row_owners[row] = tx

    def _release_rows(self, tx: _MemoryTransaction, rows: set[Row]) -> None:
        with self._row_released:
            for row in rows:
                if self._row_owners.get(row) is tx:
                    del self._row_owners[row]
            self._row_released.notify_all()


class _MemoryTransaction(Transaction):

    def __init__(
        self,
        store: InMemoryEntityStore,
        on_finish: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._writes: dict[Row, Record | None] = {}
        self._locked: set[Row] = set()
        self._active = True
        self._on_finish = on_finish

    # --- Transaction interface ------------------------------------------------

    def get(self, kind: str, key: Key, *, for_update: bool = False) -> Record | None:
        self._ensure_active()
        row = (kind, key)
        if for_update:
            self._lock(row)
        if row in self._writes:
            pending = self._writes[row]
            return copy.deepcopy(pending) if pending is not None else None
        return self._store._read(kind, key)

    def put(self, kind: str, key: Key, value: Record) -> None:
        self._ensure_active()
        row = (kind, key)
        self._lock(row)
        self._writes[row] = copy.deepcopy(value)

    def delete(self, kind: str, key: Key) -> None:
        self._ensure_active()
        row = (kind, key)
        self._lock(row)
        self._writes[row] = None

    def scan(self, kind: str, predicate: Predicate | None = None) -> list[tuple[Key, Record]]:
        self._ensure_active()
        visible = self._store._read_all(kind)
        for (pending_kind, key), value in self._writes.items():
            if pending_kind != kind:
                continue
            if value is None:
                visible.pop(key, None)
            else:
                visible[key] = copy.deepcopy(value)
        rows = sorted(visible.items(), key=itemgetter(0))
        return [(key, record) for key, record in rows if predicate is None or predicate(record)]

    def adjust_counter(
        self,
        kind: str,
        key: Key,
        field: str,
        delta: int,
        *,
        floor: int = 0,
    ) -> Record | None:
        record = self.get(kind, key, for_update=True)
        if record is None:
            raise StoreError(f"No {kind} record with key {key!r}")
        result = record[field] + delta
        if result < floor:
            return None
        record[field] = result
        self.put(kind, key, record)
        return record

    def next_id(self, kind: str) -> int:
        self._ensure_active()
        return self._store._draw_id(kind)

    def commit(self) -> None:
        self._ensure_active()
        try:
            if self._writes:
                self._store._apply(self._writes)
        finally:
            self._finish()

    def abort(self) -> None:
        if self._active:
            self._finish()

    # --- Internal helpers -----------------------------------------------------

    def _lock(self, row: Row) -> None:
        if row not in self._locked:
            self._store._acquire_row(self, row)
            self._locked.add(row)

    def _finish(self) -> None:
        self._active = False
        self._writes = {}
        self._store._release_rows(self, self._locked)
        self._locked = set()
        if self._on_finish is not None:
            on_finish, self._on_finish = self._on_finish, None
            on_finish()

    def _ensure_active(self) -> None:
        if not self._active:
            raise StoreError("Transaction is no longer active")
