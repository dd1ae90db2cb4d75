"""JSON-file-backed implementation of EntityStore.

Keeps the whole store in memory (see InMemoryEntityStore) and rewrites a
single JSON snapshot on every commit that writes something. The snapshot
is written to a temporary file and moved into place, so a crash never
leaves a half-written file behind.

Every CLI invocation is its own process, so thread locks alone cannot
serialize writers. Each transaction therefore holds an exclusive
``fcntl`` lock on a sidecar ``<name>.lock`` file from ``begin()`` until
commit/abort, and reloads the snapshot under that lock before it reads
anything.
"""

from __future__ import annotations

import fcntl
import json
import os
from pathlib import Path
from typing import IO

import structlog

from orderdesk.domain.repository.entity_store import Key, Record, StoreError, Transaction
from orderdesk.infrastructure.persistence.memory_store import (
    InMemoryEntityStore,
    _MemoryTransaction,
)

logger = structlog.get_logger(__name__)


class JsonFileEntityStore(InMemoryEntityStore):

    def __init__(self, file_path: Path) -> None:
        super().__init__()
        self._file_path = file_path
        self._lock_path = file_path.with_name(file_path.name + ".lock")

        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot create data directory for {self._file_path}") from exc

        handle = self._lock()
        try:
            self._ensure_file()
            self._load()
        finally:
            _unlock(handle)

    # --- EntityStore interface ------------------------------------------------

    def begin(self) -> Transaction:
        handle = self._lock()
        try:
            self._load()
        except StoreError:
            _unlock(handle)
            raise
        return _MemoryTransaction(self, on_finish=lambda: _unlock(handle))

    # --- Durability hook ------------------------------------------------------

    def _flush(self, tables: dict[str, dict[Key, Record]], sequences: dict[str, int]) -> None:
        payload = {
            "sequences": sequences,
            "tables": {
                kind: [
                    {"key": _encode_key(key), "value": value}
                    for key, value in sorted(rows.items())
                ]
                for kind, rows in tables.items()
            },
        }
        self._write(payload)

    # --- Serialization --------------------------------------------------------

    def _load(self) -> None:
        """Replace the in-memory state with the snapshot on disk."""
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Cannot read store file {self._file_path}") from exc

        sequences = {kind: int(n) for kind, n in raw.get("sequences", {}).items()}
        tables = {
            kind: {_decode_key(row["key"]): row["value"] for row in rows}
            for kind, rows in raw.get("tables", {}).items()
        }
        with self._mutex:
            self._sequences = sequences
            self._tables = tables
        logger.debug(
            "store_loaded",
            path=str(self._file_path),
            kinds={kind: len(rows) for kind, rows in tables.items()},
        )

    # --- File helpers ---------------------------------------------------------

    def _write(self, payload: dict) -> None:
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
            os.replace(tmp_path, self._file_path)
        except OSError as exc:
            raise StoreError(f"Cannot write store file {self._file_path}") from exc

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._write({"sequences": {}, "tables": {}})

    def _lock(self) -> IO[str]:
        """Block until this process holds the store's exclusive file lock."""
        try:
            handle = open(self._lock_path, "a", encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot open lock file {self._lock_path}") from exc
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        except OSError as exc:
            handle.close()
            raise StoreError(f"Cannot lock {self._lock_path}") from exc
        return handle


def _unlock(handle: IO[str]) -> None:
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    finally:
        handle.close()


def _encode_key(key: Key) -> int | list[int]:
    return list(key) if isinstance(key, tuple) else key


def _decode_key(raw: int | list[int]) -> Key:
    return tuple(raw) if isinstance(raw, list) else raw
