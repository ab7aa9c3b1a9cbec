"""
Keyed record store over sqlite3.

The store mirrors a browser object-store API: every collection is a table of
JSON documents with an auto-increment `id`. Records go in and come out as
plain dicts; the `id` lives in the primary key column and is merged back into
the dict on read.

Conventions:
- Every write commits immediately unless it runs inside `transaction()`.
- Any sqlite3.Error is re-raised as PersistenceError (chained).
- Collections are restricted to the names declared in schema.STORES.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Optional

from .errors import PersistenceError
from .schema import STORES, index_expression, key_path_for

_log = logging.getLogger(__name__)


class RecordStore:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        self._tx_depth = 0

    # ---------------------------- TX helper ----------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Group several writes (possibly across collections) into one IMMEDIATE
        transaction: commit on success, rollback on error. Nested calls join
        the outer transaction.
        """
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield
            finally:
                self._tx_depth -= 1
            return

        try:
            if self.conn.in_transaction:
                self.conn.commit()
            self.conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            raise PersistenceError(f"Could not start a transaction: {e}") from e

        self._tx_depth = 1
        try:
            yield
            self.conn.commit()
        except sqlite3.Error as e:
            self.conn.rollback()
            raise PersistenceError(f"Transaction failed: {e}") from e
        except Exception:
            self.conn.rollback()
            raise
        finally:
            self._tx_depth = 0

    def _commit(self) -> None:
        if not self._tx_depth:
            self.conn.commit()

    # ---------------------------- Reads ----------------------------

    def get_all(self, store: str) -> List[Dict[str, Any]]:
        self._check_store(store)
        rows = self._execute(f"SELECT id, data FROM {store} ORDER BY id").fetchall()
        return [self._row_to_record(r) for r in rows]

    def get(self, store: str, key: int) -> Optional[Dict[str, Any]]:
        self._check_store(store)
        row = self._execute(
            f"SELECT id, data FROM {store} WHERE id = ?", (int(key),)
        ).fetchone()
        return self._row_to_record(row) if row else None

    def get_by_index(self, store: str, index_name: str, value: Any) -> List[Dict[str, Any]]:
        """All records whose indexed key equals `value`, in insertion order."""
        self._check_store(store)
        try:
            key_path = key_path_for(store, index_name)
        except KeyError as e:
            raise PersistenceError(str(e)) from e
        rows = self._execute(
            f"SELECT id, data FROM {store} WHERE {index_expression(key_path)} = ? ORDER BY id",
            (value,),
        ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def count(self, store: str) -> int:
        self._check_store(store)
        row = self._execute(f"SELECT COUNT(*) AS n FROM {store}").fetchone()
        return int(row["n"])

    # ---------------------------- Writes ----------------------------

    def add(self, store: str, record: Dict[str, Any]) -> int:
        """Insert a new record and return its key. A preset `id` is honoured."""
        self._check_store(store)
        key = record.get("id")
        data = self._dump(record)
        if key is None:
            cur = self._execute(f"INSERT INTO {store}(data) VALUES (?)", (data,))
        else:
            cur = self._execute(
                f"INSERT INTO {store}(id, data) VALUES (?, ?)", (int(key), data)
            )
        self._commit()
        return int(cur.lastrowid)

    def update(self, store: str, record: Dict[str, Any]) -> int:
        """Upsert by `id`; a record without an id is inserted."""
        self._check_store(store)
        key = record.get("id")
        if key is None:
            return self.add(store, record)
        self._execute(
            f"""
            INSERT INTO {store}(id, data) VALUES (?, ?)
            ON CONFLICT(id) DO UPDATE SET data = excluded.data
            """,
            (int(key), self._dump(record)),
        )
        self._commit()
        return int(key)

    def bulk_add(self, store: str, records: Iterable[Dict[str, Any]]) -> List[int]:
        with self.transaction():
            return [self.add(store, r) for r in records]

    def remove(self, store: str, key: int) -> None:
        self._check_store(store)
        self._execute(f"DELETE FROM {store} WHERE id = ?", (int(key),))
        self._commit()

    def clear(self, store: str) -> None:
        self._check_store(store)
        self._execute(f"DELETE FROM {store}")
        self._commit()

    # ---------------------------- Utilities ----------------------------

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(sql, params)
        except sqlite3.Error as e:
            _log.error("Store operation failed: %s", e)
            if not self._tx_depth and self.conn.in_transaction:
                self.conn.rollback()
            raise PersistenceError(f"Database operation failed: {e}") from e

    @staticmethod
    def _check_store(store: str) -> None:
        if store not in STORES:
            raise PersistenceError(f"Unknown store: {store!r}")

    @staticmethod
    def _dump(record: Dict[str, Any]) -> str:
        payload = {k: v for k, v in record.items() if k != "id"}
        return json.dumps(payload, ensure_ascii=False)

    @staticmethod
    def _row_to_record(r: sqlite3.Row) -> Dict[str, Any]:
        rec = json.loads(r["data"])
        rec["id"] = int(r["id"])
        return rec
