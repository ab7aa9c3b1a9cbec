"""
Collection definitions for the record store.

Each collection is a table of JSON documents:

    CREATE TABLE <store> (
        id   INTEGER PRIMARY KEY AUTOINCREMENT,
        data TEXT NOT NULL          -- JSON object, without the id
    );

Secondary lookups are expression indexes over json_extract(data, '$.<key>').
`init_schema` is idempotent (CREATE ... IF NOT EXISTS only).
"""
from __future__ import annotations

import sqlite3
from typing import Dict, List

from ..constants import (
    STORE_PRODUCTS,
    STORE_STOCK,
    STORE_HISTORY,
    STORE_STOCK_HISTORY,
    STORE_SYNC_STATUS,
)

STORES: Dict[str, List[dict]] = {
    STORE_PRODUCTS: [
        {"name": "name", "key_path": "name", "unique": True},
    ],
    STORE_HISTORY: [
        {"name": "date", "key_path": "date", "unique": False},
        {"name": "customer_name", "key_path": "customer_name", "unique": False},
    ],
    STORE_STOCK: [
        {"name": "product_id", "key_path": "product_id", "unique": True},
        {"name": "product_name", "key_path": "product_name", "unique": False},
    ],
    STORE_STOCK_HISTORY: [
        {"name": "product_id", "key_path": "product_id", "unique": False},
        {"name": "date", "key_path": "date", "unique": False},
    ],
    STORE_SYNC_STATUS: [
        {"name": "store_name", "key_path": "store_name", "unique": False},
        {"name": "record_id", "key_path": "record_id", "unique": False},
        {"name": "status", "key_path": "status", "unique": False},
    ],
}


def index_expression(key_path: str) -> str:
    return f"json_extract(data, '$.{key_path}')"


def init_schema(conn: sqlite3.Connection) -> None:
    for store, indexes in STORES.items():
        conn.execute(f"""
            CREATE TABLE IF NOT EXISTS {store} (
                id   INTEGER PRIMARY KEY AUTOINCREMENT,
                data TEXT NOT NULL
            );
        """)
        for idx in indexes:
            unique = "UNIQUE " if idx["unique"] else ""
            conn.execute(
                f"CREATE {unique}INDEX IF NOT EXISTS idx_{store}_{idx['name']} "
                f"ON {store}({index_expression(idx['key_path'])});"
            )
    conn.commit()


def key_path_for(store: str, index_name: str) -> str:
    """Resolve an index name to its key path; KeyError for unknown indexes."""
    for idx in STORES[store]:
        if idx["name"] == index_name:
            return idx["key_path"]
    raise KeyError(f"{store} has no index named {index_name!r}")
