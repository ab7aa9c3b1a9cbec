# mimipro/database/__init__.py
from __future__ import annotations

from pathlib import Path
import logging
import sqlite3

from ..config import DB_PATH
from ..constants import TABLE_SCHEMA_VERSION, SCHEMA_VERSION
from . import schema as schema_module
from .errors import DomainError, ValidationError, NotFoundError, PersistenceError
from .store import RecordStore
from .seeders.default_data import seed as seed_default_data

_log = logging.getLogger(__name__)


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id INTEGER PRIMARY KEY CHECK (id=1),
            version TEXT NOT NULL
        );
    """)
    row = conn.execute(
        f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;"
    ).fetchone()
    if row is None:
        conn.execute(
            f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?);",
            (SCHEMA_VERSION,),
        )
    elif row["version"] != SCHEMA_VERSION:
        _log.info("Schema version %s -> %s", row["version"], SCHEMA_VERSION)
        conn.execute(
            f"UPDATE {TABLE_SCHEMA_VERSION} SET version=? WHERE id=1;",
            (SCHEMA_VERSION,),
        )


def get_connection(db_path: Path | str | None = None, *, seed: bool = True) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures the collections exist and, unless `seed=False`, applies the
    sample data seed (idempotent: only fills an empty products store).
    """
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")

    # Always apply the schema (idempotent: CREATE ... IF NOT EXISTS)
    schema_module.init_schema(conn)
    _ensure_version_table(conn)
    conn.commit()

    if seed:
        seed_default_data(RecordStore(conn))

    return conn


__all__ = [
    "get_connection",
    "RecordStore",
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
]
