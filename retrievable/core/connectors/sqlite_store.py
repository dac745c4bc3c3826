"""
SQLiteStore - SQLite-based durable store.

Tables:
- entities:  one row per record (namespace, key path) with its payload
             (the record's CustomSerialization bytes, or default JSON)
- sequences: next int id per (namespace, parent path + kind) for incomplete keys

Cancellation: every connection installs a progress handler that interrupts
running statements once the request context is cancelled or expired.
"""

import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Union

from retrievable.common.logging import get_logger
from ..context import RequestContext
from ..errors import NotFound, StoreBackendError
from ..keys import StorageKey
from ..serialization import decode_payload, encode_payload, serializer_of

logger = get_logger(__name__)

# VM instructions between cancellation checks
PROGRESS_STEPS = 1000


class SQLiteStore:
    """
    SQLite-backed StoreBackend.

    Opens a short-lived connection per operation (thread-safe without
    sharing connections).

    Usage:
        store = SQLiteStore("data/entities.db")
        key = store.put(ctx, StorageKey.new(ctx, "User", "alice"), user)
    """

    def __init__(self, db_path: Union[str, Path] = "data/entities.db", timeout: float = 5.0):
        """
        Args:
            db_path: Path to SQLite database (parent directory is created)
            timeout: Seconds to wait for a database lock
        """
        self.db_path = Path(db_path).expanduser()
        self.timeout = timeout
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()
        logger.info("SQLite store initialized", data={"db_path": str(self.db_path)})

    def _init_db(self):
        """Create tables if they don't exist."""
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        try:
            cursor = conn.cursor()
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS entities (
                    namespace TEXT NOT NULL,
                    path TEXT NOT NULL,
                    kind TEXT NOT NULL,
                    payload BLOB NOT NULL,
                    updated_at REAL NOT NULL,
                    PRIMARY KEY (namespace, path)
                )
            ''')
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS sequences (
                    namespace TEXT NOT NULL,
                    scope TEXT NOT NULL,
                    last_id INTEGER NOT NULL,
                    PRIMARY KEY (namespace, scope)
                )
            ''')
            cursor.execute('CREATE INDEX IF NOT EXISTS idx_entities_kind ON entities(namespace, kind)')
            conn.commit()
        except sqlite3.Error as e:
            raise StoreBackendError(
                "Cannot initialize SQLite store",
                data={"db_path": str(self.db_path)},
                cause=e,
            )
        finally:
            conn.close()

    @contextmanager
    def _connect(self, ctx: RequestContext, operation: str) -> Iterator[sqlite3.Connection]:
        """Connection scoped to one operation and bound to ``ctx``."""
        ctx.check(f"store.{operation}")
        timeout = self.timeout
        remaining = ctx.remaining()
        if remaining is not None:
            timeout = min(timeout, remaining)

        try:
            conn = sqlite3.connect(str(self.db_path), timeout=timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreBackendError(
                f"SQLite {operation} error",
                data={"db_path": str(self.db_path), "operation": operation},
                cause=e,
            )
        conn.set_progress_handler(lambda: 1 if ctx.done else 0, PROGRESS_STEPS)
        try:
            yield conn
        except sqlite3.Error as e:
            # Interrupted by the progress handler
            ctx.check(f"store.{operation}")
            raise StoreBackendError(
                f"SQLite {operation} error",
                data={"db_path": str(self.db_path), "operation": operation},
                cause=e,
            )
        finally:
            conn.close()

    @staticmethod
    def _scope(key: StorageKey) -> str:
        parent = key.parent.path_string() if key.parent is not None else ""
        return f"{parent}/{key.kind}"

    def put(self, ctx: RequestContext, key: StorageKey, record: Any) -> StorageKey:
        """Insert or replace ``record``; allocates an id for incomplete keys."""
        payload = encode_payload(record, serializer_of(record))
        with self._connect(ctx, "put") as conn:
            conn.execute('BEGIN IMMEDIATE')
            scope = self._scope(key)
            if key.incomplete:
                row = conn.execute(
                    'SELECT last_id FROM sequences WHERE namespace = ? AND scope = ?',
                    (key.namespace, scope),
                ).fetchone()
                key = key.with_int_id((row[0] if row else 0) + 1)
            if key.int_id:
                conn.execute('''
                    INSERT INTO sequences (namespace, scope, last_id) VALUES (?, ?, ?)
                    ON CONFLICT(namespace, scope) DO UPDATE SET last_id = MAX(last_id, excluded.last_id)
                ''', (key.namespace, scope, key.int_id))
            conn.execute('''
                INSERT OR REPLACE INTO entities (namespace, path, kind, payload, updated_at)
                VALUES (?, ?, ?, ?, ?)
            ''', (key.namespace, key.path_string(), key.kind, payload, time.time()))
            conn.execute('COMMIT')
        return key

    def get(self, ctx: RequestContext, key: StorageKey, record: Any) -> None:
        """Load the row at ``key`` into ``record``."""
        with self._connect(ctx, "get") as conn:
            row = conn.execute(
                'SELECT payload FROM entities WHERE namespace = ? AND path = ?',
                (key.namespace, key.path_string()),
            ).fetchone()
        if row is None:
            raise NotFound("Entity not found", data={"key": str(key)})
        decode_payload(bytes(row[0]), record, serializer_of(record))

    def delete(self, ctx: RequestContext, key: StorageKey) -> None:
        """Delete key; absent keys are ignored."""
        with self._connect(ctx, "delete") as conn:
            conn.execute(
                'DELETE FROM entities WHERE namespace = ? AND path = ?',
                (key.namespace, key.path_string()),
            )

    def count(self, namespace: str = "", kind: str = "") -> int:
        """Number of stored rows, optionally filtered by kind."""
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        try:
            if kind:
                row = conn.execute(
                    'SELECT COUNT(*) FROM entities WHERE namespace = ? AND kind = ?',
                    (namespace, kind),
                ).fetchone()
            else:
                row = conn.execute(
                    'SELECT COUNT(*) FROM entities WHERE namespace = ?', (namespace,)
                ).fetchone()
            return int(row[0])
        finally:
            conn.close()
