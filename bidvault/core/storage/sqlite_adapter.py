import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from bidvault.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter:
    """
    SQLite backend for persistent contract storage.

    Provides a bucketed key-value store:
    - point get/put
    - (key, value) enumeration in ascending key order within a bucket
    - transaction() scopes whose writes commit or roll back together
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._conn_local = threading.local()

        if not self.db_path.parent.exists():
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            # Autocommit mode; transaction() issues BEGIN/COMMIT itself
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False,
                isolation_level=None,
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
            self._conn_local.depth = 0
        return self._conn_local.conn

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                bucket TEXT NOT NULL,
                key TEXT NOT NULL,
                value BLOB NOT NULL,
                PRIMARY KEY (bucket, key)
            )
        """)

    # =========================================================================
    # Transactions
    # =========================================================================

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Run a block of reads and writes atomically.

        Nested scopes join the outermost one.
        """
        conn = self._get_conn()
        if self._conn_local.depth:
            self._conn_local.depth += 1
            try:
                yield
            finally:
                self._conn_local.depth -= 1
            return

        conn.execute("BEGIN IMMEDIATE")
        self._conn_local.depth = 1
        try:
            yield
        except BaseException:
            conn.execute("ROLLBACK")
            logger.debug("Rolled back transaction")
            raise
        else:
            conn.execute("COMMIT")
        finally:
            self._conn_local.depth = 0

    # =========================================================================
    # Key-Value Operations
    # =========================================================================

    def put(self, key: str, value: bytes, bucket: str = "default"):
        """Save a key-value pair."""
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO kv_store (bucket, key, value) VALUES (?, ?, ?)",
            (bucket, key, value)
        )

    def get(self, key: str, bucket: str = "default") -> Optional[bytes]:
        """Get value by key, None if absent."""
        conn = self._get_conn()
        cursor = conn.execute(
            "SELECT value FROM kv_store WHERE bucket = ? AND key = ?", (bucket, key)
        )
        row = cursor.fetchone()
        return bytes(row["value"]) if row else None

    def items(self, bucket: str = "default") -> List[Tuple[str, bytes]]:
        """All (key, value) pairs of a bucket, ascending by key."""
        conn = self._get_conn()
        cursor = conn.execute(
            "SELECT key, value FROM kv_store WHERE bucket = ? ORDER BY key ASC", (bucket,)
        )
        return [(row["key"], bytes(row["value"])) for row in cursor]

    def count(self, bucket: str = "default") -> int:
        conn = self._get_conn()
        cursor = conn.execute("SELECT COUNT(*) AS cnt FROM kv_store WHERE bucket = ?", (bucket,))
        return cursor.fetchone()["cnt"]

    def close(self) -> None:
        """Close the current thread's connection."""
        if hasattr(self._conn_local, "conn"):
            self._conn_local.conn.close()
            del self._conn_local.conn
