"""
Key-value persistence backends for the serialized deck.

Every backend honours the same contract: load() answers None when nothing is
stored or the read fails, and save() answers False when the write fails.
Neither raises.
"""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

import duckdb

from ..exceptions import StorageError, StorageOperationError
from .connection import ConnectionHandler
from .schema_manager import SchemaManager

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Opaque persistence service used by the deck store."""

    def load(self, key: str) -> Optional[str]: ...

    def save(self, key: str, text: str) -> bool: ...


class InMemoryKeyValueStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def load(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def save(self, key: str, text: str) -> bool:
        with self._lock:
            self._data[key] = text
        return True

    def close(self) -> None:
        pass


class DuckDBKeyValueStore:
    """
    Stores values in a single `kv_store` table of a DuckDB database.

    The connection is shared between the caller's thread and the snapshot
    writer thread, so every operation takes the lock and uses its own cursor.
    """

    _UPSERT_SQL = """
        INSERT INTO kv_store (key, value, updated_at)
        VALUES ($1, $2, $3)
        ON CONFLICT (key) DO UPDATE SET
            value = EXCLUDED.value,
            updated_at = EXCLUDED.updated_at;
        """

    def __init__(self, db_path: Union[str, Path], read_only: bool = False):
        self._handler = ConnectionHandler(db_path=db_path, read_only=read_only)
        self._schema_manager = SchemaManager(self._handler)
        self._lock = threading.RLock()
        self._schema_ready = False

    @property
    def db_path_resolved(self) -> Path:
        return self._handler.db_path_resolved

    def _connection(self) -> duckdb.DuckDBPyConnection:
        conn = self._handler.get_connection()
        if not self._schema_ready:
            self._schema_manager.initialize_schema()
            self._schema_ready = True
        return conn

    def get_value(self, key: str) -> Optional[str]:
        """
        Read the value stored under key.

        Raises:
            StorageError: If the database cannot be opened or queried.
        """
        with self._lock:
            conn = self._connection()
            try:
                with conn.cursor() as cursor:
                    row = cursor.execute(
                        "SELECT value FROM kv_store WHERE key = $1", [key]
                    ).fetchone()
            except duckdb.Error as e:
                raise StorageOperationError(
                    f"Failed to read key '{key}': {e}", original_exception=e
                ) from e
        return row[0] if row else None

    def put_value(self, key: str, text: str) -> None:
        """
        Insert or replace the value stored under key in one statement.

        Raises:
            StorageError: If the database cannot be opened or written.
        """
        if self._handler.read_only:
            raise StorageOperationError(
                f"Cannot write key '{key}': store is read-only."
            )
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        with self._lock:
            conn = self._connection()
            try:
                with conn.cursor() as cursor:
                    cursor.execute(self._UPSERT_SQL, [key, text, now])
            except duckdb.Error as e:
                raise StorageOperationError(
                    f"Failed to write key '{key}': {e}", original_exception=e
                ) from e

    def load(self, key: str) -> Optional[str]:
        try:
            return self.get_value(key)
        except StorageError as e:
            logger.error(f"Failed to load '{key}' from {self.db_path_resolved}: {e}")
            return None

    def save(self, key: str, text: str) -> bool:
        try:
            self.put_value(key, text)
        except StorageError as e:
            logger.error(f"Failed to save '{key}' to {self.db_path_resolved}: {e}")
            return False
        logger.debug(f"Saved {len(text)} characters under '{key}'.")
        return True

    def close(self) -> None:
        with self._lock:
            self._handler.close_connection()
            self._schema_ready = False

    def __enter__(self) -> "DuckDBKeyValueStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
