import duckdb
import logging

from .connection import ConnectionHandler
from ..exceptions import SchemaInitializationError

logger = logging.getLogger(__name__)

KV_SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS kv_store (
        key VARCHAR PRIMARY KEY,
        value VARCHAR NOT NULL,
        updated_at TIMESTAMP NOT NULL
    );
"""


class SchemaManager:
    """Manages initialization of the key-value table."""

    def __init__(self, handler: ConnectionHandler):
        self._handler = handler

    def initialize_schema(self) -> None:
        """
        Creates the kv_store table inside a transaction. Skips in read-only mode
        unless the database is in memory.
        """
        if self._handler.read_only and not self._handler.is_memory:
            logger.warning(
                "Attempting to initialize schema in read-only mode. Skipping."
            )
            return

        conn = self._handler.get_connection()
        try:
            with conn.cursor() as cursor:
                cursor.begin()
                cursor.execute(KV_SCHEMA_SQL)
                cursor.commit()
            logger.info(
                f"Schema at {self._handler.db_path_resolved} initialized successfully (or already exists)."
            )
        except duckdb.Error as e:
            logger.error(
                f"Error initializing schema at {self._handler.db_path_resolved}: {e}"
            )
            try:
                conn.rollback()
                logger.info("Transaction rolled back due to schema initialization error.")
            except duckdb.Error as rb_err:
                logger.error(f"Failed to rollback transaction: {rb_err}")
            raise SchemaInitializationError(
                f"Failed to initialize schema: {e}", original_exception=e
            ) from e

