"""PostgreSQL storage implementation."""

import logging
import os
import psycopg2
from psycopg2.extras import Json

from core.errors import StorageError
from core.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


class PostgresStorage(KeyValueStore):
    """Key-value storage in a single JSONB table, namespaced per user."""

    def __init__(self, db_url: str = None, user_id: str = "default"):
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/lessico'
        )
        self.user_id = user_id
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(self.db_url)
            except psycopg2.Error as e:
                raise StorageError(f"Cannot connect to database: {e}") from e
            if not self._initialized:
                self._init_db()
                self._initialized = True
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    user_id VARCHAR(255) NOT NULL,
                    key VARCHAR(255) NOT NULL,
                    value JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (user_id, key)
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_kv_store_updated
                ON kv_store(updated_at)
            """)
        self._conn.commit()

    def close(self):
        if self._conn and not self._conn.closed:
            self._conn.close()

    def get(self, key: str):
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    "SELECT value FROM kv_store WHERE user_id = %s AND key = %s",
                    (self.user_id, key)
                )
                row = cur.fetchone()
                return row[0] if row else None
        except psycopg2.Error as e:
            logger.error(f"Error loading '{key}': {e}")
            self.conn.rollback()
            raise StorageError(f"Error loading '{key}': {e}") from e

    def set(self, key: str, value) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO kv_store (user_id, key, value, updated_at)
                    VALUES (%s, %s, %s, CURRENT_TIMESTAMP)
                    ON CONFLICT (user_id, key)
                    DO UPDATE SET value = EXCLUDED.value, updated_at = CURRENT_TIMESTAMP
                """, (self.user_id, key, Json(value)))
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error saving '{key}': {e}")
            self.conn.rollback()
            raise StorageError(f"Error saving '{key}': {e}") from e

    def remove(self, key: str) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM kv_store WHERE user_id = %s AND key = %s",
                    (self.user_id, key)
                )
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error removing '{key}': {e}")
            self.conn.rollback()
            raise StorageError(f"Error removing '{key}': {e}") from e
