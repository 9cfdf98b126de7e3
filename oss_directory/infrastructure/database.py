"""Database connection and catalog storage implementation."""

import logging
import threading
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from oss_directory.domain.catalog_entry import CatalogEntry
from oss_directory.domain.errors import MalformedRow, StoreUnavailable
from oss_directory.domain.query import CatalogQuery
from oss_directory.infrastructure.config import DatabaseConfig
from oss_directory.infrastructure.sql import build_entry_query

logger = logging.getLogger(__name__)


def _text(row: Mapping[str, Any], column: str) -> str:
    value = row[column]
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRow(f"Column {column!r} is not text: {value!r}")
    return value


def _timestamp(row: Mapping[str, Any], column: str) -> str:
    """Render a timestamp column as an ISO-8601 string ("" when NULL)."""
    value = row[column]
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, str):
        return value
    raise MalformedRow(f"Column {column!r} is not a timestamp: {value!r}")


def decode_entry_row(row: Mapping[str, Any]) -> CatalogEntry:
    """
    Decode one result row into a CatalogEntry.

    Args:
        row: Mapping of column name to value, as produced by RealDictCursor

    Returns:
        The decoded entry

    Raises:
        MalformedRow: If a column is missing or holds a value of the wrong shape
    """
    try:
        entry_id = row["id"]
        if entry_id is None or entry_id == "":
            raise MalformedRow("Row has no id")

        name = _text(row, "name")
        if not name:
            raise MalformedRow(f"Entry {entry_id} has no name")

        stars = row["stars"]
        if stars is None:
            stars = 0
        if isinstance(stars, bool) or not isinstance(stars, int) or stars < 0:
            raise MalformedRow(f"Entry {entry_id} has invalid star count: {stars!r}")

        tags = row["tags"] or []
        if not isinstance(tags, (list, tuple)) or not all(isinstance(tag, str) for tag in tags):
            raise MalformedRow(f"Entry {entry_id} has invalid tags: {tags!r}")

        return CatalogEntry(
            id=str(entry_id),
            name=name,
            description=_text(row, "description"),
            source_url=_text(row, "source_url"),
            license=_text(row, "license"),
            language=_text(row, "language"),
            stars=stars,
            created_at=_timestamp(row, "created_at"),
            first_commit=_timestamp(row, "first_commit"),
            last_commit=_timestamp(row, "last_commit"),
            tags=tuple(sorted(set(tags))),
            maintainer=_text(row, "maintainer"),
            country=_text(row, "country"),
        )
    except KeyError as e:
        raise MalformedRow(f"Row is missing column {e}") from e


class CatalogDatabase:
    """Read-only access to catalog entries stored in PostgreSQL."""

    def __init__(self, config: DatabaseConfig):
        """
        Initialize catalog database access.

        The pool is created on first use if ``connect`` was not called.
        Callers beyond ``max_connections`` wait up to ``pool_timeout``
        seconds for a free connection.

        Args:
            config: PostgreSQL connection and pool settings
        """
        self.config = config
        self.pool: Optional[ThreadedConnectionPool] = None
        self._lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(config.max_connections)
        # id(connection) -> pool it was taken from
        self._owners: Dict[int, ThreadedConnectionPool] = {}

    def _ensure_pool(self) -> ThreadedConnectionPool:
        """Return the connection pool, creating it once under the lock."""
        with self._lock:
            if self.pool is None:
                try:
                    self.pool = ThreadedConnectionPool(
                        self.config.min_connections,
                        self.config.max_connections,
                        self.config.connection_string,
                    )
                except psycopg2.Error as e:
                    logger.error(f"Error creating connection pool: {e}")
                    raise StoreUnavailable(f"Cannot connect to database: {e}") from e
                logger.info(
                    f"Database connection pool created for {self.config.host}:{self.config.port}/"
                    f"{self.config.dbname}"
                )
            return self.pool

    def connect(self):
        """Initialize connection pool."""
        self._ensure_pool()

    def close(self):
        """Close connection pool."""
        with self._lock:
            pool, self.pool = self.pool, None
        if pool:
            pool.closeall()
            logger.info("Database connection pool closed")

    def _get_connection(self):
        """Get a connection from the pool, waiting for a free one if all are in use."""
        if not self._slots.acquire(timeout=self.config.pool_timeout):
            logger.error(f"No database connection freed up within {self.config.pool_timeout}s")
            raise StoreUnavailable("Timed out waiting for a database connection")
        try:
            pool = self._ensure_pool()
            conn = pool.getconn()
        except psycopg2.Error as e:
            self._slots.release()
            logger.error(f"Error acquiring database connection: {e}")
            raise StoreUnavailable(f"No database connection available: {e}") from e
        except BaseException:
            self._slots.release()
            raise

        with self._lock:
            self._owners[id(conn)] = pool
        return conn

    def _return_connection(self, conn):
        """Return a connection to the pool it came from."""
        with self._lock:
            pool = self._owners.pop(id(conn), None)
        try:
            # A closed pool has already closed its connections
            if pool is not None and not pool.closed:
                pool.putconn(conn)
        finally:
            self._slots.release()

    def initialize_schema(self):
        """Create catalog tables if they don't exist."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE EXTENSION IF NOT EXISTS "uuid-ossp";

                    CREATE TABLE IF NOT EXISTS apps (
                        id UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
                        name VARCHAR(255) NOT NULL,
                        description TEXT,
                        source_url VARCHAR(255) NOT NULL,
                        license VARCHAR(100),
                        language VARCHAR(50),
                        first_commit TIMESTAMP,
                        last_commit TIMESTAMP,
                        created_at TIMESTAMP DEFAULT now(),
                        homepage VARCHAR(255),
                        maintainer VARCHAR(255),
                        country VARCHAR(100),
                        status VARCHAR(50),
                        stars INT NOT NULL DEFAULT 0 CHECK (stars >= 0),
                        forks INT,
                        issues_open INT,
                        docker_image VARCHAR(255),
                        demo_url VARCHAR(255)
                    );

                    CREATE TABLE IF NOT EXISTS app_tags (
                        app_id UUID REFERENCES apps(id) ON DELETE CASCADE,
                        tag VARCHAR(50),
                        PRIMARY KEY (app_id, tag)
                    );

                    CREATE INDEX IF NOT EXISTS idx_app_tags_tag ON app_tags(tag);
                """)
                conn.commit()
                logger.info("Database schema initialized")
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Error initializing schema: {e}")
            raise StoreUnavailable(f"Schema initialization failed: {e}") from e
        finally:
            self._return_connection(conn)

    def fetch_entries(self, query: CatalogQuery) -> List[CatalogEntry]:
        """
        Select entries matching the query's keyword and tag filters.

        One statement fetches the entries together with their aggregated tags.
        The result comes back in name order; ranking is the caller's concern.

        Args:
            query: Normalized filter parameters

        Returns:
            Matching entries, each with its full tag set

        Raises:
            StoreUnavailable: If the database cannot be reached or the statement fails
            MalformedRow: If a returned row cannot be decoded
        """
        sql, params = build_entry_query(query)
        conn = self._get_connection()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(sql, params)
                rows = cur.fetchall()
        except (psycopg2.Error, ValueError) as e:
            # ValueError: psycopg2 refused to adapt a parameter (e.g. NUL bytes)
            logger.error(f"Error fetching catalog entries: {e}")
            raise StoreUnavailable(f"Catalog query failed: {e}") from e
        finally:
            self._return_connection(conn)

        return [decode_entry_row(row) for row in rows]

    def get_entry_count(self) -> int:
        """Get the total number of entries in the catalog."""
        conn = self._get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM apps")
                count = cur.fetchone()[0]
                return count
        except psycopg2.Error as e:
            logger.error(f"Error getting entry count: {e}")
            raise StoreUnavailable(f"Count query failed: {e}") from e
        finally:
            self._return_connection(conn)
