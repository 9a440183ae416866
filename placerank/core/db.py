"""Database helpers for the rating store."""

import logging
from contextlib import contextmanager
from typing import Optional

import psycopg2
from psycopg2 import pool

from placerank.core.config import get_settings

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.ThreadedConnectionPool] = None

# Errors that mean "the database is not reachable right now", as opposed to a
# bug in a statement. Callers may retry these.
_UNAVAILABLE_ERRORS = (psycopg2.OperationalError, psycopg2.InterfaceError, pool.PoolError)


class StorageError(RuntimeError):
    """Raised when the rating storage cannot be reached."""


_SCHEMA = """
CREATE TABLE IF NOT EXISTS ratings (
    id SERIAL PRIMARY KEY,
    business_id TEXT NOT NULL UNIQUE,
    business_name TEXT NOT NULL,
    user_rating SMALLINT NOT NULL CHECK (user_rating BETWEEN 1 AND 5),
    user_review TEXT,
    visited_date TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS ratings_visited_date_idx ON ratings (visited_date DESC);
"""


def init_pool() -> pool.ThreadedConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        dsn = settings.require_database_url()
        try:
            _connection_pool = pool.ThreadedConnectionPool(
                settings.db_pool_min,
                settings.db_pool_max,
                dsn=dsn,
                connect_timeout=10,
            )
        except psycopg2.OperationalError as exc:
            raise StorageError("could not connect to the rating database") from exc
        logger.info("Database connection pool initialised")
    return _connection_pool


def close_pool() -> None:
    global _connection_pool
    if _connection_pool is not None:
        _connection_pool.closeall()
        _connection_pool = None


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    try:
        conn = pg_pool.getconn()
    except _UNAVAILABLE_ERRORS as exc:
        logger.warning("Could not borrow a database connection: %s", exc)
        raise StorageError("no database connection available") from exc
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


@contextmanager
def transaction():
    """Yield a pooled connection and commit, or roll back on any failure."""
    with get_connection() as conn:
        try:
            yield conn
            conn.commit()
        except _UNAVAILABLE_ERRORS as exc:
            _rollback_quietly(conn)
            logger.error("Database unavailable: %s", exc)
            raise StorageError("rating storage is unavailable") from exc
        except Exception:
            _rollback_quietly(conn)
            raise


def _rollback_quietly(conn) -> None:
    if conn.closed:
        return
    try:
        conn.rollback()
    except _UNAVAILABLE_ERRORS as exc:
        logger.warning("Rollback failed on a broken connection: %s", exc)


def ensure_schema() -> None:
    """Create the ratings table and its index when they do not exist yet."""
    with transaction() as conn:
        with conn.cursor() as cur:
            cur.execute(_SCHEMA)
    logger.info("Ratings schema is in place")
