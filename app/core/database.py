from app.core.config import settings
from app.core.logging import logger

# Postgres (psycopg2) imports
from typing import Any, Dict, List, Optional
from contextlib import contextmanager
from pathlib import Path
from psycopg2.pool import SimpleConnectionPool

_pg_pool: Optional[SimpleConnectionPool] = None

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


# ==============================
# Psycopg2 connection utilities
# ==============================
def get_pg_pool(minconn: int = settings.db_pool_min, maxconn: int = settings.db_pool_max) -> SimpleConnectionPool:
    """Lazily initialize and return a global psycopg2 connection pool."""
    global _pg_pool
    if _pg_pool is None:
        if not settings.database_url:
            raise ValueError("DATABASE_URL is not set")
        _pg_pool = SimpleConnectionPool(minconn=minconn, maxconn=maxconn, dsn=settings.database_url)
        logger.info("Postgres pool created | min=%s max=%s", minconn, maxconn)
    return _pg_pool


def close_pg_pool() -> None:
    global _pg_pool
    if _pg_pool is not None:
        _pg_pool.closeall()
        _pg_pool = None
        logger.info("Postgres pool closed")


@contextmanager
def pg_connection():
    """Context manager that yields a pooled psycopg2 connection."""
    pool = get_pg_pool()
    conn = pool.getconn()
    try:
        yield conn
    finally:
        pool.putconn(conn)


@contextmanager
def pg_cursor(commit: bool = False):
    """Context manager for a psycopg2 cursor. Optionally commits on exit.

    A failing statement rolls the connection back so it goes back to the
    pool clean.

    Usage:
        with pg_cursor(commit=True) as cur:
            cur.execute("SELECT 1")
    """
    with pg_connection() as conn:
        try:
            with conn.cursor() as cur:
                yield cur
                if commit:
                    conn.commit()
        except Exception:
            conn.rollback()
            raise
        else:
            if not commit:
                conn.rollback()


def rows_to_dicts(cur) -> List[Dict[str, Any]]:
    """Convert psycopg2 cursor results to list of dicts."""
    columns = [desc[0] for desc in cur.description]
    return [dict(zip(columns, row)) for row in cur.fetchall()]


def first_or_none(cur) -> Optional[Dict[str, Any]]:
    rows = rows_to_dicts(cur)
    return rows[0] if rows else None


def init_schema() -> None:
    """Create the tables and indexes if they do not exist yet."""
    sql = SCHEMA_PATH.read_text(encoding="utf-8")
    with pg_cursor(commit=True) as cur:
        cur.execute(sql)
    logger.info("Database schema ensured from %s", SCHEMA_PATH.name)
