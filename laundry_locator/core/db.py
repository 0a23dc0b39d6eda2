"""Database helpers for per-session location persistence."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psycopg2
from psycopg2 import extras, pool

from laundry_locator.core.config import get_settings

logger = logging.getLogger(__name__)

_connection_pool: Optional[pool.SimpleConnectionPool] = None


def init_pool(minconn: int = 1, maxconn: int = 5) -> pool.SimpleConnectionPool:
    """Initialise and return the shared connection pool."""
    global _connection_pool
    if _connection_pool is None:
        settings = get_settings()
        if not settings.database_url:
            raise RuntimeError("DATABASE_URL is required for database connections")
        _connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            dsn=settings.database_url,
            connect_timeout=10,
        )
        logger.info("Database connection pool initialised")
    return _connection_pool


@contextmanager
def get_connection():
    """Context manager yielding a pooled connection."""
    pg_pool = init_pool()
    conn = pg_pool.getconn()
    try:
        yield conn
    finally:
        pg_pool.putconn(conn)


_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS client_locations (
    session_id TEXT PRIMARY KEY,
    display TEXT NOT NULL,
    lat DOUBLE PRECISION,
    lng DOUBLE PRECISION,
    state_code TEXT,
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_SELECT_LOCATION = """
SELECT display, lat, lng, state_code
FROM client_locations
WHERE session_id = %(session_id)s;
"""

_UPSERT_LOCATION = """
INSERT INTO client_locations (
    session_id,
    display,
    lat,
    lng,
    state_code,
    updated_at
) VALUES (
    %(session_id)s,
    %(display)s,
    %(lat)s,
    %(lng)s,
    %(state_code)s,
    NOW()
)
ON CONFLICT (session_id) DO UPDATE SET
    display = EXCLUDED.display,
    lat = EXCLUDED.lat,
    lng = EXCLUDED.lng,
    state_code = EXCLUDED.state_code,
    updated_at = NOW();
"""


def ensure_schema() -> None:
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute(_CREATE_TABLE)
        conn.commit()
    logger.info("client_locations table ready")


def fetch_location(session_id: str) -> Optional[Dict[str, Any]]:
    """Return the last saved location row for a session, or None."""
    if not session_id:
        raise ValueError("session_id is required")

    with get_connection() as conn:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            cur.execute(_SELECT_LOCATION, {"session_id": session_id})
            row = cur.fetchone()
    return dict(row) if row else None


def upsert_location(session_id: str, record: Dict[str, Any]) -> None:
    """Persist the resolved location for a session, performing an idempotent upsert."""
    if not session_id:
        raise ValueError("session_id is required")
    if not record.get("display"):
        raise ValueError("display is required for upsert")

    params = {
        "session_id": session_id,
        "display": record.get("display"),
        "lat": record.get("lat"),
        "lng": record.get("lng"),
        "state_code": record.get("state_code"),
    }
    try:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(_UPSERT_LOCATION, params)
            conn.commit()
    except psycopg2.Error as exc:
        logger.error("Failed to save location for session %s: %s", session_id, exc)
        raise
    logger.debug("Saved location %s for session %s", params["display"], session_id)
