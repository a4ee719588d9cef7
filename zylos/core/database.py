"""
PostgreSQL (Supabase) database access

Two ways in:
- psycopg2 direct (RealDictCursor) for every repository query
- Supabase client for the tenants table

Author: TM3
Updated: 2025-10-17
"""
import logging
import time
from typing import Optional

import psycopg2
from psycopg2.extras import RealDictCursor
from supabase import create_client, Client

from .config import settings

logger = logging.getLogger(__name__)


# ============================================================================
# psycopg2 Direct Connections
# ============================================================================

def _database_url() -> str:
    # Use settings.DATABASE_URL which loads from .env file
    database_url = settings.DATABASE_URL
    if not database_url:
        raise RuntimeError("DATABASE_URL not configured")
    return database_url


def get_db_connection_with_retry(max_retries=3, retry_delay=1.0, cursor_factory=None):
    """
    Get a psycopg2 connection with automatic retry on SSL/connection failures

    Handles intermittent Supabase connection issues by:
    - Retrying failed connections up to max_retries times
    - Adding exponential backoff between retries

    Args:
        max_retries: Maximum number of connection attempts (default: 3)
        retry_delay: Initial delay between retries in seconds (default: 1.0)
        cursor_factory: psycopg2 cursor factory (e.g. RealDictCursor)

    Returns:
        psycopg2 connection object

    Raises:
        psycopg2.OperationalError: If all retry attempts fail
    """
    database_url = _database_url()
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(database_url, cursor_factory=cursor_factory)

            # Test connection with a simple query
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.close()

            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            error_msg = str(e)

            if "SSL connection has been closed unexpectedly" in error_msg:
                logger.warning(f"SSL connection error on attempt {attempt}/{max_retries}: {error_msg}")
            else:
                logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {error_msg}")

            # Don't retry on last attempt
            if attempt < max_retries:
                # Exponential backoff
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")
                raise

    raise last_error


def get_db_connection_dict():
    """
    Get a database connection with RealDictCursor (returns dictionaries)

    Every repository uses this one; rows come back as dicts ready to map
    onto domain models.

    Example:
        conn = get_db_connection_dict()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM suppliers WHERE tenant_id = %s", (tenant_id,))
        results = cursor.fetchall()  # Returns list of dicts
        cursor.close()
        conn.close()
    """
    return get_db_connection_with_retry(cursor_factory=RealDictCursor)


# ============================================================================
# Supabase Client
# ============================================================================

_supabase: Optional[Client] = None


def get_supabase() -> Client:
    """
    Supabase client, created on first use

    Usage:
        @app.get("/data")
        def get_data(sb: Client = Depends(get_supabase)):
            ...
    """
    global _supabase
    if _supabase is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise RuntimeError("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured")
        _supabase = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _supabase
