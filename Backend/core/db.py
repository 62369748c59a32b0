"""
Database readiness checks used at startup, by the API middleware and /health.
"""
from __future__ import annotations

import logging
import time

from django.db import DatabaseError, connections

logger = logging.getLogger(__name__)


def ping(alias: str = "default") -> None:
    """Run a trivial query; raises DatabaseError if the database is unreachable."""
    with connections[alias].cursor() as cursor:
        cursor.execute("SELECT 1")


def database_ready(alias: str = "default") -> bool:
    try:
        connections[alias].ensure_connection()
    except DatabaseError as e:
        logger.warning(f"Database not ready: {e}")
        return False
    return True


def wait_for_database(timeout: float = 10.0, interval: float = 1.0, alias: str = "default") -> bool:
    """
    Try to reach the database for at most ``timeout`` seconds.

    Returns False instead of raising so the process can boot in degraded mode;
    API requests answer 503 until a later attempt succeeds.
    """
    deadline = time.monotonic() + timeout
    while True:
        try:
            ping(alias)
            logger.info("Database connected successfully")
            return True
        except DatabaseError as e:
            if time.monotonic() + interval > deadline:
                logger.warning(
                    f"Database connection failed or timed out: {e}. "
                    "Serving in degraded mode; data routes return 503 until it is reachable."
                )
                return False
            time.sleep(interval)
