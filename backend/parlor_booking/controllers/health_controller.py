"""
Health controller - health check endpoints for monitoring.
"""

import logging
import re
from typing import Dict, Union

from flask import Blueprint, jsonify
from sqlalchemy import text

from ..core.config import APP_TZ
from ..db.session import get_engine

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/health")


def test_database_connection() -> bool:
    """Run ``SELECT 1`` against the configured database."""
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(
            "Database connection failed",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        return False


@health_bp.route("", methods=["GET"])
def health_check():
    """
    Liveness plus database connectivity.

    Status codes:
        200: database reachable
        503: database unreachable
    """
    db_status = test_database_connection()
    return jsonify(
        {
            "status": "healthy" if db_status else "unhealthy",
            "database": "connected" if db_status else "disconnected",
            "timezone": str(APP_TZ),
        }
    ), (200 if db_status else 503)


@health_bp.route("/pool", methods=["GET"])
def pool_metrics():
    """
    SQLAlchemy connection pool statistics.

    Useful for tracking connection usage and detecting leaks. SQLite pools
    report fewer fields than PostgreSQL's QueuePool.
    """
    try:
        pool = get_engine().pool
        status_str = pool.status()
        pool_stats: Dict[str, Union[str, int]] = {
            "status": "healthy",
            "pool_status": status_str,
        }

        # Format: "Pool size: X  Connections in pool: Y
        #          Current Overflow: Z Current Checked out connections: W"
        for key, pattern in (
            ("pool_size", r"Pool size:\s*(\d+)"),
            ("connections_in_pool", r"Connections in pool:\s*(\d+)"),
            ("overflow", r"Current Overflow:\s*(-?\d+)"),
            ("checked_out", r"Current Checked out connections:\s*(\d+)"),
        ):
            match = re.search(pattern, status_str)
            if match:
                pool_stats[key] = int(match.group(1))

        return jsonify(pool_stats), 200
    except Exception as e:
        logger.error(
            "Error collecting pool metrics",
            extra={"context": {"error": str(e)}},
            exc_info=True,
        )
        return jsonify({"status": "error", "message": str(e)}), 500
