# backend/brewhouse/routes/system.py
"""System health endpoint."""

import time
from flask import Blueprint, current_app
from sqlalchemy import select, func

from ..extensions import db
from ..models import Beer, BeerOrder, Customer

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_database_health() -> dict:
    """
    Check database connectivity with a count over each main table.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        details = {
            "beers": db.session.execute(select(func.count(Beer.id))).scalar_one(),
            "customers": db.session.execute(select(func.count(Customer.id))).scalar_one(),
            "beer_orders": db.session.execute(select(func.count(BeerOrder.id))).scalar_one(),
        }
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    ok = database["status"] == "healthy"
    return {"status": "ok" if ok else "degraded", "database": database}, 200 if ok else 503
