"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — database, sheet range and report sync status
"""

import logging
import time

from flask import Blueprint, current_app, jsonify

from app.models import db
from app.models.sheet import SheetRow

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check with dependency status."""
    checks = {}
    overall = True

    # ── Database ─────────────────────────────────────────────────────
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
    except Exception as exc:
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check — database failed: %s", exc)

    # ── Sheet range ──────────────────────────────────────────────────
    gateway_url = current_app.config.get("SHEETS_GATEWAY_URL")
    if gateway_url:
        checks["sheet"] = {"status": "remote", "url": gateway_url}
    else:
        sheet = current_app.config.get("SHEET_NAME")
        try:
            rows = SheetRow.query.filter_by(sheet=sheet).count()
            has_header = SheetRow.query.filter_by(sheet=sheet, row_number=1).first() is not None
            checks["sheet"] = {"status": "ok", "name": sheet, "rows": rows, "header": has_header}
        except Exception as exc:
            db.session.rollback()
            checks["sheet"] = {"status": "error", "detail": str(exc)}
            overall = False

    # ── Report synchronizer ──────────────────────────────────────────
    sync = current_app.extensions.get("report_sync")
    if sync is not None:
        status = sync.status()
        checks["report_sync"] = {
            "status": status["state"],
            "saving": status["saving"],
            "save_pending": status["save_pending"],
            "last_error": status["last_error"],
        }

    checks["app"] = {
        "name": "Project Status Dashboard",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
