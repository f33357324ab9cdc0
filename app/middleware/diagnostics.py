"""
Startup diagnostics — runs once when the Flask app starts.

Checks the database, the sheet range and the gateway mode, then logs a
summary banner.
"""

import logging
import sys

from flask import Flask

from app.models import db
from app.models.sheet import SheetRow

logger = logging.getLogger(__name__)


def run_startup_diagnostics(app: Flask):
    """Run diagnostic checks during app startup (inside app context)."""
    if app.config.get("TESTING"):
        return  # skip during tests for speed

    issues: list[str] = []

    with app.app_context():
        py = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        # ── Database connectivity ────────────────────────────────────
        db_status = "ok"
        db_uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
        db_type = "PostgreSQL" if "postgresql" in db_uri else "SQLite" if "sqlite" in db_uri else "unknown"
        try:
            db.session.execute(db.text("SELECT 1"))
        except Exception as exc:
            db_status = f"FAILED ({exc})"
            issues.append(f"Database unreachable: {exc}")

        # ── Gateway mode / sheet range ───────────────────────────────
        gateway_url = app.config.get("SHEETS_GATEWAY_URL")
        sheet = app.config.get("SHEET_NAME")
        if gateway_url:
            sheet_status = f"remote ({gateway_url})"
        else:
            try:
                rows = SheetRow.query.filter_by(sheet=sheet).count()
                header = SheetRow.query.filter_by(sheet=sheet, row_number=1).first()
                sheet_status = f"local {sheet}, {rows} rows"
                if header is None:
                    issues.append(f"Sheet {sheet} has no header row — run 'flask init-sheet'")
            except Exception as exc:
                db.session.rollback()
                sheet_status = "check failed"
                issues.append(f"Sheet range unreadable: {exc}")

    quiet_ms = app.config.get("AUTOSAVE_QUIET_PERIOD_MS")
    legacy = app.config.get("LEGACY_NUMERIC_DECODE")

    logger.info(
        "Startup: python=%s db=%s (%s) sheet=%s autosave=%sms legacy_numeric=%s",
        py, db_type, db_status, sheet_status, quiet_ms, legacy,
    )
    for issue in issues:
        logger.warning("Startup issue: %s", issue)
