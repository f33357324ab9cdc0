"""
Project Status Dashboard
Sheet gateway blueprint — key/value persistence over the fixed A:B range.

Endpoints:
    GET  /api/v1/sheets   → 200 {key: value, ...}      (header row excluded)
    POST /api/v1/sheets   → 200 {"success": true}      (range overwritten)
                            500 {"error": "<message>"} on any failure
    any other method      → 405 {"error": "Method not allowed"}

The contract has no authentication and no schema, and every POST replaces
the whole range.  Non-string values in the POST body are JSON-encoded
before they are stored.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from app.models import db
from app.services import sheet_service

logger = logging.getLogger(__name__)

sheets_bp = Blueprint("sheets", __name__, url_prefix="/api/v1/sheets")


def _sheet_name():
    return current_app.config.get("SHEET_NAME", sheet_service.DEFAULT_SHEET)


@sheets_bp.route("", methods=["GET"])
def read_sheet():
    """Return the stored mapping of field name → raw string value."""
    sheet = _sheet_name()
    try:
        data = sheet_service.read_range(sheet)
    except Exception as exc:
        db.session.rollback()
        logger.exception("Sheet read failed", extra={"sheet": sheet})
        return jsonify({"error": str(exc)}), 500
    return jsonify(data), 200


@sheets_bp.route("", methods=["POST"])
def write_sheet():
    """Overwrite the range with the entries of the JSON object body."""
    sheet = _sheet_name()
    try:
        data = request.get_json(force=True, silent=False)
        if not isinstance(data, dict):
            raise ValueError("Request body must be a JSON object")
        count = sheet_service.overwrite_range(data, sheet)
    except Exception as exc:
        db.session.rollback()
        logger.error("Sheet write failed: %s", exc, extra={"sheet": sheet})
        return jsonify({"error": str(exc)}), 500
    logger.debug("Sheet write ok rows=%d", count, extra={"sheet": sheet})
    return jsonify({"success": True}), 200
