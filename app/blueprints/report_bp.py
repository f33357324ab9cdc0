"""
Project Status Dashboard
Report blueprint — the view layer over the report synchronizer.

Endpoints summary:
    REPORT   /api/v1/report                                GET
             /api/v1/report/status                         GET
             /api/v1/report/options                        GET
             /api/v1/report/fields                         PATCH
             /api/v1/report/flush                          POST

    ROWS     /api/v1/report/rows/<collection>              PUT (replace), POST (append)
             /api/v1/report/rows/<collection>/<int:index>  PATCH, DELETE

The synchronizer is created by the app factory and stored in
``app.extensions["report_sync"]``.  The first request that needs the
document triggers the one-time load.  Edits made before the load has
settled are refused with 409; they never reach the autosave timer.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from app.core.exceptions import NotFoundError, SyncNotReadyError, ValidationError
from app.services.report_document import (
    BUDGET_STATUSES,
    CONTRACT_STATUSES,
    ROW_COLLECTIONS,
    SCALAR_FIELDS,
)
from app.utils.errors import E, api_error

logger = logging.getLogger(__name__)

report_bp = Blueprint("report", __name__, url_prefix="/api/v1/report")


# ── Helpers ──────────────────────────────────────────────────────────────────

def get_synchronizer():
    """Return the app's synchronizer, loading it on first use when autoload is on."""
    sync = current_app.extensions["report_sync"]
    if current_app.config.get("REPORT_AUTOLOAD", True):
        sync.ensure_loaded()
    return sync


def _json_object():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _report_payload(sync, document=None):
    return {
        "document": document if document is not None else sync.snapshot(),
        "derived": sync.derived(),
        "status": sync.status(),
    }


# ── Error handlers ───────────────────────────────────────────────────────────

@report_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@report_bp.errorhandler(ValidationError)
def _handle_validation(error: ValidationError):
    return api_error(E.VALIDATION_INVALID, str(error), details=error.details)


@report_bp.errorhandler(SyncNotReadyError)
def _handle_not_ready(error: SyncNotReadyError):
    return api_error(E.NOT_READY, str(error), details={"state": error.state})


# ═════════════════════════════════════════════════════════════════════════════
#  REPORT
# ═════════════════════════════════════════════════════════════════════════════

@report_bp.route("", methods=["GET"])
def get_report():
    """Current document, derived display values and sync status."""
    sync = get_synchronizer()
    return jsonify(_report_payload(sync))


@report_bp.route("/status", methods=["GET"])
def get_status():
    """Sync status only.  Does not trigger the load."""
    sync = current_app.extensions["report_sync"]
    return jsonify(sync.status())


@report_bp.route("/options", methods=["GET"])
def get_options():
    """Enumerations and row shapes the form is built from."""
    return jsonify({
        "fields": list(SCALAR_FIELDS),
        "collections": {name: list(fields) for name, fields in ROW_COLLECTIONS.items()},
        "contract_statuses": list(CONTRACT_STATUSES),
        "budget_statuses": list(BUDGET_STATUSES),
    })


@report_bp.route("/fields", methods=["PATCH"])
def patch_fields():
    """Body: {fieldName: "value", ...} — applied as one edit."""
    sync = get_synchronizer()
    data = _json_object()
    if not data:
        return api_error(E.VALIDATION_REQUIRED, "At least one field is required")
    document = sync.update_fields(data)
    return jsonify(_report_payload(sync, document))


@report_bp.route("/flush", methods=["POST"])
def flush():
    """Write the pending autosave now instead of waiting for the quiet period."""
    sync = get_synchronizer()
    flushed = sync.flush()
    return jsonify({"flushed": flushed, "status": sync.status()})


# ═════════════════════════════════════════════════════════════════════════════
#  ROWS
# ═════════════════════════════════════════════════════════════════════════════

@report_bp.route("/rows/<collection>", methods=["PUT"])
def replace_rows(collection):
    """Body: {"rows": [{...}, ...]} — replaces the whole collection."""
    sync = get_synchronizer()
    data = _json_object()
    if "rows" not in data:
        return api_error(E.VALIDATION_REQUIRED, "rows is required")
    document = sync.replace_rows(collection, data["rows"])
    return jsonify(_report_payload(sync, document))


@report_bp.route("/rows/<collection>", methods=["POST"])
def add_row(collection):
    sync = get_synchronizer()
    document = sync.add_row(collection)
    return jsonify(_report_payload(sync, document)), 201


@report_bp.route("/rows/<collection>/<int:index>", methods=["PATCH"])
def patch_row(collection, index):
    """Body: {fieldName: "value", ...} — applied to the row as one edit."""
    sync = get_synchronizer()
    data = _json_object()
    if not data:
        return api_error(E.VALIDATION_REQUIRED, "At least one row field is required")
    allowed = ROW_COLLECTIONS.get(collection, ())
    unknown = [f for f in data if allowed and f not in allowed]
    if unknown:
        raise ValidationError(
            f"Unknown {collection} field(s): {', '.join(unknown)}",
            details={"collection": collection, "fields": unknown},
        )
    document = sync.update_row_fields(collection, index, data)
    return jsonify(_report_payload(sync, document))


@report_bp.route("/rows/<collection>/<int:index>", methods=["DELETE"])
def delete_row(collection, index):
    sync = get_synchronizer()
    document = sync.remove_row(collection, index)
    return jsonify(_report_payload(sync, document))
