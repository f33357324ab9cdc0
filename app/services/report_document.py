"""
Project Status Dashboard
Report document — defaults and immutable edit operations.

The document is a flat dict of field name → string, plus three row
collections (lists of small string-keyed dicts).  Every edit returns a new
document; the previous snapshot is never mutated, so anything still holding
it (a pending save, a response being serialised) sees consistent data.

    default_document()                       → fresh document
    merge_loaded(decoded)                    → defaults overlaid with stored fields
    set_field(doc, name, value)              → new doc
    set_row_field(doc, coll, index, f, v)    → new doc
    append_row(doc, coll)                    → new doc
    delete_row(doc, coll, index)             → new doc
    replace_rows(doc, coll, rows)            → new doc
"""

from __future__ import annotations

import copy
from datetime import date
from typing import Any

from app.core.exceptions import NotFoundError, ValidationError

# ── Field catalogue ──────────────────────────────────────────────────────

SCALAR_FIELDS = (
    "projectCode",
    "projectName",
    "client",
    "reportDate",
    "keyPersonnel",
    "subconsultants",
    "contractStatus",
    "contractValue",
    "budgetStatus",
    "internalBudget",
    "externalBudget",
    "availableBudget",
    "actualSpent",
    "earnedValue",
    "invoiceSubmitted",
    "externalActualSpent",
    "projectStatus",
    "progressPct",
    "stagePlannedPct",
    "stageActualPct",
    "targetInvoice",
    "invoiceDueDate",
    "clientPayments",
    "subsPayments",
    "potentialVariations",
    "criticalIssues",
)

PROGRAM_ROW_FIELDS = ("stage", "baseline", "actual")
ACTION_ROW_FIELDS = ("action", "owner", "date")

ROW_COLLECTIONS = {
    "programRows": PROGRAM_ROW_FIELDS,
    "currentActions": ACTION_ROW_FIELDS,
    "nextActions": ACTION_ROW_FIELDS,
}

DEFAULT_ROW_COUNT = 3

CONTRACT_STATUSES = ("Signed", "Pending", "LOA Issued", "Awaited")
BUDGET_STATUSES = ("Approved", "Pending")


def blank_row(collection: str) -> dict[str, str]:
    """Return an empty record shaped for ``collection``."""
    return {name: "" for name in _row_fields(collection)}


def default_document(today: date | None = None) -> dict[str, Any]:
    """Build the default report: empty strings, today's date, three blank rows per table."""
    doc: dict[str, Any] = {name: "" for name in SCALAR_FIELDS}
    doc["reportDate"] = (today or date.today()).isoformat()
    for collection in ROW_COLLECTIONS:
        doc[collection] = [blank_row(collection) for _ in range(DEFAULT_ROW_COUNT)]
    return doc


def merge_loaded(decoded: dict[str, Any], today: date | None = None) -> dict[str, Any]:
    """Overlay stored fields onto the defaults; absent fields keep their default.

    Stored row collections are reshaped the way the form would have written
    them.  A collection that is not a list falls back to the default rows;
    a row that is not an object becomes a blank row; a cell that is not a
    string becomes ``""``.
    """
    doc = default_document(today)
    doc.update(copy.deepcopy(decoded))
    for collection in ROW_COLLECTIONS:
        doc[collection] = _coerce_rows(collection, doc[collection])
    return doc


def _coerce_rows(collection: str, rows: Any) -> list[dict[str, str]]:
    if not isinstance(rows, list):
        return [blank_row(collection) for _ in range(DEFAULT_ROW_COUNT)]
    coerced = []
    for row in rows:
        if not isinstance(row, dict):
            row = {}
        clean = {}
        for name in ROW_COLLECTIONS[collection]:
            value = row.get(name, "")
            clean[name] = value if isinstance(value, str) else ""
        coerced.append(clean)
    return coerced


# ── Validation helpers ───────────────────────────────────────────────────

def _row_fields(collection: str) -> tuple[str, ...]:
    fields = ROW_COLLECTIONS.get(collection)
    if fields is None:
        raise ValidationError(
            f"Unknown row collection: {collection}",
            details={"collection": collection, "allowed": sorted(ROW_COLLECTIONS)},
        )
    return fields


def _rows(doc: dict[str, Any], collection: str) -> list:
    _row_fields(collection)
    rows = doc.get(collection)
    if not isinstance(rows, list):
        raise ValidationError(
            f"{collection} does not hold a row list",
            details={"collection": collection},
        )
    return rows


def _check_index(rows: list, collection: str, index: int) -> None:
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(rows):
        raise NotFoundError("Row", index, scope=collection)


def _check_text(value: Any, name: str) -> None:
    if not isinstance(value, str):
        raise ValidationError(
            f"{name} must be a string",
            details={"field": name, "type": type(value).__name__},
        )


# ── Edit operations ──────────────────────────────────────────────────────

def set_field(doc: dict[str, Any], name: str, value: str) -> dict[str, Any]:
    """Return a copy of ``doc`` with one scalar field replaced."""
    if name in ROW_COLLECTIONS:
        raise ValidationError(
            f"{name} is a row collection; use the row operations",
            details={"field": name},
        )
    if name not in doc and name not in SCALAR_FIELDS:
        raise ValidationError(f"Unknown field: {name}", details={"field": name})
    _check_text(value, name)
    return {**doc, name: value}


def set_row_field(
    doc: dict[str, Any], collection: str, index: int, field: str, value: str
) -> dict[str, Any]:
    """Return a copy of ``doc`` with one field of one row replaced."""
    rows = _rows(doc, collection)
    _check_index(rows, collection, index)
    if field not in ROW_COLLECTIONS[collection]:
        raise ValidationError(
            f"Unknown {collection} field: {field}",
            details={"collection": collection, "field": field},
        )
    _check_text(value, f"{collection}[{index}].{field}")
    new_rows = [
        {**row, field: value} if i == index else row
        for i, row in enumerate(rows)
    ]
    return {**doc, collection: new_rows}


def append_row(doc: dict[str, Any], collection: str) -> dict[str, Any]:
    """Return a copy of ``doc`` with a blank row appended to ``collection``."""
    rows = _rows(doc, collection)
    return {**doc, collection: [*rows, blank_row(collection)]}


def delete_row(doc: dict[str, Any], collection: str, index: int) -> dict[str, Any]:
    """Return a copy of ``doc`` without the row at ``index``; other rows keep their order."""
    rows = _rows(doc, collection)
    _check_index(rows, collection, index)
    return {**doc, collection: [row for i, row in enumerate(rows) if i != index]}


def replace_rows(doc: dict[str, Any], collection: str, rows: list) -> dict[str, Any]:
    """Return a copy of ``doc`` with ``collection`` replaced wholesale.

    Each incoming row is normalised to the collection's shape: missing
    fields become ``""`` and unknown fields are dropped.
    """
    fields = _row_fields(collection)
    if not isinstance(rows, list):
        raise ValidationError(f"{collection} must be a list of rows", details={"collection": collection})
    normalised = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ValidationError(
                f"{collection}[{i}] must be an object",
                details={"collection": collection, "index": i},
            )
        clean = {}
        for name in fields:
            value = row.get(name, "")
            _check_text(value, f"{collection}[{i}].{name}")
            clean[name] = value
        normalised.append(clean)
    return {**doc, collection: normalised}
