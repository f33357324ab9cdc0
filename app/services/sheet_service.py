"""
Project Status Dashboard
Sheet service — the gateway side of report persistence.

Reads and overwrites the fixed ``A:B`` range of one sheet, stored in the
``sheet_rows`` table:

    read_range(sheet)          → {key: value} for every data row
    overwrite_range(data, ...) → replaces rows 2..n with the encoded entries
    ensure_header(sheet)       → creates the ``key | value`` header row

There is no schema validation, versioning or concurrency control: every
write is a full overwrite of the same range, and the last writer wins.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from app.models import db
from app.models.sheet import (
    FIRST_DATA_ROW,
    HEADER_KEY,
    HEADER_VALUE,
    SheetRow,
)
from app.services.sheet_codec import encode_entries

logger = logging.getLogger(__name__)

DEFAULT_SHEET = "Sheet1"


def _sheet_rows(sheet: str):
    return SheetRow.query.filter_by(sheet=sheet).order_by(SheetRow.row_number)


def read_range(sheet: str = DEFAULT_SHEET) -> dict[str, str]:
    """
    Return the range as a flat ``{key: value}`` mapping.

    Mirrors a spreadsheet ``values.get`` on ``A:B``:
      - the header row (key ``"key"``) is skipped
      - rows with a blank key are skipped
      - rows whose value cell is empty are omitted, because a spreadsheet
        read drops trailing empty cells and the field is then simply absent
      - a key that appears twice keeps the later row's value
    """
    data: dict[str, str] = {}
    for row in _sheet_rows(sheet):
        if not row.key or row.is_header:
            continue
        if row.value is None or row.value == "":
            continue
        data[row.key] = row.value
    logger.debug("Read %d entries from sheet=%s", len(data), sheet)
    return data


def overwrite_range(data: Mapping[str, Any], sheet: str = DEFAULT_SHEET) -> int:
    """
    Replace every data row of the sheet with the encoded entries of ``data``.

    Non-string values are JSON-encoded.  The header row is left in place.
    Returns the number of rows written.
    """
    rows = encode_entries(data)

    SheetRow.query.filter(
        SheetRow.sheet == sheet,
        SheetRow.row_number >= FIRST_DATA_ROW,
    ).delete(synchronize_session=False)

    for offset, (key, value) in enumerate(rows):
        db.session.add(SheetRow(
            sheet=sheet,
            row_number=FIRST_DATA_ROW + offset,
            key=key,
            value=value,
        ))
    db.session.commit()
    logger.info("Overwrote sheet=%s with %d rows", sheet, len(rows))
    return len(rows)


def ensure_header(sheet: str = DEFAULT_SHEET) -> bool:
    """Create the header row if the sheet has none.  Returns True when created."""
    existing = SheetRow.query.filter_by(sheet=sheet, row_number=1).first()
    if existing:
        return False
    db.session.add(SheetRow(sheet=sheet, row_number=1, key=HEADER_KEY, value=HEADER_VALUE))
    db.session.commit()
    logger.info("Created header row for sheet=%s", sheet)
    return True
