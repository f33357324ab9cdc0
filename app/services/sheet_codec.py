"""
Project Status Dashboard
Sheet codec — converts between the report document and gateway rows.

Storage format:
    - One row per top-level field: (key, value), both strings.
    - String values are stored verbatim; everything else is JSON-encoded
      (the row collections end up as compact JSON arrays).
    - A row whose key is the literal ``"key"`` is the header and never
      reaches the decoded document.

Decoding tries JSON on every value.  Only strings, arrays and objects
replace the raw text; numbers, booleans and ``null`` keep it, so a
value typed as ``1.50`` is still ``"1.50"`` after a reload.  Passing
``legacy_numeric=True`` restores the older behaviour in which numeric-looking
text comes back as a number.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from app.models.sheet import HEADER_KEY

_DECODED_TYPES = (str, list, dict)


def encode_value(value: Any) -> str:
    """Encode a single field value for storage."""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def encode_entries(data: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Turn a document (or any flat JSON object) into ordered ``(key, value)`` rows."""
    return [(str(key), encode_value(value)) for key, value in data.items()]


def decode_value(raw: Any, *, legacy_numeric: bool = False) -> Any:
    """Decode one stored value.  Never raises."""
    if not isinstance(raw, str):
        return raw
    try:
        parsed = json.loads(raw)
    except ValueError:
        return raw
    if legacy_numeric or isinstance(parsed, _DECODED_TYPES):
        return parsed
    return raw


def decode_entries(
    mapping: Mapping[str, Any] | Iterable[tuple[str, Any]],
    *,
    legacy_numeric: bool = False,
) -> dict[str, Any]:
    """Decode a gateway mapping into document fields, dropping the header row."""
    items = mapping.items() if isinstance(mapping, Mapping) else mapping
    decoded = {}
    for key, raw in items:
        if key == HEADER_KEY:
            continue
        decoded[key] = decode_value(raw, legacy_numeric=legacy_numeric)
    return decoded
