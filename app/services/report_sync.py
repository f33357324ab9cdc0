"""
Project Status Dashboard
Report synchronizer — keeps the in-memory report and the gateway in step.

Lifecycle:
    UNLOADED ──load()──► LOADING ──(any outcome)──► READY

    - load() runs once.  Failure, a non-success response or an empty mapping
      all leave the default document in place; the synchronizer becomes
      READY either way.
    - Edits are refused until READY, so a pending save can never overwrite
      stored data with the blank default document.

Autosave:
    Every edit swaps in a new document snapshot and re-arms a single-slot
    debounce timer (800 ms by default).  When the quiet period ends, the
    *current* snapshot is written in full.  Bursts of edits therefore
    collapse into one write carrying the last state.  Write failures are
    logged and otherwise ignored: ``saved_at`` simply does not advance.

Usage:
    sync = ReportSynchronizer(gateway)
    sync.load()
    sync.update_field("projectName", "Marina Tower")
    sync.add_row("currentActions")
"""

from __future__ import annotations

import atexit
import copy
import logging
import threading
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable

from app.core.exceptions import SyncNotReadyError
from app.services import report_document as rd
from app.services.debounce import DebounceTimer
from app.services.report_metrics import compute_derived, save_indicator
from app.services.sheet_codec import decode_entries

logger = logging.getLogger(__name__)

DEFAULT_QUIET_PERIOD_MS = 800


class SyncState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"


class ReportSynchronizer:
    """Owns the authoritative report document for one dashboard process."""

    def __init__(
        self,
        gateway,
        *,
        quiet_period_ms: int = DEFAULT_QUIET_PERIOD_MS,
        timer_factory: Callable[..., object] = threading.Timer,
        legacy_numeric: bool = False,
        clock: Callable[[], datetime] | None = None,
        today: date | None = None,
    ) -> None:
        self._gateway = gateway
        self._legacy_numeric = legacy_numeric
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._today = today
        self._lock = threading.Lock()

        self._state = SyncState.UNLOADED
        self._document: dict[str, Any] = rd.default_document(today)
        self._saving = False
        self._saved_at: datetime | None = None
        self._last_attempt_at: datetime | None = None
        self._last_error: str | None = None
        self._save_count = 0

        self._timer = DebounceTimer(
            quiet_period_ms / 1000.0,
            self._save,
            timer_factory=timer_factory,
            name="report-autosave",
        )

    # ── Read-only views ──────────────────────────────────────────────────

    @property
    def gateway(self):
        return self._gateway

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is SyncState.READY

    @property
    def saving(self) -> bool:
        return self._saving

    @property
    def saved_at(self) -> datetime | None:
        return self._saved_at

    @property
    def save_pending(self) -> bool:
        return self._timer.pending

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of the current document."""
        with self._lock:
            return copy.deepcopy(self._document)

    def derived(self) -> dict:
        with self._lock:
            doc = self._document
        return compute_derived(doc)

    def status(self) -> dict:
        return {
            "state": self._state.value,
            "ready": self.is_ready,
            "saving": self._saving,
            "save_pending": self.save_pending,
            "saved_at": self._saved_at.isoformat() if self._saved_at else None,
            "last_attempt_at": self._last_attempt_at.isoformat() if self._last_attempt_at else None,
            "last_error": self._last_error,
            "save_count": self._save_count,
            "indicator": save_indicator(self._saving, self._saved_at),
        }

    # ── Load ─────────────────────────────────────────────────────────────

    def load(self) -> bool:
        """Hydrate the document from the gateway.  Returns False if already loaded or loading."""
        with self._lock:
            if self._state is not SyncState.UNLOADED:
                return False
            self._state = SyncState.LOADING

        decoded = None
        try:
            result = self._gateway.read()
            if not result.ok:
                logger.warning("Report load failed, using defaults: %s", result.error)
            elif not result.data:
                logger.info("No saved report found, using defaults")
            else:
                decoded = decode_entries(result.data, legacy_numeric=self._legacy_numeric)
        except Exception:
            logger.warning("Report load raised, using defaults", exc_info=True)

        with self._lock:
            if decoded:
                self._document = rd.merge_loaded(decoded, self._today)
            self._state = SyncState.READY
        logger.info("Report ready (%d stored fields)", len(decoded or {}))
        return True

    def ensure_loaded(self) -> None:
        if self._state is SyncState.UNLOADED:
            self.load()

    # ── Edits ────────────────────────────────────────────────────────────

    def _apply(self, op: Callable[..., dict], *args) -> dict[str, Any]:
        with self._lock:
            if self._state is not SyncState.READY:
                raise SyncNotReadyError(self._state.value)
            self._document = op(self._document, *args)
            doc = self._document
        self._timer.arm()
        return copy.deepcopy(doc)

    def update_field(self, name: str, value: str) -> dict[str, Any]:
        return self._apply(rd.set_field, name, value)

    def update_fields(self, values: dict[str, str]) -> dict[str, Any]:
        """Apply several field updates as one edit (one timer re-arm)."""

        def _set_all(doc, items):
            for name, value in items:
                doc = rd.set_field(doc, name, value)
            return doc

        return self._apply(_set_all, list(values.items()))

    def update_row(self, collection: str, index: int, field: str, value: str) -> dict[str, Any]:
        return self._apply(rd.set_row_field, collection, index, field, value)

    def update_row_fields(self, collection: str, index: int, values: dict[str, str]) -> dict[str, Any]:
        """Apply several field updates to one row as one edit; all or nothing."""

        def _set_all(doc, items):
            for field, value in items:
                doc = rd.set_row_field(doc, collection, index, field, value)
            return doc

        return self._apply(_set_all, list(values.items()))

    def add_row(self, collection: str) -> dict[str, Any]:
        return self._apply(rd.append_row, collection)

    def remove_row(self, collection: str, index: int) -> dict[str, Any]:
        return self._apply(rd.delete_row, collection, index)

    def replace_rows(self, collection: str, rows: list) -> dict[str, Any]:
        return self._apply(rd.replace_rows, collection, rows)

    # ── Save ─────────────────────────────────────────────────────────────

    def flush(self) -> bool:
        """Write a pending save immediately.  Returns True if one was pending."""
        return self._timer.flush()

    def cancel_pending(self) -> bool:
        return self._timer.cancel()

    def _save(self) -> None:
        with self._lock:
            self._saving = True
            doc = self._document

        error = None
        try:
            result = self._gateway.write(doc)
            if not result.ok:
                error = result.error or "write failed"
        except Exception as exc:
            logger.warning("Report save raised", exc_info=True)
            error = str(exc)[:500]

        now = self._clock()
        with self._lock:
            self._saving = False
            self._last_attempt_at = now
            self._last_error = error
            self._save_count += 1
            if error is None:
                self._saved_at = now

        if error:
            logger.warning("Report save failed: %s", error)
        else:
            logger.debug("Report saved at %s", now.isoformat())


def init_report_sync(app, *, gateway=None, **overrides) -> ReportSynchronizer:
    """Create the app's synchronizer from config and store it in ``app.extensions``.

    ``gateway`` and any ReportSynchronizer keyword (``timer_factory``,
    ``clock``, ...) may be overridden, which is how tests drive the
    quiet period by hand.
    """
    from app.integrations.sheets_gateway import LocalSheetsGateway, SheetsGateway

    if gateway is None:
        url = app.config.get("SHEETS_GATEWAY_URL")
        if url:
            gateway = SheetsGateway(url, timeout=app.config.get("SHEETS_GATEWAY_TIMEOUT", 10))
        else:
            gateway = LocalSheetsGateway(app, app.config.get("SHEET_NAME", "Sheet1"))

    options = {
        "quiet_period_ms": app.config.get("AUTOSAVE_QUIET_PERIOD_MS", DEFAULT_QUIET_PERIOD_MS),
        "legacy_numeric": app.config.get("LEGACY_NUMERIC_DECODE", False),
    }
    options.update(overrides)

    previous = app.extensions.get("report_sync")
    if previous is not None:
        previous.cancel_pending()

    sync = ReportSynchronizer(gateway, **options)
    app.extensions["report_sync"] = sync
    if not app.config.get("TESTING"):
        # Pending edits are written on interpreter exit
        atexit.register(sync.flush)
    logger.info(
        "Report synchronizer initialised gateway=%s quiet_period_ms=%s",
        type(gateway).__name__, options["quiet_period_ms"],
    )
    return sync
