"""
Project Status Dashboard
Derived display values — pure functions of the current document.

Nothing here is persisted; everything is recomputed from field text on every
read.  Amounts, percentages and dates are free text, so parsing is lenient:
malformed numbers degrade to "undefined" (ratios, stage variance) or to zero
(balance), never to an error.

    stage_variance(planned, actual)        → StageVariance | None
    balance(available, spent)              → Balance
    ratio(numerator, denominator)          → Ratio  (CPI, cash variance)
    progress(value)                        → Progress
    header_title(doc)                      → str
    status_badge(kind, value)              → dict
    save_indicator(saving, saved_at)       → str
    compute_derived(doc)                   → dict (all of the above, JSON-ready)
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

# ── Lenient number parsing ───────────────────────────────────────────────

_FLOAT_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"^[+-]?\d+")
_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_float_prefix(text: Any) -> float | None:
    """Parse the longest numeric prefix of ``text`` (``"12.5 weeks"`` → 12.5).

    Leading whitespace is ignored.  Returns None when no number starts the
    string.
    """
    if text is None:
        return None
    match = _FLOAT_PREFIX.match(str(text).lstrip())
    if not match:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None


def parse_int_prefix(text: Any) -> int | None:
    if text is None:
        return None
    match = _INT_PREFIX.match(str(text).lstrip())
    return int(match.group(0)) if match else None


def parse_amount(text: Any) -> float | None:
    """Parse a currency-like string: ``"AED 1,250.50"`` → 1250.5.

    Everything except digits, ``.`` and ``-`` is stripped first.
    """
    if text is None:
        return None
    return parse_float_prefix(_NON_NUMERIC.sub("", str(text)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return math.floor(value + 0.5)


def round_to_step(value: float | None, step: int = 5) -> int | None:
    if value is None:
        return None
    return round_half_up(value / step) * step


def _group_thousands(value: float) -> str:
    rounded = Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return f"{int(rounded):,}"


# ── Result types ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class StageVariance:
    status: str             # Ahead | Delay | On Track
    planned: int | None     # rounded to the nearest 5, None if unparseable
    actual: int | None
    bg: str
    fg: str


@dataclass(frozen=True)
class Balance:
    value: float
    display: str            # "+750", "-1,200" or "—"
    tone: str               # positive | negative | neutral
    glyph: str              # ▲, ▼ or ""
    bg: str
    fg: str


@dataclass(frozen=True)
class Ratio:
    value: float | None     # None → undefined
    display: str            # "0.93" or "—"
    band: str | None        # good | caution | poor | None
    bg: str
    fg: str


@dataclass(frozen=True)
class Progress:
    pct: int                # clamped 0..100
    color: str


# ── Stage variance ───────────────────────────────────────────────────────

_VARIANCE_COLORS = {
    "Delay": ("#fef2f2", "#dc2626"),
    "Ahead": ("#f0fdf4", "#16a34a"),
    "On Track": ("#eff6ff", "#2563eb"),
}


def stage_variance(planned: Any, actual: Any) -> StageVariance | None:
    """Compare planned vs actual stage progress, both rounded to the nearest 5 %.

    Returns None when both inputs are empty.  When only one side parses the
    comparison is indeterminate and the result is ``On Track``.
    """
    if not planned and not actual:
        return None
    p = round_to_step(parse_float_prefix(planned))
    a = round_to_step(parse_float_prefix(actual))
    status = "On Track"
    if p is not None and a is not None:
        if p > a:
            status = "Delay"
        elif a > p:
            status = "Ahead"
    bg, fg = _VARIANCE_COLORS[status]
    return StageVariance(status=status, planned=p, actual=a, bg=bg, fg=fg)


# ── Balance ──────────────────────────────────────────────────────────────

NEUTRAL_DASH = "—"


def balance(available: Any, spent: Any) -> Balance:
    """Available budget minus actual spend; unparseable amounts count as zero."""
    av = parse_amount(available) or 0.0
    sp = parse_amount(spent) or 0.0
    value = av - sp
    if value == 0:
        return Balance(value=0.0, display=NEUTRAL_DASH, tone="neutral", glyph="",
                       bg="#f1f5f9", fg="#64748b")
    if value > 0:
        return Balance(value=value, display="+" + _group_thousands(value), tone="positive",
                       glyph="▲", bg="#dcfce7", fg="#166534")
    return Balance(value=value, display=_group_thousands(value), tone="negative",
                   glyph="▼", bg="#fee2e2", fg="#991b1b")


# ── Ratios (CPI, cash variance) ──────────────────────────────────────────

_RATIO_BANDS = {
    "good": ("#f0fdf4", "#16a34a"),
    "caution": ("#fffbeb", "#d97706"),
    "poor": ("#fef2f2", "#dc2626"),
    None: ("#f1f5f9", "#64748b"),
}


def ratio_band(value: float | None) -> str | None:
    if value is None:
        return None
    if value >= 1:
        return "good"
    if value >= 0.9:
        return "caution"
    return "poor"


def ratio(numerator: Any, denominator: Any) -> Ratio:
    """Quotient of two currency strings, undefined on bad input or a zero denominator."""
    num = parse_amount(numerator)
    den = parse_amount(denominator)
    value = None
    if num is not None and den is not None and den != 0:
        value = num / den
    band = ratio_band(value)
    bg, fg = _RATIO_BANDS[band]
    display = f"{value:.2f}" if value is not None else NEUTRAL_DASH
    return Ratio(value=value, display=display, band=band, bg=bg, fg=fg)


def cost_performance(doc: dict[str, Any]) -> Ratio:
    """CPI = earned value ÷ actual spent."""
    return ratio(doc.get("earnedValue") or "", doc.get("actualSpent") or "")


def cash_variance(doc: dict[str, Any]) -> Ratio:
    """Invoice submitted ÷ total expense to date."""
    return ratio(doc.get("invoiceSubmitted") or "", doc.get("externalActualSpent") or "")


# ── Small presentation helpers ───────────────────────────────────────────

def progress(value: Any) -> Progress:
    pct = min(100, max(0, parse_int_prefix(value) or 0))
    if pct < 30:
        color = "#f87171"
    elif pct < 70:
        color = "#fbbf24"
    else:
        color = "#34d399"
    return Progress(pct=pct, color=color)


def header_title(doc: dict[str, Any]) -> str:
    parts = [doc.get(k) for k in ("projectCode", "projectName", "client")]
    return " · ".join(str(p) for p in parts if p) or "Untitled Project"


_BADGE_COLORS = {
    "contract": {
        "Signed": ("#dcfce7", "#166534"),
        "Pending": ("#fef9c3", "#854d0e"),
        "LOA Issued": ("#dbeafe", "#1e40af"),
        "Awaited": ("#fee2e2", "#991b1b"),
    },
    "budget": {
        "Approved": ("#dcfce7", "#166534"),
    },
}
_BADGE_FALLBACK = {
    "contract": ("#f1f5f9", "#64748b"),
    "budget": ("#fef9c3", "#854d0e"),
}


def status_badge(kind: str, value: Any) -> dict:
    """Colour pair for a contract or budget status value."""
    if not isinstance(value, str):
        value = ""
    bg, fg = _BADGE_COLORS[kind].get(value, _BADGE_FALLBACK[kind])
    return {"value": value, "bg": bg, "fg": fg}


def save_indicator(saving: bool, saved_at: datetime | None) -> str:
    if saving:
        return "Saving…"
    if saved_at is not None:
        return f"Saved {saved_at.strftime('%H:%M')}"
    return ""


def compute_derived(doc: dict[str, Any]) -> dict:
    """All derived display values for ``doc`` as a JSON-serialisable dict."""
    variance = stage_variance(doc.get("stagePlannedPct"), doc.get("stageActualPct"))
    return {
        "title": header_title(doc),
        "progress": asdict(progress(doc.get("progressPct"))),
        "stage_variance": asdict(variance) if variance else None,
        "balance": asdict(balance(doc.get("availableBudget") or "", doc.get("actualSpent") or "")),
        "cost_performance": asdict(cost_performance(doc)),
        "cash_variance": asdict(cash_variance(doc)),
        "contract_status": status_badge("contract", doc.get("contractStatus")),
        "budget_status": status_badge("budget", doc.get("budgetStatus")),
    }
