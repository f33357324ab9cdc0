"""
Persistence gateway clients — the synchronizer's outbound side.

Two interchangeable clients share one contract:

    read()           → GatewayResult with ``data`` = {key: raw string value}
    write(document)  → GatewayResult with ``data`` = gateway response body

  - SheetsGateway: HTTP client for a remote gateway URL (``requests``)
  - LocalSheetsGateway: calls the sheet service in-process when the
    dashboard hosts its own gateway endpoint

Neither client raises and neither retries: persistence is best effort, and
the caller decides what a failed result means (defaults on load, "appears
unsaved" on save).

Testability: pass a mock ``session`` to SheetsGateway() in tests instead of
letting it create a real requests.Session internally.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

import requests

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10


class GatewayResult:
    """Structured return value from gateway calls.

    Attributes:
        ok:             True if the call succeeded (HTTP 2xx + no exception).
        status_code:    HTTP status code (None if network-level failure).
        data:           Parsed JSON response body, else None.
        error:          Human-readable error message or None.
        duration_ms:    Round-trip latency in milliseconds.
    """

    def __init__(
        self,
        ok: bool,
        status_code: int | None,
        data: dict | None,
        error: str | None,
        duration_ms: int,
    ) -> None:
        self.ok = ok
        self.status_code = status_code
        self.data = data
        self.error = error
        self.duration_ms = duration_ms

    def to_log_dict(self) -> dict:
        return {
            "ok": self.ok,
            "status": self.status_code,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }

    def __repr__(self) -> str:
        return f"<GatewayResult ok={self.ok} status={self.status_code}>"


class SheetsGateway:
    """HTTP client for the sheet persistence gateway.

    Usage:
        gateway = SheetsGateway("https://dashboard.example/api/v1/sheets")
        result = gateway.read()
        if result.ok:
            ...
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        # Inject custom session for testing; create real one lazily otherwise.
        self._session: requests.Session | None = session

    @property
    def session(self) -> requests.Session:
        """Return (or lazily create) the requests.Session."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def _request(self, method: str, *, json_body: Mapping[str, Any] | None = None) -> GatewayResult:
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if json_body is not None:
            kwargs["json"] = json_body

        t0 = time.perf_counter()
        try:
            resp = self.session.request(method, self.url, **kwargs)
        except requests.Timeout:
            logger.warning("Gateway %s timed out after %ss url=%s", method, self.timeout, self.url)
            return GatewayResult(
                ok=False,
                status_code=None,
                data=None,
                error=f"Request timed out after {self.timeout}s",
                duration_ms=int(self.timeout * 1000),
            )
        except requests.RequestException as exc:
            logger.warning("Gateway %s network error url=%s error=%s", method, self.url, exc)
            return GatewayResult(
                ok=False,
                status_code=None,
                data=None,
                error=str(exc)[:500],
                duration_ms=int((time.perf_counter() - t0) * 1000),
            )
        duration_ms = int((time.perf_counter() - t0) * 1000)

        if not resp.ok:
            logger.warning("Gateway %s failed status=%d url=%s", method, resp.status_code, self.url)
            return GatewayResult(
                ok=False,
                status_code=resp.status_code,
                data=None,
                error=f"HTTP {resp.status_code}: {resp.text[:500]}",
                duration_ms=duration_ms,
            )

        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            logger.warning("Gateway %s returned a non-JSON body url=%s", method, self.url)
            return GatewayResult(
                ok=False,
                status_code=resp.status_code,
                data=None,
                error="Response body is not valid JSON",
                duration_ms=duration_ms,
            )

        return GatewayResult(
            ok=True,
            status_code=resp.status_code,
            data=data,
            error=None,
            duration_ms=duration_ms,
        )

    def read(self) -> GatewayResult:
        """GET the stored mapping.  A body that is not a JSON object counts as failure."""
        result = self._request("GET")
        if result.ok and not isinstance(result.data, dict):
            return GatewayResult(
                ok=False,
                status_code=result.status_code,
                data=None,
                error="Gateway did not return a JSON object",
                duration_ms=result.duration_ms,
            )
        return result

    def write(self, document: Mapping[str, Any]) -> GatewayResult:
        """POST the full document; the gateway overwrites the whole range."""
        return self._request("POST", json_body=document)


class LocalSheetsGateway:
    """In-process gateway client backed by the sheet service.

    Used when no ``SHEETS_GATEWAY_URL`` is configured and the dashboard
    serves its own ``/api/v1/sheets`` endpoint.  Each call pushes an app
    context, so it is safe to call from the autosave timer thread.
    """

    def __init__(self, app, sheet: str) -> None:
        self._app = app
        self.sheet = sheet

    def _call(self, fn, *args) -> GatewayResult:
        from app.models import db

        t0 = time.perf_counter()
        with self._app.app_context():
            try:
                data = fn(*args)
            except Exception as exc:
                db.session.rollback()
                logger.warning("Local gateway call failed sheet=%s error=%s", self.sheet, exc)
                return GatewayResult(
                    ok=False,
                    status_code=500,
                    data=None,
                    error=str(exc)[:500],
                    duration_ms=int((time.perf_counter() - t0) * 1000),
                )
        return GatewayResult(
            ok=True,
            status_code=200,
            data=data,
            error=None,
            duration_ms=int((time.perf_counter() - t0) * 1000),
        )

    def read(self) -> GatewayResult:
        from app.services import sheet_service

        return self._call(sheet_service.read_range, self.sheet)

    def write(self, document: Mapping[str, Any]) -> GatewayResult:
        from app.services import sheet_service

        def _write(data, sheet):
            sheet_service.overwrite_range(data, sheet)
            return {"success": True}

        return self._call(_write, document, self.sheet)
