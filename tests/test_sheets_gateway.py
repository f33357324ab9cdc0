"""Unit tests for app.integrations.sheets_gateway.

Test strategy
-------------
SheetsGateway gets a MagicMock ``session`` so no HTTP leaves the process.
LocalSheetsGateway runs against the in-memory sheet_rows table.
"""

from unittest.mock import MagicMock

import pytest
import requests

from app.integrations.sheets_gateway import GatewayResult, LocalSheetsGateway, SheetsGateway
from app.services import sheet_service

URL = "https://gateway.test/api/v1/sheets"


def _response(status=200, body=None, content=b"{}", json_exc=None):
    resp = MagicMock()
    resp.ok = 200 <= status < 400
    resp.status_code = status
    resp.content = content
    resp.text = content.decode() if content else ""
    if json_exc is not None:
        resp.json.side_effect = json_exc
    else:
        resp.json.return_value = body if body is not None else {}
    return resp


@pytest.fixture()
def http():
    return MagicMock()


@pytest.fixture()
def gateway(http):
    return SheetsGateway(URL, timeout=5, session=http)


class TestGatewayResult:
    def test_log_dict(self):
        result = GatewayResult(ok=False, status_code=503, data=None, error="down", duration_ms=12)
        assert result.to_log_dict() == {"ok": False, "status": 503, "error": "down", "duration_ms": 12}
        assert "ok=False" in repr(result)


class TestSheetsGatewayRead:
    def test_success(self, gateway, http):
        http.request.return_value = _response(body={"projectName": "Marina"})
        result = gateway.read()

        assert result.ok
        assert result.data == {"projectName": "Marina"}
        http.request.assert_called_once_with("GET", URL, timeout=5)

    def test_empty_body_is_empty_mapping(self, gateway, http):
        http.request.return_value = _response(content=b"")
        result = gateway.read()
        assert result.ok
        assert result.data == {}

    def test_http_error(self, gateway, http):
        http.request.return_value = _response(status=500, content=b'{"error":"quota"}')
        result = gateway.read()
        assert not result.ok
        assert result.status_code == 500
        assert result.error.startswith("HTTP 500")

    def test_non_object_body_is_failure(self, gateway, http):
        http.request.return_value = _response(body=["not", "a", "mapping"])
        result = gateway.read()
        assert not result.ok
        assert result.data is None

    def test_invalid_json(self, gateway, http):
        http.request.return_value = _response(content=b"<html>", json_exc=ValueError("bad"))
        result = gateway.read()
        assert not result.ok
        assert "JSON" in result.error

    def test_timeout(self, gateway, http):
        http.request.side_effect = requests.Timeout()
        result = gateway.read()
        assert not result.ok
        assert result.status_code is None
        assert "timed out" in result.error

    def test_connection_error(self, gateway, http):
        http.request.side_effect = requests.ConnectionError("refused")
        result = gateway.read()
        assert not result.ok
        assert "refused" in result.error


class TestSheetsGatewayWrite:
    def test_posts_full_document(self, gateway, http):
        http.request.return_value = _response(body={"success": True})
        document = {"projectName": "Marina", "programRows": []}
        result = gateway.write(document)

        assert result.ok
        assert result.data == {"success": True}
        http.request.assert_called_once_with("POST", URL, timeout=5, json=document)

    def test_write_failure(self, gateway, http):
        http.request.return_value = _response(status=500, content=b'{"error":"boom"}')
        assert not gateway.write({}).ok

    def test_session_created_lazily(self):
        gw = SheetsGateway(URL)
        assert isinstance(gw.session, requests.Session)
        assert gw.session is gw.session


class TestLocalSheetsGateway:
    def test_write_then_read(self, app):
        gw = LocalSheetsGateway(app, "Sheet1")
        written = gw.write({"projectName": "Marina", "programRows": []})
        assert written.ok
        assert written.data == {"success": True}

        read = gw.read()
        assert read.ok
        assert read.data == {"projectName": "Marina", "programRows": "[]"}

    def test_failure_is_reported_not_raised(self, app, monkeypatch):
        def boom(sheet):
            raise RuntimeError("table missing")

        monkeypatch.setattr(sheet_service, "read_range", boom)
        result = LocalSheetsGateway(app, "Sheet1").read()
        assert not result.ok
        assert result.status_code == 500
        assert result.error == "table missing"
