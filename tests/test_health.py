"""Tests for health endpoints, app-level error handlers and CLI commands."""

import json

from app.models.sheet import SheetRow
from app.services import sheet_service


class TestHealthEndpoints:
    def test_basic_health(self, client):
        res = client.get("/api/v1/health")
        assert res.status_code == 200
        assert res.get_json()["status"] == "ok"

    def test_ready(self, client):
        assert client.get("/api/v1/health/ready").get_json() == {"status": "ok"}

    def test_live(self, client):
        res = client.get("/api/v1/health/live")
        assert res.status_code == 200
        body = res.get_json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "ok"
        assert body["checks"]["sheet"] == {"status": "ok", "name": "Sheet1", "rows": 0, "header": False}
        assert body["checks"]["report_sync"]["status"] == "unloaded"

    def test_live_sees_header(self, client):
        sheet_service.ensure_header("Sheet1")
        sheet = client.get("/api/v1/health/live").get_json()["checks"]["sheet"]
        assert sheet["header"] is True
        assert sheet["rows"] == 1

    def test_live_remote_gateway(self, client, app, monkeypatch):
        monkeypatch.setitem(app.config, "SHEETS_GATEWAY_URL", "http://gateway.test/api/v1/sheets")
        sheet = client.get("/api/v1/health/live").get_json()["checks"]["sheet"]
        assert sheet["status"] == "remote"

    def test_request_id_header(self, client):
        res = client.get("/api/v1/health/ready", headers={"X-Request-ID": "abc123"})
        assert res.headers.get("X-Request-ID") == "abc123"


class TestErrorHandlers:
    def test_unknown_route(self, client):
        res = client.get("/api/v1/nothing-here")
        assert res.status_code == 404
        assert res.get_json()["path"] == "/api/v1/nothing-here"


class TestCli:
    def test_init_sheet(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["init-sheet"])
        assert result.exit_code == 0
        assert "Header row for Sheet1 created." in result.output
        header = SheetRow.query.filter_by(sheet="Sheet1", row_number=1).first()
        assert header is not None
        assert header.key == "key"

        again = runner.invoke(args=["init-sheet"])
        assert again.exit_code == 0
        assert "already present" in again.output
        assert SheetRow.query.filter_by(sheet="Sheet1").count() == 1

    def test_sheet_dump_decodes(self, app):
        sheet_service.overwrite_range({"projectCode": '"ABC"', "progressPct": "42"}, "Sheet1")
        result = app.test_cli_runner().invoke(args=["sheet-dump"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"projectCode": "ABC", "progressPct": "42"}

    def test_sheet_dump_raw(self, app):
        sheet_service.overwrite_range({"projectCode": '"ABC"'}, "Sheet1")
        result = app.test_cli_runner().invoke(args=["sheet-dump", "--raw"])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"projectCode": '"ABC"'}
