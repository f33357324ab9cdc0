"""Tests for app.utils.errors — standard API error bodies."""

import pytest

from app.utils.errors import E, _DEFAULT_STATUS, api_error


def _codes():
    return {value for name, value in vars(E).items() if name.isupper()}


class TestApiError:
    def test_every_code_has_a_default_status(self):
        assert _codes() == set(_DEFAULT_STATUS)

    @pytest.mark.parametrize(
        "code,status",
        [
            (E.VALIDATION_REQUIRED, 400),
            (E.VALIDATION_INVALID, 422),
            (E.NOT_FOUND, 404),
            (E.NOT_READY, 409),
        ],
    )
    def test_default_status(self, app, code, status):
        with app.test_request_context():
            response, http_status = api_error(code, "message")
        assert http_status == status
        assert response.get_json() == {"error": "message", "code": code}

    def test_details_and_status_override(self, app):
        with app.test_request_context():
            response, http_status = api_error(E.NOT_FOUND, "gone", status=410, details={"index": 4})
        assert http_status == 410
        assert response.get_json()["details"] == {"index": 4}
