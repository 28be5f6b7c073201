"""Unit tests for kubernetes API error helpers."""

import json
import kopf
import pytest
from kubernetes_asyncio.client import ApiException
from webserver.utils.errors import already_exists_error, convert_api_exception


def api_exception(status, body=None):
    ex = ApiException(status=status, reason="reason")
    ex.body = json.dumps(body) if body is not None else None
    return ex


class TestAlreadyExistsError:
    """Tests for already_exists_error."""

    def test_already_exists(self):
        assert already_exists_error(api_exception(409, {"reason": "AlreadyExists"}))

    def test_conflict_with_other_reason(self):
        assert not already_exists_error(api_exception(409, {"reason": "Conflict"}))

    def test_not_json_body(self):
        ex = api_exception(409)
        ex.body = "not json"
        assert not already_exists_error(ex)

    def test_other_status(self):
        assert not already_exists_error(api_exception(404, {"reason": "NotFound"}))

    def test_other_exception(self):
        assert not already_exists_error(ValueError("x"))


class TestConvertApiException:
    """Tests for convert_api_exception."""

    @pytest.mark.parametrize("status", [500, 503, 408, 429])
    def test_temporary(self, status):
        with pytest.raises(kopf.TemporaryError):
            convert_api_exception(api_exception(status))

    @pytest.mark.parametrize("status", [400, 403, 422])
    def test_permanent(self, status):
        with pytest.raises(kopf.PermanentError) as exc_info:
            convert_api_exception(api_exception(status, {"message": "denied"}))
        assert "denied" in str(exc_info.value)

    def test_forced_temporary(self):
        with pytest.raises(kopf.TemporaryError):
            convert_api_exception(api_exception(403), permanent=False)
