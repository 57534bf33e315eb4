import json

from shoot.api.envelope import domain_error_envelope, error_envelope, success_envelope
from shoot.core.context import bind_request_context, clear_request_context
from shoot.core.errors import NotFoundError, ProxyRequestError


def _body(response) -> dict:
    return json.loads(response.body.decode("utf-8"))


def test_success_envelope_shape() -> None:
    response = success_envelope({"value": 1})
    body = _body(response)
    assert body["ok"] is True
    assert body["data"] == {"value": 1}
    assert body["error"] is None
    assert isinstance(body.get("meta"), dict)


def test_error_envelope_shape() -> None:
    response = error_envelope(code="bad_request", message="Invalid", status_code=400, details={"field": "x"})
    body = _body(response)
    assert response.status_code == 400
    assert body["ok"] is False
    assert body["error"]["code"] == "bad_request"
    assert body["error"]["message"] == "Invalid"


def test_domain_error_envelope_uses_exception_status() -> None:
    response = domain_error_envelope(NotFoundError("Spec", 42))
    body = _body(response)
    assert response.status_code == 404
    assert body["error"] == {"code": "not_found", "message": "Spec not found", "details": {"id": 42}}

    response = domain_error_envelope(ProxyRequestError("Request failed: boom"))
    assert response.status_code == 502
    assert _body(response)["error"]["code"] == "proxy_request_failed"


def test_meta_carries_bound_request_ids() -> None:
    bind_request_context(request_id="req-1", correlation_id="corr-1")
    try:
        meta = _body(success_envelope(None, meta={"path": "/x"}))["meta"]
    finally:
        clear_request_context()
    assert meta["request_id"] == "req-1"
    assert meta["correlation_id"] == "corr-1"
    assert meta["path"] == "/x"

    meta = _body(success_envelope(None))["meta"]
    assert meta["request_id"] is None
