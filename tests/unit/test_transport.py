"""
Unit tests -- HTTP transport via httpx.MockTransport (no live server needed).
"""
import httpx
import pytest

from tabquery.client.transport import get_method, request
from tabquery.core.errors import RequestFailure

URL = "http://testserver/query/home/getQuery.api"


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class Recorder:
    """Counts callback invocations and keeps the last arguments."""

    def __init__(self, result="handled"):
        self.calls = []
        self.result = result

    def __call__(self, body, response):
        self.calls.append((body, response))
        return self.result


# ── get_method ───────────────────────────────────────────

def test_get_method_normalises():
    assert get_method("post") == "POST"
    assert get_method("GET") == "GET"


def test_get_method_defaults_to_get():
    assert get_method(None) == "GET"
    assert get_method("DELETE") == "GET"


# ── Success ──────────────────────────────────────────────

def test_returns_json_without_callback():
    client = _client(lambda req: httpx.Response(200, json={"rows": [{"Name": "x"}]}))
    assert request(URL, client=client) == {"rows": [{"Name": "x"}]}


def test_success_callback_invoked_once():
    success, failure = Recorder("ok"), Recorder()
    client = _client(lambda req: httpx.Response(200, json={"rowCount": 0}))
    result = request(URL, success=success, failure=failure, client=client)
    assert result == "ok"
    assert len(success.calls) == 1
    assert failure.calls == []
    body, response = success.calls[0]
    assert body == {"rowCount": 0}
    assert response.status_code == 200


def test_non_json_success_body_is_none():
    client = _client(lambda req: httpx.Response(200, text="<html></html>"))
    assert request(URL, client=client) is None


def test_params_sent_with_repeats():
    seen = {}

    def handler(req):
        seen["values"] = req.url.params.get_list("query.x~eq")
        seen["method"] = req.method
        return httpx.Response(200, json={})

    request(URL, method="post", params={"query.x~eq": ["1", "2"]}, client=_client(handler))
    assert seen["values"] == ["1", "2"]
    assert seen["method"] == "POST"


def test_injected_client_left_open():
    client = _client(lambda req: httpx.Response(200, json={}))
    request(URL, client=client)
    assert not client.is_closed


# ── Failure ──────────────────────────────────────────────

def test_server_exception_passed_to_failure():
    success, failure = Recorder(), Recorder("failed")
    client = _client(lambda req: httpx.Response(500, json={"exception": "boom"}))
    result = request(URL, success=success, failure=failure, client=client)
    assert result == "failed"
    assert success.calls == []
    assert len(failure.calls) == 1
    payload, response = failure.calls[0]
    assert payload["exception"] == "boom"
    assert response.status_code == 500


def test_empty_error_body_uses_reason_phrase():
    failure = Recorder()
    client = _client(lambda req: httpx.Response(404))
    request(URL, failure=failure, client=client)
    payload, _ = failure.calls[0]
    assert payload == {"exception": "Not Found"}


def test_failure_without_callback_raises():
    client = _client(lambda req: httpx.Response(403, json={"exception": "denied"}))
    with pytest.raises(RequestFailure, match="denied") as info:
        request(URL, client=client)
    assert info.value.status == 403
    assert info.value.payload["exception"] == "denied"


def test_network_error_goes_to_failure():
    def handler(req):
        raise httpx.ConnectError("connection refused", request=req)

    failure = Recorder()
    request(URL, failure=failure, client=_client(handler))
    payload, response = failure.calls[0]
    assert response is None
    assert payload["exception"] == "connection refused"


def test_network_error_without_callback_raises():
    def handler(req):
        raise httpx.ConnectError("connection refused", request=req)

    with pytest.raises(RequestFailure) as info:
        request(URL, client=_client(handler))
    assert info.value.status == 0
