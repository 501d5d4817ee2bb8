# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import socket
import threading

import httpx

from serviceapi.config import HttpSettings
from serviceapi.errors import BodyEncodingError, ErrorCategory, categorize_exception
from serviceapi.http.adapters import StubHttpClient
from serviceapi.http.headers import header_value, normalize_headers, set_header
from serviceapi.http.httpx_client import HttpxClient
from serviceapi.http.models import HttpRequest, HttpResponse


def _fake_httpx_client(requests, chunks=(b"",), status_code=200):
    class FakeHttpxClient:
        def __init__(self, follow_redirects, timeout, verify):  # noqa: ARG002
            self.follow_redirects = follow_redirects
            self.timeout = timeout
            self.verify = verify

        def stream(self, method, url, headers=None, content=None, timeout=None, follow_redirects=None):
            requests.append({"method": method, "url": url, "headers": headers, "content": content, "timeout": timeout, "follow_redirects": follow_redirects})

            class Resp:
                headers = httpx.Headers({"Content-Type": "application/json"})
                encoding = "utf-8"

                def __init__(self, response_url: str):
                    self.url = httpx.URL(response_url)
                    self.status_code = status_code

                def iter_bytes(self):
                    yield from chunks

            class _Ctx:
                def __enter__(self):
                    return Resp(url)

                def __exit__(self, exc_type, exc, tb):  # noqa: ARG002
                    return None

            return _Ctx()

        def close(self):
            requests.append({"closed": True})

    return FakeHttpxClient


def test_httpx_client_success_and_error(monkeypatch):
    requests = []
    monkeypatch.setattr(httpx, "Client", _fake_httpx_client(requests, chunks=(b'{"a"', b": 1}")))
    client = HttpxClient(HttpSettings(user_agent="UA/1.0"))
    resp = client.request(HttpRequest(url="http://example/path", method="POST", headers={"X": "1"}, body=b"payload", allow_redirects=False, timeout=1.2))
    assert resp.ok is True
    assert resp.status_code == 200
    assert resp.content == b'{"a": 1}'
    assert resp.text == '{"a": 1}'
    assert resp.meta["body_truncated"] is False
    assert requests[0]["headers"]["User-Agent"] == "UA/1.0"
    assert requests[0]["content"] == b"payload"
    assert requests[0]["timeout"] == 1.2
    assert requests[0]["follow_redirects"] is False

    client.close()
    assert requests[-1] == {"closed": True}

    class ErrorClient(_fake_httpx_client([])):
        def stream(self, *_, **__):
            raise httpx.ConnectTimeout("boom")

    monkeypatch.setattr(httpx, "Client", ErrorClient)
    err_resp = HttpxClient(HttpSettings()).request(HttpRequest(url="http://example"))
    assert err_resp.ok is False
    assert err_resp.error_message == "boom"
    assert err_resp.error_category == ErrorCategory.TIMEOUT.value
    assert err_resp.error_type == "ConnectTimeout"


def test_httpx_client_keeps_caller_user_agent_and_default_timeout(monkeypatch):
    requests = []
    monkeypatch.setattr(httpx, "Client", _fake_httpx_client(requests))
    client = HttpxClient(HttpSettings(user_agent="UA/1.0", timeout=4.0))
    client.request(HttpRequest(url="http://example", headers={"user-agent": "Mine/2"}))
    assert requests[0]["headers"] == {"user-agent": "Mine/2"}
    assert requests[0]["timeout"] == 4.0


def test_httpx_client_truncates_large_bodies(monkeypatch):
    monkeypatch.setattr(httpx, "Client", _fake_httpx_client([], chunks=(b"12345", b"67890")))
    client = HttpxClient(HttpSettings(max_body_bytes=7))
    resp = client.request(HttpRequest(url="http://example"))
    assert resp.content == b"1234567"
    assert resp.body_truncated


def test_httpx_client_honours_cancel_event(monkeypatch):
    requests = []
    monkeypatch.setattr(httpx, "Client", _fake_httpx_client(requests))
    cancel = threading.Event()
    cancel.set()
    resp = HttpxClient(HttpSettings()).request(HttpRequest(url="http://example", cancel_event=cancel))
    assert resp.ok is False
    assert resp.error_category == ErrorCategory.CANCELLED.value
    assert requests == []


def test_httpx_client_cancel_while_reading(monkeypatch):
    cancel = threading.Event()

    def chunks():
        yield b"first"
        cancel.set()
        yield b"second"

    monkeypatch.setattr(httpx, "Client", _fake_httpx_client([], chunks=chunks()))
    resp = HttpxClient(HttpSettings()).request(HttpRequest(url="http://example", cancel_event=cancel))
    assert resp.ok is False
    assert resp.error_category == ErrorCategory.CANCELLED.value


def test_stub_http_client_returns_registered_responses():
    stub = StubHttpClient()
    custom_resp = HttpResponse(ok=True, status_code=200, text="hello")
    stub.add("http://example", custom_resp)
    result = stub.request(HttpRequest(url="http://example", body=iter([b"a", b"b"])))
    assert result.text == "hello"
    assert stub.bodies == [b"ab"]
    missing = stub.request(HttpRequest(url="http://missing"))
    assert missing.ok is False
    assert stub.requests[0].url == "http://example"
    stub.close()
    assert stub.closed


def test_header_helpers_are_case_insensitive():
    pairs = [("Content-Type", "text/plain"), ("X-A", "1")]
    assert header_value(pairs, "content-type") == "text/plain"
    assert header_value({"x-a": " 1 "}, "X-A") == "1"
    assert header_value(None, "x", default="d") == "d"
    assert normalize_headers({"X-B": None}) == {"x-b": ""}

    set_header(pairs, "content-type", "application/json")
    assert pairs == [("X-A", "1"), ("content-type", "application/json")]


def test_categorize_exception():
    assert categorize_exception(httpx.ReadTimeout("t")) is ErrorCategory.TIMEOUT
    assert categorize_exception(httpx.ConnectError("refused")) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ConnectionResetError()) is ErrorCategory.CONNECTION_ERROR
    assert categorize_exception(ValueError("x")) is ErrorCategory.UNKNOWN_ERROR
    assert categorize_exception(BodyEncodingError("short read")) is ErrorCategory.ENCODING_ERROR

    try:
        try:
            raise socket.gaierror("no such host")
        except socket.gaierror as inner:
            raise httpx.ConnectError("wrapped") from inner
    except httpx.ConnectError as exc:
        assert categorize_exception(exc) is ErrorCategory.DNS_ERROR
