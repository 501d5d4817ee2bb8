# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import json
import threading

import pytest

from serviceapi.cli import main as cli_main
from serviceapi.cli.main import build_descriptor, build_parser
from serviceapi.config import HttpSettings
from serviceapi.dispatcher import DispatchState
from serviceapi.errors import ErrorCategory
from serviceapi.http.adapters import StubHttpClient
from serviceapi.http.models import HttpRequest, HttpResponse
from serviceapi.models import JsonValue, Method, RequestDescriptor, Success
from serviceapi.runtime import ServiceApi


def _ok(payload: dict) -> HttpResponse:
    return HttpResponse(ok=True, status_code=200, content=json.dumps(payload).encode())


def test_build_parser_and_descriptor(tmp_path):
    upload = tmp_path / "a.txt"
    upload.write_text("hi")
    parser = build_parser()
    args = parser.parse_args(
        [
            "http://example.com/api",
            "-X",
            "post",
            "-H",
            "X-Token: abc",
            "-d",
            "count=3",
            "-d",
            "name=bob",
            "-d",
            'meta={"k": [1]}',
            "-F",
            f"doc={upload}",
            "--json",
        ]
    )
    assert args.method == "POST"
    assert args.json is True

    descriptor = build_descriptor(args)
    assert descriptor.method is Method.POST
    assert [(h.name, h.value) for h in descriptor.headers] == [("X-Token", "abc")]
    assert [(p.key, p.value.to_python()) for p in descriptor.parameters] == [("count", 3), ("name", "bob"), ("meta", {"k": [1]})]
    assert descriptor.files[0].source_path == str(upload)


def test_cli_main_success_json(monkeypatch, capsys):
    stub = StubHttpClient({"http://h/p?a=1": _ok({"x": 1})})
    monkeypatch.setattr(cli_main, "create_default_http_client", lambda settings: stub)
    code = cli_main.main(["http://h/p", "-d", "a=1", "--json"])
    assert code == cli_main.EXIT_OK
    assert json.loads(capsys.readouterr().out) == {"data": {"x": 1}, "ok": True}
    assert stub.closed


def test_cli_main_failure_and_construction_error(monkeypatch, capsys, tmp_path):
    stub = StubHttpClient({"http://h/p": HttpResponse(ok=True, status_code=500)})
    monkeypatch.setattr(cli_main, "create_default_http_client", lambda settings: stub)

    assert cli_main.main(["http://h/p"]) == cli_main.EXIT_FAILURE
    assert "Failure: request failed" in capsys.readouterr().out

    code = cli_main.main(["http://h/p", "-X", "POST", "-F", f"f={tmp_path / 'missing.bin'}"])
    assert code == cli_main.EXIT_CONSTRUCTION_ERROR
    assert "bodyPartFileNotReachable" in capsys.readouterr().err
    assert len(stub.requests) == 1


def test_cli_rejects_malformed_pairs():
    with pytest.raises(SystemExit):
        cli_main.main(["http://h/p", "-d", "novalue"])


def test_service_api_call_and_request():
    stub = StubHttpClient({"http://h/p": _ok({"done": True})})
    with ServiceApi(stub, settings=HttpSettings()) as api:
        result = api.call(RequestDescriptor(url="http://h/p", method=Method.POST), timeout=5)
        assert result.ok
        assert result.value.to_python() == {"done": True}

        delivered = []
        dispatcher = api.request(RequestDescriptor(url="http://h/p", method=Method.PUT), delivered.append)
        assert dispatcher.wait(5)
        assert delivered == [dispatcher.result]
        assert dispatcher.request_id != api.dispatcher(RequestDescriptor(url="http://h/p")).request_id
    assert stub.closed
    assert stub.bodies[0] == b""


def test_service_api_call_times_out_and_cancels():
    release = threading.Event()

    class SlowClient:
        def request(self, request: HttpRequest) -> HttpResponse:
            release.wait(5)
            return _ok({})

        def close(self) -> None:
            return None

    api = ServiceApi(SlowClient(), settings=HttpSettings())
    result = api.call(RequestDescriptor(url="http://h/p"), timeout=0.05)
    release.set()
    assert not result.ok
    assert result.category is ErrorCategory.TIMEOUT


class LateCompletingDispatcher:
    """Times out on the first wait, then completes as cancel() arrives."""

    def __init__(self):
        self.state = DispatchState.IDLE
        self._on_complete = None

    def start(self, on_complete):
        self._on_complete = on_complete
        self.state = DispatchState.IN_FLIGHT

    def wait(self, timeout=None):
        return timeout is None

    def cancel(self):
        self.state = DispatchState.COMPLETED
        self._on_complete(Success(JsonValue.of_string("late")))


def test_service_api_call_keeps_result_delivered_during_timeout(monkeypatch):
    api = ServiceApi(StubHttpClient(), settings=HttpSettings())
    monkeypatch.setattr(api, "dispatcher", lambda descriptor: LateCompletingDispatcher())
    result = api.call(RequestDescriptor(url="http://h/p"), timeout=0.01)
    assert result.ok
    assert result.value.payload == "late"
