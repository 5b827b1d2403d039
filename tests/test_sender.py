"""Tests for wren.server.sender and wren.server.serve."""

from typing import Any

import pytest

from wren import App
from wren.http.response import Response
from wren.server import serve
from wren.server.sender import send_empty, send_response


class _Recorder:
    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)


class TestSendResponse:
    async def test_start_and_body(self) -> None:
        send = _Recorder()
        await send_response(Response("héllo", status=201).with_header("X-Trace", "1"), send)
        start, body = send.messages
        assert start["type"] == "http.response.start"
        assert start["status"] == 201
        headers = dict(start["headers"])
        assert headers[b"content-type"] == b"text/html; charset=utf-8"
        assert headers[b"x-trace"] == b"1"
        assert headers[b"content-length"] == str(len("héllo".encode())).encode()
        assert body == {"type": "http.response.body", "body": "héllo".encode()}

    async def test_no_body_for_204(self) -> None:
        send = _Recorder()
        await send_response(Response("ignored", status=204), send)
        assert send.messages[1]["body"] == b""
        assert dict(send.messages[0]["headers"])[b"content-length"] == b"0"

    async def test_send_empty(self) -> None:
        send = _Recorder()
        await send_empty(send)
        assert send.messages[0]["status"] == 200
        assert send.messages[1]["body"] == b""


class TestRunServer:
    @pytest.fixture
    def calls(self, monkeypatch: pytest.MonkeyPatch) -> list[tuple[Any, dict[str, Any]]]:
        recorded: list[tuple[Any, dict[str, Any]]] = []
        monkeypatch.setattr(
            serve.uvicorn, "run", lambda target, **kw: recorded.append((target, kw))
        )
        return recorded

    def test_single_process_uses_instance(self, calls: list[tuple[Any, dict[str, Any]]]) -> None:
        app = App()
        serve.run_server(app, "0.0.0.0", 9000)
        target, kwargs = calls[0]
        assert target is app
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9000

    def test_workers_use_import_string(self, calls: list[tuple[Any, dict[str, Any]]]) -> None:
        serve.run_server(App(), "127.0.0.1", 8000, workers=4, app_path="myapp:app")
        target, kwargs = calls[0]
        assert target == "myapp:app"
        assert kwargs["workers"] == 4

    def test_reload_without_import_string_serves_instance(
        self, calls: list[tuple[Any, dict[str, Any]]]
    ) -> None:
        app = App()
        serve.run_server(app, "127.0.0.1", 8000, reload=True)
        target, _ = calls[0]
        assert target is app
