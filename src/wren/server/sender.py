"""ASGI response sending: a wren Response becomes a start and a body message."""

from wren._internal.asgi import Send
from wren.http.response import Response

# 1xx, 204 and 304 replies never carry a body
_BODYLESS = frozenset({204, 304})


def _encode(pairs: list[tuple[str, str]]) -> list[tuple[bytes, bytes]]:
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in pairs]


async def _send(send: Send, status: int, headers: list[tuple[str, str]], body: bytes) -> None:
    if status < 200 or status in _BODYLESS:
        body = b""
    headers.append(("content-length", str(len(body))))
    await send({"type": "http.response.start", "status": status, "headers": _encode(headers)})
    await send({"type": "http.response.body", "body": body})


async def send_response(response: Response, send: Send) -> None:
    """Write *response* with its content type, headers and a content length."""
    headers = [("content-type", response.content_type), *response.headers]
    await _send(send, response.status, headers, response.body_bytes)


async def send_empty(send: Send, status: int = 200) -> None:
    """Reply with headers only, for handlers that produced nothing."""
    await _send(send, status, [], b"")
