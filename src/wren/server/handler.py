"""ASGI handler: translates ASGI scope/messages to wren types.

The only component that touches raw ASGI request messages. Reads the
body, builds a Request, runs the synchronous router dispatch in a worker
thread, and sends the Response back through ASGI send(). Every failure
on the way, user filters and error handlers included, ends up as an
error response.
"""

import contextvars
import logging
from collections.abc import Callable, Mapping
from typing import Any

import anyio.to_thread

from wren._internal.asgi import Receive, Scope, Send, read_body
from wren.context import request_var
from wren.errors import HTTPError
from wren.hooks import Filters
from wren.http.request import Request
from wren.http.response import Response
from wren.routing.router import Router
from wren.server.errors import default_error_response, handle_http_error, handle_internal_error
from wren.server.sender import send_empty, send_response

logger = logging.getLogger("wren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    error_handlers: Mapping[int | type, Callable[..., Any]],
    filters: Filters | None = None,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    body = await read_body(receive)
    try:
        request = Request.from_asgi(scope, body, filters=filters)
    except Exception as exc:
        # A request.method or request.uri filter failed: report it against
        # the unfiltered request
        request = Request.from_asgi(scope, body)
        response = await handle_internal_error(exc, request, error_handlers, debug)
        await _send(response, request, send)
        return

    token = request_var.set(request)
    try:
        context = contextvars.copy_context()
        try:
            response = await anyio.to_thread.run_sync(context.run, router.dispatch, request)
        except HTTPError as exc:
            response = await handle_http_error(exc, request, error_handlers, debug)
        except Exception as exc:
            response = await handle_internal_error(exc, request, error_handlers, debug)
        await _send(response, request, send)
    finally:
        request_var.reset(token)


async def _send(response: Response | None, request: Request, send: Send) -> None:
    if response is None:
        await send_empty(send)
        return
    try:
        await send_response(response, send)
    except UnicodeEncodeError:
        # Headers must be latin-1; nothing was sent yet
        logger.exception("Unsendable response for %s %s", request.method, request.path)
        await send_response(default_error_response(request, 500, "Internal Server Error"), send)
