"""Error handling pipeline for wren requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or minimal defaults.
"""

import html
import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from wren.errors import HTTPError
from wren.http.request import Request
from wren.http.response import Response
from wren.server.negotiation import negotiate

logger = logging.getLogger("wren.server")

ErrorHandlers = Mapping[int | type, Callable[..., Any]]

_STATUS_TITLES = {
    400: "Bad Request",
    403: "Forbidden",
    404: "Page Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
}


def default_error_page(status: int, detail: str) -> str:
    """Minimal HTML document for an error status."""
    title = _STATUS_TITLES.get(status, f"Error {status}")
    message = "The requested page was not found." if status == 404 else detail
    return (
        "<html><body>"
        f"<h1>{html.escape(title)}</h1>"
        f"<p>{html.escape(message)}</p>"
        "</body></html>"
    )


def default_error_response(request: Request, status: int, detail: str) -> Response:
    """HTML error page, or a JSON body when the client asked for JSON."""
    if request.wants_json:
        return Response.json({"error": detail, "status": status}, status=status)
    return Response(body=default_error_page(status, detail), status=status)


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    response = negotiate(result)
    if response is None:
        return Response(body="")
    return response


async def _run_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    status: int,
) -> Response:
    try:
        response = await call_error_handler(handler, request, exc)
    except Exception:
        logger.exception("Error handler for %d failed on %s %s", status, request.method, request.path)
        return default_error_response(request, 500, "Internal Server Error")
    # Keep the exception's status unless the handler chose one
    if response.status == 200:
        response = response.with_status(status)
    return response


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    # Exact exception type first, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        return await _run_error_handler(handler, request, exc, exc.status)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = default_error_response(request, exc.status, detail)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        return await _run_error_handler(handler, request, exc, 500)

    if debug:
        from wren.server.debug_page import render_debug_page

        return Response(body=render_debug_page(exc, request), status=500)

    return default_error_response(request, 500, "Internal Server Error")
