"""Self-contained debug error page.

Rendered with plain f-strings so a failure anywhere else in the stack
cannot prevent error reporting. Only used when ``AppConfig.debug`` is on.
"""

import html
import traceback

from wren.http.request import Request

_STYLE = (
    "body{font-family:monospace;background:#1a1b26;color:#c0caf5;padding:2em}"
    "h1{color:#f7768e}pre{white-space:pre-wrap;background:#24283b;padding:1em}"
    "th{text-align:left;padding-right:1em;color:#7aa2f7}"
)


def _request_table(request: Request) -> str:
    rows = [
        ("Method", request.method),
        ("Path", request.path),
        ("Route URI", request.uri),
    ]
    rows.extend((f"Header {name}", value) for name, value in request.headers.items())
    cells = "".join(
        f"<tr><th>{html.escape(label)}</th><td>{html.escape(value)}</td></tr>"
        for label, value in rows
    )
    return f"<table>{cells}</table>"


def render_debug_page(exc: BaseException, request: Request) -> str:
    """Full HTML document describing *exc* raised while serving *request*."""
    title = f"{type(exc).__name__}: {exc}"
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{html.escape(type(exc).__name__)}</title><style>{_STYLE}</style></head>"
        f"<body><h1>{html.escape(title)}</h1>"
        f"<h2>Traceback</h2><pre>{html.escape(tb)}</pre>"
        f"<h2>Request</h2>{_request_table(request)}"
        "</body></html>"
    )
