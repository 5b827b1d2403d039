"""Request-scoped context via ContextVar.

``request_var`` holds the ``Request`` being served. The ASGI handler sets
it before dispatch and resets it afterwards; the worker thread that runs
the route sees it through a copied context.
"""

from contextvars import ContextVar

from wren.http.request import Request

request_var: ContextVar[Request] = ContextVar("wren_request")


def get_request() -> Request:
    """The current request.

    Raises ``LookupError`` outside a request.
    """
    return request_var.get()


def current_base_url() -> str:
    """``scheme://host`` of the current request, or ``""`` outside one."""
    request = request_var.get(None)
    return request.base_url if request is not None else ""
