"""Wren exception hierarchy.

Shared across Router, container, App, and the server pipeline so every
module raises and catches the same types.
"""

from dataclasses import dataclass
from typing import Any


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when routes, bindings, or app configuration are invalid.

    Typically surfaces at registration time or during ``App._freeze()``.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    The ASGI handler catches these and dispatches to the matching
    ``@app.error()`` handler, or renders a default body.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: the requested page does not exist."""

    def __init__(self, detail: str = "Page Not Found") -> None:
        super().__init__(status=404, detail=detail)


class NoRouteMatched(NotFound):  # noqa: N818
    """404: no registered route satisfies the request method and path.

    The only error the router raises itself.
    """

    def __init__(self, method: str, path: str) -> None:
        super().__init__(detail=f"No route matches {method} {path!r}")
        object.__setattr__(self, "method", method)
        object.__setattr__(self, "path", path)


class UnresolvableDependency(WrenError):  # noqa: N818
    """A handler or parameter asked for something the container cannot produce.

    Raised by ``ServiceContainer.resolve()``. Not an ``HTTPError``: the
    error pipeline turns it into a 500 with diagnostics in debug mode.
    """

    def __init__(self, key: Any, reason: str = "") -> None:
        self.key = key
        label = key if isinstance(key, str) else getattr(key, "__qualname__", repr(key))
        msg = f"Cannot resolve {label!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
