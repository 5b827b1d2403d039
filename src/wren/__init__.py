"""Wren: a small, routing-first web framework.

Routes are matched in registration order, handlers get their arguments
from an explicit service container, and return values are shaped into
responses by type.

Basic usage::

    from wren import App

    app = App()

    @app.route("/")
    def index():
        return "Hello, World!"

    app.get("/profile/{company}/{user}", profile).name("page-2")

    app.run()

Data access::

    from wren.data import Database, QueryBuilder
    app = App(db="sqlite:///app.db")
"""

__version__ = "0.1.0"
__all__ = [
    "Actions",
    "App",
    "AppConfig",
    "Collection",
    "ConfigurationError",
    "Filters",
    "HTTPError",
    "NoRouteMatched",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "Router",
    "ServiceContainer",
    "UnresolvableDependency",
    "WrenError",
    "current_request",
    "get_request",
    "path_param",
    "service",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name == "AppConfig":
        from wren.config import AppConfig

        return AppConfig

    if name == "Request":
        from wren.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from wren.http import response as _resp

        return getattr(_resp, name)

    if name == "Router":
        from wren.routing.router import Router

        return Router

    if name in ("ServiceContainer", "current_request", "path_param", "service"):
        from wren import container as _container

        return getattr(_container, name)

    if name in ("Actions", "Filters"):
        from wren import hooks as _hooks

        return getattr(_hooks, name)

    if name == "get_request":
        from wren.context import get_request

        return get_request

    if name == "Collection":
        from wren.collection import Collection

        return Collection

    if name in (
        "ConfigurationError",
        "HTTPError",
        "NoRouteMatched",
        "NotFound",
        "UnresolvableDependency",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
