"""Ordered route registry with first-match dispatch.

Routes are matched in registration order: the first route whose
``is_match()`` accepts the request wins, regardless of how specific a
later route might be. The registry is append-only and becomes read-only
once ``compile()`` runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from wren.container import Param, ServiceContainer
from wren.errors import ConfigurationError, NoRouteMatched
from wren.hooks import Filters
from wren.routing.route import HandlerRef, Method, Route, RouteMatch
from wren.server.negotiation import negotiate

if TYPE_CHECKING:
    from wren.http.request import Request
    from wren.http.response import Response

logger = logging.getLogger("wren.routing")


class RouteHandle:
    """Fluent configuration for a freshly registered route.

    Each call swaps the registry entry for a modified copy of the
    ``Route`` and returns the handle again::

        router.get("/profile/{company}/{user}", profile).name("page-2")
    """

    __slots__ = ("_index", "_router")

    def __init__(self, router: Router, index: int) -> None:
        self._router = router
        self._index = index

    @property
    def route(self) -> Route:
        """The current registry entry."""
        return self._router._routes[self._index]

    def name(self, name: str) -> RouteHandle:
        """Name the route for reverse URL generation."""
        self._router._replace(self._index, name=name)
        return self

    def prefix(self, prefix: str) -> RouteHandle:
        """Mount the route under *prefix* (affects matching and URLs)."""
        self._router._replace(self._index, prefix=prefix)
        return self

    def middleware(self, *middleware: Any) -> RouteHandle:
        """Attach middleware. Lists and tuples are flattened in order.

        Middleware is recorded on the route only; dispatch does not run it.
        """
        added = tuple(_flatten(middleware))
        self._router._replace(self._index, middlewares=(*self.route.middlewares, *added))
        return self

    def __repr__(self) -> str:
        return f"RouteHandle({self.route!r})"


def _flatten(items: Iterable[Any]) -> Iterable[Any]:
    for item in items:
        if isinstance(item, list | tuple):
            yield from _flatten(item)
        else:
            yield item


class Router:
    """Route registry, matcher, and dispatcher.

    Usage::

        router = Router()
        router.get("/", home).name("home")
        router.get("/users/{id:int}", show_user)
        router.compile()
        response = router.dispatch(request)

    Handlers are resolved to callables through the container when they
    are registered, so bind services before registering routes that
    refer to them.
    """

    __slots__ = ("_compiled", "_container", "_filters", "_routes")

    def __init__(
        self,
        container: ServiceContainer | None = None,
        filters: Filters | None = None,
    ) -> None:
        self._container = container if container is not None else ServiceContainer()
        self._filters = filters if filters is not None else Filters()
        self._routes: list[Route] = []
        self._compiled = False

    # -- Registration --

    def route(
        self,
        method: str,
        path: str,
        handler: Any,
        *,
        params: Sequence[Param] | None = None,
    ) -> RouteHandle:
        """Register *handler* for *method* and *path*.

        The new Route passes through the ``router.new_route`` filter,
        which may return a replacement Route.
        """
        self._check_not_compiled()
        ref = HandlerRef.of(handler)
        route = Route(
            method=Method.parse(method),
            path=path,
            handler=ref,
            endpoint=self._container.resolve_handler(ref),
            params=tuple(params) if params is not None else None,
        )
        route = self._filters.apply("router.new_route", route)
        if not isinstance(route, Route):
            msg = (
                "The 'router.new_route' filter must return a Route, "
                f"got {type(route).__name__}"
            )
            raise ConfigurationError(msg)
        self._routes.append(route)
        return RouteHandle(self, len(self._routes) - 1)

    def get(self, path: str, handler: Any, *, params: Sequence[Param] | None = None) -> RouteHandle:
        return self.route("GET", path, handler, params=params)

    def post(self, path: str, handler: Any, *, params: Sequence[Param] | None = None) -> RouteHandle:
        return self.route("POST", path, handler, params=params)

    def put(self, path: str, handler: Any, *, params: Sequence[Param] | None = None) -> RouteHandle:
        return self.route("PUT", path, handler, params=params)

    def delete(
        self, path: str, handler: Any, *, params: Sequence[Param] | None = None
    ) -> RouteHandle:
        return self.route("DELETE", path, handler, params=params)

    def patch(
        self, path: str, handler: Any, *, params: Sequence[Param] | None = None
    ) -> RouteHandle:
        return self.route("PATCH", path, handler, params=params)

    def options(
        self, path: str, handler: Any, *, params: Sequence[Param] | None = None
    ) -> RouteHandle:
        return self.route("OPTIONS", path, handler, params=params)

    def any(self, path: str, handler: Any, *, params: Sequence[Param] | None = None) -> RouteHandle:
        """Register *handler* for every HTTP method."""
        return self.route("ANY", path, handler, params=params)

    def _replace(self, index: int, **changes: Any) -> None:
        self._check_not_compiled()
        self._routes[index] = replace(self._routes[index], **changes)

    def _check_not_compiled(self) -> None:
        if self._compiled:
            msg = "Cannot add or modify routes after the router has been compiled."
            raise RuntimeError(msg)

    # -- Introspection --

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes in registration (= match priority) order."""
        return tuple(self._routes)

    @property
    def container(self) -> ServiceContainer:
        return self._container

    @property
    def compiled(self) -> bool:
        return self._compiled

    def __len__(self) -> int:
        return len(self._routes)

    def route_by_name(self, name: str) -> Route | None:
        """The first route registered under *name*, or ``None``."""
        for route in self._routes:
            if route.name == name:
                return route
        return None

    def compile(self) -> None:
        """Freeze the registry. No more routes can be added or changed."""
        self._compiled = True

    # -- Matching and dispatch --

    def match_route(self, method: str, path: str) -> Route | None:
        """The first route accepting *method* and *path*, or ``None``."""
        for route in self._routes:
            if route.is_match(method, path):
                return route
        return None

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against the registry.

        Raises ``NoRouteMatched`` if no route accepts it.
        """
        route = self.match_route(method, path)
        if route is None:
            raise NoRouteMatched(method, path)
        logger.debug("%s /%s -> %s", method, path.strip("/"), route.handler.label)
        return RouteMatch(route=route, path_params=route.resolve_variables(path))

    def dispatch(self, request: Request) -> Response | None:
        """Match *request*, run the route, and shape the result.

        Returns ``None`` when the handler produced an empty result.
        Handler exceptions propagate unchanged; the only error raised
        here is ``NoRouteMatched``.
        """
        match = self.match(request.method, request.uri)
        result = match.route.run(request, self._container, match.path_params)
        return negotiate(result)
