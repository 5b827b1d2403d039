"""Wren application class.

Mutable during setup (bindings, routes, hooks, error handlers).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

from __future__ import annotations

import inspect
import threading
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.types import ErrorHandler, ErrorKey, Handler
from wren.config import AppConfig
from wren.container import Param, ServiceContainer
from wren.data.database import Database
from wren.data.query import QueryBuilder
from wren.hooks import DEFAULT_PRIORITY, Actions, Filters
from wren.routing.router import RouteHandle, Router
from wren.routing.urls import UrlGenerator
from wren.server.handler import handle_request


class App:
    """The wren application.

    Owns one ``Router``, one ``ServiceContainer`` and the hook registries.
    Routes can be registered fluently::

        app = App(AppConfig(base_url="https://example.com"))
        app.get("/", home).name("home")
        app.get("/profile/{company}/{user}", profile).name("page-2")

    or with the decorator::

        @app.route("/users/{id:int}", name="user")
        def show_user(id):
            ...

    Handlers given as classes or string tags are resolved through the
    container when the route is registered, so bind services first.

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the router, even when several ASGI workers make
        their first call at once.
    """

    __slots__ = (
        "_db",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_urls",
        "actions",
        "config",
        "container",
        "filters",
        "router",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: Database | str | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.container = ServiceContainer()
        self.filters = Filters()
        self.actions = Actions()
        self.router = Router(self.container, self.filters)
        self._urls = UrlGenerator(self.router, self.config.base_url)
        self._error_handlers: dict[ErrorKey, ErrorHandler] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        self.container.instance(App, self)
        self.container.instance(AppConfig, self.config)
        self.container.instance(Router, self.router)
        self.container.instance(UrlGenerator, self._urls)

        # A Database instance or URL, falling back to config.database_url.
        # When set it is bound in the container and closed at shutdown.
        if db is None and self.config.database_url:
            db = self.config.database_url
        self._db: Database | None = Database(db) if isinstance(db, str) else db
        if self._db is not None:
            database = self._db
            self.container.instance(Database, database)
            self.container.instance(QueryBuilder, QueryBuilder(database))

    # -- Route registration --

    def add_route(
        self,
        method: str,
        path: str,
        handler: Any,
        *,
        params: Sequence[Param] | None = None,
    ) -> RouteHandle:
        """Register *handler* for *method* and *path*."""
        self._check_not_frozen()
        return self.router.route(method, path, handler, params=params)

    def get(self, path: str, handler: Any, *, params: Sequence[Param] | None = None) -> RouteHandle:
        return self.add_route("GET", path, handler, params=params)

    def post(self, path: str, handler: Any, *, params: Sequence[Param] | None = None) -> RouteHandle:
        return self.add_route("POST", path, handler, params=params)

    def put(self, path: str, handler: Any, *, params: Sequence[Param] | None = None) -> RouteHandle:
        return self.add_route("PUT", path, handler, params=params)

    def delete(
        self, path: str, handler: Any, *, params: Sequence[Param] | None = None
    ) -> RouteHandle:
        return self.add_route("DELETE", path, handler, params=params)

    def patch(
        self, path: str, handler: Any, *, params: Sequence[Param] | None = None
    ) -> RouteHandle:
        return self.add_route("PATCH", path, handler, params=params)

    def options(
        self, path: str, handler: Any, *, params: Sequence[Param] | None = None
    ) -> RouteHandle:
        return self.add_route("OPTIONS", path, handler, params=params)

    def any(self, path: str, handler: Any, *, params: Sequence[Param] | None = None) -> RouteHandle:
        return self.add_route("ANY", path, handler, params=params)

    def route(
        self,
        path: str,
        *,
        method: str = "GET",
        name: str | None = None,
        params: Sequence[Param] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` or ``{param?}`` for
                path variables, ``{param:int}`` to constrain one.
            method: HTTP method, or ``"ANY"``. Defaults to ``"GET"``.
            name: Optional route name for URL generation.
            params: Explicit argument descriptors (``path_param``,
                ``service``, ``current_request``). Without them the
                handler receives its path variables as keyword arguments.
        """

        def decorator(func: Handler) -> Handler:
            handle = self.add_route(method, path, func, params=params)
            if name is not None:
                handle.name(name)
            return func

        return decorator

    # -- Services --

    def bind(self, key: type | str, factory: Callable[[], Any]) -> None:
        """Bind *key* to a factory called on every resolve."""
        self._check_not_frozen()
        self.container.bind(key, factory)

    def instance(self, key: type | str, obj: Any) -> None:
        """Bind *key* to an existing object."""
        self._check_not_frozen()
        self.container.instance(key, obj)

    def singleton(self, key: type | str, factory: Callable[[], Any]) -> None:
        """Bind *key* to the object *factory* returns on first resolve."""
        self._check_not_frozen()
        self.container.singleton(key, factory)

    @property
    def db(self) -> Database:
        """The configured database.

        Raises ``RuntimeError`` if the app was created without ``db=``.
        """
        if self._db is None:
            msg = "No database configured. Pass db= to App()."
            raise RuntimeError(msg)
        return self._db

    # -- Error handlers --

    def error(self, code_or_exception: ErrorKey) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        Handlers may take ``()``, ``(request)`` or ``(request, exc)`` and
        return anything a route handler can return::

            @app.error(404)
            def not_found(request):
                return {"error": "missing", "path": request.path}
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    @property
    def error_handlers(self) -> Mapping[ErrorKey, ErrorHandler]:
        return dict(self._error_handlers)

    # -- Hooks --

    def add_filter(
        self, name: str, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY
    ) -> None:
        """Register a filter callback (see ``wren.hooks``)."""
        self._check_not_frozen()
        self.filters.add(name, callback, priority)

    def add_action(
        self, name: str, callback: Callable[..., Any], priority: int = DEFAULT_PRIORITY
    ) -> None:
        """Register an action callback (see ``wren.hooks``)."""
        self._check_not_frozen()
        self.actions.add(name, callback, priority)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run as the ``app.startup`` action during ASGI lifespan
        startup, before the server accepts HTTP requests.
        """
        self.add_action("app.startup", func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run as the ``app.shutdown`` action during ASGI lifespan
        shutdown, after the server stops accepting requests.
        """
        self.add_action("app.shutdown", func)
        return func

    # -- URL generation --

    @property
    def urls(self) -> UrlGenerator:
        return self._urls

    def url(self, path: str = "") -> str:
        """Absolute URL for *path* under ``config.base_url``."""
        return self._urls.url(path)

    def url_for(
        self,
        name: str,
        values: Mapping[str, Any] | Sequence[Any] | None = None,
    ) -> str:
        """Absolute URL of the route named *name*.

        Raises ``LookupError`` if no route has that name.
        """
        url = self._urls.route(name, values)
        if url is None:
            msg = f"No route named {name!r}"
            raise LookupError(msg)
        return url

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
        *,
        app_path: str | None = None,
    ) -> None:
        """Compile the app and serve it with uvicorn.

        Args:
            host: Override bind host.
            port: Override bind port.
            app_path: ``"module:attr"`` import string, needed for reload
                in debug mode and for more than one worker.
        """
        from wren.server.serve import run_server

        self._ensure_frozen()
        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            log_level=self.config.log_level,
            reload=self.config.debug,
            workers=self.config.workers,
            app_path=app_path,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            router=self.router,
            error_handlers=self._error_handlers,
            filters=self.filters,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs the startup/shutdown actions and signals completion back to
        the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    if self._db is not None:
                        self._db.connect()
                    await self._run_actions("app.startup")
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self._run_actions("app.shutdown")
                if self._db is not None:
                    self._db.disconnect()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _run_actions(self, name: str) -> None:
        for hook in self.actions.get(name):
            result = hook.callback()
            if inspect.isawaitable(result):
                await result

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        self.router.compile()
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, services, and hooks before calling app.run()."
            )
            raise RuntimeError(msg)
