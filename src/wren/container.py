"""Service container: the dependency resolver behind route handlers.

Handlers never get inspected at call time. Instead, the binding table
maps a type or a string tag to a factory, and each route may declare the
arguments its handler needs as an explicit tuple of ``Param`` descriptors::

    container = ServiceContainer()
    container.bind(QueryBuilder, lambda: QueryBuilder(db))

    router.get(
        "/profile/{company}/{user}",
        show_profile,
        params=(service(QueryBuilder), path_param("company"), path_param("user")),
    )

Routes without descriptors receive their path variables as keyword
arguments, nothing else.

Resolution order for ``resolve(key)``:

1. A factory bound under *key* (``bind``, ``instance``, ``singleton``)
2. Default construction, when *key* is a class whose constructor takes
   no required arguments
3. ``UnresolvableDependency``
"""

from __future__ import annotations

import inspect
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from wren.errors import UnresolvableDependency
from wren.routing.params import convert_param
from wren.routing.route import HandlerKind, HandlerRef

if TYPE_CHECKING:
    from wren.http.request import Request

Factory = Callable[[], Any]


class ParamKind(Enum):
    PATH = "path"
    SERVICE = "service"
    REQUEST = "request"


@dataclass(frozen=True, slots=True)
class Param:
    """One declared handler argument.

    Build these with ``path_param()``, ``service()`` and ``current_request()``
    rather than directly.
    """

    kind: ParamKind
    key: Any = None
    default: Any = None


def path_param(name: str, default: Any = None) -> Param:
    """The value of placeholder *name*, or *default* when the pattern lacks it."""
    return Param(ParamKind.PATH, name, default)


def service(key: type | str) -> Param:
    """An object produced by the container for *key*."""
    return Param(ParamKind.SERVICE, key)


def current_request() -> Param:
    """The ``Request`` being dispatched."""
    return Param(ParamKind.REQUEST)


class ServiceContainer:
    """Binding table from types or string tags to factories.

    Thread safety:
        Bindings are registered during setup. After that the table is
        only read, so concurrent ``resolve()`` calls need no lock beyond
        the one guarding lazy singletons.
    """

    __slots__ = ("_bindings", "_singleton_lock")

    def __init__(self) -> None:
        self._bindings: dict[Any, Factory] = {}
        self._singleton_lock = threading.Lock()

    # -- Binding --

    def bind(self, key: type | str, factory: Factory) -> None:
        """Bind *key* to a zero-argument *factory*, called on every resolve."""
        if not callable(factory):
            msg = f"Factory for {key!r} must be callable, got {type(factory).__name__}"
            raise TypeError(msg)
        self._bindings[key] = factory

    def instance(self, key: type | str, obj: Any) -> None:
        """Bind *key* to an existing object."""
        self._bindings[key] = lambda: obj

    def singleton(self, key: type | str, factory: Factory) -> None:
        """Bind *key* to the object *factory* returns on first resolve."""
        created: list[Any] = []

        def once() -> Any:
            if not created:
                with self._singleton_lock:
                    if not created:
                        created.append(factory())
            return created[0]

        self._bindings[key] = once

    def unbind(self, key: type | str) -> None:
        self._bindings.pop(key, None)

    def has(self, key: type | str) -> bool:
        return key in self._bindings

    # -- Resolution --

    def resolve(self, key: type | str) -> Any:
        """Produce the object for *key*.

        Raises ``UnresolvableDependency`` when there is no binding and
        *key* cannot be default-constructed.
        """
        factory = self._bindings.get(key)
        if factory is not None:
            return factory()
        if isinstance(key, type):
            return self._construct(key)
        if isinstance(key, str):
            raise UnresolvableDependency(key, "no binding registered")
        raise UnresolvableDependency(key, "keys must be types or string tags")

    def _construct(self, cls: type) -> Any:
        try:
            sig = inspect.signature(cls)
        except (TypeError, ValueError):
            return cls()
        required = [
            p.name
            for p in sig.parameters.values()
            if p.default is inspect.Parameter.empty
            and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        ]
        if required:
            names = ", ".join(required)
            raise UnresolvableDependency(
                cls, f"no binding registered and the constructor requires {names}"
            )
        return cls()

    def resolve_handler(self, ref: HandlerRef) -> Callable[..., Any]:
        """Turn a handler reference into the callable dispatch will invoke.

        Called once per route at registration time.
        """
        match ref.kind:
            case HandlerKind.FUNCTION:
                return ref.target
            case HandlerKind.METHOD:
                owner = self.resolve(ref.target)
                method = getattr(owner, ref.method or "", None)
                if not callable(method):
                    raise UnresolvableDependency(
                        ref.target, f"{type(owner).__name__} has no method {ref.method!r}"
                    )
                return method
            case HandlerKind.SERVICE:
                handler = self.resolve(ref.target)
                if not callable(handler):
                    raise UnresolvableDependency(
                        ref.target, f"resolved to non-callable {type(handler).__name__}"
                    )
                return handler
        msg = f"Unknown handler kind {ref.kind!r}"
        raise TypeError(msg)

    def build_arguments(
        self,
        params: Sequence[Param] | None,
        variables: Mapping[str, str],
        request: Request | None = None,
        *,
        types: Mapping[str, str] | None = None,
    ) -> tuple[list[Any], dict[str, Any]]:
        """Build ``(args, kwargs)`` for a handler call.

        Without descriptors, every path variable becomes a keyword argument.
        With descriptors, arguments are positional in descriptor order.
        *types* maps variable names to converter names for typed placeholders.
        """
        types = types or {}
        if params is None:
            kwargs = {
                name: _convert(value, types.get(name, "str")) for name, value in variables.items()
            }
            return [], kwargs

        args: list[Any] = []
        for param in params:
            match param.kind:
                case ParamKind.PATH:
                    if param.key in variables:
                        args.append(_convert(variables[param.key], types.get(param.key, "str")))
                    else:
                        args.append(param.default)
                case ParamKind.SERVICE:
                    args.append(self.resolve(param.key))
                case ParamKind.REQUEST:
                    args.append(request)
        return args, {}


def _convert(value: str, param_type: str) -> Any:
    if not value or param_type == "str":
        return value
    return convert_param(value, param_type)
