"""Route, HandlerRef, and RouteMatch frozen dataclasses."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from typing import TYPE_CHECKING, Any

from wren.errors import ConfigurationError
from wren.routing.params import PathSegment, normalize_path, parse_pattern, split_path

if TYPE_CHECKING:
    from wren.container import Param, ServiceContainer
    from wren.http.request import Request


class Method(StrEnum):
    """HTTP methods a route can be registered for. ``ANY`` is a wildcard."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    OPTIONS = "OPTIONS"
    ANY = "ANY"

    @classmethod
    def parse(cls, value: str) -> Method:
        """Parse a verb string. ``"*"`` is accepted as ``ANY``."""
        upper = value.upper()
        if upper == "*":
            return cls.ANY
        try:
            return cls(upper)
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            msg = f"Unsupported route method {value!r}. Use one of: {allowed}."
            raise ConfigurationError(msg) from None


class HandlerKind(Enum):
    FUNCTION = "function"
    METHOD = "method"
    SERVICE = "service"


@dataclass(frozen=True, slots=True)
class HandlerRef:
    """What a route calls, before the container turns it into a callable.

    FUNCTION: a plain callable, used as-is.
    METHOD:   ``(Class, "method")`` or ``"tag@method"``; the owner is
              resolved through the container and the method looked up on it.
    SERVICE:  a class or string tag resolved through the container; the
              result must be callable.
    """

    kind: HandlerKind
    target: Any
    method: str | None = None

    @classmethod
    def of(cls, handler: Any) -> HandlerRef:
        """Classify a handler as given at registration."""
        if isinstance(handler, HandlerRef):
            return handler
        if isinstance(handler, str):
            if "@" in handler:
                tag, _, method = handler.partition("@")
                return cls(HandlerKind.METHOD, tag, method)
            return cls(HandlerKind.SERVICE, handler)
        if isinstance(handler, tuple | list) and len(handler) == 2 and isinstance(handler[1], str):
            return cls(HandlerKind.METHOD, handler[0], handler[1])
        if isinstance(handler, type):
            return cls(HandlerKind.SERVICE, handler)
        if callable(handler):
            return cls(HandlerKind.FUNCTION, handler)
        msg = (
            f"Cannot use {type(handler).__name__} as a route handler. "
            "Pass a function, a (Class, 'method') pair, a class, or a string tag."
        )
        raise ConfigurationError(msg)

    @property
    def label(self) -> str:
        """Readable name for route listings and logs."""
        target = self.target if isinstance(self.target, str) else getattr(
            self.target, "__qualname__", repr(self.target)
        )
        if self.kind is HandlerKind.METHOD:
            return f"{target}.{self.method}"
        return target


@dataclass(frozen=True, slots=True)
class Route:
    """One registered (method, pattern, handler) binding.

    Frozen. Fluent configuration through ``RouteHandle`` replaces the
    registry entry with a modified copy.
    """

    method: Method
    path: str
    handler: HandlerRef
    endpoint: Callable[..., Any]
    params: tuple[Param, ...] | None = None
    name: str | None = None
    prefix: str | None = None
    middlewares: tuple[Any, ...] = ()
    _segments: tuple[PathSegment, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_segments", parse_pattern(self.pattern))

    @property
    def pattern(self) -> str:
        """The effective, normalized pattern: prefix joined with path."""
        if self.prefix:
            return normalize_path(f"{normalize_path(self.prefix)}/{normalize_path(self.path)}")
        return normalize_path(self.path)

    @property
    def segments(self) -> tuple[PathSegment, ...]:
        return self._segments

    @property
    def variables(self) -> tuple[str, ...]:
        """Placeholder names in pattern order."""
        names: list[str] = []
        for seg in self._segments:
            if seg.is_param and seg.param_name not in names:
                names.append(seg.param_name or "")
        return tuple(names)

    @property
    def param_types(self) -> dict[str, str]:
        """Converter name per typed placeholder."""
        types: dict[str, str] = {}
        for seg in self._segments:
            if seg.is_param and seg.param_name:
                types.setdefault(seg.param_name, seg.param_type)
        return types

    def is_match(self, method: str, path: str) -> bool:
        """Whether a request with *method* and *path* selects this route."""
        if self.method is not Method.ANY and self.method != method:
            return False

        if not any(seg.is_param for seg in self._segments):
            return self.pattern == normalize_path(path)

        parts = split_path(path)
        if len(parts) != len(self._segments):
            return False
        return all(seg.accepts(part) for seg, part in zip(self._segments, parts, strict=True))

    def resolve_variables(self, path: str) -> dict[str, str]:
        """Placeholder values read positionally from the concrete *path*.

        A placeholder whose position lies beyond the end of *path*
        resolves to ``""``.
        """
        parts = split_path(path)
        variables: dict[str, str] = {}
        for index, seg in enumerate(self._segments):
            if seg.is_param and seg.param_name:
                variables.setdefault(seg.param_name, parts[index] if index < len(parts) else "")
        return variables

    def run(
        self,
        request: Request,
        container: ServiceContainer,
        variables: Mapping[str, str] | None = None,
    ) -> Any:
        """Invoke the handler for *request* and return its raw result.

        *variables* are the already-resolved path variables; they are read
        from ``request.uri`` when not given. Exceptions raised by the
        handler propagate unchanged.
        """
        if variables is None:
            variables = self.resolve_variables(request.uri)
        args, kwargs = container.build_arguments(
            self.params, variables, request, types=self.param_types
        )
        return self.endpoint(*args, **kwargs)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
