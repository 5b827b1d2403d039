"""Filter and action hook registries.

Two small observer-pattern registries that let application code hook into
the framework without subclassing:

- ``Filters`` pass a value through every callback registered under a name;
  each callback returns the (possibly replaced) value for the next one.
- ``Actions`` call every callback registered under a name and hand back
  their return values.

Callbacks run in ascending priority order. Callbacks sharing a priority
run in registration order.

Hook names used by wren itself:

==================== ==================================================
``router.new_route`` ``(route)`` before a Route is stored
``request.method``   ``(method)`` when a Request is built
``request.uri``      ``(uri)`` when a Request is built
``request.all``      ``(data)`` from ``Request.all()``
``app.startup``      ``()`` during ASGI lifespan startup
``app.shutdown``     ``()`` during ASGI lifespan shutdown
==================== ==================================================

Thread safety:
    Registration happens during setup. Once the app is frozen the
    registries are only read.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DEFAULT_PRIORITY = 10


@dataclass(frozen=True, slots=True)
class Hook:
    """A registered callback and its priority."""

    callback: Callable[..., Any]
    priority: int = DEFAULT_PRIORITY


class _Registry:
    __slots__ = ("_hooks",)

    def __init__(self) -> None:
        self._hooks: dict[str, list[Hook]] = {}

    def has(self, name: str) -> bool:
        """Return True if at least one callback is registered under *name*."""
        return bool(self._hooks.get(name))

    def get(self, name: str) -> list[Hook]:
        """Return the callbacks for *name*, ordered by priority."""
        return sorted(self._hooks.get(name, ()), key=lambda hook: hook.priority)

    def _add(self, name: str, callback: Callable[..., Any], priority: int) -> None:
        if not callable(callback):
            msg = f"Hook callback for {name!r} must be callable, got {type(callback).__name__}"
            raise TypeError(msg)
        self._hooks.setdefault(name, []).append(Hook(callback, priority))

    def __len__(self) -> int:
        return sum(len(hooks) for hooks in self._hooks.values())


class Filters(_Registry):
    """Named value filters.

    Usage::

        filters = Filters()
        filters.add("request.uri", lambda uri: uri.removeprefix("blog/"))
        filters.apply("request.uri", "blog/posts")  # "posts"
    """

    __slots__ = ()

    def add(
        self,
        name: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> Filters:
        """Register *callback* under *name*. Returns self for chaining."""
        self._add(name, callback, priority)
        return self

    def apply(self, name: str, value: Any, *args: Any) -> Any:
        """Pass *value* through every callback registered under *name*.

        Extra positional *args* are forwarded unchanged to each callback.
        With no callbacks registered, *value* is returned as-is.
        """
        for hook in self.get(name):
            value = hook.callback(value, *args)
        return value


class Actions(_Registry):
    """Named action callbacks.

    Usage::

        actions = Actions()
        actions.add("app.startup", warm_cache)
        actions.run("app.startup")
    """

    __slots__ = ()

    def add(
        self,
        name: str,
        callback: Callable[..., Any],
        priority: int = DEFAULT_PRIORITY,
    ) -> Actions:
        """Register *callback* under *name*. Returns self for chaining."""
        self._add(name, callback, priority)
        return self

    def run(self, name: str, *args: Any) -> list[Any]:
        """Call every callback registered under *name* with *args*.

        Returns the callbacks' return values in call order so async
        callers can await any awaitables among them.
        """
        return [hook.callback(*args) for hook in self.get(name)]
