"""Reverse URL generation for named routes."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from wren.context import current_base_url
from wren.routing.params import normalize_path, parse_pattern

if TYPE_CHECKING:
    from wren.routing.router import Router


class UrlGenerator:
    """Builds absolute URLs from paths and route names.

    Usage::

        urls = UrlGenerator(router, "https://example.com")
        urls.url("/about")                                  # .../about
        urls.route("page-2", {"company": "acme", "user": "bob"})
        urls.route("page-2", ["acme", "bob"])               # same URL

    Without a configured base URL, the scheme and host of the request
    being served are used instead.
    """

    __slots__ = ("_base_url", "_router")

    def __init__(self, router: Router, base_url: str = "") -> None:
        self._router = router
        self._base_url = base_url.rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url or current_base_url()

    def url(self, path: str = "") -> str:
        """Join the base URL and *path* with exactly one slash."""
        return f"{self.base_url}/{normalize_path(path)}"

    def route(
        self,
        name: str,
        values: Mapping[str, Any] | Sequence[Any] | Any = None,
    ) -> str | None:
        """URL for the first route named *name*, or ``None`` if there is none.

        *values* fills placeholders by name (mapping) or in pattern order
        (sequence). A single scalar, strings included, fills the first
        placeholder. Values are percent-encoded, ``/`` included. An
        optional placeholder without a value drops its segment; a
        required one is left empty.
        """
        route = self._router.route_by_name(name)
        if route is None:
            return None

        by_name: Mapping[str, Any] = {}
        positional: list[Any] = []
        if isinstance(values, Mapping):
            by_name = values
        elif isinstance(values, str | bytes) or not isinstance(values, Sequence):
            positional = [] if values is None else [values]
        else:
            positional = list(values)

        parts: list[str] = []
        position = 0
        for seg in parse_pattern(route.pattern):
            if not seg.is_param:
                parts.append(seg.value)
                continue
            if isinstance(values, Mapping):
                value = by_name.get(seg.param_name or "")
            else:
                value = positional[position] if position < len(positional) else None
                position += 1
            if value is None or value == "":
                if seg.optional:
                    continue
                value = ""
            if isinstance(value, bytes):
                value = value.decode("utf-8")
            parts.append(quote(str(value), safe=""))
        return self.url("/".join(parts))
