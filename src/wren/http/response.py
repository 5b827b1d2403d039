"""HTTP response with chainable .with_*() transformation API.

Each transformation returns a new Response. Immutable by convention,
built incrementally by design.
"""

from __future__ import annotations

import dataclasses
import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wren.routing.urls import UrlGenerator

DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"
JSON_CONTENT_TYPE = "application/json"


def _json_default(value: Any) -> Any:
    from wren.collection import Collection

    if isinstance(value, Collection):
        return value.to_list()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


def dumps_json(data: Any) -> str:
    """Serialize *data* to a UTF-8 friendly JSON document.

    Non-ASCII characters and forward slashes are written unescaped.
    Dataclasses, collections and sets are unwrapped; anything else
    unknown falls back to ``str()``.
    """
    return json_module.dumps(data, ensure_ascii=False, default=_json_default)


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    Construct with a body, then chain ``.with_*()`` calls to set
    status and headers. Each call returns a new ``Response``.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = DEFAULT_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def json(cls, data: Any, status: int = 200) -> Response:
        """A JSON response for *data*."""
        return cls(body=dumps_json(data), status=status, content_type=JSON_CONTENT_TYPE)

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        new = tuple(headers.items())
        return replace(self, headers=(*self.headers, *new))

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    def with_body(self, body: str | bytes) -> Response:
        return replace(self, body=body)

    def header(self, name: str) -> str | None:
        """Last value set for header *name* (case-insensitive)."""
        wanted = name.lower()
        found = None
        for key, value in self.headers:
            if key.lower() == wanted:
                found = value
        return found

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect response (302 unless made permanent)."""

    url: str
    status: int = 302
    headers: tuple[tuple[str, str], ...] = ()

    def permanent(self) -> Redirect:
        return replace(self, status=301)

    def temporary(self) -> Redirect:
        return replace(self, status=302)

    @classmethod
    def to_route(
        cls,
        urls: UrlGenerator,
        name: str,
        values: Mapping[str, Any] | list[Any] | tuple[Any, ...] | None = None,
    ) -> Redirect:
        """Redirect to the URL of the route registered as *name*.

        Raises ``LookupError`` when no route carries that name.
        """
        url = urls.route(name, values)
        if url is None:
            msg = f"No route named {name!r}"
            raise LookupError(msg)
        return cls(url)
