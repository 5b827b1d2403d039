"""Immutable HTTP request.

Frozen metadata plus the fully-read body. Dispatch in wren is
synchronous, so the ASGI boundary reads the body before the request is
built and handlers access it without awaiting.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from wren.hooks import Filters
from wren.http.headers import Headers
from wren.http.query import QueryParams
from wren.routing.params import normalize_path

_FORM_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``method`` is the uppercase verb and ``uri`` is the routing path:
    path component only, query string excluded, leading and trailing
    slashes stripped. Both have been passed through the ``request.method``
    and ``request.uri`` filters.
    """

    method: str
    path: str
    uri: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    cookies: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    client: tuple[str, int] | None = None
    scheme: str = "http"
    host: str = ""

    _filters: Filters | None = field(default=None, repr=False, compare=False)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def wants_json(self) -> bool:
        """True when the client asked for JSON via ``Accept`` or sent JSON."""
        accept = self.headers.get("accept", "") or ""
        return "application/json" in accept or "json" in (self.content_type or "")

    @property
    def base_url(self) -> str:
        """``scheme://host`` the client addressed, or ``""`` when the host is unknown."""
        return f"{self.scheme}://{self.host}" if self.host else ""

    @property
    def url(self) -> str:
        """Request path plus query string."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    # -- Body access --

    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """Parse the body as JSON. Cached after the first call."""
        if "_json" not in self._cache:
            self._cache["_json"] = json_module.loads(self.body) if self.body else None
        return self._cache["_json"]

    def form(self) -> dict[str, str]:
        """Parse a URL-encoded body. Non-form bodies yield an empty dict."""
        if "_form" in self._cache:
            return self._cache["_form"]
        result: dict[str, str] = {}
        if self.body and (self.content_type or _FORM_TYPE).startswith(_FORM_TYPE):
            result = dict(QueryParams.parse(self.body, "utf-8"))
        self._cache["_form"] = result
        return result

    def all(self) -> dict[str, Any]:
        """Query parameters merged with form fields (form wins).

        Passed through the ``request.all`` filter.
        """
        data: dict[str, Any] = {key: self.query[key] for key in self.query}
        data.update(self.form())
        if self._filters is not None:
            data = self._filters.apply("request.all", data)
        return data

    def input(self, key: str, default: Any = None) -> Any:
        """Single value from ``all()``.

        Dotted keys walk into nested JSON bodies: ``input("user.name")``.
        """
        data = self.all()
        if key in data:
            return data[key]
        if "." in key and "json" in (self.content_type or ""):
            node: Any = self.json()
            for part in key.split("."):
                if not isinstance(node, Mapping) or part not in node:
                    return default
                node = node[part]
            return node
        return default

    # -- Factory --

    @classmethod
    def from_asgi(
        cls,
        scope: Mapping[str, Any],
        body: bytes = b"",
        *,
        filters: Filters | None = None,
    ) -> Request:
        """Create a Request from an ASGI scope and an already-read body."""
        headers = Headers.from_asgi(scope.get("headers", ()))
        scheme = scope.get("scheme", "http")
        method = scope["method"].upper()
        uri = normalize_path(scope["path"])
        if filters is not None:
            method = filters.apply("request.method", method)
            uri = filters.apply("request.uri", uri)
        client = scope.get("client")
        return cls(
            method=method,
            path=scope["path"],
            uri=uri,
            headers=headers,
            query=QueryParams.parse(scope.get("query_string", b"")),
            cookies=headers.cookies(),
            body=body,
            client=tuple(client) if client else None,
            scheme=scheme,
            host=headers.get("host") or _server_host(scope.get("server"), scheme),
            _filters=filters,
        )

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        """Build a request without a transport. Query strings are split off."""
        path_part, _, query_string = path.partition("?")
        hdrs = Headers.from_mapping(headers or {})
        return cls(
            method=method.upper(),
            path=path_part,
            uri=normalize_path(path_part),
            headers=hdrs,
            query=QueryParams.parse(query_string.encode("latin-1")),
            cookies=hdrs.cookies(),
            body=body,
            host=hdrs.get("host", ""),
        )


_DEFAULT_PORTS = {"http": 80, "https": 443}


def _server_host(server: Any, scheme: str) -> str:
    """``host[:port]`` from the ASGI ``server`` pair, dropping the scheme's default port."""
    if not server:
        return ""
    host, port = server[0], server[1]
    if port is None or _DEFAULT_PORTS.get(scheme) == port:
        return str(host)
    return f"{host}:{port}"
