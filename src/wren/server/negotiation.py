"""Response shaping: maps handler return values to Response objects.

isinstance-based dispatch on the *shape* of the value, decided once when
the response is built:

1. ``None`` / empty value  -> ``None`` (nothing is written by the core)
2. ``Response``            -> pass through
3. ``Redirect``            -> status + ``Location`` header
4. ``bytes``               -> body as-is, default content type
5. ``str``                 -> body as-is, default content type
6. mappings, sequences, sets, ``Collection``, other iterables and
   dataclass instances     -> JSON, ``Content-Type: application/json``
7. anything else           -> ``str(value)``, default content type
"""

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any

from wren.collection import Collection
from wren.http.response import JSON_CONTENT_TYPE, Redirect, Response, dumps_json


def is_empty(value: Any) -> bool:
    """True for ``None``, empty strings/bytes, and empty containers."""
    if value is None:
        return True
    if isinstance(value, str | bytes | Mapping | list | tuple | set | frozenset | Collection):
        return len(value) == 0
    return False


def negotiate(value: Any) -> Response | None:
    """Convert a route handler's return value to a Response.

    Returns ``None`` for empty results so the transport can decide what
    an empty reply looks like.
    """
    if is_empty(value):
        return None

    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case bytes():
            return Response(body=value)
        case str():
            return Response(body=value)
        case Collection():
            return Response(body=value.to_json(), content_type=JSON_CONTENT_TYPE)
        case Mapping() | list() | tuple() | set() | frozenset():
            return Response(body=dumps_json(value), content_type=JSON_CONTENT_TYPE)
        case _ if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return Response(body=dumps_json(value), content_type=JSON_CONTENT_TYPE)
        case Iterable():
            return Response(body=dumps_json(list(value)), content_type=JSON_CONTENT_TYPE)
        case _:
            return Response(body=str(value))
