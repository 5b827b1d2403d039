"""Route pattern tokens and path parameter conversion.

A pattern segment holding ``{name}`` or ``{name?}`` is a placeholder.
``{name:type}`` additionally constrains the segment with one of the
built-in converters below.
"""

import re
from dataclasses import dataclass

from wren.errors import ConfigurationError

# Identifier: alphanumerics, underscore, colon (the colon separates a type)
PLACEHOLDER = re.compile(r"\{([a-zA-Z0-9_:]+)(\??)\}")

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "slug": (r"[-a-zA-Z0-9_]+", str),
}

_COMPILED: dict[str, re.Pattern[str]] = {
    name: re.compile(f"^{pattern}$") for name, (pattern, _) in CONVERTERS.items()
}


def normalize_path(path: str) -> str:
    """Strip leading and trailing slashes: ``"/a/b/"`` -> ``"a/b"``."""
    return path.strip("/")


def split_path(path: str) -> list[str]:
    """Normalize *path* and split it into segments.

    The root path yields a single empty segment, so it still compares
    by count against one-segment patterns.
    """
    return normalize_path(path).split("/")


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:  ``users``     (is_param=False)
    Param:    ``{id}``      (is_param=True, param_name="id")
    Optional: ``{id?}``     (is_param=True, optional=True)
    Typed:    ``{id:int}``  (is_param=True, param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"
    optional: bool = False

    def accepts(self, part: str) -> bool:
        """Whether a concrete path segment satisfies this pattern segment."""
        if not self.is_param:
            return part == self.value
        if not part:
            return False
        return _COMPILED[self.param_type].match(part) is not None


def parse_segment(part: str) -> PathSegment:
    """Parse one pattern segment.

    A segment that contains a token anywhere is treated as a whole-segment
    placeholder named after the first token.
    """
    token = PLACEHOLDER.search(part)
    if token is None:
        return PathSegment(value=part)
    inner, optional = token.group(1), token.group(2) == "?"
    name, _, param_type = inner.partition(":")
    param_type = param_type or "str"
    if param_type not in CONVERTERS:
        known = ", ".join(sorted(CONVERTERS))
        msg = f"Unknown placeholder type {param_type!r} in {part!r}. Known types: {known}."
        raise ConfigurationError(msg)
    return PathSegment(
        value=part,
        is_param=True,
        param_name=name,
        param_type=param_type,
        optional=optional,
    )


def parse_pattern(pattern: str) -> tuple[PathSegment, ...]:
    """Parse a route pattern into segments.

    Examples::

        "/users"            -> (PathSegment("users"),)
        "/users/{id}"       -> (PathSegment("users"), PathSegment("{id}", is_param=True, ...))
        "/users/{id:int}"   -> (..., PathSegment("{id:int}", param_type="int", ...))
        "/posts/{slug?}"    -> (..., PathSegment("{slug?}", optional=True, ...))
    """
    if "<" in pattern and ">" in pattern and "{" not in pattern:
        msg = (
            f"Route pattern {pattern!r} uses <param> syntax. "
            "Wren placeholders are written {param} or {param?}."
        )
        raise ConfigurationError(msg)
    return tuple(parse_segment(part) for part in split_path(pattern))


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the target type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)
