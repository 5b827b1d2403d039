"""Data layer error hierarchy."""

from wren.errors import WrenError


class DataError(WrenError):
    """Base for all wren.data errors."""


class QueryError(DataError):
    """Raised when a SQL statement fails or a query cannot be built."""
