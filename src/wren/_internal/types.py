"""Shared type aliases used across wren modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: user-defined callable, arguments supplied by the container
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# Keys accepted by App.error(): a status code or an exception type
ErrorKey: TypeAlias = int | type[BaseException]
