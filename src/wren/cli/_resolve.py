"""Locating the App behind a ``"module:attribute"`` import string."""

import importlib
from typing import Any

from wren.app import App


def _lookup(import_string: str) -> Any:
    module_path, _, attr_path = import_string.partition(":")
    obj: Any = importlib.import_module(module_path)
    # "pkg.main:factory.app" walks attributes one dot at a time
    for attr in (attr_path or "app").split("."):
        obj = getattr(obj, attr)
    return obj


def resolve_app(import_string: str) -> App:
    """The wren App named by *import_string*.

    ``"myapp"`` means ``myapp:app``. Dotted attributes are followed, and a
    callable that is not an App is called once as a factory.

    Raises:
        ModuleNotFoundError: the module does not import.
        AttributeError: an attribute along the path is missing.
        TypeError: the result is not a wren ``App``, or the factory failed.
    """
    obj = _lookup(import_string)

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"App factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc

    if isinstance(obj, App):
        return obj
    msg = f"{import_string!r} points at {type(obj).__name__}, not a wren.App instance"
    raise TypeError(msg)
