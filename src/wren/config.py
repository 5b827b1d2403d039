"""Application configuration.

AppConfig is a frozen dataclass: built once at startup, passed around by
reference, never mutated. ``AppConfig.from_env()`` reads ``WREN_*``
variables for deployments that configure through the environment.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any, Self

_TRUE = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    Override what you need::

        config = AppConfig(debug=True, port=3000, base_url="https://example.com")
    """

    name: str = "wren"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False
    workers: int = 1
    log_level: str = "info"

    # Absolute URLs are built on this (no trailing slash needed)
    base_url: str = ""

    # sqlite:///path or sqlite:///:memory:, empty for no database
    database_url: str = ""

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            msg = f"AppConfig.port must be between 1 and 65535, got {self.port}"
            raise ValueError(msg)
        if self.workers < 1:
            msg = f"AppConfig.workers must be at least 1, got {self.workers}"
            raise ValueError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, prefix: str = "WREN_") -> Self:
        """Build a config from ``WREN_PORT``, ``WREN_DEBUG`` and friends.

        Unset variables keep their defaults. Booleans accept
        ``1/true/yes/on`` in any case.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                values[f.name] = raw.strip().lower() in _TRUE
            elif f.type in (int, "int"):
                try:
                    values[f.name] = int(raw)
                except ValueError as exc:
                    msg = f"{prefix}{f.name.upper()} must be an integer, got {raw!r}"
                    raise ValueError(msg) from exc
            else:
                values[f.name] = raw
        return cls(**values)
