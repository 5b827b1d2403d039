"""Serving a live wren App with uvicorn."""

import logging
from typing import Any

import uvicorn

logger = logging.getLogger("wren.server")


def run_server(
    app: Any,
    host: str,
    port: int,
    *,
    log_level: str = "info",
    reload: bool = False,
    workers: int = 1,
    app_path: str | None = None,
) -> None:
    """Start a uvicorn server for *app*.

    uvicorn can only reload or fork workers from an import string, so
    ``reload`` and ``workers > 1`` need *app_path* (``"module:attr"``).
    Without it the live object is served by a single process.
    """
    target: Any = app
    if app_path is not None and (reload or workers > 1):
        target = app_path
    else:
        if reload or workers > 1:
            logger.warning("reload and workers need an import string; serving one process")
        reload = False
        workers = 1

    uvicorn.run(
        target,
        host=host,
        port=port,
        log_level=log_level,
        reload=reload,
        workers=workers if not reload else None,
    )
