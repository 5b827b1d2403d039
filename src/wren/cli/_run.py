"""``wren run``: serve an app with uvicorn."""

import argparse
import sys

from wren.cli._resolve import resolve_app
from wren.server.serve import run_server as serve


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it. Flags given on the command line win over AppConfig."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    config = app.config
    app._ensure_frozen()
    serve(
        app,
        args.host or config.host,
        args.port or config.port,
        log_level=args.log_level or config.log_level,
        reload=args.reload or config.debug,
        workers=config.workers if args.workers is None else args.workers,
        app_path=args.app,
    )
