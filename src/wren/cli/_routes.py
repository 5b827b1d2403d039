"""``wren routes``: print the route table in match order."""

import argparse
import sys

from wren.cli._resolve import resolve_app
from wren.routing.route import Route


def format_routes(routes: tuple[Route, ...]) -> str:
    """Render routes as a table of METHOD, PATH, NAME and HANDLER."""
    rows = [
        (
            route.method.value,
            "/" + route.pattern,
            route.name or "",
            route.handler.label,
        )
        for route in routes
    ]
    headers = ("METHOD", "PATH", "NAME", "HANDLER")
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers)]
    fmt = "  ".join(f"{{:<{w}}}" for w in widths[:-1]) + "  {}"
    lines = [fmt.format(*headers), "-" * min(sum(widths) + 6, 80)]
    lines.extend(fmt.format(*row) for row in rows)
    return "\n".join(lines)


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a wren app."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.router.routes
    if not routes:
        print("No routes registered.")
        return
    print(format_routes(routes))
