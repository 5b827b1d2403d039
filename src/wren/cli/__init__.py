"""Command line for wren apps.

Installed as the ``wren`` script::

    wren run myapp:app --port 3000
    wren routes myapp:app
"""

import argparse

from wren import __version__


def _cmd_run(args: argparse.Namespace) -> None:
    from wren.cli._run import run_server

    run_server(args)


def _cmd_routes(args: argparse.Namespace) -> None:
    from wren.cli._routes import run_routes

    run_routes(args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Serve a wren app or inspect its route table.",
    )
    parser.add_argument("--version", action="version", version=f"wren {__version__}")
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    run = commands.add_parser("run", help="serve an app with uvicorn")
    run.add_argument("app", help="import string, e.g. myapp:app")
    run.add_argument("--host", help="bind address (default: AppConfig.host)")
    run.add_argument("--port", type=int, help="bind port (default: AppConfig.port)")
    run.add_argument("--workers", type=int, help="worker processes (default: AppConfig.workers)")
    run.add_argument("--reload", action="store_true", help="restart on code changes")
    run.add_argument(
        "--log-level",
        choices=("critical", "error", "warning", "info", "debug", "trace"),
        help="server log level (default: AppConfig.log_level)",
    )
    run.set_defaults(handler=_cmd_run)

    routes = commands.add_parser("routes", help="print routes in match order")
    routes.add_argument("app", help="import string, e.g. myapp:app")
    routes.set_defaults(handler=_cmd_routes)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``wren`` script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        raise SystemExit(0)
    args.handler(args)
