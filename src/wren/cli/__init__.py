"""Wren CLI — dev server, route listing, and route table validation.

Entry point registered as ``wren`` in ``pyproject.toml``::

    [project.scripts]
    wren = "wren.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``wren`` command."""
    parser = argparse.ArgumentParser(
        prog="wren",
        description="Wren — controllers, validation, and redirect-flash for ASGI.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- wren run ---------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the development server")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload even when the app is in debug mode",
    )

    # -- wren routes ------------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List the route table")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    # -- wren check -------------------------------------------------------
    check_parser = subparsers.add_parser(
        "check", help="Verify every route resolves to a controller action"
    )
    check_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from wren.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from wren.cli._routes import run_routes

        run_routes(args)
    elif args.command == "check":
        from wren.cli._check import run_check

        run_check(args)
