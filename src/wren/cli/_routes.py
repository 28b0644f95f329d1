"""``wren routes`` — print the static route table."""

import argparse
import sys

from wren.cli._resolve import resolve_or_exit
from wren.errors import ConfigurationError


def run_routes(args: argparse.Namespace) -> None:
    """Print PATH, CONTROLLER and ACTION for every route."""
    app = resolve_or_exit(args)
    try:
        routes = app.router.routes
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes registered.")
        return

    rows = [(route.path, route.controller_name, route.action) for route in routes]
    max_path = max(4, *(len(r[0]) for r in rows))  # "PATH" header
    max_ctrl = max(10, *(len(r[1]) for r in rows))  # "CONTROLLER" header

    fmt = f"{{:<{max_path}}}  {{:<{max_ctrl}}}  {{}}"
    print(fmt.format("PATH", "CONTROLLER", "ACTION"))
    sep_len = max_path + max_ctrl + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for path, controller, action in rows:
        print(fmt.format(path, controller, action))
