"""``wren check`` — route table validation command.

Resolves every route's controller and action without serving a
request. Exits with code 1 if any route is broken.
"""

import argparse
import sys

from wren.cli._resolve import resolve_or_exit
from wren.errors import ConfigurationError


def run_check(args: argparse.Namespace) -> None:
    app = resolve_or_exit(args)
    try:
        problems = app.check()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if problems:
        for problem in problems:
            print(f"  x {problem}")
        print(f"{len(problems)} broken route(s).")
        raise SystemExit(1)

    print(f"OK: {len(app.router.routes)} route(s) resolve.")
