"""``wren run`` — development server command."""

import argparse
import logging
import sys

from wren.cli._resolve import resolve_or_exit
from wren.errors import ConfigurationError


def run_server(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and serve it with the pounce dev server.

    The app is compiled before the server starts, so a missing secret
    key or a malformed route table fails here instead of on the first
    request.
    """
    app = resolve_or_exit(args)

    logging.basicConfig(
        level=app.config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        app._ensure_frozen()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from wren.server.dev import run_dev_server

    run_dev_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=app.config.debug and not args.no_reload,
        app_path=args.app,
    )
