"""guildhall CLI — serve the API or dashboard over a bot snapshot.

Entry point registered as ``guildhall`` in ``pyproject.toml``::

    [project.scripts]
    guildhall = "guildhall.cli:main"
"""

import argparse
import logging
import sys


def _add_app_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("surface", choices=("api", "dashboard"), help="Which app to build")
    parser.add_argument(
        "--snapshot",
        required=True,
        help="JSON file describing the bot's guilds, commands and piece stores",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Dashboard settings JSON (clientID, clientSecret, callbackURL, ...)",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``guildhall`` command."""
    parser = argparse.ArgumentParser(
        prog="guildhall",
        description="guildhall: HTTP surfaces for a running chat bot.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # -- guildhall serve ----------------------------------------------------
    serve_parser = subparsers.add_parser("serve", help="Serve the API or the dashboard")
    _add_app_arguments(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Bind host address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port number")

    # -- guildhall routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    _add_app_arguments(routes_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        from guildhall.cli._serve import run_server

        run_server(args)
    elif args.command == "routes":
        from guildhall.cli._routes import run_routes

        run_routes(args)
