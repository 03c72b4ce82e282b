"""``guildhall serve`` — run the API or dashboard with pounce."""

import argparse

from guildhall.cli._build import build_app


def run_server(args: argparse.Namespace) -> None:
    app = build_app(args)
    app.run(host=args.host, port=args.port)
