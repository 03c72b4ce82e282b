"""Build an App from CLI arguments."""

import argparse
import json
import sys

from guildhall.app import App
from guildhall.bot.memory import MemoryBot
from guildhall.errors import ConfigurationError


def build_app(args: argparse.Namespace) -> App:
    """Load the snapshot (and dashboard settings) named by *args*.

    Exits with status 1 and a message on stderr when either file is
    unusable.
    """
    try:
        bot = MemoryBot.from_file(args.snapshot)
    except (OSError, json.JSONDecodeError, KeyError) as exc:
        print(f"Error: cannot load snapshot {args.snapshot}: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if args.surface == "api":
        from guildhall.api.app import create_api

        return create_api(bot)

    if not args.config:
        print("Error: the dashboard needs --config", file=sys.stderr)
        raise SystemExit(1)

    from guildhall.config import load_dashboard_config
    from guildhall.dashboard.app import create_dashboard

    try:
        config = load_dashboard_config(args.config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    return create_dashboard(bot, config)
