"""``guildhall routes`` — list registered routes.

Builds the app from a snapshot and prints a table of METHOD, PATTERN,
ACCESS and handler name.
"""

import argparse

from guildhall.cli._build import build_app


def run_routes(args: argparse.Namespace) -> None:
    app = build_app(args)
    routes = app.routes
    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str, str]] = []
    for route in routes:
        handler_name = getattr(route.handler, "__name__", str(route.handler))
        if route.name and route.name != handler_name:
            handler_name = f"{handler_name} ({route.name})"
        rows.append((", ".join(sorted(route.methods)), route.pattern, route.access.value, handler_name))

    headers = ("METHOD", "PATTERN", "ACCESS", "HANDLER")
    widths = [max(len(header), *(len(row[i]) for row in rows)) for i, header in enumerate(headers)]
    print("  ".join(header.ljust(width) for header, width in zip(headers, widths, strict=True)))
    print("  ".join("-" * width for width in widths))
    for row in rows:
        print("  ".join(cell.ljust(width) for cell, width in zip(row, widths, strict=True)))
