"""Routing — ordered route registry with ``:param`` segment matching.

Routes are registered during setup and frozen when the app starts
serving.
"""

from guildhall.routing.route import Access, PathSegment, Route, RouteMatch
from guildhall.routing.router import Router, parse_pattern, split_path

__all__ = [
    "Access",
    "PathSegment",
    "Route",
    "RouteMatch",
    "Router",
    "parse_pattern",
    "split_path",
]
