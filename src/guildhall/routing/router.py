"""Ordered route registry with segment-wise pattern matching.

Routes are registered during setup and scanned in registration order
at request time. The first route whose verb, segment count, and literal
segments agree with the request wins; parameter segments match any
value and bind it by name.
"""

import logging
from dataclasses import dataclass

from guildhall.errors import ConfigurationError
from guildhall.routing.route import PathSegment, Route, RouteMatch

logger = logging.getLogger("guildhall.routing")


def split_path(path: str) -> list[str]:
    """Split a path on ``/``, discarding a single leading empty segment.

    Examples::

        "/stats/"     -> ["stats", ""]
        "/guilds/42"  -> ["guilds", "42"]
        "guilds/"     -> ["guilds", ""]
        "/"           -> [""]
    """
    parts = path.split("/")
    if len(parts) > 1 and parts[0] == "":
        parts = parts[1:]
    return parts


def parse_pattern(pattern: str) -> tuple[PathSegment, ...]:
    """Parse a route pattern into segments.

    A segment written as ``:name`` is a named parameter; anything else
    is a literal compared verbatim.

    Examples::

        "guilds/"                -> (PathSegment("guilds"), PathSegment(""))
        "/guilds/:guildID"       -> (PathSegment("guilds"),
                                     PathSegment(":guildID", is_param=True, param_name="guildID"))
    """
    segments: list[PathSegment] = []
    for part in split_path(pattern):
        if part.startswith(":"):
            name = part[1:]
            if not name:
                msg = f"Route pattern {pattern!r} has a parameter segment with no name."
                raise ConfigurationError(msg)
            segments.append(PathSegment(value=part, is_param=True, param_name=name))
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


@dataclass(frozen=True, slots=True)
class _Entry:
    """One (verb, pattern) registration."""

    method: str
    segments: tuple[PathSegment, ...]
    route: Route


class Router:
    """Ordered route registry.

    Usage::

        router = Router()
        router.add(Route("guilds/:guildID", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/guilds/42")
        match.path_params  # {"guildID": "42"}
    """

    __slots__ = ("_compiled", "_entries", "_keys")

    def __init__(self) -> None:
        self._entries: list[_Entry] = []
        self._keys: set[tuple[str, tuple[str, ...]]] = set()
        self._compiled = False

    def add(self, route: Route) -> None:
        """Register a route for each of its verbs.

        A (verb, pattern) pair that is already registered keeps its
        first handler; the later registration is a no-op for that verb.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = parse_pattern(route.pattern)
        key_segments = tuple(seg.value for seg in segments)
        for method in sorted(route.methods):
            key = (method, key_segments)
            if key in self._keys:
                logger.debug("Ignoring duplicate route %s %s", method, route.pattern)
                continue
            self._keys.add(key)
            self._entries.append(_Entry(method=method, segments=segments, route=route))

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order, without repeats."""
        seen: set[int] = set()
        result: list[Route] = []
        for entry in self._entries:
            if id(entry.route) not in seen:
                seen.add(id(entry.route))
                result.append(entry.route)
        return result

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Find the first registered route for *method* matching *path*.

        Returns ``None`` when nothing matches; the caller decides what
        an unmatched request looks like.
        """
        parts = split_path(path)
        for entry in self._entries:
            if entry.method != method:
                continue
            params = self._matches(entry.segments, parts)
            if params is not None:
                return RouteMatch(route=entry.route, path_params=params)
        return None

    @staticmethod
    def _matches(segments: tuple[PathSegment, ...], parts: list[str]) -> dict[str, str] | None:
        """Bind *parts* against *segments*, or return ``None`` on mismatch."""
        if len(segments) != len(parts):
            return None
        params: dict[str, str] = {}
        for seg, part in zip(segments, parts, strict=True):
            if seg.is_param:
                params[seg.param_name or ""] = part
            elif seg.value != part:
                return None
        return params
