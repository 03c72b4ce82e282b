"""Route, RouteMatch, and access-level definitions."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Access(Enum):
    """Who may reach a route.

    The dispatcher asks the auth gate before calling any handler whose
    route is not ``PUBLIC``.
    """

    PUBLIC = "public"
    LOGIN = "login"  # any authenticated session
    GUILD = "guild"  # admin, or a manager of the guild named in the path
    ADMIN = "admin"  # the configured owner only


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal:  ``guilds``    (is_param=False)
    Param:    ``:guildID``  (is_param=True, param_name="guildID")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    Created during app setup and added to the router before the app
    freezes.
    """

    pattern: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    access: Access = Access.PUBLIC
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
