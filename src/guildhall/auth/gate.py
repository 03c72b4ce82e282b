"""Access decisions for dashboard routes.

``decide()`` is a pure function of the route's access level and three
facts about the caller. ``AuthGate`` gathers those facts from the
session and the bot's guild rosters, and turns a refusal into a
redirect. Nothing here ever answers 401 or 403: an anonymous caller is
sent to the login page, an unauthorized one to the site root.
"""

import logging
from collections.abc import Mapping
from enum import Enum

from guildhall.auth.flow import LoginRedirectFlow
from guildhall.bot.models import ADMINISTRATOR, MANAGE_GUILD, Guild
from guildhall.errors import ConfigurationError
from guildhall.http.request import Request
from guildhall.http.response import Redirect
from guildhall.middleware.sessions import get_session
from guildhall.routing.route import Access, RouteMatch
from guildhall.security.audit import emit_security_event

logger = logging.getLogger("guildhall.auth")


class Decision(Enum):
    ALLOW = "allow"
    LOGIN = "login"
    DENY = "deny"


def decide(
    access: Access,
    *,
    authenticated: bool,
    is_admin: bool,
    is_guild_manager: bool,
) -> Decision:
    """Decide whether a caller may reach a route.

    Rules are evaluated in order and the first that applies wins:

    1. not authenticated → ``LOGIN``, whatever the access level;
    2. ``GUILD`` access without admin or guild-manager rights → ``DENY``;
    3. ``ADMIN`` access without admin rights → ``DENY``;
    4. otherwise ``ALLOW``.

    Public routes never reach the gate.
    """
    if not authenticated:
        return Decision.LOGIN
    if access is Access.GUILD and not (is_admin or is_guild_manager):
        return Decision.DENY
    if access is Access.ADMIN and not is_admin:
        return Decision.DENY
    return Decision.ALLOW


def is_guild_manager(guild: Guild | None, user_id: str) -> bool:
    """Whether *user_id* may manage *guild*.

    True for the guild owner and for members holding ``MANAGE_GUILD``
    or ``ADMINISTRATOR``. An unknown guild or non-member is never a
    manager.
    """
    if guild is None:
        return False
    if guild.owner_id and guild.owner_id == user_id:
        return True
    member = guild.member(user_id)
    if member is None:
        return False
    return bool(member.permissions & (MANAGE_GUILD | ADMINISTRATOR))


class AuthGate:
    """Adapter between the dispatcher and ``decide()``.

    Called for every matched route whose access is not ``PUBLIC``.
    Returns ``None`` to let the request through, or a ``Redirect``.

    Usage::

        gate = AuthGate(bot.guilds, LoginRedirectFlow(domain="example.com", owner_id="1"))
        app = App(gate=gate)
    """

    __slots__ = ("_flow", "_guilds", "guild_param", "login_url", "root_url")

    def __init__(
        self,
        guilds: Mapping[str, Guild],
        flow: LoginRedirectFlow,
        *,
        login_url: str = "/login",
        root_url: str = "/",
        guild_param: str = "guildID",
    ) -> None:
        self._guilds = guilds
        self._flow = flow
        self.login_url = login_url
        self.root_url = root_url
        self.guild_param = guild_param

    def authorize(self, request: Request, match: RouteMatch) -> Redirect | None:
        try:
            session = get_session()
        except LookupError:
            msg = (
                "AuthGate requires SessionMiddleware. Add SessionMiddleware "
                "to any app that registers non-public routes."
            )
            raise ConfigurationError(msg) from None

        access = match.route.access
        user_id = session.user.id if session.user is not None else None
        manager = False
        if access is Access.GUILD and user_id is not None:
            guild_id = match.path_params.get(self.guild_param, "")
            manager = is_guild_manager(self._guilds.get(guild_id), user_id)

        decision = decide(
            access,
            authenticated=session.authenticated,
            is_admin=session.is_admin,
            is_guild_manager=manager,
        )
        logger.debug(
            "%s %s %s (access=%s)",
            decision.value.upper(),
            request.method,
            request.path,
            access.value,
        )
        emit_security_event(
            f"auth.gate.{decision.value}",
            request=request,
            user_id=user_id,
            details={"access": access.value},
        )

        if decision is Decision.LOGIN:
            self._flow.remember(session, request.url)
            return Redirect(self.login_url)
        if decision is Decision.DENY:
            return Redirect(self.root_url)
        return None
