"""The session-authenticated management dashboard.

Browsers sign in through the identity provider; the session remembers
who they are and whether they are the bot owner. Guild pages are open
to the owner and to members who can manage that guild. Every refusal
is a redirect.
"""

import logging
import secrets
from pathlib import Path
from typing import Any

from guildhall.api.app import command_catalog
from guildhall.app import App
from guildhall.auth.flow import LoginRedirectFlow
from guildhall.auth.gate import AuthGate
from guildhall.auth.provider import DiscordOAuth, IdentityProvider
from guildhall.bot.source import BotSource
from guildhall.config import DashboardConfig
from guildhall.dashboard.members import list_members_from_query
from guildhall.errors import IdentityProviderError
from guildhall.http.encoding import json_response
from guildhall.http.request import Request
from guildhall.http.response import Redirect, Response
from guildhall.middleware.sessions import (
    SessionConfig,
    SessionMiddleware,
    destroy_session,
    get_session,
    regenerate_session,
)
from guildhall.routing.route import Access
from guildhall.security.audit import emit_security_event
from guildhall.sessions.store import MemorySessionStore, SessionStore
from guildhall.templating.render import KidaRenderer, Renderer
from guildhall.templating.returns import Template

logger = logging.getLogger("guildhall.auth")

TEMPLATE_DIR = Path(__file__).parent / "templates"


def create_dashboard(
    source: BotSource,
    config: DashboardConfig,
    provider: IdentityProvider | None = None,
    *,
    store: SessionStore | None = None,
    renderer: Renderer | None = None,
) -> App:
    """Build the dashboard app.

    ``provider`` defaults to Discord OAuth with ``config.oauth``,
    ``store`` to an in-memory store, ``renderer`` to the bundled kida
    templates.

    Usage::

        config = load_dashboard_config("keys/dashboard.json")
        app = create_dashboard(bot, config)
        app.run()
    """
    if provider is None:
        provider = DiscordOAuth(config.oauth)
    if store is None:
        store = MemorySessionStore(ttl=config.session_max_age)
    if renderer is None:
        renderer = KidaRenderer(TEMPLATE_DIR, globals_={"domain": config.domain})
    flow = LoginRedirectFlow(domain=config.domain, owner_id=config.owner_id)

    app = App(config.app, gate=AuthGate(source.guilds, flow), renderer=renderer)
    app.add_middleware(
        SessionMiddleware(
            SessionConfig(
                secret_key=config.session_secret,
                store=store,
                cookie_name=config.cookie_name,
                max_age=config.session_max_age,
                secure=config.secure_cookies,
            )
        )
    )

    def page(name: str, request: Request, **context: Any) -> Template:
        session = get_session()
        return Template(
            name,
            bot=source,
            path=request.path,
            auth=session.authenticated,
            user=session.user,
            is_admin=session.is_admin,
            **context,
        )

    # -- Public pages --

    @app.route("/")
    def index(request: Request) -> Template:
        return page("index.html", request)

    @app.route("/commands")
    def commands(request: Request) -> Template:
        return page("commands.html", request, catalog=command_catalog(list(source.commands)))

    @app.route("/stats")
    def stats() -> Redirect:
        return Redirect(config.stats_url)

    @app.route("/autherror")
    def autherror(request: Request) -> Template:
        return page("autherror.html", request)

    # -- Login round-trip --

    @app.route("/login")
    def login(request: Request) -> Redirect:
        session = get_session()
        flow.capture(session, request.referer)
        session.oauth_state = secrets.token_urlsafe(24)
        return Redirect(provider.authorize_url(session.oauth_state))

    @app.route("/callback")
    async def callback(request: Request) -> Redirect:
        session = get_session()
        expected, session.oauth_state = session.oauth_state, None
        code = request.query.get("code")
        state = request.query.get("state") or ""
        if not code or not expected or not secrets.compare_digest(state, expected):
            emit_security_event("auth.login.failed", request=request, details={"reason": "state"})
            return Redirect("/autherror")

        try:
            identity = await provider.identify(code)
        except IdentityProviderError as exc:
            logger.warning("Login failed: %s", exc)
            emit_security_event("auth.login.failed", request=request, details={"reason": "provider"})
            return Redirect("/autherror")

        regenerate_session()
        target = flow.complete(session, identity)
        emit_security_event("auth.login.success", request=request, user_id=identity.id)
        return Redirect(target)

    @app.route("/logout")
    def logout(request: Request) -> Redirect:
        user = get_session().user
        destroy_session()
        emit_security_event("auth.logout.success", request=request, user_id=user.id if user else None)
        return Redirect("/")

    # -- Signed-in pages --

    @app.route("/admin", access=Access.ADMIN)
    def admin(request: Request) -> Template:
        return page("admin.html", request, guilds=list(source.guilds.values()))

    @app.route("/dashboard", access=Access.LOGIN)
    def dashboard(request: Request) -> Template:
        user = get_session().user
        manageable = [g for g in (user.guilds if user else ()) if g.manageable]
        return page(
            "dashboard.html",
            request,
            guilds=[{"guild": g, "present": g.id in source.guilds} for g in manageable],
        )

    @app.route("/dashboard/:guildID", access=Access.LOGIN)
    def guild_home(guildID: str) -> Redirect:  # noqa: N803
        return Redirect(f"/dashboard/{guildID}/manage")

    # -- Guild pages --

    @app.route("/dashboard/:guildID/manage", access=Access.GUILD)
    async def manage(request: Request, guildID: str) -> Template | Redirect:  # noqa: N803
        guild = source.guilds.get(guildID)
        if guild is None:
            return Redirect("/dashboard")
        settings = await source.get_settings(guildID)
        return page("manage.html", request, guild=guild, settings=settings)

    @app.route("/dashboard/:guildID/manage", methods=["POST"], access=Access.GUILD)
    async def manage_update(request: Request, guildID: str) -> Redirect:  # noqa: N803
        if guildID not in source.guilds:
            return Redirect("/dashboard")
        submitted = await request.data()
        settings = await source.get_settings(guildID)
        for key in settings:
            if key in submitted:
                settings[key] = submitted[key]
        await source.set_settings(guildID, settings)
        return Redirect(f"/dashboard/{guildID}/manage")

    @app.route("/dashboard/:guildID/members", access=Access.GUILD)
    def members(request: Request, guildID: str) -> Template | Redirect:  # noqa: N803
        guild = source.guilds.get(guildID)
        if guild is None:
            return Redirect("/dashboard")
        return page("members.html", request, guild=guild, members=list(guild.members.values()))

    @app.route("/dashboard/:guildID/members/list", access=Access.GUILD)
    async def members_list(request: Request, guildID: str) -> Response | Redirect:  # noqa: N803
        guild = source.guilds.get(guildID)
        if guild is None:
            return Redirect("/dashboard")
        if request.query.get("fetch"):
            await source.fetch_members(guildID)
            guild = source.guilds.get(guildID, guild)
        return json_response(list_members_from_query(guild, request.query))

    @app.route("/dashboard/:guildID/leave", access=Access.GUILD)
    async def leave(guildID: str) -> Redirect:  # noqa: N803
        if guildID not in source.guilds:
            return Redirect("/dashboard")
        await source.leave_guild(guildID)
        user = get_session().user
        logger.info("Left guild %s at the request of %s", guildID, user.id if user else None)
        if user is not None and user.id == config.owner_id:
            return Redirect("/admin")
        return Redirect("/dashboard")

    @app.route("/dashboard/:guildID/reset", access=Access.GUILD)
    async def reset(guildID: str) -> Redirect:  # noqa: N803
        if guildID not in source.guilds:
            return Redirect("/dashboard")
        await source.set_settings(guildID, await source.default_settings())
        return Redirect(f"/dashboard/{guildID}")

    return app
