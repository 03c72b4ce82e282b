"""Tests for access decisions and the login redirect round-trip."""

import pytest
from conftest import make_guilds

from guildhall.app import App
from guildhall.auth.flow import LoginRedirectFlow
from guildhall.auth.gate import AuthGate, Decision, decide, is_guild_manager
from guildhall.auth.identity import Identity
from guildhall.errors import ConfigurationError
from guildhall.http.request import Request
from guildhall.middleware.sessions import SessionConfig, SessionMiddleware, get_session
from guildhall.routing.route import Access
from guildhall.security.audit import SecurityEvent, set_security_event_sink
from guildhall.sessions.state import SessionState
from guildhall.sessions.store import MemorySessionStore
from guildhall.testing import TestClient

FLOW = LoginRedirectFlow(domain="dash.example.com", owner_id="999")


class TestDecide:
    @pytest.mark.parametrize("access", [Access.LOGIN, Access.GUILD, Access.ADMIN])
    def test_unauthenticated_always_login(self, access: Access) -> None:
        for admin in (True, False):
            for manager in (True, False):
                decision = decide(
                    access, authenticated=False, is_admin=admin, is_guild_manager=manager
                )
                assert decision is Decision.LOGIN

    def test_login_access_allows_any_authenticated(self) -> None:
        assert (
            decide(Access.LOGIN, authenticated=True, is_admin=False, is_guild_manager=False)
            is Decision.ALLOW
        )

    def test_guild_access(self) -> None:
        assert (
            decide(Access.GUILD, authenticated=True, is_admin=False, is_guild_manager=False)
            is Decision.DENY
        )
        assert (
            decide(Access.GUILD, authenticated=True, is_admin=False, is_guild_manager=True)
            is Decision.ALLOW
        )
        assert (
            decide(Access.GUILD, authenticated=True, is_admin=True, is_guild_manager=False)
            is Decision.ALLOW
        )

    def test_admin_access_ignores_manager_bit(self) -> None:
        assert (
            decide(Access.ADMIN, authenticated=True, is_admin=False, is_guild_manager=True)
            is Decision.DENY
        )
        assert (
            decide(Access.ADMIN, authenticated=True, is_admin=True, is_guild_manager=False)
            is Decision.ALLOW
        )


class TestIsGuildManager:
    def test_manage_guild_bit(self) -> None:
        alpha = make_guilds()[0]
        assert is_guild_manager(alpha, "2") is True

    def test_administrator_bit(self) -> None:
        assert is_guild_manager(make_guilds()[0], "4") is True

    def test_owner(self) -> None:
        assert is_guild_manager(make_guilds()[0], "1") is True

    def test_plain_member(self) -> None:
        assert is_guild_manager(make_guilds()[0], "3") is False

    def test_non_member(self) -> None:
        assert is_guild_manager(make_guilds()[0], "42") is False

    def test_unknown_guild(self) -> None:
        assert is_guild_manager(None, "2") is False


class TestLoginRedirectFlow:
    def test_remember(self) -> None:
        session = SessionState()
        FLOW.remember(session, "/dashboard/100/manage")
        assert session.back_url == "/dashboard/100/manage"

    def test_capture_keeps_existing(self) -> None:
        session = SessionState(back_url="/admin")
        assert FLOW.capture(session, "https://dash.example.com/commands") == "/admin"

    def test_capture_same_domain_referer(self) -> None:
        session = SessionState()
        FLOW.capture(session, "https://dash.example.com/commands?page=2")
        assert session.back_url == "/commands?page=2"

    def test_capture_referer_host_is_case_insensitive(self) -> None:
        session = SessionState()
        FLOW.capture(session, "https://DASH.example.com/x")
        assert session.back_url == "/x"

    def test_capture_foreign_referer(self) -> None:
        session = SessionState()
        FLOW.capture(session, "https://evil.example/phish")
        assert session.back_url == "/"

    def test_capture_no_referer(self) -> None:
        session = SessionState()
        FLOW.capture(session, None)
        assert session.back_url == "/"

    def test_complete_returns_and_clears_back_url(self) -> None:
        session = SessionState(back_url="/dashboard")
        target = FLOW.complete(session, Identity(id="5", username="e"))
        assert target == "/dashboard"
        assert session.back_url is None
        assert session.user.id == "5"
        assert session.is_admin is False

    def test_complete_without_back_url(self) -> None:
        session = SessionState()
        assert FLOW.complete(session, Identity(id="5", username="e")) == "/"

    def test_complete_marks_owner_admin(self) -> None:
        session = SessionState()
        FLOW.complete(session, Identity(id="999", username="owner"))
        assert session.is_admin is True

    def test_complete_rejects_unsafe_target(self) -> None:
        session = SessionState(back_url="//evil.example/")
        assert FLOW.complete(session, Identity(id="5", username="e")) == "/"
        assert session.back_url is None


def _gated_app(store: MemorySessionStore) -> App:
    app = App(gate=AuthGate({g.id: g for g in make_guilds()}, FLOW))
    app.add_middleware(SessionMiddleware(SessionConfig(secret_key="k", store=store)))

    @app.route("/as/:userID")
    def sign_in(userID: str):  # noqa: N803
        session = get_session()
        session.user = Identity(id=userID, username=f"user{userID}")
        session.is_admin = userID == "999"
        return "signed in"

    @app.route("/private", access=Access.LOGIN)
    def private():
        return "private"

    @app.route("/admin", access=Access.ADMIN)
    def admin():
        return "admin"

    @app.route("/g/:guildID", access=Access.GUILD)
    def guild_page(guildID: str):  # noqa: N803
        return f"guild {guildID}"

    @app.route("/back")
    def back():
        return f"back={get_session().back_url}"

    return app


class TestAuthGate:
    async def test_anonymous_redirected_to_login_with_url_remembered(self) -> None:
        async with TestClient(_gated_app(MemorySessionStore())) as client:
            response = await client.get("/g/100?tab=roles")
            assert response.status == 302
            assert response.location == "/login"
            remembered = await client.get("/back")
        assert remembered.text == "back=/g/100?tab=roles"

    async def test_handler_not_called_when_denied(self) -> None:
        async with TestClient(_gated_app(MemorySessionStore())) as client:
            response = await client.get("/private")
        assert response.text == ""

    async def test_signed_in_reaches_login_route(self) -> None:
        async with TestClient(_gated_app(MemorySessionStore())) as client:
            await client.get("/as/3")
            response = await client.get("/private")
        assert response.text == "private"

    async def test_non_admin_denied_admin_route(self) -> None:
        async with TestClient(_gated_app(MemorySessionStore())) as client:
            await client.get("/as/2")
            response = await client.get("/admin")
        assert response.status == 302
        assert response.location == "/"

    async def test_admin_allowed_everywhere(self) -> None:
        async with TestClient(_gated_app(MemorySessionStore())) as client:
            await client.get("/as/999")
            assert (await client.get("/admin")).text == "admin"
            assert (await client.get("/g/100")).text == "guild 100"

    async def test_guild_manager_allowed_only_in_own_guild(self) -> None:
        async with TestClient(_gated_app(MemorySessionStore())) as client:
            await client.get("/as/2")
            assert (await client.get("/g/100")).text == "guild 100"
            assert (await client.get("/g/200")).text == "guild 200"

            await client.get("/as/3")
            denied = await client.get("/g/100")
        assert denied.status == 302
        assert denied.location == "/"

    async def test_unknown_guild_denied_for_non_admin(self) -> None:
        async with TestClient(_gated_app(MemorySessionStore())) as client:
            await client.get("/as/2")
            response = await client.get("/g/nope")
        assert response.location == "/"

    async def test_decisions_emit_security_events(self) -> None:
        events: list[SecurityEvent] = []
        set_security_event_sink(events.append)
        try:
            async with TestClient(_gated_app(MemorySessionStore())) as client:
                await client.get("/private")
        finally:
            set_security_event_sink(None)
        assert [e.name for e in events] == ["auth.gate.login"]
        assert events[0].path == "/private"

    async def test_gate_without_session_middleware(self) -> None:
        app = App(gate=AuthGate({}, FLOW))

        @app.route("/private", access=Access.LOGIN)
        def private():
            return "private"

        async with TestClient(app) as client:
            response = await client.get("/private")
        assert response.status == 500

    def test_authorize_outside_session_raises_configuration_error(self) -> None:
        from guildhall.routing.route import Route, RouteMatch

        gate = AuthGate({}, FLOW)
        route = Route(
            pattern="/x", handler=lambda: None, methods=frozenset({"GET"}), access=Access.LOGIN
        )
        request = Request.from_asgi({"method": "GET", "path": "/x"}, _never_receive)
        with pytest.raises(ConfigurationError, match="SessionMiddleware"):
            gate.authorize(request, RouteMatch(route=route, path_params={}))


async def _never_receive() -> dict:
    return {"type": "http.disconnect"}
