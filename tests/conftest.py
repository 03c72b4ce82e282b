"""Shared fixtures: a small bot, a fake identity provider, a recording renderer."""

from urllib.parse import parse_qs, urlsplit

import pytest

from guildhall.auth.identity import Identity, PartialGuild
from guildhall.bot.memory import MemoryBot
from guildhall.bot.models import ADMINISTRATOR, MANAGE_GUILD, Channel, Command, Guild, Member, Role, User
from guildhall.config import DashboardConfig, OAuthConfig
from guildhall.errors import IdentityProviderError
from guildhall.templating.returns import Template

OWNER_ID = "999"


def _member(
    user_id: str,
    username: str,
    *,
    permissions: int = 0,
    roles: tuple[str, ...] = (),
    display_name: str = "",
    bot: bool = False,
    joined_at: float = 0.0,
) -> Member:
    user = User(id=user_id, username=username, discriminator="0001", bot=bot, created_at=1.0)
    return Member(
        id=user_id,
        user=user,
        display_name=display_name,
        permissions=permissions,
        roles=roles,
        joined_at=joined_at,
        status="online",
    )


def make_guilds() -> list[Guild]:
    alpha = Guild(
        id="100",
        name="Alpha",
        owner_id="1",
        members={
            "1": _member("1", "alice", display_name="Alice"),
            "2": _member("2", "bob", permissions=MANAGE_GUILD, display_name="Bobby"),
            "3": _member("3", "carol", roles=("r1", "r2"), display_name="Caz"),
            "4": _member("4", "dave", permissions=ADMINISTRATOR),
            "5": _member("5", "helper", bot=True),
        },
        roles={
            "r1": Role(id="r1", name="Mod", color=0xFF0000, position=2),
            "r2": Role(id="r2", name="Member", color=0x00FF00, position=1),
        },
        channels={"c1": Channel(id="c1", name="general")},
    )
    beta = Guild(
        id="200",
        name="Beta",
        owner_id="2",
        members={"2": _member("2", "bob"), "3": _member("3", "carol")},
    )
    return [alpha, beta]


def make_bot() -> MemoryBot:
    return MemoryBot(
        guilds=make_guilds(),
        commands=[
            Command(name="ping", category="General", description="Pong", usage="ping"),
            Command(
                name="ban",
                category="Moderation",
                description="Ban a member",
                aliases=("b",),
                perm_level=3,
                cost=5,
                usage="ban <member>",
            ),
            Command(name="eval", category="System", perm_level=10, usage="eval <code>"),
        ],
        piece_stores={
            "events": {"ready": {"name": "ready"}, "message": {"name": "message"}},
            "monitors": {},
        },
        default_settings={"prefix": "!", "modRole": ""},
        ping=42.0,
    )


class FakeProvider:
    """Identity provider answering from a dict of code -> Identity."""

    def __init__(self, identities: dict[str, Identity]) -> None:
        self.identities = identities
        self.codes: list[str] = []

    def authorize_url(self, state: str) -> str:
        return f"https://id.example/authorize?state={state}"

    async def identify(self, code: str) -> Identity:
        self.codes.append(code)
        if code not in self.identities:
            raise IdentityProviderError(401, "invalid_grant")
        return self.identities[code]


class RecordingRenderer:
    """Renders ``<name>`` and keeps every Template it was given."""

    def __init__(self) -> None:
        self.rendered: list[Template] = []

    def render(self, template: Template) -> str:
        self.rendered.append(template)
        return f"<{template.name}>"

    @property
    def last(self) -> Template:
        return self.rendered[-1]


def state_from(location: str) -> str:
    """The ``state`` query parameter of an authorize redirect."""
    return parse_qs(urlsplit(location).query)["state"][0]


@pytest.fixture
def bot() -> MemoryBot:
    return make_bot()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(
        {
            "owner-code": Identity(id=OWNER_ID, username="owner"),
            "bob-code": Identity(
                id="2",
                username="bob",
                guilds=(
                    PartialGuild(id="100", name="Alpha", permissions=MANAGE_GUILD),
                    PartialGuild(id="200", name="Beta", owner=True),
                    PartialGuild(id="300", name="Gamma", permissions=MANAGE_GUILD),
                    PartialGuild(id="400", name="Delta"),
                ),
            ),
            "carol-code": Identity(id="3", username="carol"),
            "alice-code": Identity(id="1", username="alice"),
        }
    )


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def dashboard_config() -> DashboardConfig:
    return DashboardConfig(
        domain="dash.example.com",
        owner_id=OWNER_ID,
        session_secret="test-session-secret",
        oauth=OAuthConfig(
            client_id="client-id",
            client_secret="client-secret",
            callback_url="https://dash.example.com/callback",
        ),
        stats_url="https://stats.example.com/board",
    )
