"""Read-only JSON introspection API over a running bot.

Every route answers ``200``. A guild, member, role, or channel that does
not exist yields ``{}`` (single resource) or ``[]`` (listing) and the
handler stops there. Unmatched paths get the app's fallback body.
"""

from collections.abc import Mapping
from typing import Any

from guildhall.app import App
from guildhall.bot.models import Command
from guildhall.bot.source import BotSource
from guildhall.config import AppConfig
from guildhall.http.encoding import json_response
from guildhall.http.response import Response
from guildhall.routing.collections import register_collections

# Commands above this level are owner/staff-only and stay unlisted.
MAX_PUBLIC_PERM_LEVEL = 3


def command_catalog(commands: list[Command] | tuple[Command, ...]) -> dict[str, dict[str, Any]]:
    """Group public commands by category, keyed by command name."""
    catalog: dict[str, dict[str, Any]] = {}
    for command in commands:
        if command.perm_level > MAX_PUBLIC_PERM_LEVEL:
            continue
        catalog.setdefault(command.category, {})[command.name] = {
            "name": command.name,
            "description": command.description,
            "aliases": list(command.aliases),
            "permLevel": command.perm_level,
            "cost": command.cost,
            "usageString": command.usage,
        }
    return catalog


def _keys_or_empty(guild: Any, roster: str) -> Response:
    if guild is None:
        return json_response([])
    return json_response(list(getattr(guild, roster)))


def _item_or_empty(roster: Mapping[str, Any] | None, key: str) -> Response:
    if roster is None:
        return json_response({})
    item = roster.get(key)
    if item is None:
        return json_response({})
    return json_response(item)


def create_api(source: BotSource, config: AppConfig | None = None) -> App:
    """Build the introspection API app for *source*.

    Collection routes are registered for every piece store the source
    has at this moment; the stores themselves are read per request.

    Usage::

        app = create_api(bot)
        app.run(port=6565)
    """
    app = App(config or AppConfig(port=6565))

    @app.route("stats/", name="stats")
    async def stats() -> Response:
        return json_response(await source.stats())

    @app.route("commands/", name="commands")
    def commands() -> Response:
        return json_response(command_catalog(list(source.commands)))

    @app.route("guilds/", name="guilds")
    def guilds() -> Response:
        return json_response(list(source.guilds))

    @app.route("guilds/:guildID", name="guild")
    def guild(guildID: str) -> Response:  # noqa: N803
        return _item_or_empty(source.guilds, guildID)

    @app.route("guilds/:guildID/members", name="guild_members")
    def guild_members(guildID: str) -> Response:  # noqa: N803
        return _keys_or_empty(source.guilds.get(guildID), "members")

    @app.route("guilds/:guildID/members/:memberID", name="guild_member")
    def guild_member(guildID: str, memberID: str) -> Response:  # noqa: N803
        found = source.guilds.get(guildID)
        return _item_or_empty(found.members if found else None, memberID)

    @app.route("guilds/:guildID/roles", name="guild_roles")
    def guild_roles(guildID: str) -> Response:  # noqa: N803
        return _keys_or_empty(source.guilds.get(guildID), "roles")

    @app.route("guilds/:guildID/roles/:roleID", name="guild_role")
    def guild_role(guildID: str, roleID: str) -> Response:  # noqa: N803
        found = source.guilds.get(guildID)
        return _item_or_empty(found.roles if found else None, roleID)

    @app.route("guilds/:guildID/channels", name="guild_channels")
    def guild_channels(guildID: str) -> Response:  # noqa: N803
        return _keys_or_empty(source.guilds.get(guildID), "channels")

    @app.route("guilds/:guildID/channels/:channelID", name="guild_channel")
    def guild_channel(guildID: str, channelID: str) -> Response:  # noqa: N803
        found = source.guilds.get(guildID)
        return _item_or_empty(found.channels if found else None, channelID)

    register_collections(app, source.piece_stores)
    return app
