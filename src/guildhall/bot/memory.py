"""In-process ``BotSource`` backed by plain dicts.

Used by the CLI to serve a JSON snapshot and by the test-suite as a
stand-in for a live bot.
"""

from __future__ import annotations

import json
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import psutil

from guildhall.bot.models import BotStats, Channel, Command, Guild, Member, Role, User


class MemoryBot:
    """A bot whose state lives in memory.

    Usage::

        bot = MemoryBot(guilds=[guild], commands=[ping])
        bot.piece_stores["events"] = {"ready": {...}}
    """

    def __init__(
        self,
        *,
        guilds: Sequence[Guild] = (),
        commands: Sequence[Command] = (),
        piece_stores: Mapping[str, Mapping[str, Any]] | None = None,
        default_settings: Mapping[str, Any] | None = None,
        ping: float = 0.0,
        status: str = "ready",
        commands_run: int = 0,
        messages_seen: int = 0,
    ) -> None:
        self._guilds: dict[str, Guild] = {guild.id: guild for guild in guilds}
        self._commands: list[Command] = list(commands)
        self._piece_stores: dict[str, Mapping[str, Any]] = dict(piece_stores or {})
        self._defaults: dict[str, Any] = dict(default_settings or {})
        self._settings: dict[str, dict[str, Any]] = {}
        self._started = time.monotonic()
        self.ping = ping
        self.status = status
        self.commands_run = commands_run
        self.messages_seen = messages_seen
        self.fetched: list[str] = []

    @property
    def guilds(self) -> Mapping[str, Guild]:
        return self._guilds

    @property
    def commands(self) -> Sequence[Command]:
        return self._commands

    @property
    def piece_stores(self) -> dict[str, Mapping[str, Any]]:
        return self._piece_stores

    async def stats(self) -> BotStats:
        users = {member_id for guild in self._guilds.values() for member_id in guild.members}
        return BotStats(
            guilds=len(self._guilds),
            users=len(users),
            channels=sum(len(guild.channels) for guild in self._guilds.values()),
            ping=self.ping,
            status=self.status,
            uptime=round((time.monotonic() - self._started) * 1000),
            memory=_resident_megabytes(),
            commands=self.commands_run,
            messages=self.messages_seen,
        )

    async def fetch_members(self, guild_id: str) -> None:
        # Everything is already resident; record the request for callers
        # that want to observe it.
        self.fetched.append(guild_id)

    async def leave_guild(self, guild_id: str) -> None:
        self._guilds.pop(guild_id, None)
        self._settings.pop(guild_id, None)

    async def get_settings(self, guild_id: str) -> dict[str, Any]:
        return dict(self._settings.get(guild_id, self._defaults))

    async def set_settings(self, guild_id: str, values: Mapping[str, Any]) -> None:
        self._settings[guild_id] = dict(values)

    async def default_settings(self) -> dict[str, Any]:
        return dict(self._defaults)

    # -- Snapshots --

    @classmethod
    def from_snapshot(cls, data: Mapping[str, Any]) -> MemoryBot:
        """Build a bot from the JSON snapshot format used by the CLI.

        Snapshot shape::

            {
              "guilds": [{"id", "name", "ownerID", "members": [...],
                          "roles": [...], "channels": [...]}],
              "commands": [{"name", "category", "permLevel", ...}],
              "pieceStores": {"events": {"ready": {...}}},
              "defaultSettings": {"prefix": "!"}
            }
        """
        return cls(
            guilds=[_guild_from_dict(g) for g in data.get("guilds", [])],
            commands=[_command_from_dict(c) for c in data.get("commands", [])],
            piece_stores=data.get("pieceStores", {}),
            default_settings=data.get("defaultSettings", {}),
            status=data.get("status", "ready"),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> MemoryBot:
        return cls.from_snapshot(json.loads(Path(path).read_text(encoding="utf-8")))


def _resident_megabytes() -> float:
    """Current resident set size of this process, in megabytes."""
    return round(psutil.Process().memory_info().rss / (1024 * 1024), 2)


def _guild_from_dict(data: Mapping[str, Any]) -> Guild:
    members = {}
    for raw in data.get("members", []):
        raw_user = raw.get("user", {})
        user = User(
            id=str(raw_user.get("id", raw["id"])),
            username=raw_user.get("username", ""),
            discriminator=str(raw_user.get("discriminator", "0000")),
            bot=bool(raw_user.get("bot", False)),
            created_at=float(raw_user.get("createdAt", 0)),
        )
        member = Member(
            id=str(raw["id"]),
            user=user,
            display_name=raw.get("displayName", ""),
            permissions=int(raw.get("permissions", 0)),
            roles=tuple(str(r) for r in raw.get("roles", ())),
            joined_at=float(raw.get("joinedAt", 0)),
            status=raw.get("status", "offline"),
        )
        members[member.id] = member
    roles = {
        str(r["id"]): Role(
            id=str(r["id"]),
            name=r.get("name", ""),
            color=int(r.get("color", 0)),
            position=int(r.get("position", 0)),
            permissions=int(r.get("permissions", 0)),
        )
        for r in data.get("roles", [])
    }
    channels = {
        str(c["id"]): Channel(id=str(c["id"]), name=c.get("name", ""), type=c.get("type", "text"))
        for c in data.get("channels", [])
    }
    return Guild(
        id=str(data["id"]),
        name=data.get("name", ""),
        owner_id=str(data.get("ownerID", "")),
        icon=data.get("icon"),
        members=members,
        roles=roles,
        channels=channels,
    )


def _command_from_dict(data: Mapping[str, Any]) -> Command:
    return Command(
        name=data["name"],
        category=data.get("category", "General"),
        description=data.get("description", ""),
        aliases=tuple(data.get("aliases", ())),
        perm_level=int(data.get("permLevel", 0)),
        cost=int(data.get("cost", 0)),
        usage=data.get("usage", ""),
    )
