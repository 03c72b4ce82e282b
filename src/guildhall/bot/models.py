"""Snapshot records for the bot's guild state.

Frozen dataclasses handed out by a ``BotSource``. ``to_dict()`` gives
the JSON shape served by the introspection API.
"""

from dataclasses import dataclass, field
from typing import Any

# Permission bits read by the auth gate.
ADMINISTRATOR = 0x8
MANAGE_GUILD = 0x20


@dataclass(frozen=True, slots=True)
class User:
    id: str
    username: str
    discriminator: str = "0000"
    bot: bool = False
    created_at: float = 0.0

    @property
    def tag(self) -> str:
        return f"{self.username}#{self.discriminator}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "discriminator": self.discriminator,
            "tag": self.tag,
            "bot": self.bot,
            "createdTimestamp": self.created_at,
        }


@dataclass(frozen=True, slots=True)
class Role:
    id: str
    name: str
    color: int = 0
    position: int = 0
    permissions: int = 0

    @property
    def hex_color(self) -> str:
        return f"#{self.color:06x}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "hexColor": self.hex_color,
            "position": self.position,
            "permissions": self.permissions,
        }


@dataclass(frozen=True, slots=True)
class Channel:
    id: str
    name: str
    type: str = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type}


@dataclass(frozen=True, slots=True)
class Member:
    """A user's membership record within one guild."""

    id: str
    user: User
    display_name: str = ""
    permissions: int = 0
    roles: tuple[str, ...] = ()
    joined_at: float = 0.0
    status: str = "offline"

    def has_permission(self, bit: int) -> bool:
        """Whether *bit* is granted, with administrator implying all bits."""
        return bool(self.permissions & bit) or bool(self.permissions & ADMINISTRATOR)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user": self.user.to_dict(),
            "displayName": self.display_name or self.user.username,
            "permissions": self.permissions,
            "roles": list(self.roles),
            "joinedTimestamp": self.joined_at,
            "status": self.status,
        }


@dataclass(frozen=True, slots=True)
class Guild:
    """A guild and its member, role, and channel rosters."""

    id: str
    name: str
    owner_id: str = ""
    icon: str | None = None
    members: dict[str, Member] = field(default_factory=dict)
    roles: dict[str, Role] = field(default_factory=dict)
    channels: dict[str, Channel] = field(default_factory=dict)

    def member(self, user_id: str) -> Member | None:
        return self.members.get(user_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "ownerID": self.owner_id,
            "icon": self.icon,
            "memberCount": len(self.members),
            "members": list(self.members),
            "roles": list(self.roles),
            "channels": list(self.channels),
        }


@dataclass(frozen=True, slots=True)
class Command:
    name: str
    category: str
    description: str = ""
    aliases: tuple[str, ...] = ()
    perm_level: int = 0
    cost: int = 0
    usage: str = ""


@dataclass(frozen=True, slots=True)
class BotStats:
    """Aggregate counters served by ``GET /stats/``."""

    guilds: int
    users: int
    channels: int
    ping: float
    status: str
    uptime: float
    memory: float  # current resident memory, MB
    commands: int
    messages: int
