"""Identities confirmed by the external identity provider."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from guildhall.bot.models import ADMINISTRATOR, MANAGE_GUILD


@dataclass(frozen=True, slots=True)
class PartialGuild:
    """A guild as the identity provider reports it for the signed-in user."""

    id: str
    name: str
    icon: str | None = None
    owner: bool = False
    permissions: int = 0

    @property
    def manageable(self) -> bool:
        """Whether the user may manage this guild, per the provider."""
        return self.owner or bool(self.permissions & (MANAGE_GUILD | ADMINISTRATOR))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "owner": self.owner,
            "permissions": self.permissions,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PartialGuild:
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            icon=data.get("icon"),
            owner=bool(data.get("owner", False)),
            permissions=int(data.get("permissions", 0)),
        )


@dataclass(frozen=True, slots=True)
class Identity:
    """The signed-in user. Present in a session only after login."""

    id: str
    username: str
    discriminator: str = "0"
    avatar: str | None = None
    guilds: tuple[PartialGuild, ...] = ()

    @property
    def is_authenticated(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "discriminator": self.discriminator,
            "avatar": self.avatar,
            "guilds": [guild.to_dict() for guild in self.guilds],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Identity:
        return cls(
            id=str(data["id"]),
            username=data.get("username", ""),
            discriminator=str(data.get("discriminator", "0")),
            avatar=data.get("avatar"),
            guilds=tuple(PartialGuild.from_dict(g) for g in data.get("guilds", ())),
        )
