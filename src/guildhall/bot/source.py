"""The data-source protocol the HTTP surfaces read from.

The running bot owns its state; guildhall only reads it, plus the few
writes the dashboard performs (settings, leaving a guild). Anything that
satisfies ``BotSource`` can be served.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from guildhall.bot.models import BotStats, Command, Guild


@runtime_checkable
class BotSource(Protocol):
    """Live view of a running bot."""

    @property
    def guilds(self) -> Mapping[str, Guild]: ...

    @property
    def commands(self) -> Sequence[Command]: ...

    @property
    def piece_stores(self) -> Mapping[str, Mapping[str, Any]]: ...

    async def stats(self) -> BotStats: ...

    async def fetch_members(self, guild_id: str) -> None: ...

    async def leave_guild(self, guild_id: str) -> None: ...

    async def get_settings(self, guild_id: str) -> dict[str, Any]: ...

    async def set_settings(self, guild_id: str, values: Mapping[str, Any]) -> None: ...

    async def default_settings(self) -> dict[str, Any]: ...
