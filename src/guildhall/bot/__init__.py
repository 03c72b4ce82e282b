"""Bot state — records, the ``BotSource`` protocol, and an in-memory source."""

from guildhall.bot.memory import MemoryBot
from guildhall.bot.models import (
    ADMINISTRATOR,
    MANAGE_GUILD,
    BotStats,
    Channel,
    Command,
    Guild,
    Member,
    Role,
    User,
)
from guildhall.bot.source import BotSource

__all__ = [
    "ADMINISTRATOR",
    "MANAGE_GUILD",
    "BotSource",
    "BotStats",
    "Channel",
    "Command",
    "Guild",
    "Member",
    "MemoryBot",
    "Role",
    "User",
]
