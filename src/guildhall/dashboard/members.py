"""Paged member listings for the dashboard's member browser."""

import math
import time
from typing import Any

from guildhall.bot.models import Guild, Member, Role
from guildhall.http.query import QueryParams

DEFAULT_PAGE_SIZE = 50

_UNITS = (("days", 86400), ("hrs", 3600), ("mins", 60), ("secs", 1))


def format_member_for(seconds: float) -> str:
    """Render a membership duration like ``" 3 days, 4 hrs, 0 mins, 12 secs"``.

    Leading zero units are dropped; seconds are always shown.
    """
    remaining = max(0, int(seconds))
    parts: list[str] = []
    for label, size in _UNITS:
        value, remaining = divmod(remaining, size)
        if parts or value or label == "secs":
            parts.append(f"{value} {label}")
    return " " + ", ".join(parts)


def highest_role(member: Member, guild: Guild) -> Role | None:
    roles = [guild.roles[role_id] for role_id in member.roles if role_id in guild.roles]
    if not roles:
        return None
    return max(roles, key=lambda role: role.position)


def member_record(member: Member, guild: Guild, now: float) -> dict[str, Any]:
    """The JSON shape of one member row."""
    top = highest_role(member, guild)
    return {
        "id": member.id,
        "status": member.status,
        "bot": member.user.bot,
        "username": member.user.username,
        "displayName": member.display_name or member.user.username,
        "tag": member.user.tag,
        "discriminator": member.user.discriminator,
        "joinedAt": member.joined_at,
        "createdAt": member.user.created_at,
        "highestRole": {"hexColor": top.hex_color if top else "#000000"},
        "memberFor": format_member_for(now - member.joined_at),
        "roles": [
            {"name": role.name, "id": role.id, "hexColor": role.hex_color}
            for role_id in member.roles
            if (role := guild.roles.get(role_id)) is not None
        ],
    }


def _sort_value(value: Any) -> tuple[int, Any]:
    # Missing keys sort last; numbers before strings so mixed columns never compare.
    if value is None:
        return (2, "")
    if isinstance(value, bool | int | float):
        return (0, value)
    return (1, str(value).lower())


def list_members(
    guild: Guild,
    *,
    start: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
    filter: str | None = None,  # noqa: A002
    filter_user: bool = False,
    sortby: str | None = None,
    now: float | None = None,
) -> dict[str, Any]:
    """One page of *guild*'s members.

    ``total`` counts every member; ``pageof`` counts pages of the
    filtered set. A ``filter`` of ``"null"`` is treated as absent.
    """
    if limit <= 0:
        limit = DEFAULT_PAGE_SIZE
    start = max(0, start)
    now = time.time() if now is None else now

    members = list(guild.members.values())
    if filter and filter != "null":
        needle = filter.lower()
        if filter_user:
            members = [m for m in members if needle in m.user.username.lower()]
        else:
            members = [
                m for m in members if needle in (m.display_name or m.user.username).lower()
            ]

    records = [member_record(member, guild, now) for member in members]
    if sortby:
        records.sort(key=lambda record: _sort_value(record.get(sortby)))

    return {
        "total": len(guild.members),
        "page": start // limit + 1,
        "pageof": math.ceil(len(records) / limit),
        "members": records[start : start + limit],
    }


def list_members_from_query(guild: Guild, query: QueryParams) -> dict[str, Any]:
    """``list_members`` driven by the request's query string."""
    return list_members(
        guild,
        start=query.get_int("start", 0),
        limit=query.get_int("limit", DEFAULT_PAGE_SIZE),
        filter=query.get("filter"),
        filter_user=bool(query.get("filterUser")),
        sortby=query.get("sortby") or None,
    )
