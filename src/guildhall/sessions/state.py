"""Per-session state carried between dashboard requests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from guildhall.auth.identity import Identity


@dataclass(slots=True)
class SessionState:
    """Mutable state for one session id.

    ``user`` is set only once the identity provider has confirmed who
    the caller is. ``is_admin`` is computed at that moment and never
    re-checked. ``back_url`` holds the page to return to after login and
    is cleared after one use.
    """

    user: Identity | None = None
    is_admin: bool = False
    back_url: str | None = None
    oauth_state: str | None = None

    @property
    def authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_empty(self) -> bool:
        return self == SessionState()

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict() if self.user is not None else None,
            "isAdmin": self.is_admin,
            "backURL": self.back_url,
            "oauthState": self.oauth_state,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SessionState:
        raw_user = data.get("user")
        return cls(
            user=Identity.from_dict(raw_user) if raw_user else None,
            is_admin=bool(data.get("isAdmin", False)),
            back_url=data.get("backURL"),
            oauth_state=data.get("oauthState"),
        )
