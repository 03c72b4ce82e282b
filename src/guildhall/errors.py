"""guildhall exception hierarchy.

Shared across Router, App, handler, sessions, and auth so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class GuildhallError(Exception):
    """Base for all guildhall-specific errors."""


class ConfigurationError(GuildhallError):
    """Raised when app configuration is invalid.

    Typically surfaces during route registration or ``App._freeze()``
    at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(GuildhallError):
    """An error that maps directly to an HTTP status code.

    Raised by handlers that want an explicit status. The ASGI handler
    catches these and answers with ``status`` and ``detail``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class IdentityProviderError(GuildhallError):
    """The external identity provider rejected or failed a call."""

    def __init__(self, status: int, detail: str = "") -> None:
        self.status = status
        self.detail = detail
        super().__init__(f"Identity provider returned {status}: {detail[:200]}")
