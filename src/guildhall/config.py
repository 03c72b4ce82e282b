"""Application and dashboard configuration.

Frozen dataclasses: immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``load_dashboard_config()`` is the one
place the bot's JSON settings file is read.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from guildhall.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=3000, fallback_body="Hi!")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Body of the 200 response sent when no route matches
    fallback_body: str = "Hello!"


@dataclass(frozen=True, slots=True)
class OAuthConfig:
    """Credentials and endpoints for the Discord OAuth2 identity provider."""

    client_id: str
    client_secret: str
    callback_url: str
    scopes: tuple[str, ...] = ("identify", "guilds")
    api_base: str = "https://discord.com/api"
    authorize_url: str = "https://discord.com/api/oauth2/authorize"


@dataclass(frozen=True, slots=True)
class DashboardConfig:
    """Dashboard configuration.

    ``domain`` is the public host name, used to trust same-site
    ``Referer`` headers. ``owner_id`` is the one user treated as admin.
    """

    domain: str
    owner_id: str
    session_secret: str
    oauth: OAuthConfig
    cookie_name: str = "guildhall_session"
    session_max_age: int = 86400
    secure_cookies: bool = False
    stats_url: str = "/"
    app: AppConfig = field(default_factory=lambda: AppConfig(port=8080))


_REQUIRED_KEYS = ("clientID", "clientSecret", "callbackURL", "sessionSecret", "domainName", "ownerID")


def dashboard_config_from_dict(data: Mapping[str, Any]) -> DashboardConfig:
    """Build a ``DashboardConfig`` from the bot's settings mapping.

    Raises ``ConfigurationError`` naming every missing key.
    """
    missing = [key for key in _REQUIRED_KEYS if not data.get(key)]
    if missing:
        msg = f"Dashboard settings missing required keys: {', '.join(missing)}"
        raise ConfigurationError(msg)

    try:
        port = int(data.get("dashboardPort", 8080))
    except (TypeError, ValueError):
        msg = f"dashboardPort must be an integer, got {data.get('dashboardPort')!r}"
        raise ConfigurationError(msg) from None

    oauth = OAuthConfig(
        client_id=str(data["clientID"]),
        client_secret=str(data["clientSecret"]),
        callback_url=str(data["callbackURL"]),
    )
    return DashboardConfig(
        domain=str(data["domainName"]),
        owner_id=str(data["ownerID"]),
        session_secret=str(data["sessionSecret"]),
        oauth=oauth,
        stats_url=str(data.get("statsURL", "/")),
        secure_cookies=str(data["callbackURL"]).startswith("https://"),
        app=AppConfig(host=str(data.get("dashboardHost", "0.0.0.0")), port=port),
    )


def load_dashboard_config(path: str | Path) -> DashboardConfig:
    """Read the JSON settings file at *path* into a ``DashboardConfig``."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        msg = f"Dashboard settings file not found: {path}"
        raise ConfigurationError(msg) from None
    except json.JSONDecodeError as exc:
        msg = f"Dashboard settings file {path} is not valid JSON: {exc}"
        raise ConfigurationError(msg) from None
    if not isinstance(data, dict):
        msg = f"Dashboard settings file {path} must contain a JSON object"
        raise ConfigurationError(msg)
    return dashboard_config_from_dict(data)
