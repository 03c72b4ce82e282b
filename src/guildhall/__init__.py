"""guildhall — HTTP surfaces for a running chat bot.

Two ASGI apps over one live bot: a read-only JSON introspection API and
a session-authenticated management dashboard.

Basic usage::

    from guildhall import MemoryBot, create_api

    bot = MemoryBot.from_file("bot.json")
    app = create_api(bot)
    app.run(port=6565)

Dashboard::

    from guildhall import create_dashboard, load_dashboard_config

    app = create_dashboard(bot, load_dashboard_config("keys/dashboard.json"))
    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "Access",
    "App",
    "AppConfig",
    "BotSource",
    "ConfigurationError",
    "DashboardConfig",
    "GuildhallError",
    "HTTPError",
    "IdentityProviderError",
    "MemoryBot",
    "Redirect",
    "Request",
    "Response",
    "Template",
    "create_api",
    "create_dashboard",
    "load_dashboard_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import guildhall`` fast while providing a clean top-level API.
    """
    if name == "App":
        from guildhall.app import App

        return App

    if name in ("AppConfig", "DashboardConfig", "load_dashboard_config"):
        from guildhall import config as _config

        return getattr(_config, name)

    if name == "Access":
        from guildhall.routing.route import Access

        return Access

    if name == "Request":
        from guildhall.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from guildhall.http import response as _resp

        return getattr(_resp, name)

    if name == "Template":
        from guildhall.templating.returns import Template

        return Template

    if name in ("BotSource", "MemoryBot"):
        from guildhall import bot as _bot

        return getattr(_bot, name)

    if name == "create_api":
        from guildhall.api.app import create_api

        return create_api

    if name == "create_dashboard":
        from guildhall.dashboard.app import create_dashboard

        return create_dashboard

    if name in ("ConfigurationError", "GuildhallError", "HTTPError", "IdentityProviderError"):
        from guildhall import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
