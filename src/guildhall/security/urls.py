"""URL safety checks for redirect targets.

The login round-trip redirects to a target remembered in the session.
Only same-origin relative paths are ever followed; anything else falls
back to the application root.
"""

from urllib.parse import urlsplit


def is_safe_url(url: str | None) -> bool:
    """Check whether *url* is a same-origin relative path.

    Examples::

        >>> is_safe_url("/dashboard/42/manage")
        True
        >>> is_safe_url("//evil.example")
        False
        >>> is_safe_url("https://evil.example/")
        False
        >>> is_safe_url("")
        False
    """
    if not url or not isinstance(url, str):
        return False
    if not url.startswith("/") or url.startswith("//") or url.startswith("/\\"):
        return False
    return "://" not in url


def referer_path(referer: str | None, domain: str) -> str | None:
    """Return the path (and query) of *referer* when it points at *domain*.

    Returns ``None`` for a missing, malformed, or foreign referer.
    """
    if not referer or not domain:
        return None
    try:
        parts = urlsplit(referer)
    except ValueError:
        return None
    if parts.hostname is None or parts.hostname.lower() != domain.lower():
        return None
    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return path
