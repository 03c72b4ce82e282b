"""The login redirect round-trip.

A caller who hits a protected page is sent to ``/login`` with the page
remembered in their session. After the identity provider confirms who
they are, ``complete()`` sends them back to it, once.
"""

import logging
from dataclasses import dataclass

from guildhall.auth.identity import Identity
from guildhall.security.urls import is_safe_url, referer_path
from guildhall.sessions.state import SessionState

logger = logging.getLogger("guildhall.auth")


@dataclass(frozen=True, slots=True)
class LoginRedirectFlow:
    """Remember, capture, and resolve the post-login destination.

    ``domain`` is the public host name of the dashboard; a ``Referer``
    from that host counts as a destination. ``owner_id`` is the single
    user granted administrator rights.
    """

    domain: str
    owner_id: str
    root_url: str = "/"

    def remember(self, session: SessionState, target: str) -> None:
        """Record *target* as the page to return to after login."""
        session.back_url = target

    def capture(self, session: SessionState, referer: str | None) -> str:
        """Settle the destination as the login round-trip begins.

        An already remembered page wins. Otherwise a same-domain referer
        is used, otherwise the root.
        """
        if not session.back_url:
            session.back_url = referer_path(referer, self.domain) or self.root_url
        return session.back_url

    def complete(self, session: SessionState, identity: Identity) -> str:
        """Sign *identity* into *session* and return where to go next.

        ``is_admin`` is decided here and never recomputed for the life
        of the session. The remembered destination is cleared.
        """
        session.user = identity
        session.is_admin = identity.id == self.owner_id
        target, session.back_url = session.back_url, None
        logger.info("Login completed for user %s (admin=%s)", identity.id, session.is_admin)
        if target and is_safe_url(target):
            return target
        return self.root_url
