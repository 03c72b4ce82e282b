"""Session middleware — server-side sessions behind a signed cookie.

The cookie carries only an opaque session id signed with
``itsdangerous``; the ``SessionState`` itself lives in a
``SessionStore``. The active state is stored in a ContextVar,
accessible via ``get_session()`` from any handler, middleware, or the
auth gate.
"""

import logging
import secrets
from contextvars import ContextVar
from dataclasses import dataclass

from itsdangerous import BadSignature, TimestampSigner

from guildhall.errors import ConfigurationError
from guildhall.http.request import Request
from guildhall.http.response import Response
from guildhall.middleware.protocol import Next
from guildhall.sessions.state import SessionState
from guildhall.sessions.store import SessionStore

logger = logging.getLogger("guildhall.sessions")


@dataclass(slots=True)
class _ActiveSession:
    id: str
    state: SessionState
    is_new: bool
    rotated_from: str | None = None
    destroyed: bool = False


# -- Session ContextVar --

_session_var: ContextVar[_ActiveSession | None] = ContextVar("guildhall_session", default=None)


def _active() -> _ActiveSession:
    active = _session_var.get()
    if active is None:
        msg = (
            "No active session. Ensure SessionMiddleware is added "
            "to the app before accessing the session."
        )
        raise LookupError(msg)
    return active


def get_session() -> SessionState:
    """Return the current request's session state.

    Raises ``LookupError`` if called outside a request with
    ``SessionMiddleware`` active.
    """
    return _active().state


def regenerate_session() -> SessionState:
    """Move the current state to a fresh session id.

    The data is kept and the old id is deleted from the store when the
    response goes out. Called on login to prevent session fixation.
    """
    active = _active()
    if active.rotated_from is None and not active.is_new:
        active.rotated_from = active.id
    active.id = _new_id()
    return active.state


def destroy_session() -> None:
    """Discard the current session once the handler returns.

    The store entry is deleted and the cookie expired. Mutations made
    after this call are not persisted.
    """
    _active().destroyed = True


def _new_id() -> str:
    return secrets.token_urlsafe(32)


# -- Configuration --


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` signs the session id cookie. The state is stored
    server-side in ``store``.
    """

    secret_key: str
    store: SessionStore
    cookie_name: str = "guildhall_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


# -- Middleware --


class SessionMiddleware:
    """Server-side session middleware.

    Reads and verifies the session cookie, loads the state from the
    store, makes it available via ``get_session()``, then writes it back
    after the handler. A new session whose state is still empty is not
    persisted, so anonymous visitors do not fill the store.

    Usage::

        app.add_middleware(SessionMiddleware(SessionConfig(
            secret_key="my-secret-key",
            store=MemorySessionStore(),
        )))
    """

    __slots__ = ("_config", "_signer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._signer = TimestampSigner(config.secret_key, salt="guildhall.session")

    async def _load(self, request: Request) -> _ActiveSession:
        cookie_value = request.cookies.get(self._config.cookie_name)
        if cookie_value:
            try:
                session_id = self._signer.unsign(cookie_value, max_age=self._config.max_age).decode()
            except BadSignature:
                logger.debug("Rejected session cookie with bad or expired signature")
            else:
                state = await self._config.store.get(session_id)
                if state is not None:
                    return _ActiveSession(id=session_id, state=state, is_new=False)
        return _ActiveSession(id=_new_id(), state=SessionState(), is_new=True)

    def _set_cookie(self, response: Response, session_id: str) -> Response:
        cfg = self._config
        return response.with_cookie(
            name=cfg.cookie_name,
            value=self._signer.sign(session_id).decode(),
            max_age=cfg.max_age,
            path=cfg.path,
            domain=cfg.domain,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )

    async def _save(self, response: Response, active: _ActiveSession) -> Response:
        store = self._config.store
        if active.rotated_from is not None:
            await store.destroy(active.rotated_from)

        if active.destroyed:
            if not active.is_new:
                await store.destroy(active.id)
            logger.debug("Session destroyed")
            return response.without_cookie(self._config.cookie_name, path=self._config.path)

        if active.is_new and active.rotated_from is None and active.state.is_empty:
            return response

        await store.put(active.id, active.state)
        if active.is_new or active.rotated_from is not None:
            response = self._set_cookie(response, active.id)
        return response

    async def __call__(self, request: Request, next: Next) -> Response:
        """Load session, dispatch, then persist session and cookie."""
        active = await self._load(request)
        token = _session_var.set(active)
        try:
            response = await next(request)
        finally:
            _session_var.reset(token)
        return await self._save(response, active)
