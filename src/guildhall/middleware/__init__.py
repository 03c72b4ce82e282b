"""Request/response middleware."""

from guildhall.middleware.protocol import Middleware, Next
from guildhall.middleware.sessions import (
    SessionConfig,
    SessionMiddleware,
    destroy_session,
    get_session,
    regenerate_session,
)

__all__ = [
    "Middleware",
    "Next",
    "SessionConfig",
    "SessionMiddleware",
    "destroy_session",
    "get_session",
    "regenerate_session",
]
