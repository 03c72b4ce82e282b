"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. Handler return values are negotiated into a
``Response`` before middleware sees them, so ``.with_header()`` and
``.with_cookie()`` are always available on the way out.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from guildhall.http.request import Request
from guildhall.http.response import Response

# The next handler in the middleware chain
Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for guildhall middleware.

    Accepts both functions and callable objects::

        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
