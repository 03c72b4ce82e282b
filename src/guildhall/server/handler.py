"""ASGI handler — translates ASGI scope/messages to guildhall types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, dispatches through middleware, the router and
the auth gate, and sends the Response back through ASGI send().
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any, Protocol

from guildhall._internal.asgi import Receive, Scope, Send
from guildhall._internal.invoke import invoke
from guildhall.errors import ConfigurationError, HTTPError
from guildhall.http.request import Request
from guildhall.http.response import Redirect, Response
from guildhall.middleware.protocol import Next
from guildhall.routing.route import Access, RouteMatch
from guildhall.routing.router import Router
from guildhall.server.errors import handle_http_error, handle_internal_error
from guildhall.server.negotiation import negotiate
from guildhall.server.sender import send_response
from guildhall.templating.render import Renderer

logger = logging.getLogger("guildhall.server")


class Gate(Protocol):
    """Anything that can veto a matched, non-public route."""

    def authorize(self, request: Request, match: RouteMatch) -> Redirect | None: ...


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    fallback: Response,
    gate: Gate | None = None,
    renderer: Renderer | None = None,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    try:
        # Innermost handler: route, gate, invoke
        async def dispatch(req: Request) -> Response:
            match = router.match(req.method, req.path)
            if match is None:
                logger.debug("No route for %s %s, sending fallback", req.method, req.path)
                return fallback

            if match.route.access is not Access.PUBLIC:
                if gate is None:
                    msg = f"Route {match.route.pattern!r} is not public but the app has no gate."
                    raise ConfigurationError(msg)
                redirect = gate.authorize(req, match)
                if redirect is not None:
                    return negotiate(redirect)

            return await _invoke_handler(match, req, renderer=renderer)

        # Wrap middleware around the dispatch
        handler = dispatch
        for mw in reversed(middleware):
            outer = handler
            mw_ref = mw

            async def make_next(req: Request, _mw: Any = mw_ref, _next: Next = outer) -> Response:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except HTTPError as exc:
        response = handle_http_error(exc, request, debug)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug)

    await send_response(response, send)


async def _invoke_handler(
    match: RouteMatch,
    request: Request,
    *,
    renderer: Renderer | None = None,
) -> Response:
    """Call the matched route handler and negotiate its return value."""
    handler = match.route.handler
    request = request.with_params(match.path_params)
    kwargs = _build_handler_kwargs(handler, request, match.path_params)
    result = await invoke(handler, **kwargs)
    return negotiate(result, renderer=renderer)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs by parameter name.

    Resolution:
    1. ``request`` -> the Request
    2. ``params``  -> the whole path-parameter mapping
    3. any path parameter name -> its bound string value

    Parameters that resolve to nothing are left to their defaults.
    """
    kwargs: dict[str, Any] = {}
    for name, param in inspect.signature(handler).parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if name == "request":
            kwargs[name] = request
        elif name in path_params:
            kwargs[name] = path_params[name]
        elif name == "params":
            kwargs[name] = dict(path_params)
    return kwargs
