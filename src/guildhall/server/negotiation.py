"""Content negotiation — maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

from typing import Any

from guildhall.errors import ConfigurationError
from guildhall.http.encoding import JSON_CONTENT_TYPE, dumps
from guildhall.http.response import Redirect, Response
from guildhall.templating.render import Renderer
from guildhall.templating.returns import Template


def negotiate(value: Any, *, renderer: Renderer | None = None) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> 302 with Location header
    3. ``Template``         -> render via the app's renderer -> text/html
    4. ``str``              -> 200, text/html
    5. ``bytes``            -> 200, application/octet-stream
    6. ``dict`` / ``list``  -> 200, application/json
    7. ``(value, int)``     -> negotiate value, override status
    """
    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case Template():
            if renderer is None:
                msg = (
                    "Template return type requires a renderer. "
                    "Pass renderer= to App()."
                )
                raise ConfigurationError(msg)
            return Response(body=renderer.render(value))
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(body=dumps(value), content_type=JSON_CONTENT_TYPE)
        case (inner, int() as status):
            return negotiate(inner, renderer=renderer).with_status(status)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return a Response, Redirect, Template, str, bytes, dict, or list."
            )
            raise TypeError(msg)
