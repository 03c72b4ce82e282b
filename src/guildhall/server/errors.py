"""Error handling for guildhall requests.

Maps HTTPError exceptions and unexpected failures to Response objects.
"""

import logging
import traceback

from guildhall.errors import HTTPError
from guildhall.http.request import Request
from guildhall.http.response import Response

logger = logging.getLogger("guildhall.server")


def handle_http_error(exc: HTTPError, request: Request, debug: bool) -> Response:
    """Answer a handler-raised HTTPError with its own status."""
    logger.debug("%d %s %s - %s", exc.status, request.method, request.path, exc.detail)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    resp = Response(body=detail, content_type="text/plain; charset=utf-8").with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(exc: Exception, request: Request, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors.

    Upstream failures (identity provider, bot source) end up here: the
    request fails, nothing is retried.
    """
    logger.exception("500 %s %s", request.method, request.path)
    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
    return Response(body="Internal Server Error", status=500, content_type="text/plain; charset=utf-8")
