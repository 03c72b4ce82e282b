"""Immutable HTTP request.

Frozen metadata with async body access.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from guildhall._internal.asgi import Receive, Scope
from guildhall.http.cookies import parse_cookies
from guildhall.http.headers import Headers
from guildhall.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()``, ``.json()``, ``.form()``.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str]
    cookies: Mapping[str, str]
    client: tuple[str, int] | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for body and parsed form data
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def url(self) -> str:
        """Path plus query string, as the client requested it."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    @property
    def referer(self) -> str | None:
        return self.headers.get("referer")

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    def with_params(self, path_params: dict[str, str]) -> Request:
        """Return a copy carrying the matched route's path parameters.

        The body cache is shared so a body read before routing is not
        lost.
        """
        return replace(self, path_params=path_params)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached after the first read)."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    async def form(self) -> QueryParams:
        """Parse a URL-encoded form body.

        Raises ``ValueError`` for any other content type.
        """
        if "_form" in self._cache:
            return self._cache["_form"]
        ct = (self.content_type or "application/x-www-form-urlencoded").lower()
        if ct.split(";")[0].strip() != "application/x-www-form-urlencoded":
            msg = f"Unsupported form content type: {ct!r}"
            raise ValueError(msg)
        result = QueryParams(await self.body())
        self._cache["_form"] = result
        return result

    async def data(self) -> dict[str, Any]:
        """Return the submitted fields from a JSON or URL-encoded body."""
        ct = (self.content_type or "").lower()
        if "json" in ct:
            payload = await self.json()
            return payload if isinstance(payload, dict) else {}
        form = await self.form()
        return {key: form[key] for key in form}

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            cookies=parse_cookies(headers.get("cookie", "")),
            client=tuple(client) if client else None,
            _receive=receive,
        )
