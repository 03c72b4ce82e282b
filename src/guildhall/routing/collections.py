"""Generic list and get-by-id routes for named collections.

A host bot owns several keyed stores (commands, events, monitors, ...).
Each one is exposed through two synthesized routes::

    GET <name>/      -> JSON list of keys, in store order
    GET <name>/:id   -> JSON value for the key, or {} when absent

Stores are read when a request arrives, never copied at registration,
so entries added or removed later are visible immediately.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from guildhall.http.encoding import json_response
from guildhall.http.response import Response

if TYPE_CHECKING:
    from guildhall.app import App


def collection_routes(name: str, store: Mapping[str, Any]) -> list[tuple[str, Any]]:
    """Build the ``(pattern, handler)`` pairs exposing one store."""
    prefix = name.strip("/")

    def list_keys() -> Response:
        return json_response(list(store.keys()))

    def get_item(id: str) -> Response:  # noqa: A002
        item = store.get(id)
        if item is None:
            return json_response({})
        return json_response(item)

    list_keys.__name__ = f"list_{prefix}"
    get_item.__name__ = f"get_{prefix}"
    return [(f"{prefix}/", list_keys), (f"{prefix}/:id", get_item)]


def register_collections(app: App, collections: Mapping[str, Mapping[str, Any]]) -> None:
    """Register list and get-by-id routes for every named store.

    Must run before the app serves its first request; routes are
    immutable afterwards. Distinct names never shadow each other since
    each name is the first literal segment of both routes.
    """
    for name, store in collections.items():
        for pattern, handler in collection_routes(name, store):
            app.route(pattern, name=handler.__name__)(handler)
