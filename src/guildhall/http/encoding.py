"""JSON encoding for bot records.

Records expose ``to_dict()``; plain dataclasses are converted field by
field. Everything else goes through the standard ``json`` encoder.
"""

import dataclasses
import json
from collections.abc import Mapping, Set
from typing import Any

from guildhall.http.response import Response

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def _default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, Set):
        return sorted(value, key=str)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def dumps(value: Any) -> str:
    """Serialize *value* to compact JSON."""
    return json.dumps(value, default=_default, separators=(",", ":"))


def json_response(value: Any, status: int = 200) -> Response:
    """Build an ``application/json`` response from any encodable value."""
    return Response(body=dumps(value), status=status, content_type=JSON_CONTENT_TYPE)
