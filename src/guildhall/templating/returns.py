"""Template return type.

Handlers return a ``Template``; the negotiation layer hands it to the
app's renderer.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Template:
    """Render a full template.

    Usage::

        return Template("manage.html", guild=guild, settings=settings)
    """

    name: str
    context: dict[str, Any] = field(default_factory=dict)

    def __init__(self, name: str, /, **context: Any) -> None:
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "context", context)
