"""Template renderers.

A renderer turns a ``Template`` into HTML. ``KidaRenderer`` is the
default and loads templates from a directory with kida; tests can
substitute anything with a matching ``render()``.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from kida import Environment, FileSystemLoader

from guildhall.templating.returns import Template


@runtime_checkable
class Renderer(Protocol):
    def render(self, template: Template) -> str: ...


class KidaRenderer:
    """Render templates from *template_dir* with a kida Environment.

    The environment is created once. ``globals_`` are available to every
    template.

    Usage::

        renderer = KidaRenderer("templates", globals_={"site_name": "Guildhall"})
        html = renderer.render(Template("index.html", user=user))
    """

    __slots__ = ("_env",)

    def __init__(
        self,
        template_dir: str | Path,
        *,
        globals_: Mapping[str, Any] | None = None,
        auto_reload: bool = False,
    ) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=True,
            auto_reload=auto_reload,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        for name, value in (globals_ or {}).items():
            self._env.add_global(name, value)

    @property
    def env(self) -> Environment:
        return self._env

    def render(self, template: Template) -> str:
        return self._env.get_template(template.name).render(template.context)
