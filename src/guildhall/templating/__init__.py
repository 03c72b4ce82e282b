"""Templating — the ``Template`` return type and its renderers."""

from guildhall.templating.render import KidaRenderer, Renderer
from guildhall.templating.returns import Template

__all__ = ["KidaRenderer", "Renderer", "Template"]
