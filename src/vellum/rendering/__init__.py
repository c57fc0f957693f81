"""Rendering layer — template expansion, markup conversion and contexts."""

from vellum.rendering.markup import MarkupConverter
from vellum.rendering.templates import TemplateEngine

__all__ = ["MarkupConverter", "TemplateEngine"]
