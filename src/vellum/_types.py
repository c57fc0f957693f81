"""Shared type definitions for vellum."""

from collections.abc import Callable, Mapping
from typing import Any, Literal, TypeAlias

# Mode of operation
VellumMode: TypeAlias = Literal["build", "watch"]

# Name of a collection derived from a page path (e.g. "books_fantasy")
CollectionName: TypeAlias = str

# Arbitrary template context mapping
Context: TypeAlias = Mapping[str, Any]

# render(text, context) -> text; fails with TemplateError
RenderFunc: TypeAlias = Callable[[str, Context], str]

# convert(text) -> text; fails with MarkupError
ConvertFunc: TypeAlias = Callable[[str], str]

# Verbosity: 0 errors, 1 warnings, 2 info, 3 debug, 4 trace
Verbosity: TypeAlias = Literal[0, 1, 2, 3, 4]
