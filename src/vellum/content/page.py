"""Page model — one authored content file.

A Page holds only authored content. Render artifacts (``url``, ``rendered``)
live on the graph node wrapping the page, so ``==`` on two pages is exactly
the content-equality the graph differ needs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any


@dataclass(frozen=True, slots=True)
class Pagination:
    """Frontmatter ``pagination`` block.

    Parsed, compared and exposed to templates; pages are not expanded into
    per-page copies.

    """

    collection: str
    page_size: int


@dataclass(frozen=True, slots=True)
class Page:
    """A parsed content file.

    Attributes:
        path: Canonical path relative to the site root (identity key).
        is_layout: Whether the page lives in the layouts directory.
        title: Frontmatter ``title``.
        date: Frontmatter ``date``, always timezone-aware.
        layout: Name or path of the layout this page renders inside.
        permalink: Output path template or shorthand; None means the source
            path with an ``.html`` suffix.
        depends: Collections whose members must render before this page.
        pagination: Frontmatter ``pagination`` block.
        data: Every other frontmatter key, verbatim.
        body: Source text following the frontmatter.

    """

    path: PurePosixPath
    is_layout: bool = False
    title: str | None = None
    date: datetime | None = None
    layout: str | None = None
    permalink: str | None = None
    depends: frozenset[str] = frozenset()
    pagination: Pagination | None = None
    data: dict[str, Any] = field(default_factory=dict)
    body: str = ""

    @property
    def collections(self) -> tuple[str, ...]:
        """Collections this page belongs to, derived from its path."""
        if self.is_layout:
            return ()
        return derive_collections(self.path)

    @property
    def is_markup(self) -> bool:
        """Whether the body is Markdown and must be converted before rendering."""
        return self.path.suffix.lower() in {".md", ".markdown"}

    def __str__(self) -> str:
        return str(self.path)


def derive_collections(path: PurePosixPath | str) -> tuple[str, ...]:
    """Collections a page at ``path`` belongs to.

    One collection per directory component, plus one compound name per
    successive prefix joined by an underscore::

        >>> derive_collections("books/fantasy/x.md")
        ('books', 'fantasy', 'books_fantasy')

    """
    directories = PurePosixPath(path).parts[:-1]
    names: list[str] = []
    prefix: list[str] = []
    for component in directories:
        names.append(component)
        prefix.append(component)
        if len(prefix) > 1:
            names.append("_".join(prefix))
    return tuple(names)
