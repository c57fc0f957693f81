"""Shared test fixtures for vellum."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any

import pytest

from vellum.config import VellumConfig
from vellum.content.page import Page

# Three layouts and three pages: default wraps everything, post and page
# wrap their content in default.
LAYERED_SITE: dict[str, str] = {
    "global.yaml": "title: My Site\n",
    "layouts/default.html": (
        "<title>{{ page.title or global.title }}</title>\n"
        "<main>{{ layouts[0].rendered }}</main>\n"
    ),
    "layouts/post.html": "---\nlayout: default\n---\n<article>{{ layouts[0].rendered }}</article>",
    "layouts/page.html": "---\nlayout: default\n---\n<section>{{ layouts[0].rendered }}</section>",
    "a.html": "---\nlayout: default\n---\nPage A",
    "b.html": "---\nlayout: post\ntitle: Page B\n---\nPage B",
    "c.html": "---\nlayout: page\n---\nPage C",
}

BLOG_SITE: dict[str, str] = {
    "posts/one.md": "---\ntitle: One\ndate: 2024-01-01\n---\nFirst post.\n",
    "posts/two.md": "---\ntitle: Two\ndate: 2024-02-01\n---\nSecond post.\n",
    "posts/three.md": "---\ntitle: Three\ndate: 2024-03-01\n---\nThird post.\n",
    "index.html": (
        "---\ndepends: [posts]\n---\n"
        "{% for post in posts %}<a href=\"{{ post.url }}\">{{ post.title }}</a>\n{% endfor %}"
    ),
}


def write_site(root: Path, files: dict[str, str]) -> Path:
    """Write ``relative path -> text`` files under ``root`` and return it."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def layered_site(tmp_path: Path) -> Path:
    """Site root with the default/post/page layout scenario."""
    return write_site(tmp_path, LAYERED_SITE)


@pytest.fixture
def blog_site(tmp_path: Path) -> Path:
    """Site root with a dated ``posts`` collection and an index depending on it."""
    return write_site(tmp_path, BLOG_SITE)


@pytest.fixture
def config(tmp_path: Path) -> VellumConfig:
    """A VellumConfig rooted at a temp directory."""
    return VellumConfig(root=tmp_path)


def make_page(
    path: str,
    *,
    layout: str | None = None,
    depends: tuple[str, ...] = (),
    title: str | None = None,
    date: datetime | None = None,
    permalink: str | None = None,
    body: str = "",
    data: dict[str, Any] | None = None,
) -> Page:
    """Create a Page without going through frontmatter parsing."""
    rel = PurePosixPath(path)
    return Page(
        path=rel,
        is_layout=rel.parts[0] == "layouts",
        title=title,
        date=date,
        layout=layout,
        permalink=permalink,
        depends=frozenset(depends),
        data=data or {},
        body=body,
    )


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)
