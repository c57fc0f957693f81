"""Permalink shorthands and URL normalisation."""

from __future__ import annotations

import re
from pathlib import PurePosixPath

SHORTHAND_TEMPLATES: dict[str, str] = {
    "date": (
        "{{ page.collections.last }}/{{ page.date.year }}/{{ page.date.month }}/"
        "{{ page.date.day }}/{{ page.data.title }}.html"
    ),
    "pretty": (
        "{{ page.collections.last }}/{{ page.date.year }}/{{ page.date.month }}/"
        "{{ page.date.day }}/{{ page.data.title }}/index.html"
    ),
    "ordinal": "{{ page.collections.last }}/{{ page.date.year }}/{{ page.date.y_day }}/{{ page.data.title }}.html",
    "weekdate": (
        "{{ page.collections.last }}/{{ page.date.year }}/W{{ page.date.week }}/"
        "{{ page.date.short_day }}/{{ page.data.title }}.html"
    ),
    "none": "{{ page.collections.last }}/{{ page.data.title }}.html",
}

_SLASHES = re.compile(r"/{2,}")


def permalink_template(permalink: str) -> str:
    """Expand a shorthand to its template; anything else is already a template."""
    return SHORTHAND_TEMPLATES.get(permalink, permalink)


def default_url(path: PurePosixPath) -> str:
    """URL of a page without a permalink: its source path with an ``.html`` suffix."""
    return "/" + path.with_suffix(".html").as_posix()


def normalise_url(rendered: str) -> str:
    """Trim whitespace, collapse repeated slashes and root the URL at ``/``."""
    return "/" + _SLASHES.sub("/", rendered.strip()).lstrip("/")
