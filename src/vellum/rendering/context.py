"""Render context assembly.

Contexts are plain dicts built fresh for every node visit and dropped
afterwards.  Values describing other nodes are read from the graph at the
moment the context is built; since those nodes were visited earlier, their
``rendered`` and ``url`` are already final.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from vellum._errors import ConfigurationError
from vellum.content.dates import DEFAULT_LOCALE, date_context, date_names

if TYPE_CHECKING:
    from vellum.graph.model import BuildGraph, GraphNode

BUILDER_NAME = "Vellum"


class CollectionNames(list):
    """A page's collection names, outermost first, with ``first``/``last`` accessors."""

    @property
    def first(self) -> str:
        return self[0] if self else ""

    @property
    def last(self) -> str:
        return self[-1] if self else ""


def _locale_name(global_context: Mapping[str, Any]) -> str:
    return str(global_context.get("locale") or DEFAULT_LOCALE)


def site_locale(global_context: Mapping[str, Any]) -> str:
    """The ``locale`` named in the global context, or the default.

    Raises:
        ConfigurationError: If Babel does not know the locale.

    """
    locale = _locale_name(global_context)
    try:
        date_names(locale)
    except ValueError as exc:
        msg = f"global context: {exc}"
        raise ConfigurationError(msg) from exc
    return locale


def page_context(node: GraphNode, locale: str = DEFAULT_LOCALE) -> dict[str, Any]:
    """Describe one node to templates; date names follow ``locale``."""
    page = node.page
    data = dict(page.data)
    if page.title is not None:
        data["title"] = page.title
    collections = page.collections
    directory = page.path.parent.as_posix()
    return {
        "path": page.path.as_posix(),
        "name": page.path.name,
        "stem": page.path.stem,
        "directory": "" if directory == "." else directory,
        "title": page.title,
        "date": date_context(page.date, locale) if page.date is not None else None,
        "layout": page.layout,
        "permalink": page.permalink,
        "depends": sorted(page.depends),
        "collections": CollectionNames(collections),
        "collection": collections[-1] if collections else "",
        "pagination": (
            {"collection": page.pagination.collection, "page_size": page.pagination.page_size}
            if page.pagination is not None
            else None
        ),
        "data": data,
        "body": page.body,
        "url": node.url,
        "rendered": node.rendered,
    }


def meta_context(version: str, now: datetime, locale: str = DEFAULT_LOCALE) -> dict[str, Any]:
    """Build-wide ``meta`` entry: build time, builder name and version."""
    return {"date": date_context(now, locale), "builder": BUILDER_NAME, "version": version}


def node_context(
    graph: BuildGraph,
    node: GraphNode,
    *,
    global_context: Mapping[str, Any],
    meta: Mapping[str, Any],
) -> dict[str, Any]:
    """Assemble the context a node is rendered with.

    ``page`` is the owning content page, ``layout`` the node itself when it
    is a layout instance, and ``layouts`` every ancestor nearest first.
    Date names follow the global context's ``locale``.
    Each depended-on collection is exposed under its own name as a list of
    member contexts in collection order; reserved keys take precedence over
    a collection of the same name.
    """
    locale = _locale_name(global_context)
    own = page_context(node, locale)
    ancestors = [page_context(graph[key], locale) for key in node.ancestors]

    context: dict[str, Any] = {}
    for collection in sorted(node.page.depends):
        context[collection] = [
            page_context(graph[member], locale)
            for member in graph.members.get(collection, ())
            if member != node.key
        ]
    context.update({
        "global": global_context,
        "meta": meta,
        "page": ancestors[-1] if ancestors else own,
        "layout": own if node.is_layout_instance else None,
        "layouts": ancestors,
        "include": {},
    })
    return context
