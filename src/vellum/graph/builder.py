"""Dependency graph construction.

Turns the parsed page set of one snapshot into a :class:`BuildGraph`:

1. Every content page becomes a node.
2. Each node declaring ``layout`` gets a *fresh* instance of that layout as
   its uses-layout child, recursively, so a layout shared by N pages yields
   N nodes with independent ancestor chains.
3. Each node depending on a collection gets a member-of edge from every
   member of that collection.

Layout cycles are caught while a chain is being expanded; anything else that
closes a loop is caught by a final acyclicity check over the whole graph.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import PurePosixPath

from vellum._errors import ConfigurationError, CycleError, ParseError, UnresolvedReferenceError
from vellum.content.dates import sort_key
from vellum.content.page import Page, derive_collections
from vellum.graph.model import BuildGraph, Edge, EdgeKind, GraphNode, NodeKey

__all__ = ["build_graph", "derive_collections", "member_index", "resolve_layout"]


def build_graph(
    pages: Iterable[Page],
    parse_errors: Iterable[ParseError] = (),
    *,
    layouts_dir: str = "layouts",
) -> BuildGraph:
    """Build the dependency graph for one snapshot.

    Args:
        pages: Every successfully parsed page, layouts included.
        parse_errors: Files excluded from the snapshot; carried on the graph
            for reporting.
        layouts_dir: Directory layout references are resolved against.

    Raises:
        UnresolvedReferenceError: A layout or collection reference names
            nothing in the snapshot.
        CycleError: The resulting graph is not acyclic.

    """
    pages = sorted(pages, key=lambda p: str(p.path))
    layouts = {page.path: page for page in pages if page.is_layout}
    content = [page for page in pages if not page.is_layout]
    members = member_index(content)

    nodes: list[GraphNode] = []
    edges: list[Edge] = []
    for page in content:
        node = GraphNode(key=NodeKey(page.path), page=page)
        nodes.append(node)
        _expand_layouts(node, layouts, layouts_dir, nodes, edges)

    for node in nodes:
        for collection in sorted(node.page.depends):
            if collection not in members:
                raise UnresolvedReferenceError(node.key.path, "collection", collection)
            edges.extend(
                (member, node.key, EdgeKind.MEMBER_OF)
                for member in members[collection]
                if member != node.key
            )

    graph = BuildGraph(nodes, edges, members=members, parse_errors=parse_errors)
    if not graph.is_acyclic():
        raise CycleError([str(key.path) for key in graph.find_cycle()])
    return graph


def member_index(pages: Iterable[Page]) -> dict[str, tuple[NodeKey, ...]]:
    """Map each collection name to its members, newest first.

    Undated members sort after dated ones; ties are broken by path.
    """
    grouped: dict[str, list[Page]] = {}
    for page in pages:
        for name in page.collections:
            grouped.setdefault(name, []).append(page)
    return {
        name: tuple(NodeKey(page.path) for page in _collection_order(group))
        for name, group in grouped.items()
    }


def resolve_layout(
    name: str,
    layouts: Mapping[PurePosixPath, Page],
    layouts_dir: str = "layouts",
) -> Page | None:
    """Find the layout page a ``layout`` reference names.

    Tries the reference as a site-relative path, then as a path inside the
    layouts directory, then as a suffix-less stem inside the layouts directory.

    Raises:
        ConfigurationError: The stem matches more than one layout.

    """
    reference = PurePosixPath(name)
    for candidate in (reference, PurePosixPath(layouts_dir) / reference):
        if candidate in layouts:
            return layouts[candidate]

    matches = [
        page for path, page in layouts.items()
        if path.relative_to(layouts_dir).with_suffix("") == reference
    ]
    if len(matches) > 1:
        names = ", ".join(str(page.path) for page in matches)
        msg = f"layout {name!r} is ambiguous: {names}"
        raise ConfigurationError(msg)
    return matches[0] if matches else None


def _expand_layouts(
    node: GraphNode,
    layouts: Mapping[PurePosixPath, Page],
    layouts_dir: str,
    nodes: list[GraphNode],
    edges: list[Edge],
) -> None:
    """Append ``node``'s chain of layout instances, innermost first."""
    chain = [node.key.path]
    current = node
    while current.page.layout is not None:
        layout = resolve_layout(current.page.layout, layouts, layouts_dir)
        if layout is None:
            raise UnresolvedReferenceError(current.key.path, "layout", current.page.layout)
        if layout.path in chain:
            raise CycleError([*(str(path) for path in chain), str(layout.path)])

        instance = GraphNode(
            key=NodeKey(layout.path, site=current.key),
            page=layout,
            ancestors=(current.key, *current.ancestors),
        )
        nodes.append(instance)
        edges.append((current.key, instance.key, EdgeKind.USES_LAYOUT))
        chain.append(layout.path)
        current = instance


def _collection_order(pages: list[Page]) -> list[Page]:
    by_path = sorted(pages, key=lambda p: str(p.path))
    dated = sorted((p for p in by_path if p.date is not None), key=lambda p: sort_key(p.date), reverse=True)
    undated = [p for p in by_path if p.date is None]
    return dated + undated
