"""Build graph data model.

A :class:`BuildGraph` holds one generation's rendering instances.  Nodes are
keyed by ``(path, instantiation-site)`` so a layout used by N pages yields N
independent nodes, each with its own ancestor chain resolved at build time.

Edges run in render order:

- *uses-layout*: page (or layout instance) -> the layout instance it renders inside
- *member-of*: collection member -> page that depends on the collection

The edge set is stored in a ``networkx.MultiDiGraph`` keyed by edge kind, so
a pair of nodes can be linked by both kinds at once.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, TypeAlias

import networkx as nx

if TYPE_CHECKING:
    from vellum._errors import ParseError
    from vellum.content.page import Page


class EdgeKind(Enum):
    """Kind of dependency edge."""

    USES_LAYOUT = "uses-layout"
    MEMBER_OF = "member-of"


@dataclass(frozen=True, slots=True)
class NodeKey:
    """Identity of one rendering instance.

    Attributes:
        path: Source page path.
        site: Key of the node that instantiated this layout; None for content pages.

    """

    path: PurePosixPath
    site: NodeKey | None = None

    @property
    def is_layout_instance(self) -> bool:
        return self.site is not None

    @property
    def owner(self) -> NodeKey:
        """The content page at the bottom of this instance's site chain."""
        key = self
        while key.site is not None:
            key = key.site
        return key

    def __str__(self) -> str:
        if self.site is None:
            return str(self.path)
        return f"{self.path}@{self.site}"


@dataclass(slots=True)
class GraphNode:
    """One rendering instance of a page.

    ``rendered`` and ``url`` are the only mutable fields: the merger copies
    them forward from the previous generation, and the scheduler writes them
    as the node completes.

    Attributes:
        key: Node identity.
        page: The authored page this node renders.
        ancestors: Uses-layout predecessors, nearest first, up to and
            including the owning content page.  Empty for content pages.

    """

    key: NodeKey
    page: Page
    ancestors: tuple[NodeKey, ...] = ()
    rendered: str | None = None
    url: str | None = None

    @property
    def is_layout_instance(self) -> bool:
        return self.key.is_layout_instance


Edge: TypeAlias = tuple[NodeKey, NodeKey, EdgeKind]


class BuildGraph:
    """The complete node and edge set for one generation.

    Structure is fixed at construction; only ``GraphNode.rendered`` and
    ``GraphNode.url`` change afterwards.

    Args:
        nodes: Every rendering instance.
        edges: ``(source, target, kind)`` triples between keys in ``nodes``.
        members: Collection name -> member keys, in collection order.
        parse_errors: Files of the snapshot that were excluded from the graph.

    """

    __slots__ = ("_graph", "_members", "_nodes", "_parse_errors")

    def __init__(
        self,
        nodes: Iterable[GraphNode] = (),
        edges: Iterable[Edge] = (),
        *,
        members: Mapping[str, tuple[NodeKey, ...]] | None = None,
        parse_errors: Iterable[ParseError] = (),
    ) -> None:
        self._nodes: dict[NodeKey, GraphNode] = {node.key: node for node in nodes}
        self._graph = nx.MultiDiGraph()
        self._graph.add_nodes_from(self._nodes)
        for source, target, kind in edges:
            self._graph.add_edge(source, target, key=kind)
        self._members = dict(members or {})
        self._parse_errors = tuple(parse_errors)

    @classmethod
    def empty(cls) -> BuildGraph:
        """The baseline before the first generation."""
        return cls()

    # ----- nodes -----

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __getitem__(self, key: NodeKey) -> GraphNode:
        return self._nodes[key]

    def __iter__(self) -> Iterator[NodeKey]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, key: NodeKey) -> GraphNode | None:
        return self._nodes.get(key)

    def nodes(self) -> Iterator[GraphNode]:
        return iter(self._nodes.values())

    def pages(self) -> list[NodeKey]:
        """Keys of the content (non-layout) pages, in path order."""
        return sorted((k for k in self._nodes if k.site is None), key=str)

    @property
    def members(self) -> Mapping[str, tuple[NodeKey, ...]]:
        """Collection name -> member keys, newest first."""
        return self._members

    @property
    def parse_errors(self) -> tuple[ParseError, ...]:
        return self._parse_errors

    # ----- edges -----

    def edges(self, kind: EdgeKind | None = None) -> list[Edge]:
        return [
            (source, target, edge_kind)
            for source, target, edge_kind in self._graph.edges(keys=True)
            if kind is None or edge_kind is kind
        ]

    def successors(self, key: NodeKey, kind: EdgeKind | None = None) -> set[NodeKey]:
        return {
            target
            for _, target, edge_kind in self._graph.out_edges(key, keys=True)
            if kind is None or edge_kind is kind
        }

    def predecessors(self, key: NodeKey, kind: EdgeKind | None = None) -> set[NodeKey]:
        return {
            source
            for source, _, edge_kind in self._graph.in_edges(key, keys=True)
            if kind is None or edge_kind is kind
        }

    def descendants(self, key: NodeKey) -> set[NodeKey]:
        """Every node reachable from ``key`` along edges of either kind."""
        return nx.descendants(self._graph, key)

    def layout_chain(self, key: NodeKey) -> list[NodeKey]:
        """``key`` followed by its uses-layout successors, outermost last."""
        chain = [key]
        current = key
        while True:
            nxt = self.successors(current, EdgeKind.USES_LAYOUT)
            if not nxt:
                return chain
            current = next(iter(nxt))
            chain.append(current)

    def terminal(self, key: NodeKey) -> NodeKey:
        """The outermost layout instance wrapping a page (the page itself if none)."""
        return self.layout_chain(key)[-1]

    def roots(self) -> list[NodeKey]:
        """Nodes with no incoming member-of edge that are not layout targets."""
        return sorted(
            (
                key for key in self._nodes
                if key.site is None and not self.predecessors(key, EdgeKind.MEMBER_OF)
            ),
            key=str,
        )

    # ----- whole-graph queries -----

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    def find_cycle(self) -> list[NodeKey]:
        """Nodes along one cycle, first node repeated last; empty if acyclic."""
        try:
            cycle = nx.find_cycle(self._graph)
        except nx.NetworkXNoCycle:
            return []
        # MultiDiGraph yields (u, v, key) triples
        chain = [edge[0] for edge in cycle]
        chain.append(chain[0])
        return chain

    def topological_order(self) -> list[NodeKey]:
        """Deterministic topological order over every node (ties by key text)."""
        return list(nx.lexicographical_topological_sort(self._graph, key=str))
