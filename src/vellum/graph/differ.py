"""Graph differ — classify nodes across two generations.

Compares the previous generation's graph with the freshly built one and
decides what must be re-rendered and which outputs have gone stale.

Node labels are :class:`NodeKey` values.  Two nodes sharing a label are
compared on their authored page and ancestor chain only; ``url`` and
``rendered`` are render artifacts and never make a node Modified.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal, TypeAlias

from vellum.graph.model import BuildGraph, EdgeKind, GraphNode, NodeKey

ChangeKind: TypeAlias = Literal["added", "removed", "modified", "unchanged"]


@dataclass(frozen=True, slots=True)
class GraphDiff:
    """Partition of ``old-labels | new-labels`` into four disjoint sets."""

    added: frozenset[NodeKey]
    removed: frozenset[NodeKey]
    modified: frozenset[NodeKey]
    unchanged: frozenset[NodeKey]

    @property
    def changed(self) -> frozenset[NodeKey]:
        """Added or Modified labels."""
        return self.added | self.modified

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)

    def kind_of(self, key: NodeKey) -> ChangeKind:
        if key in self.added:
            return "added"
        if key in self.removed:
            return "removed"
        if key in self.modified:
            return "modified"
        if key in self.unchanged:
            return "unchanged"
        msg = f"{key} is in neither generation"
        raise KeyError(msg)


def same_content(old: GraphNode, new: GraphNode) -> bool:
    """Content equality, ignoring ``url`` and ``rendered``."""
    return old.page == new.page and old.ancestors == new.ancestors


def classify(old: BuildGraph, new: BuildGraph) -> GraphDiff:
    """Classify every label present in either generation."""
    old_keys = set(old)
    new_keys = set(new)
    common = old_keys & new_keys
    modified = {key for key in common if not same_content(old[key], new[key])}
    return GraphDiff(
        added=frozenset(new_keys - old_keys),
        removed=frozenset(old_keys - new_keys),
        modified=frozenset(modified),
        unchanged=frozenset(common - modified),
    )


def render_needed(
    old: BuildGraph,
    new: BuildGraph,
    diff: GraphDiff,
    force_all: bool = False,
) -> frozenset[NodeKey]:
    """Compute the set of new-graph nodes that must be rendered.

    Seeds are the Added and Modified nodes, the former parents of changed or
    removed layout instances together with the content page owning
    any Added, Modified or Removed layout instance, and the old-graph successors of removed nodes.
    The result is every seed still present in ``new`` plus its new-graph
    descendants.

    Args:
        old: Previous generation (empty on the first run).
        new: Freshly built generation.
        diff: ``classify(old, new)``.
        force_all: A build-wide input (global context, snippets) changed;
            every node is render-needed.

    """
    if force_all:
        return frozenset(new)

    seeds: set[NodeKey] = set(diff.changed)
    for key in diff.modified | diff.removed:
        if key.is_layout_instance:
            seeds.update(old.predecessors(key, EdgeKind.USES_LAYOUT))
    for key in diff.changed | diff.removed:
        if key.is_layout_instance:
            seeds.add(key.owner)
    for key in diff.removed:
        seeds.update(old.successors(key))

    needed = {key for key in seeds if key in new}
    for key in list(needed):
        needed |= new.descendants(key)
    return frozenset(needed)


def stale_outputs(old: BuildGraph, diff: GraphDiff) -> dict[NodeKey, str]:
    """Last-known output url of every removed content page."""
    stale: dict[NodeKey, str] = {}
    for key in sorted(diff.removed, key=str):
        node = old[key]
        if not key.is_layout_instance and node.url is not None:
            stale[key] = node.url
    return stale


def moved_outputs(old: BuildGraph, new: BuildGraph, pages: Iterable[NodeKey]) -> dict[NodeKey, str]:
    """Previous url of every listed page whose url changed in ``new``."""
    moved: dict[NodeKey, str] = {}
    for key in pages:
        previous = old.get(key)
        current = new.get(key)
        if previous is None or current is None or previous.url is None:
            continue
        if previous.url != current.url:
            moved[key] = previous.url
    return moved
