"""Graph merger — carry prior output forward into a new generation."""

from __future__ import annotations

from collections.abc import Set

from vellum._errors import GraphError
from vellum.graph.model import BuildGraph, NodeKey


def merge_graphs(old: BuildGraph, new: BuildGraph, render_needed: Set[NodeKey]) -> BuildGraph:
    """Copy ``rendered`` and ``url`` from ``old`` onto unaffected nodes of ``new``.

    Render-needed nodes have both fields cleared.  This is the only point
    where state from the previous generation enters the new one.

    Returns:
        ``new``, updated in place.

    Raises:
        GraphError: A node outside ``render_needed`` has no rendered
            counterpart in ``old``.

    """
    for node in new.nodes():
        if node.key in render_needed:
            node.rendered = None
            node.url = None
            continue
        prior = old.get(node.key)
        if prior is None or prior.rendered is None:
            msg = f"{node.key} is not render-needed but has no prior output"
            raise GraphError(msg)
        node.rendered = prior.rendered
        node.url = prior.url
    return new
