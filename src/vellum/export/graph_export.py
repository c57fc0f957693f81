"""Diagnostic graph export in Graphviz DOT form.

Layout instances, collection members and plain pages get distinct fill
colours; member-of edges are dashed.
"""

from __future__ import annotations

from vellum.graph.model import BuildGraph, EdgeKind, NodeKey

LAYOUT_COLOUR = "#FFDFBA"
MEMBER_COLOUR = "#DAFFBA"
PAGE_COLOUR = "#BADAFF"

GRAPH_FILE = "graph.dot"


def node_colour(graph: BuildGraph, key: NodeKey) -> str:
    if key.is_layout_instance:
        return LAYOUT_COLOUR
    if graph.successors(key, EdgeKind.MEMBER_OF):
        return MEMBER_COLOUR
    return PAGE_COLOUR


def to_dot(graph: BuildGraph) -> str:
    """Render the graph as a DOT digraph, nodes and edges in stable order."""
    ids = {key: f"n{index}" for index, key in enumerate(sorted(graph, key=str))}
    lines = [
        "digraph vellum {",
        "    rankdir=LR;",
        '    node [shape=box, style="rounded,filled", fontname="Helvetica"];',
    ]
    for key, node_id in ids.items():
        node = graph[key]
        label = str(key.path)
        if node.url is not None and not key.is_layout_instance:
            label += f"\\n{node.url}"
        lines.append(f'    {node_id} [label="{_escape(label)}", fillcolor="{node_colour(graph, key)}"];')

    edges = sorted(graph.edges(), key=lambda e: (str(e[0]), str(e[1]), e[2].value))
    for source, target, kind in edges:
        style = "solid" if kind is EdgeKind.USES_LAYOUT else "dashed"
        lines.append(f'    {ids[source]} -> {ids[target]} [label="{kind.value}", style={style}];')
    lines.append("}")
    return "\n".join(lines) + "\n"


def _escape(text: str) -> str:
    return text.replace('"', '\\"')
