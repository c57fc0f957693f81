"""Graph layer — dependency graph, generation diffing and render order.

Builds the per-generation page graph, compares it with the previous one,
carries unaffected output forward and renders the rest in topological order.
"""

from vellum.graph.builder import build_graph
from vellum.graph.differ import GraphDiff, classify, render_needed, stale_outputs
from vellum.graph.merger import merge_graphs
from vellum.graph.model import BuildGraph, EdgeKind, GraphNode, NodeKey
from vellum.graph.scheduler import NodeResult, RenderOutcome, RenderScheduler, visit_order

__all__ = [
    "BuildGraph",
    "EdgeKind",
    "GraphDiff",
    "GraphNode",
    "NodeKey",
    "NodeResult",
    "RenderOutcome",
    "RenderScheduler",
    "build_graph",
    "classify",
    "merge_graphs",
    "render_needed",
    "stale_outputs",
    "visit_order",
]
