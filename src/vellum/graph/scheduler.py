"""Render scheduler — sequential, topologically ordered render pass.

The scheduler walks the *whole* merged graph in one deterministic
topological order.  Nodes outside the render-needed set are not rendered,
but their carried-forward ``rendered``/``url`` stay visible to every
context built later in the walk.

For each render-needed node:

1. Build the context (``page``, ``layout``, ``layouts``, collections).
2. Compute ``url``: layout instances take their owning page's url; pages
   expand their permalink (shorthands first) or fall back to the source
   path with ``.html``.
3. Convert the body if it is Markdown, then expand it as a template.
4. Write ``url``/``rendered`` back onto the node and record a
   :class:`NodeResult`.

Any render failure aborts the pass.  The raised error names the failing
node's path and carries the keys of that node and all its descendants.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping, Set
from dataclasses import dataclass, field
from typing import Any

from vellum._errors import RenderError
from vellum._types import ConvertFunc, RenderFunc
from vellum.graph.model import BuildGraph, GraphNode, NodeKey
from vellum.rendering.context import node_context
from vellum.rendering.permalink import default_url, normalise_url, permalink_template


def visit_order(graph: BuildGraph) -> list[NodeKey]:
    """Deterministic topological order over every node of ``graph``."""
    return graph.topological_order()


@dataclass(frozen=True, slots=True)
class NodeResult:
    """Final output of one node for one generation."""

    key: NodeKey
    url: str | None
    rendered: str
    render_ms: float = 0.0


@dataclass(frozen=True, slots=True)
class RenderOutcome:
    """Result of a completed render pass.

    Attributes:
        order: Every node in visit order.
        results: Records for the nodes rendered in this pass.

    """

    order: tuple[NodeKey, ...]
    results: Mapping[NodeKey, NodeResult] = field(default_factory=dict)

    @property
    def rendered(self) -> tuple[NodeKey, ...]:
        """Keys rendered in this pass, in visit order."""
        return tuple(key for key in self.order if key in self.results)


class RenderScheduler:
    """Render the render-needed subset of a merged graph.

    Args:
        render: Template expansion, ``render(text, context) -> text``.
        convert: Markup conversion, ``convert(text) -> text``.
        global_context: Contents of the global context file.
        meta: Build-wide ``meta`` entry.
        on_rendered: Called with each :class:`NodeResult` as it completes.

    """

    def __init__(
        self,
        render: RenderFunc,
        convert: ConvertFunc,
        global_context: Mapping[str, Any] | None = None,
        meta: Mapping[str, Any] | None = None,
        *,
        on_rendered: Callable[[NodeResult], None] | None = None,
    ) -> None:
        self._render = render
        self._convert = convert
        self._global = dict(global_context or {})
        self._meta = dict(meta or {})
        self._on_rendered = on_rendered

    def run(self, graph: BuildGraph, render_needed: Set[NodeKey]) -> RenderOutcome:
        """Visit every node in order, rendering those in ``render_needed``.

        Raises:
            TemplateError: Template expansion failed for a node.
            MarkupError: Markup conversion failed for a node.

        """
        order = visit_order(graph)
        results: dict[NodeKey, NodeResult] = {}
        for key in order:
            if key not in render_needed:
                continue
            node = graph[key]
            try:
                result = self._render_node(graph, node)
            except RenderError as exc:
                raise _attribute(exc, node, graph) from exc
            results[key] = result
            if self._on_rendered is not None:
                self._on_rendered(result)
        return RenderOutcome(order=tuple(order), results=results)

    def _render_node(self, graph: BuildGraph, node: GraphNode) -> NodeResult:
        start = time.perf_counter()
        context = node_context(graph, node, global_context=self._global, meta=self._meta)
        node.url = self._url(graph, node, context)
        own = context["layout"] if node.is_layout_instance else context["page"]
        own["url"] = node.url

        body = node.page.body
        if node.page.is_markup:
            body = self._convert(body)
        node.rendered = self._render(body, context)
        return NodeResult(
            key=node.key,
            url=node.url,
            rendered=node.rendered,
            render_ms=(time.perf_counter() - start) * 1000,
        )

    def _url(self, graph: BuildGraph, node: GraphNode, context: Mapping[str, Any]) -> str:
        if node.is_layout_instance:
            return graph[node.key.owner].url or default_url(node.key.owner.path)
        if node.page.permalink is None:
            return default_url(node.page.path)
        return normalise_url(self._render(permalink_template(node.page.permalink), context))


def _attribute(exc: RenderError, node: GraphNode, graph: BuildGraph) -> RenderError:
    """Re-issue a render error against the failing node."""
    error = type(exc)(node.key.path, exc.reason)
    error.invalidated = frozenset({node.key, *graph.descendants(node.key)})
    return error
