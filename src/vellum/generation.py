"""One build generation: snapshot -> graph -> diff -> merge -> render -> write.

The stages run strictly in sequence against graphs owned by this call.  The
baseline passed in is only read; the caller decides whether to adopt the
returned graph.  Any :class:`~vellum._errors.VellumError` propagates, and a
render failure propagates before a single output file is touched.
"""

from __future__ import annotations

import time
from collections.abc import Set
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from vellum.config_loader import load_global_context
from vellum.content.loader import load_snapshot
from vellum.export.graph_export import GRAPH_FILE, to_dot
from vellum.export.stylesheets import syntax_stylesheets
from vellum.export.writer import OutputWriter, WrittenFile
from vellum.graph.builder import build_graph
from vellum.graph.differ import GraphDiff, classify, moved_outputs, render_needed, stale_outputs
from vellum.graph.merger import merge_graphs
from vellum.graph.model import BuildGraph, NodeKey
from vellum.graph.scheduler import RenderScheduler
from vellum.observability.collector import BuildCollector
from vellum.observability.profiler import GenerationProfiler
from vellum.observability.reporter import Reporter
from vellum.rendering.context import meta_context, site_locale
from vellum.rendering.markup import MarkupConverter
from vellum.rendering.templates import TemplateEngine

if TYPE_CHECKING:
    from vellum._errors import ParseError
    from vellum.config import VellumConfig
    from vellum.observability.events import GenerationProfile


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """Everything one successful generation produced.

    Attributes:
        graph: The new graph, rendered; the next baseline.
        diff: Classification against the previous baseline.
        render_needed: Nodes rendered in this generation.
        written: Output files written, exports included.
        deleted: Stale output files removed.
        parse_errors: Files excluded from the graph.
        profile: Per-stage timing.

    """

    graph: BuildGraph
    diff: GraphDiff
    render_needed: frozenset[NodeKey]
    written: tuple[WrittenFile, ...]
    deleted: tuple[Path, ...]
    parse_errors: tuple[ParseError, ...]
    profile: GenerationProfile


def page_outputs(graph: BuildGraph, needed: Set[NodeKey]) -> dict[str, str]:
    """``url -> text`` for every content page whose layout chain was rendered.

    A page's output is the rendered text of the last node of its chain.
    """
    outputs: dict[str, str] = {}
    for key in graph.pages():
        chain = graph.layout_chain(key)
        if not any(link in needed for link in chain):
            continue
        url = graph[key].url
        text = graph[chain[-1]].rendered
        if url is not None and text is not None:
            outputs[url] = text
    return outputs


def run_generation(
    config: VellumConfig,
    baseline: BuildGraph,
    *,
    force_all: bool = False,
    trigger: str = "initial",
    collector: BuildCollector | None = None,
    reporter: Reporter | None = None,
    now: datetime | None = None,
) -> GenerationResult:
    """Run one generation against ``baseline``.

    Args:
        config: Site configuration.
        baseline: Graph of the last successful generation (empty at first).
        force_all: Render every node regardless of the diff.
        trigger: What started this generation, for reporting.
        collector: Event collector; a private one is used when omitted.
        reporter: Console reporter; silent below warnings when omitted.
        now: Build time exposed as ``meta.date``.

    Raises:
        ConfigurationError: The page graph cannot be built.
        RenderError: A node failed to render; nothing was written.
        OutputError: Writing or deleting some output files failed.

    """
    from vellum import __version__

    collector = collector if collector is not None else BuildCollector()
    reporter = reporter if reporter is not None else Reporter()
    profiler = GenerationProfiler(collector.log, verbose=reporter.enabled(3))
    profiler.begin(trigger)

    # -- graph --
    profiler.start("graph")
    t0 = time.perf_counter()
    global_context = load_global_context(config.root)
    locale = site_locale(global_context)
    snapshot = load_snapshot(config)
    for error in snapshot.errors:
        reporter.warning(f"skipped {error}")
    graph = build_graph(snapshot.pages, snapshot.errors, layouts_dir=config.layouts_dir)
    collector.record_graph(graph, duration_ms=(time.perf_counter() - t0) * 1000)
    profiler.stop("graph")
    reporter.debug(f"graph: {len(graph.pages())} pages, {len(graph)} nodes, {len(graph.edges())} edges")

    # -- diff --
    with profiler.stage("diff"):
        diff = classify(baseline, graph)
        needed = render_needed(baseline, graph, diff, force_all=force_all)
        collector.record_diff(diff, render_needed=len(needed))
    reporter.debug(
        f"diff: +{len(diff.added)} -{len(diff.removed)} ~{len(diff.modified)}"
        f" ={len(diff.unchanged)}, {len(needed)} to render"
    )

    # -- merge --
    with profiler.stage("merge"):
        merge_graphs(baseline, graph, needed)

    # -- render --
    profiler.start("render")
    engine = TemplateEngine(config.snippets_path)
    scheduler = RenderScheduler(
        engine.render,
        MarkupConverter().convert,
        global_context,
        meta_context(__version__, now or datetime.now(timezone.utc), locale),
        on_rendered=collector.record_render,
    )
    outcome = scheduler.run(graph, needed)
    profiler.stop("render")
    for key in outcome.rendered:
        reporter.trace(f"rendered {key} -> {graph[key].url}")

    # -- write --
    profiler.start("write")
    writes = page_outputs(graph, needed)
    deletes = [
        *stale_outputs(baseline, diff).values(),
        *moved_outputs(baseline, graph, (key for key in graph.pages() if key in needed)).values(),
    ]
    exports: dict[str, str] = {}
    if config.export_graph:
        exports[GRAPH_FILE] = to_dot(graph)
    if config.export_syntax_css:
        exports.update(syntax_stylesheets())

    result = OutputWriter(config.output_path).apply({**writes, **exports}, deletes)
    for file in result.written:
        collector.record_output("export" if file.url in exports else "write", file.url)
    for path in result.deleted:
        collector.record_output("delete", path.relative_to(config.output_path).as_posix())
    profiler.stop("write")

    profile = profiler.finish(nodes_rendered=len(outcome.results))
    reporter.info(
        f"{trigger}: rendered {len(outcome.results)} nodes, "
        f"wrote {len(writes)} pages, deleted {len(result.deleted)} stale files"
    )
    return GenerationResult(
        graph=graph,
        diff=diff,
        render_needed=needed,
        written=result.written,
        deleted=result.deleted,
        parse_errors=snapshot.errors,
        profile=profile,
    )
