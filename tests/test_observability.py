"""Tests for vellum.observability — build events, log, collector and reporter."""

import io
import threading

from vellum.graph.builder import build_graph
from vellum.graph.differ import classify
from vellum.graph.model import BuildGraph
from vellum.graph.scheduler import NodeResult
from vellum.observability.collector import BuildCollector
from vellum.observability.events import (
    GenerationFinished,
    GraphBuilt,
    GraphDiffed,
    NodeRendered,
    OutputWritten,
    now_ns,
)
from vellum.observability.log import EventLog
from vellum.observability.reporter import Reporter
from tests.conftest import make_page
from tests.test_graph import key, layered_pages


def _rendered(path: str, url: str = "/x.html", timestamp_ns: int | None = None) -> NodeRendered:
    return NodeRendered(
        path=path, url=url, render_ms=0.1,
        timestamp_ns=timestamp_ns if timestamp_ns is not None else now_ns(),
    )


# ---------------------------------------------------------------------------
# EventLog
# ---------------------------------------------------------------------------


class TestEventLog:
    """Tests for the event log store."""

    def test_append_and_len(self) -> None:
        log = EventLog()
        assert len(log) == 0
        log.append(_rendered("a.html"))
        assert len(log) == 1

    def test_max_events_enforced(self) -> None:
        log = EventLog(max_events=5)
        for i in range(10):
            log.append(_rendered(f"{i}.html"))
        assert len(log) == 5

    def test_recent(self) -> None:
        log = EventLog()
        log.extend([_rendered(f"{i}.html") for i in range(5)])
        recent = log.recent(3)
        assert len(recent) == 3
        assert recent[-1].path == "4.html"

    def test_query_by_type(self) -> None:
        log = EventLog()
        log.append(_rendered("a.html"))
        log.append(OutputWritten(kind="write", path="/a.html", timestamp_ns=now_ns()))
        log.append(_rendered("b.html"))

        results = log.query(event_type=NodeRendered)
        assert len(results) == 2
        assert all(isinstance(r, NodeRendered) for r in results)

    def test_query_most_recent_first(self) -> None:
        log = EventLog()
        log.append(_rendered("a.html"))
        log.append(_rendered("b.html"))
        assert [e.path for e in log.query()] == ["b.html", "a.html"]

    def test_query_by_path(self) -> None:
        log = EventLog()
        log.append(_rendered("posts/one.md"))
        log.append(_rendered("index.html"))
        assert [e.path for e in log.query(path="posts/")] == ["posts/one.md"]

    def test_query_since_and_limit(self) -> None:
        log = EventLog()
        log.append(_rendered("old.html", timestamp_ns=100))
        for i in range(5):
            log.append(_rendered(f"{i}.html", timestamp_ns=200 + i))
        assert len(log.query(since_ns=200)) == 5
        assert len(log.query(since_ns=200, limit=2)) == 2

    def test_latest(self) -> None:
        log = EventLog()
        assert log.latest(GraphBuilt) is None
        log.append(_rendered("a.html"))
        log.append(OutputWritten(kind="write", path="/a.html", timestamp_ns=now_ns()))
        log.append(_rendered("b.html"))
        assert log.latest(NodeRendered).path == "b.html"

    def test_clear_and_stats(self) -> None:
        log = EventLog()
        log.append(_rendered("a.html"))
        log.append(OutputWritten(kind="delete", path="/b.html", timestamp_ns=now_ns()))
        stats = log.stats()
        assert stats["total"] == 2
        assert stats["by_type"] == {"NodeRendered": 1, "OutputWritten": 1}
        assert log.clear() == 2
        assert len(log) == 0

    def test_thread_safe_appends(self) -> None:
        log = EventLog()

        def worker() -> None:
            for i in range(200):
                log.append(_rendered(f"{i}.html"))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(log) == 800


# ---------------------------------------------------------------------------
# BuildCollector
# ---------------------------------------------------------------------------


class TestBuildCollector:
    """The collector turns graph-layer values into events."""

    def test_record_graph(self) -> None:
        collector = BuildCollector()
        collector.record_graph(build_graph(layered_pages()), duration_ms=2.0)
        (event,) = collector.log.query(event_type=GraphBuilt)
        assert (event.pages, event.nodes, event.edges) == (3, 8, 5)
        assert event.parse_errors == 0

    def test_record_diff(self) -> None:
        collector = BuildCollector()
        new = build_graph(layered_pages())
        collector.record_diff(classify(BuildGraph.empty(), new), render_needed=8)
        (event,) = collector.log.query(event_type=GraphDiffed)
        assert event.added == 8
        assert event.render_needed == 8

    def test_record_render(self) -> None:
        collector = BuildCollector()
        instance = key("layouts/default.html", "a.html")
        collector.record_render(NodeResult(key=instance, url="/a.html", rendered="x", render_ms=1.5))
        (event,) = collector.log.query(event_type=NodeRendered)
        assert event.path == "layouts/default.html@a.html"
        assert event.url == "/a.html"

    def test_record_output_and_generation(self) -> None:
        collector = BuildCollector()
        collector.record_output("export", "graph.dot")
        collector.record_generation(3, ok=True, written=2, deleted=1, duration_ms=4.0)
        (output,) = collector.log.query(event_type=OutputWritten)
        (finished,) = collector.log.query(event_type=GenerationFinished)
        assert output.kind == "export"
        assert finished.generation == 3
        assert finished.ok
        assert finished.error == ""

    def test_shared_log(self) -> None:
        log = EventLog()
        BuildCollector(log).record_graph(build_graph([make_page("a.html")]))
        assert len(log) == 1


# ---------------------------------------------------------------------------
# Reporter
# ---------------------------------------------------------------------------


class TestReporter:
    """Messages are shown up to the configured verbosity."""

    def test_errors_always_shown(self) -> None:
        stream = io.StringIO()
        Reporter(0, stream).error("bad thing")
        assert "bad thing" in stream.getvalue()

    def test_levels_gated(self) -> None:
        stream = io.StringIO()
        reporter = Reporter(2, stream)
        reporter.warning("warn")
        reporter.info("info")
        reporter.debug("debug")
        reporter.trace("trace")
        text = stream.getvalue()
        assert "warn" in text
        assert "info" in text
        assert "debug" not in text
        assert "trace" not in text

    def test_enabled(self) -> None:
        reporter = Reporter(3)
        assert reporter.enabled(3)
        assert not reporter.enabled(4)
