"""Tests for vellum.export — output writer, DOT export and stylesheets."""

from __future__ import annotations

from pathlib import Path

import pytest

from vellum._errors import OutputError
from vellum.export.graph_export import LAYOUT_COLOUR, MEMBER_COLOUR, PAGE_COLOUR, node_colour, to_dot
from vellum.export.stylesheets import stylesheet, syntax_stylesheets
from vellum.export.writer import OutputWriter
from vellum.graph.builder import build_graph
from tests.conftest import make_page
from tests.test_graph import key, layered_pages

# ---------------------------------------------------------------------------
# OutputWriter
# ---------------------------------------------------------------------------


class TestOutputWriterTarget:
    """URL to output path mapping."""

    @pytest.mark.parametrize(("url", "rel"), [
        ("/a.html", "a.html"),
        ("/posts/one.html", "posts/one.html"),
        ("/blog/b/", "blog/b/index.html"),
        ("/", "index.html"),
    ])
    def test_target(self, tmp_path: Path, url: str, rel: str) -> None:
        assert OutputWriter(tmp_path).target(url) == tmp_path / rel

    def test_rejects_parent_traversal(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="leaves the output directory"):
            OutputWriter(tmp_path).target("/../escape.html")


class TestOutputWriterApply:
    """Writes first, then deletions; failures are collected."""

    def test_writes_files(self, tmp_path: Path) -> None:
        result = OutputWriter(tmp_path).apply({"/a.html": "A", "/docs/b.html": "Bé"})
        assert (tmp_path / "a.html").read_text() == "A"
        assert (tmp_path / "docs" / "b.html").read_text(encoding="utf-8") == "Bé"
        assert [f.url for f in result.written] == ["/a.html", "/docs/b.html"]
        assert result.written[1].size_bytes == len("Bé".encode())

    def test_deletes_stale(self, tmp_path: Path) -> None:
        (tmp_path / "old.html").write_text("x")
        result = OutputWriter(tmp_path).apply({}, ["/old.html"])
        assert not (tmp_path / "old.html").exists()
        assert result.deleted == (tmp_path / "old.html",)

    def test_missing_delete_target_is_ignored(self, tmp_path: Path) -> None:
        result = OutputWriter(tmp_path).apply({}, ["/gone.html"])
        assert result.deleted == ()

    def test_never_deletes_a_path_written_in_the_same_call(self, tmp_path: Path) -> None:
        result = OutputWriter(tmp_path).apply({"/a.html": "new"}, ["/a.html"])
        assert (tmp_path / "a.html").read_text() == "new"
        assert result.deleted == ()

    def test_failures_collected(self, tmp_path: Path) -> None:
        (tmp_path / "blocker").write_text("a file, not a directory")
        with pytest.raises(OutputError) as exc_info:
            OutputWriter(tmp_path).apply({
                "/blocker/x.html": "x",
                "/../y.html": "y",
                "/ok.html": "ok",
            })
        assert [path for path, _ in exc_info.value.failures] == ["/blocker/x.html", "/../y.html"]
        assert (tmp_path / "ok.html").read_text() == "ok"


# ---------------------------------------------------------------------------
# DOT export
# ---------------------------------------------------------------------------


class TestDotExport:
    def test_digraph_structure(self) -> None:
        dot = to_dot(build_graph(layered_pages()))
        assert dot.startswith("digraph vellum {")
        assert dot.rstrip().endswith("}")
        assert dot.count("->") == 5
        assert 'label="uses-layout", style=solid' in dot

    def test_member_edges_dashed(self) -> None:
        graph = build_graph([make_page("posts/a.md"), make_page("index.html", depends=("posts",))])
        assert 'label="member-of", style=dashed' in to_dot(graph)

    def test_stable_output(self) -> None:
        assert to_dot(build_graph(layered_pages())) == to_dot(build_graph(layered_pages()))

    def test_node_colours(self) -> None:
        graph = build_graph([
            make_page("layouts/base.html"),
            make_page("posts/a.md"),
            make_page("index.html", layout="base", depends=("posts",)),
        ])
        assert node_colour(graph, key("layouts/base.html", "index.html")) == LAYOUT_COLOUR
        assert node_colour(graph, key("posts/a.md")) == MEMBER_COLOUR
        assert node_colour(graph, key("index.html")) == PAGE_COLOUR

    def test_url_in_page_label(self) -> None:
        graph = build_graph([make_page("a.html")])
        graph[key("a.html")].url = "/a.html"
        assert 'label="a.html\\n/a.html"' in to_dot(graph)


# ---------------------------------------------------------------------------
# Stylesheets
# ---------------------------------------------------------------------------


class TestStylesheets:
    def test_stylesheet_scoped_to_highlight(self) -> None:
        assert ".highlight" in stylesheet("default")

    def test_light_and_dark_differ(self) -> None:
        sheets = syntax_stylesheets()
        assert set(sheets) == {"css/light-code.css", "css/dark-code.css", "css/code.css"}
        assert sheets["css/light-code.css"] != sheets["css/dark-code.css"]

    def test_switcher_imports_both(self) -> None:
        switcher = syntax_stylesheets("assets")["assets/code.css"]
        assert "prefers-color-scheme: light" in switcher
        assert 'url("dark-code.css")' in switcher
