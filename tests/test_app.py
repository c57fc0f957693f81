"""Tests for vellum.app — the build entry point."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

import vellum


class TestBuild:
    """vellum.build renders a site once and reports it."""

    def test_returns_generation_result(self, layered_site: Path) -> None:
        with patch.object(sys, "stderr", io.StringIO()):
            result = vellum.build(layered_site)
        assert result is not None
        assert [str(k) for k in result.graph.pages()] == ["a.html", "b.html", "c.html"]
        assert (layered_site / "output" / "a.html").is_file()

    def test_prints_banner_and_summary(self, layered_site: Path) -> None:
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            vellum.build(layered_site)
        output = buf.getvalue()
        assert "[build]" in output
        assert "3 pages built" in output
        assert "Wrote 3 files" in output

    def test_overrides(self, layered_site: Path) -> None:
        with patch.object(sys, "stderr", io.StringIO()):
            vellum.build(layered_site, output="public", export_graph=True)
        assert (layered_site / "public" / "graph.dot").is_file()

    def test_parse_errors_shown_as_warnings(self, layered_site: Path) -> None:
        (layered_site / "broken.md").write_text("---\ntitle: x\n")
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            vellum.build(layered_site)
        assert "broken.md: frontmatter block is not closed" in buf.getvalue()

    def test_watch_flag_hands_over(self, layered_site: Path) -> None:
        with patch("vellum.app._run_watch") as run_watch:
            assert vellum.build(layered_site, watch=True) is None
        run_watch.assert_called_once()
        assert run_watch.call_args.args[0].watch is True
