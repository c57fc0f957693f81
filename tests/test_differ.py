"""Tests for vellum.graph.differ and vellum.graph.merger — generation comparison."""

from __future__ import annotations

from dataclasses import replace
from pathlib import PurePosixPath

import pytest

from vellum._errors import GraphError
from vellum.graph.builder import build_graph
from vellum.graph.differ import classify, moved_outputs, render_needed, stale_outputs
from vellum.graph.merger import merge_graphs
from vellum.graph.model import BuildGraph, NodeKey
from tests.conftest import make_page, utc
from tests.test_graph import key, layered_pages

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def edit(pages, path: str, **changes):
    """Return ``pages`` with the page at ``path`` replaced by an edited copy."""
    return [replace(p, **changes) if str(p.path) == path else p for p in pages]


def without(pages, path: str):
    return [p for p in pages if str(p.path) != path]


def rendered(graph: BuildGraph) -> BuildGraph:
    """Mark every node as rendered, as if a generation had completed."""
    for node in graph.nodes():
        node.rendered = f"<{node.key}>"
        node.url = "/" + str(node.key.owner.path.with_suffix(".html"))
    return graph


def blog_pages():
    return [
        make_page("posts/one.md", date=utc(2024, 1, 1)),
        make_page("posts/two.md", date=utc(2024, 2, 1)),
        make_page("posts/three.md", date=utc(2024, 3, 1)),
        make_page("index.html", depends=("posts",)),
    ]


def names(keys) -> set[str]:
    return {str(k) for k in keys}


B_CHAIN = {"b.html", "layouts/post.html@b.html", "layouts/default.html@layouts/post.html@b.html"}


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    """Every label lands in exactly one of the four sets."""

    def test_first_generation_is_all_added(self) -> None:
        new = build_graph(layered_pages())
        diff = classify(BuildGraph.empty(), new)
        assert diff.added == frozenset(new)
        assert not diff.removed and not diff.modified and not diff.unchanged

    def test_identical_snapshots(self) -> None:
        diff = classify(build_graph(layered_pages()), build_graph(layered_pages()))
        assert diff.is_empty
        assert len(diff.unchanged) == 8

    def test_partition_is_disjoint_and_complete(self) -> None:
        old = build_graph(layered_pages())
        pages = edit(layered_pages(), "b.html", layout="page")
        new = build_graph(pages)
        diff = classify(old, new)
        sets = [diff.added, diff.removed, diff.modified, diff.unchanged]
        assert sum(len(s) for s in sets) == len(set(old) | set(new))
        for i, left in enumerate(sets):
            for right in sets[i + 1:]:
                assert not left & right

    def test_body_edit_is_modified(self) -> None:
        old = build_graph(layered_pages())
        new = build_graph(edit(layered_pages(), "b.html", body="Page B, edited"))
        diff = classify(old, new)
        assert names(diff.modified) == {"b.html"}
        assert diff.kind_of(key("b.html")) == "modified"
        assert diff.kind_of(key("a.html")) == "unchanged"

    def test_render_artifacts_ignored(self) -> None:
        old = rendered(build_graph(layered_pages()))
        diff = classify(old, build_graph(layered_pages()))
        assert diff.is_empty

    def test_layout_switch(self) -> None:
        old = build_graph(layered_pages())
        new = build_graph(edit(layered_pages(), "b.html", layout="page"))
        diff = classify(old, new)
        assert names(diff.added) == {
            "layouts/page.html@b.html", "layouts/default.html@layouts/page.html@b.html",
        }
        assert names(diff.removed) == {
            "layouts/post.html@b.html", "layouts/default.html@layouts/post.html@b.html",
        }
        assert names(diff.modified) == {"b.html"}

    def test_kind_of_unknown_key(self) -> None:
        diff = classify(BuildGraph.empty(), BuildGraph.empty())
        with pytest.raises(KeyError):
            diff.kind_of(key("nope.html"))


# ---------------------------------------------------------------------------
# render_needed
# ---------------------------------------------------------------------------


class TestRenderNeeded:
    """The render-needed set is the changed seeds plus their descendants."""

    def _needed(self, old_pages, new_pages, *, force_all: bool = False):
        old = build_graph(old_pages)
        new = build_graph(new_pages)
        return render_needed(old, new, classify(old, new), force_all=force_all)

    def test_page_body_edit(self) -> None:
        needed = self._needed(layered_pages(), edit(layered_pages(), "b.html", body="edited"))
        assert names(needed) == B_CHAIN

    def test_inner_layout_edit_rerenders_its_users_only(self) -> None:
        needed = self._needed(layered_pages(), edit(layered_pages(), "layouts/post.html", body="<div/>"))
        assert names(needed) == B_CHAIN

    def test_outer_layout_edit_rerenders_everything(self) -> None:
        pages = layered_pages()
        needed = self._needed(pages, edit(pages, "layouts/default.html", body="<body/>"))
        assert needed == frozenset(build_graph(pages))

    def test_outer_layout_edit_rerenders_pages_behind_inner_layouts(self) -> None:
        pages = layered_pages()
        needed = self._needed(pages, edit(pages, "layouts/default.html", body="<body/>"))
        assert key("b.html") in needed
        assert key("c.html") in needed
        assert key("layouts/post.html", "b.html") in needed

    def test_nothing_changed(self) -> None:
        assert self._needed(layered_pages(), layered_pages()) == frozenset()

    def test_monotonic(self) -> None:
        pages = layered_pages()
        small = self._needed(pages, edit(pages, "b.html", body="x"))
        both = edit(edit(pages, "b.html", body="x"), "c.html", body="y")
        assert small <= self._needed(pages, both)

    def test_force_all(self) -> None:
        pages = layered_pages()
        assert self._needed(pages, pages, force_all=True) == frozenset(build_graph(pages))

    def test_new_member_rerenders_dependent(self) -> None:
        pages = blog_pages()
        needed = self._needed(pages, [*pages, make_page("posts/four.md", date=utc(2024, 4, 1))])
        assert names(needed) == {"posts/four.md", "index.html"}

    def test_removed_member_rerenders_dependent(self) -> None:
        pages = blog_pages()
        needed = self._needed(pages, without(pages, "posts/two.md"))
        assert names(needed) == {"index.html"}

    def test_removed_layout_instance_rerenders_former_parent(self) -> None:
        pages = layered_pages()
        needed = self._needed(pages, edit(pages, "a.html", layout=None))
        assert names(needed) == {"a.html"}

    def test_result_is_subset_of_new_graph(self) -> None:
        pages = layered_pages()
        new_pages = without(edit(pages, "b.html", layout=None), "c.html")
        needed = self._needed(pages, new_pages)
        assert needed <= frozenset(build_graph(new_pages))


# ---------------------------------------------------------------------------
# stale / moved outputs
# ---------------------------------------------------------------------------


class TestStaleOutputs:
    def test_removed_page_url(self) -> None:
        old = rendered(build_graph(blog_pages()))
        new = build_graph(without(blog_pages(), "posts/two.md"))
        stale = stale_outputs(old, classify(old, new))
        assert stale == {key("posts/two.md"): "/posts/two.html"}

    def test_removed_layout_instances_have_no_output(self) -> None:
        old = rendered(build_graph(layered_pages()))
        new = build_graph(edit(layered_pages(), "b.html", layout="page"))
        assert stale_outputs(old, classify(old, new)) == {}

    def test_moved_outputs(self) -> None:
        old = rendered(build_graph(layered_pages()))
        new = build_graph(layered_pages())
        for node in new.nodes():
            node.url = old[node.key].url
        new[key("b.html")].url = "/blog/b/"
        moved = moved_outputs(old, new, new.pages())
        assert moved == {key("b.html"): "/b.html"}


# ---------------------------------------------------------------------------
# merge_graphs
# ---------------------------------------------------------------------------


class TestMergeGraphs:
    """Unaffected nodes carry their previous output forward."""

    def test_carries_forward_and_clears(self) -> None:
        old = rendered(build_graph(layered_pages()))
        new = build_graph(edit(layered_pages(), "b.html", body="edited"))
        needed = render_needed(old, new, classify(old, new))
        merge_graphs(old, new, needed)

        for node in new.nodes():
            if node.key in needed:
                assert node.rendered is None
                assert node.url is None
            else:
                assert node.rendered == old[node.key].rendered
                assert node.url == old[node.key].url

    def test_returns_new_graph(self) -> None:
        old = rendered(build_graph(layered_pages()))
        new = build_graph(layered_pages())
        assert merge_graphs(old, new, frozenset()) is new

    def test_unrendered_prior_node_raises(self) -> None:
        old = build_graph(layered_pages())
        new = build_graph(layered_pages())
        with pytest.raises(GraphError, match="no prior output"):
            merge_graphs(old, new, frozenset())

    def test_missing_prior_node_raises(self) -> None:
        old = rendered(build_graph([make_page("a.html")]))
        new = build_graph([make_page("a.html"), make_page("b.html")])
        with pytest.raises(GraphError):
            merge_graphs(old, new, {NodeKey(PurePosixPath("a.html"))})
