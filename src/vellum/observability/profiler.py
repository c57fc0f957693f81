"""Generation profiler — how long each stage of a build generation took.

A generation runs through a fixed list of stages (``STAGES``).  The profiler
keeps one elapsed-time slot per stage and, when the generation ends, folds
them into a ``GenerationProfile`` event on the ``EventLog``.

Thread Safety:
    One profiler belongs to one generation at a time.  Aggregate queries
    read through the ``EventLog`` lock.

"""

from __future__ import annotations

import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from vellum.observability.events import GenerationProfile, now_ns

if TYPE_CHECKING:
    from vellum.observability.log import EventLog

STAGES = ("graph", "diff", "merge", "render", "write")


class GenerationProfiler:
    """Per-stage stopwatch for one generation.

    Usage::

        profiler = GenerationProfiler(event_log)
        profiler.begin("posts/hello.md")
        with profiler.stage("graph"):
            graph = build_graph(pages)
        profile = profiler.finish(nodes_rendered=3)

    ``start``/``stop`` pairs work too where a ``with`` block does not fit.
    Names outside ``STAGES`` are ignored.

    """

    __slots__ = ("_elapsed", "_log", "_began", "_running", "_trigger", "_verbose")

    def __init__(self, log: EventLog, *, verbose: bool = True) -> None:
        self._log = log
        self._verbose = verbose
        self._trigger = ""
        self._began: float | None = None
        self._elapsed = dict.fromkeys(STAGES, 0.0)
        self._running: dict[str, float] = {}

    def begin(self, trigger: str) -> None:
        """Reset every stage and start the generation clock."""
        self._trigger = trigger
        self._began = time.perf_counter()
        self._elapsed = dict.fromkeys(STAGES, 0.0)
        self._running.clear()

    def start(self, stage: str) -> None:
        if stage in self._elapsed:
            self._running[stage] = time.perf_counter()

    def stop(self, stage: str) -> None:
        started = self._running.pop(stage, None)
        if started is not None:
            self._elapsed[stage] = (time.perf_counter() - started) * 1000

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        """Time the body of a ``with`` block as stage ``name``."""
        self.start(name)
        try:
            yield
        finally:
            self.stop(name)

    def finish(self, *, nodes_rendered: int = 0) -> GenerationProfile:
        """Append the ``GenerationProfile`` event and return it."""
        total_ms = 0.0 if self._began is None else (time.perf_counter() - self._began) * 1000
        profile = GenerationProfile(
            trigger=self._trigger,
            nodes_rendered=nodes_rendered,
            total_ms=total_ms,
            timestamp_ns=now_ns(),
            **{f"{name}_ms": ms for name, ms in self._elapsed.items()},
        )
        self._log.append(profile)
        if self._verbose:
            sys.stderr.write(summary_line(profile) + "\n")
        return profile


def summary_line(profile: GenerationProfile) -> str:
    """One-line timing summary, e.g. ``[12ms] a.md -> 3 nodes rendered (graph: 2ms, ...)``."""
    noun = "node" if profile.nodes_rendered == 1 else "nodes"
    stages = ", ".join(f"{name}: {getattr(profile, name + '_ms'):.0f}ms" for name in STAGES)
    return (
        f"  [{profile.total_ms:.0f}ms] {profile.trigger} -> "
        f"{profile.nodes_rendered} {noun} rendered ({stages})"
    )


def _nearest_rank(ordered: list[float], pct: int) -> float:
    return ordered[min(len(ordered) * pct // 100, len(ordered) - 1)]


def compute_aggregate_stats(log: EventLog, *, limit: int = 100) -> dict:
    """Latency percentiles and per-stage means over recent generations.

    Only the newest ``limit`` ``GenerationProfile`` events are considered.
    """
    profiles = log.query(event_type=GenerationProfile, limit=limit)
    if not profiles:
        return {"count": 0}

    count = len(profiles)
    ordered = sorted(profile.total_ms for profile in profiles)
    total_ms = {f"p{pct}": round(_nearest_rank(ordered, pct), 1) for pct in (50, 95, 99)}
    total_ms["min"] = round(ordered[0], 1)
    total_ms["max"] = round(ordered[-1], 1)

    stage_sums = dict.fromkeys(STAGES, 0.0)
    for profile in profiles:
        for name in STAGES:
            stage_sums[name] += getattr(profile, f"{name}_ms")

    return {
        "count": count,
        "total_ms": total_ms,
        "avg_by_stage_ms": {name: round(ms / count, 1) for name, ms in stage_sums.items()},
    }
