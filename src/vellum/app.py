"""Vellum application entry points.

``build`` renders the site once; ``watch`` renders it and then keeps
re-rendering the affected subset on every filesystem change.
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

from vellum.config_loader import load_config
from vellum.graph.model import BuildGraph
from vellum.observability.collector import BuildCollector
from vellum.observability.reporter import Reporter

if TYPE_CHECKING:
    from vellum.config import VellumConfig
    from vellum.generation import GenerationResult


def build(root: str | Path = ".", **kwargs: object) -> GenerationResult | None:
    """Render the whole site into the output directory.

    With ``watch=True`` this hands over to :func:`watch` after the first
    generation and only returns when interrupted.

    Args:
        root: Path to the site root directory.
        **kwargs: Override VellumConfig fields.

    Raises:
        VellumError: The generation failed.

    """
    from vellum.banner import print_banner
    from vellum.generation import run_generation

    config = load_config(Path(root), **kwargs)
    if config.watch:
        _run_watch(config)
        return None

    reporter = Reporter(config.verbosity)
    t0 = time.perf_counter()
    result = run_generation(
        config, BuildGraph.empty(), force_all=True, collector=BuildCollector(), reporter=reporter,
    )
    load_ms = (time.perf_counter() - t0) * 1000

    print_banner(
        config, len(result.graph.pages()), mode="build",
        load_ms=load_ms,
        warnings=[str(error) for error in result.parse_errors],
    )
    _print_build_summary(result, config, load_ms)
    return result


def watch(root: str | Path = ".", **kwargs: object) -> None:
    """Render the site, then re-render on every change until interrupted.

    Args:
        root: Path to the site root directory.
        **kwargs: Override VellumConfig fields.

    """
    kwargs["watch"] = True
    _run_watch(load_config(Path(root), **kwargs))


def _run_watch(config: VellumConfig) -> None:
    try:
        asyncio.run(_watch_async(config))
    except KeyboardInterrupt:
        print("\n  Stopped watching.", file=sys.stderr)


async def _watch_async(config: VellumConfig) -> None:
    from vellum.banner import print_banner
    from vellum.content.watcher import ContentWatcher
    from vellum.coordinator import WatchCoordinator

    coordinator = WatchCoordinator(
        config, collector=BuildCollector(), reporter=Reporter(config.verbosity),
    )
    t0 = time.perf_counter()
    result = coordinator.build_once(force_all=True)
    load_ms = (time.perf_counter() - t0) * 1000

    if result is None:
        warnings = [f"first build failed: {coordinator.last_error}"]
    else:
        warnings = [str(error) for error in getattr(result, "parse_errors", ())]
    print_banner(
        config, len(coordinator.baseline.pages()), mode="watch",
        load_ms=load_ms,
        warnings=warnings,
    )

    watcher = ContentWatcher(config)
    watcher.start()
    try:
        await coordinator.run(watcher.queue)
    finally:
        watcher.stop()


def _print_build_summary(result: GenerationResult, config: VellumConfig, duration_ms: float) -> None:
    """Print build completion summary to stderr."""
    written = len(result.written)
    lines = [
        "",
        "─" * 41,
        f"  Wrote {written} file{'s' if written != 1 else ''}",
    ]
    if result.deleted:
        lines.append(f"  Removed {len(result.deleted)} stale file{'s' if len(result.deleted) != 1 else ''}")
    lines.append(f"  Output: {config.output_path}")
    lines.append(f"  Done in {duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)
