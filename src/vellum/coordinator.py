"""Watch coordinator — drives repeated build generations from change batches.

A small state machine::

    Idle ──batch──▶ Debouncing ──quiet period──▶ Building
     ▲                │  ▲                          │
     │                └──┘ batch resets timer       │
     │                                              ├─ success ─▶ Sleeping ─cooldown─▶ Idle
     └──────────────────── failure ─────────────────┘

The baseline graph is replaced only when a generation fully succeeds.  A
failed generation is reported and never retried until the next batch
arrives.  Batches that arrive while building or sleeping wait in the queue
and fold into the next debounce window; a relevant batch during the
cooldown ends it and starts debouncing at once.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Iterable
from enum import Enum
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TypeAlias

from vellum._errors import RenderError, VellumError
from vellum.content.watcher import forces_full_render, relevant_paths
from vellum.generation import run_generation
from vellum.graph.model import BuildGraph
from vellum.observability.collector import BuildCollector
from vellum.observability.events import GenerationProfile
from vellum.observability.reporter import Reporter

if TYPE_CHECKING:
    from vellum.config import VellumConfig
    from vellum.content.watcher import ChangeBatch


class CoordinatorState(Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    BUILDING = "building"
    SLEEPING = "sleeping"


class _Built(Protocol):
    @property
    def graph(self) -> BuildGraph: ...


BuildFunc: TypeAlias = Callable[..., _Built]


class WatchCoordinator:
    """Owns the baseline graph and runs generations one at a time.

    Args:
        config: Site configuration (quiet period, cooldown, paths).
        build: ``build(baseline, *, force_all, trigger)`` returning an object
            with a ``graph`` attribute; defaults to :func:`run_generation`.
        collector: Event collector shared with the generations.
        reporter: Console reporter.
        baseline: Starting baseline; empty when omitted.

    """

    def __init__(
        self,
        config: VellumConfig,
        *,
        build: BuildFunc | None = None,
        collector: BuildCollector | None = None,
        reporter: Reporter | None = None,
        baseline: BuildGraph | None = None,
    ) -> None:
        self._config = config
        self._collector = collector if collector is not None else BuildCollector()
        self._reporter = reporter if reporter is not None else Reporter(config.verbosity)
        self._build = build if build is not None else partial(
            run_generation, config, collector=self._collector, reporter=self._reporter,
        )
        self._baseline = baseline if baseline is not None else BuildGraph.empty()
        self._state = CoordinatorState.IDLE
        self._pending: set[Path] = set()
        self._force_all = False
        self._generation = 0
        self._last_error: VellumError | None = None

    # ----- properties -----

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def baseline(self) -> BuildGraph:
        """Graph of the last fully successful generation."""
        return self._baseline

    @property
    def generation(self) -> int:
        """Number of generations attempted so far."""
        return self._generation

    @property
    def last_error(self) -> VellumError | None:
        return self._last_error

    @property
    def pending(self) -> frozenset[Path]:
        """Paths collected in the current debounce window."""
        return frozenset(self._pending)

    # ----- transitions -----

    def notify(self, paths: Iterable[Path]) -> bool:
        """Fold a change batch into the current debounce window.

        Returns False when nothing in the batch can affect the build.
        """
        batch = relevant_paths(frozenset(paths), self._config)
        if not batch:
            return False
        self._pending |= batch
        if forces_full_render(batch, self._config):
            self._force_all = True
        if self._state in (CoordinatorState.IDLE, CoordinatorState.SLEEPING):
            self._state = CoordinatorState.DEBOUNCING
        return True

    def build_once(self, force_all: bool = False) -> _Built | None:
        """Run one generation now and adopt its graph on success.

        Returns the generation result, or None if it failed.
        """
        force_all = force_all or self._force_all
        trigger = self._trigger()
        self._pending.clear()
        self._force_all = False
        self._state = CoordinatorState.BUILDING
        self._generation += 1
        start = time.perf_counter()

        try:
            result = self._build(self._baseline, force_all=force_all, trigger=trigger)
        except VellumError as exc:
            self._last_error = exc
            self._state = CoordinatorState.IDLE
            self._report_failure(exc)
            self._collector.record_generation(
                self._generation,
                ok=False,
                error=str(exc),
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            return None

        self._baseline = result.graph
        self._last_error = None
        self._state = CoordinatorState.SLEEPING
        self._collector.record_generation(
            self._generation,
            ok=True,
            written=len(getattr(result, "written", ())),
            deleted=len(getattr(result, "deleted", ())),
            duration_ms=(time.perf_counter() - start) * 1000,
        )
        profile = self._collector.log.latest(GenerationProfile)
        if profile is not None and profile.trigger == trigger:
            self._reporter.debug(
                f"generation {self._generation} ({trigger}): {profile.nodes_rendered} nodes rendered in {profile.total_ms:.0f}ms"
            )
        return result

    async def run(self, batches: asyncio.Queue[ChangeBatch]) -> None:
        """Consume change batches forever; cancel the task to stop."""
        quiet = self._config.quiet_ms / 1000
        cooldown = self._config.cooldown_ms / 1000
        while True:
            if not self.notify(await batches.get()):
                continue

            while True:
                await self._debounce(batches, quiet)
                if self.build_once() is None or not await self._cool_down(batches, cooldown):
                    break

    # ----- helpers -----

    async def _debounce(self, batches: asyncio.Queue[ChangeBatch], quiet: float) -> None:
        while True:
            try:
                batch = await asyncio.wait_for(batches.get(), timeout=quiet)
            except TimeoutError:
                return
            self.notify(batch)

    async def _cool_down(self, batches: asyncio.Queue[ChangeBatch], cooldown: float) -> bool:
        """Sleep out the cooldown, returning True if a relevant batch ended it early."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + cooldown
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            try:
                batch = await asyncio.wait_for(batches.get(), timeout=remaining)
            except TimeoutError:
                break
            if self.notify(batch):
                return True
        self._state = CoordinatorState.IDLE
        return False

    def _trigger(self) -> str:
        if not self._pending:
            return "initial" if self._generation == 0 else "rebuild"
        names = sorted(path.relative_to(self._config.root).as_posix() for path in self._pending)
        return names[0] if len(names) == 1 else f"{names[0]} (+{len(names) - 1} more)"

    def _report_failure(self, exc: VellumError) -> None:
        self._reporter.error(str(exc))
        if isinstance(exc, RenderError) and exc.invalidated:
            self._reporter.info(f"{len(exc.invalidated)} nodes invalidated; keeping previous output")
        self._reporter.info("waiting for the next change")
