"""File watcher — feeds change batches to the watch coordinator.

watchfiles runs in a background thread and already debounces bursts of
filesystem events into sets.  Each set is filtered down to the paths that
can affect the build and handed to the event loop through
``call_soon_threadsafe``, so the queue is only ever touched from the loop.

Categories:

- ``page``    a content page changed
- ``layout``  a page under the layouts directory changed
- ``snippet`` a partial under the snippets directory changed
- ``global``  the global context file changed
- ``config``  the build configuration file changed
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

from vellum.config_loader import CONFIG_NAMES, GLOBAL_NAMES

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from vellum.config import VellumConfig

ChangeCategory: TypeAlias = Literal["page", "layout", "snippet", "global", "config"]
ChangeBatch: TypeAlias = frozenset[Path]


def categorize_change(path: Path, config: VellumConfig) -> ChangeCategory | None:
    """Which part of the build a changed path can affect.

    Returns None for anything that cannot affect the build: files outside
    the root, in the output directory, in hidden directories, or with a
    suffix that is not a page suffix.

    """
    try:
        rel = path.relative_to(config.root)
    except ValueError:
        return None

    parts = rel.parts
    if not parts or any(part.startswith(".") for part in parts):
        return None
    if _is_under(path, config.output_path):
        return None

    if len(parts) == 1:
        if parts[0] in GLOBAL_NAMES:
            return "global"
        if parts[0] in CONFIG_NAMES:
            return "config"

    if parts[0] == config.snippets_dir:
        return "snippet"
    if path.suffix.lower() not in config.page_suffixes:
        return None
    if parts[0] == config.layouts_dir:
        return "layout"
    return "page"


def forces_full_render(batch: ChangeBatch, config: VellumConfig) -> bool:
    """Whether a batch touches a build-wide input (global context, snippets, config)."""
    return any(categorize_change(path, config) in {"global", "snippet", "config"} for path in batch)


def relevant_paths(paths: set[Path] | frozenset[Path], config: VellumConfig) -> ChangeBatch:
    """Drop the paths that cannot affect the build."""
    return frozenset(path for path in paths if categorize_change(path, config) is not None)


class ContentWatcher:
    """Watches the site root and queues relevant change batches.

    Args:
        config: Site configuration.
        queue: Queue the batches are delivered to; created if omitted.
        debounce_ms: watchfiles debounce window.

    """

    def __init__(
        self,
        config: VellumConfig,
        queue: asyncio.Queue[ChangeBatch] | None = None,
        *,
        debounce_ms: int = 300,
    ) -> None:
        self._config = config
        self._queue: asyncio.Queue[ChangeBatch] = queue if queue is not None else asyncio.Queue()
        self._debounce_ms = debounce_ms
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def queue(self) -> asyncio.Queue[ChangeBatch]:
        return self._queue

    @property
    def is_running(self) -> bool:
        """True while the watchfiles thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching in a background thread.

        Must be called from the event loop the batches are consumed on.
        """
        if self.is_running:
            return

        self._loop = asyncio.get_running_loop()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="vellum-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop watching and join the background thread."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    async def next_change_batch(self) -> ChangeBatch:
        """Wait for the next batch of relevant changed paths."""
        return await self._queue.get()

    async def changes(self) -> AsyncIterator[ChangeBatch]:
        """Async iterator over change batches until the watcher stops."""
        while self.is_running or not self._queue.empty():
            try:
                batch = await asyncio.wait_for(self._queue.get(), timeout=0.5)
                yield batch
            except TimeoutError:
                if not self.is_running:
                    break

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and push batches to the loop."""
        from watchfiles import watch

        for raw_changes in watch(
            self._config.root,
            stop_event=self._stop_event,
            debounce=self._debounce_ms,
            step=100,
        ):
            batch = relevant_paths({Path(path) for _, path in raw_changes}, self._config)
            if batch and self._loop is not None:
                self._loop.call_soon_threadsafe(self._queue.put_nowait, batch)


def _is_under(path: Path, directory: Path) -> bool:
    try:
        path.relative_to(directory)
    except ValueError:
        return False
    return True
