"""Build collector — records generation events into the event log.

The generation runner and the watch coordinator only talk to the collector;
the event types and the log stay an implementation detail behind it.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from vellum.observability.events import (
    GenerationFinished,
    GraphBuilt,
    GraphDiffed,
    NodeRendered,
    OutputWritten,
    now_ns,
)
from vellum.observability.log import EventLog

if TYPE_CHECKING:
    from vellum.graph.differ import GraphDiff
    from vellum.graph.model import BuildGraph
    from vellum.graph.scheduler import NodeResult


class BuildCollector:
    """Event collector for build generations.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Graph events -----

    def record_graph(self, graph: BuildGraph, *, duration_ms: float = 0.0) -> None:
        """Record a freshly built graph."""
        self._log.append(
            GraphBuilt(
                pages=len(graph.pages()),
                nodes=len(graph),
                edges=len(graph.edges()),
                parse_errors=len(graph.parse_errors),
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_diff(self, diff: GraphDiff, *, render_needed: int = 0) -> None:
        """Record a generation comparison."""
        self._log.append(
            GraphDiffed(
                added=len(diff.added),
                removed=len(diff.removed),
                modified=len(diff.modified),
                unchanged=len(diff.unchanged),
                render_needed=render_needed,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Render and output events -----

    def record_render(self, result: NodeResult) -> None:
        """Record one rendered node."""
        self._log.append(
            NodeRendered(
                path=str(result.key),
                url=result.url or "",
                render_ms=result.render_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_output(self, kind: Literal["write", "delete", "export"], path: str) -> None:
        """Record an output file change."""
        self._log.append(OutputWritten(kind=kind, path=path, timestamp_ns=now_ns()))

    def record_generation(
        self,
        generation: int,
        *,
        ok: bool,
        error: str = "",
        written: int = 0,
        deleted: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record the end of a generation."""
        self._log.append(
            GenerationFinished(
                generation=generation,
                ok=ok,
                error=error,
                written=written,
                deleted=deleted,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
