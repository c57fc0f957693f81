"""Event model for build observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal, TypeAlias


# ---------------------------------------------------------------------------
# Graph events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GraphBuilt:
    """A build graph was constructed from a snapshot.

    Attributes:
        pages: Number of content pages.
        nodes: Number of nodes, layout instances included.
        edges: Number of edges of either kind.
        parse_errors: Number of files excluded for malformed frontmatter.
        duration_ms: Time spent loading and building in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    pages: int
    nodes: int
    edges: int
    parse_errors: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class GraphDiffed:
    """Two generations were compared.

    Attributes:
        added: Number of Added labels.
        removed: Number of Removed labels.
        modified: Number of Modified labels.
        unchanged: Number of Unchanged labels.
        render_needed: Size of the render-needed closure.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    added: int
    removed: int
    modified: int
    unchanged: int
    render_needed: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Render and output events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NodeRendered:
    """One node finished rendering.

    Attributes:
        path: Node label (source path, with instantiation site for layouts).
        url: URL computed for the node.
        render_ms: Time spent on the node in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    url: str
    render_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class OutputWritten:
    """An output file was written or deleted.

    Attributes:
        kind: ``write`` for page output, ``delete`` for stale output,
            ``export`` for diagnostic and stylesheet files.
        path: Output path relative to the output directory.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["write", "delete", "export"]
    path: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class GenerationFinished:
    """A build generation ended.

    Attributes:
        generation: Sequence number, starting at 1.
        ok: Whether the new graph was adopted as baseline.
        error: Error message when the generation failed.
        written: Number of output files written.
        deleted: Number of stale output files deleted.
        duration_ms: Wall time of the generation in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    generation: int
    ok: bool
    error: str
    written: int
    deleted: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class GenerationProfile:
    """Per-stage timing for one generation.

    Attributes:
        trigger: What started the generation (a path or ``initial``).
        nodes_rendered: Number of nodes rendered.
        graph_ms: Loading the snapshot and building the graph.
        diff_ms: Classification and render-needed closure.
        merge_ms: Carrying prior output forward.
        render_ms: The render pass.
        write_ms: Writing and deleting output files.
        total_ms: End-to-end time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    trigger: str
    nodes_rendered: int
    graph_ms: float
    diff_ms: float
    merge_ms: float
    render_ms: float
    write_ms: float
    total_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

BuildEventType: TypeAlias = (
    GraphBuilt
    | GraphDiffed
    | NodeRendered
    | OutputWritten
    | GenerationFinished
    | GenerationProfile
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
