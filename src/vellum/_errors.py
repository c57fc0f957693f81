"""Vellum error hierarchy.

All vellum-specific errors inherit from VellumError for easy catching.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import PurePosixPath


class VellumError(Exception):
    """Base error for all vellum operations."""


class ConfigurationError(VellumError):
    """Invalid site configuration: bad build settings or an unbuildable page graph.

    Fatal at graph-construction time; the generation is aborted before any
    rendering starts.
    """


class CycleError(ConfigurationError):
    """The page graph contains a cycle.

    Attributes:
        chain: The offending chain of page paths, first element repeated last.

    """

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        super().__init__("Dependency cycle: " + " -> ".join(self.chain))


class UnresolvedReferenceError(ConfigurationError):
    """A page names a layout or collection that does not exist."""

    def __init__(self, path: PurePosixPath | str, kind: str, name: str) -> None:
        self.path = str(path)
        self.kind = kind
        self.name = name
        super().__init__(f"{self.path}: unknown {kind} {name!r}")


class ContentError(VellumError):
    """Error in content processing."""


class ParseError(ContentError):
    """Malformed frontmatter in one content file.

    Excludes only that page from the graph; never fatal to a generation.
    """

    def __init__(self, path: PurePosixPath | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class RenderError(VellumError):
    """A node failed to render; the whole generation is aborted.

    Attributes:
        path: Source path of the node that failed.
        invalidated: Keys of the failed node and everything reachable from it.

    """

    def __init__(self, path: PurePosixPath | str, reason: str) -> None:
        self.path = str(path)
        self.reason = reason
        self.invalidated: frozenset[object] = frozenset()
        super().__init__(f"{self.path}: {reason}")


class TemplateError(RenderError):
    """Template expansion failed."""


class MarkupError(RenderError):
    """Markup conversion failed."""


class OutputError(VellumError):
    """One or more output files could not be written or deleted.

    Already-succeeded writes are not rolled back.

    Attributes:
        failures: ``(path, reason)`` pairs, one per failed path.

    """

    def __init__(self, failures: Sequence[tuple[str, str]]) -> None:
        self.failures = tuple(failures)
        detail = "; ".join(f"{path}: {reason}" for path, reason in self.failures)
        super().__init__(f"{len(self.failures)} output operation(s) failed: {detail}")


class GraphError(VellumError):
    """Internal graph invariant violated."""
