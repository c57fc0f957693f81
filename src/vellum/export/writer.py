"""Output writer — apply one generation's file changes to the output directory.

Writes happen before deletions, and a path written in the same generation
is never deleted.  Every failing path is collected; the writer raises once
at the end so one bad path does not stop the others.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from vellum._errors import OutputError


@dataclass(frozen=True, slots=True)
class WrittenFile:
    """Record of a single file written to the output directory.

    Attributes:
        url: URL the file is served at.
        output_path: Absolute filesystem path to the written file.
        size_bytes: Size of the written file in bytes.

    """

    url: str
    output_path: Path
    size_bytes: int


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Files written and deleted by one :meth:`OutputWriter.apply` call."""

    written: tuple[WrittenFile, ...] = ()
    deleted: tuple[Path, ...] = ()


class OutputWriter:
    """Maps URLs to files under an output directory.

    Args:
        output_dir: Absolute path to the output directory.

    """

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def target(self, url: str) -> Path:
        """Output file for a URL; directory URLs get ``index.html``.

        Raises:
            ValueError: The URL is empty or climbs out of the output directory.

        """
        rel = url.strip().lstrip("/")
        if not rel or rel.endswith("/"):
            rel += "index.html"
        parts = PurePosixPath(rel).parts
        if ".." in parts:
            msg = f"url {url!r} leaves the output directory"
            raise ValueError(msg)
        return self._output_dir.joinpath(*parts)

    def apply(self, writes: Mapping[str, str], deletes: Iterable[str] = ()) -> WriteResult:
        """Write ``url -> text`` pairs, then delete stale URLs.

        Raises:
            OutputError: One or more paths failed; the rest were still applied.

        """
        failures: list[tuple[str, str]] = []
        written: list[WrittenFile] = []
        for url, text in writes.items():
            try:
                path = self.target(url)
                size = _write_text(path, text)
            except (OSError, ValueError) as exc:
                failures.append((url, str(exc)))
                continue
            written.append(WrittenFile(url=url, output_path=path, size_bytes=size))

        just_written = {file.output_path for file in written}
        deleted: list[Path] = []
        for url in deletes:
            try:
                path = self.target(url)
                if path in just_written:
                    continue
                if path.exists():
                    path.unlink()
                    deleted.append(path)
            except (OSError, ValueError) as exc:
                failures.append((url, str(exc)))

        if failures:
            raise OutputError(failures)
        return WriteResult(written=tuple(written), deleted=tuple(deleted))


def _write_text(path: Path, text: str) -> int:
    """Write text to a file, creating parent dirs as needed.

    Returns the size in bytes of the written file.

    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = text.encode("utf-8")
    path.write_bytes(data)
    return len(data)
