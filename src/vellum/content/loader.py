"""Snapshot loader — read every page under the site root.

A snapshot is the full parsed page set for one filesystem state.  Files with
malformed frontmatter are reported alongside the pages rather than raised,
so one bad file never stops the rest of the site from building.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from vellum._errors import ParseError
from vellum.content.frontmatter import page_from_source

if TYPE_CHECKING:
    from vellum.config import VellumConfig
    from vellum.content.page import Page


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Parsed pages plus per-file parse failures, both in path order."""

    pages: tuple[Page, ...]
    errors: tuple[ParseError, ...]


def iter_page_files(config: VellumConfig) -> list[Path]:
    """List page source files under the site root, sorted by relative path.

    Skips hidden directories, the output directory and the snippets directory.

    """
    root = config.root
    excluded = {config.output_path.resolve(), config.snippets_path.resolve()}
    found: list[Path] = []
    for path in root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in config.page_suffixes:
            continue
        rel = path.relative_to(root)
        if any(part.startswith(".") for part in rel.parts):
            continue
        if any(parent.resolve() in excluded for parent in path.parents):
            continue
        found.append(path)
    return sorted(found, key=lambda p: p.relative_to(root).as_posix())


def is_layout_path(rel: PurePosixPath, config: VellumConfig) -> bool:
    """Whether a site-relative path lies in the layouts directory."""
    return bool(rel.parts) and rel.parts[0] == config.layouts_dir


def load_snapshot(config: VellumConfig) -> Snapshot:
    """Read and parse every page file of the site."""
    pages: list[Page] = []
    errors: list[ParseError] = []
    for path in iter_page_files(config):
        rel = PurePosixPath(path.relative_to(config.root).as_posix())
        try:
            raw = path.read_bytes()
        except OSError as exc:
            errors.append(ParseError(rel, f"cannot read file: {exc}"))
            continue
        try:
            pages.append(page_from_source(raw, rel, is_layout=is_layout_path(rel, config)))
        except ParseError as exc:
            errors.append(exc)
    return Snapshot(pages=tuple(pages), errors=tuple(errors))
