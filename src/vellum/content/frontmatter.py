"""Frontmatter parsing — split a content file into metadata and body.

Frontmatter is a YAML block delimited by ``---`` on its own line at the
start of the file.  Recognized keys are validated and lifted onto the
:class:`~vellum.content.page.Page`; everything else is kept verbatim under
``Page.data``.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any

import yaml

from vellum._errors import ParseError
from vellum.content.dates import coerce_datetime
from vellum.content.page import Page, Pagination

MARKER = "---"
RECOGNIZED_KEYS = frozenset({"title", "date", "layout", "permalink", "depends", "pagination"})


def parse(raw: bytes, path: PurePosixPath) -> tuple[dict[str, Any], str]:
    """Split raw file bytes into a metadata mapping and the body text.

    A file that does not open with a marker line has empty metadata and
    its whole text as body.

    Raises:
        ParseError: Undecodable bytes, an unterminated block, invalid YAML,
            or a block that is not a mapping.

    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(path, f"not valid UTF-8 ({exc.reason})") from exc

    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != MARKER:
        return {}, text

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == MARKER:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1:])
            break
    else:
        raise ParseError(path, "frontmatter block is not closed")

    try:
        metadata = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise ParseError(path, f"invalid frontmatter: {exc}") from exc
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise ParseError(path, f"frontmatter must be a mapping, got {type(metadata).__name__}")
    return metadata, body


def page_from_source(raw: bytes, path: PurePosixPath, *, is_layout: bool = False) -> Page:
    """Parse a content file into a :class:`Page`.

    Raises:
        ParseError: If the frontmatter is malformed or a recognized key has
            the wrong type.

    """
    metadata, body = parse(raw, path)

    title = _optional_str(metadata, "title", path)
    layout = _optional_str(metadata, "layout", path)
    permalink = _optional_str(metadata, "permalink", path)

    date = None
    if metadata.get("date") is not None:
        try:
            date = coerce_datetime(metadata["date"])
        except ValueError as exc:
            raise ParseError(path, f"invalid date: {exc}") from exc

    depends_value = metadata.get("depends") or []
    if isinstance(depends_value, str) or not isinstance(depends_value, list):
        raise ParseError(path, "depends must be a list of collection names")
    if not all(isinstance(name, str) for name in depends_value):
        raise ParseError(path, "depends must be a list of collection names")

    return Page(
        path=path,
        is_layout=is_layout,
        title=title,
        date=date,
        layout=layout,
        permalink=permalink,
        depends=frozenset(depends_value),
        pagination=_pagination(metadata.get("pagination"), path),
        data={k: v for k, v in metadata.items() if k not in RECOGNIZED_KEYS},
        body=body,
    )


def _optional_str(metadata: dict[str, Any], key: str, path: PurePosixPath) -> str | None:
    value = metadata.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ParseError(path, f"{key} must be a string, got {type(value).__name__}")
    return value


def _pagination(value: object, path: PurePosixPath) -> Pagination | None:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ParseError(path, "pagination must be a mapping")
    collection = value.get("collection")
    page_size = value.get("page_size")
    if not isinstance(collection, str):
        raise ParseError(path, "pagination.collection must be a string")
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise ParseError(path, "pagination.page_size must be a positive integer")
    return Pagination(collection=collection, page_size=page_size)
