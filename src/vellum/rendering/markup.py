"""Markdown conversion that leaves template syntax intact.

Bodies are converted *before* template expansion, so two kinds of template
delimiters have to be handled:

- Tags outside code are swapped for inert placeholders before conversion
  and restored verbatim afterwards, so the template engine still sees them.
- Delimiters inside code spans and fences are entity-encoded after
  conversion, so the template engine leaves them literal and the browser
  still shows ``{{``.
"""

from __future__ import annotations

import re

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from vellum._errors import MarkupError

_FENCE_OPEN = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_CODE_SPAN = re.compile(r"(?<!`)(`+)(?!`).+?(?<!`)\1(?!`)", re.S)
_TAG = re.compile(
    r"\{%-?\s*math\s*-?%\}.*?\{%-?\s*endmath\s*-?%\}"
    r"|\{\{.*?\}\}|\{%.*?%\}|\{#.*?#\}",
    re.S,
)
_OPEN_DELIMITER = re.compile(r"\{([{%#])")
_PLACEHOLDER = re.compile(r"zzvellumtag(\d+)zz")


class HighlightRenderer(mistune.HTMLRenderer):
    """HTML renderer that highlights fenced code with a known language."""

    def __init__(self) -> None:
        super().__init__(escape=False)
        self._formatter = HtmlFormatter(cssclass="highlight")

    def block_code(self, code: str, info: str | None = None) -> str:
        if info and info.strip():
            try:
                lexer = get_lexer_by_name(info.split(None, 1)[0])
            except ClassNotFound:
                return super().block_code(code, info)
            return highlight(code, lexer, self._formatter)
        return super().block_code(code, info)


class MarkupConverter:
    """Convert Markdown to HTML with tables, strikethrough and highlighted code."""

    def __init__(self) -> None:
        self._markdown = mistune.create_markdown(
            renderer=HighlightRenderer(),
            plugins=["table", "strikethrough"],
        )

    def convert(self, text: str) -> str:
        """Convert ``text`` to HTML.

        Raises:
            MarkupError: The converter failed.

        """
        shielded, tags = protect(text)
        try:
            html = self._markdown(shielded)
        except Exception as exc:
            raise MarkupError("<markup>", f"{type(exc).__name__}: {exc}") from exc
        return restore(neutralise(html), tags)

    __call__ = convert


def split_code(text: str) -> list[tuple[bool, str]]:
    """Split text into ``(is_code, segment)`` pieces.

    Code is fenced blocks (backticks or tildes) and inline code spans.
    Joining the segments gives back ``text``.
    """
    pieces: list[tuple[bool, str]] = []
    for is_fence, block in _split_fences(text):
        if is_fence:
            pieces.append((True, block))
            continue
        position = 0
        for match in _CODE_SPAN.finditer(block):
            if match.start() > position:
                pieces.append((False, block[position:match.start()]))
            pieces.append((True, match.group(0)))
            position = match.end()
        if position < len(block):
            pieces.append((False, block[position:]))
    return pieces


def protect(text: str) -> tuple[str, list[str]]:
    """Replace template tags outside code with numbered placeholders.

    A whole ``{% math %}`` block counts as one tag so its LaTeX stays raw."""
    tags: list[str] = []

    def stash(match: re.Match[str]) -> str:
        tags.append(match.group(0))
        return f"zzvellumtag{len(tags) - 1}zz"

    parts = [segment if is_code else _TAG.sub(stash, segment) for is_code, segment in split_code(text)]
    return "".join(parts), tags


def neutralise(html: str) -> str:
    """Entity-encode the brace of every remaining opening delimiter."""
    return _OPEN_DELIMITER.sub(r"&#123;\1", html)


def restore(html: str, tags: list[str]) -> str:
    """Put stashed template tags back in place of their placeholders."""
    return _PLACEHOLDER.sub(lambda m: tags[int(m.group(1))], html)


def _split_fences(text: str) -> list[tuple[bool, str]]:
    blocks: list[tuple[bool, str]] = []
    buffer: list[str] = []
    fence: str | None = None
    for line in text.splitlines(keepends=True):
        if fence is None:
            match = _FENCE_OPEN.match(line)
            if match is not None:
                if buffer:
                    blocks.append((False, "".join(buffer)))
                buffer = [line]
                fence = match.group(1)
                continue
            buffer.append(line)
            continue
        buffer.append(line)
        closing = line.strip()
        if closing.startswith(fence) and not closing.strip(fence[0]):
            blocks.append((True, "".join(buffer)))
            buffer = []
            fence = None
    if buffer:
        blocks.append((fence is not None, "".join(buffer)))
    return blocks
