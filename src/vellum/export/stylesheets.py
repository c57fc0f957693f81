"""Code-highlighting stylesheets generated with Pygments.

Produces a light and a dark stylesheet for the ``.highlight`` blocks the
markup converter emits, plus a switcher that picks one by
``prefers-color-scheme``.
"""

from __future__ import annotations

from pygments.formatters import HtmlFormatter

LIGHT_STYLE = "default"
DARK_STYLE = "monokai"
SELECTOR = ".highlight"


def stylesheet(style: str) -> str:
    """CSS rules for one Pygments style."""
    return HtmlFormatter(style=style).get_style_defs(SELECTOR) + "\n"


def syntax_stylesheets(directory: str = "css") -> dict[str, str]:
    """Stylesheet URLs (relative to the output root) mapped to their text."""
    switcher = (
        '@import url("light-code.css") (prefers-color-scheme: light);\n'
        '@import url("dark-code.css") (prefers-color-scheme: dark);\n'
    )
    return {
        f"{directory}/light-code.css": stylesheet(LIGHT_STYLE),
        f"{directory}/dark-code.css": stylesheet(DARK_STYLE),
        f"{directory}/code.css": switcher,
    }
