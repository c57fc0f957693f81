"""Startup banner — mode-aware status output.

Prints a branded startup banner with timing and status indicators.
Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vellum.config import VellumConfig


# ---------------------------------------------------------------------------
# ANSI helpers, honouring NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """ANSI colour is used only on a real, non-dumb stderr tty without NO_COLOR."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

RESET = "\033[0m" if _COLOR else ""
BOLD = "\033[1m" if _COLOR else ""
DIM = "\033[2m" if _COLOR else ""
RED = "\033[31m" if _COLOR else ""
GREEN = "\033[32m" if _COLOR else ""
YELLOW = "\033[33m" if _COLOR else ""
PARCHMENT = "\033[38;5;180m" if _COLOR else ""


# ---------------------------------------------------------------------------
# Mode badges
# ---------------------------------------------------------------------------

_MODE_STYLES: dict[str, tuple[str, str]] = {
    "build": (YELLOW, "build"),
    "watch": (GREEN, "watch"),
}


def _mode_badge(mode: str) -> str:
    """Coloured ``[build]``/``[watch]`` label."""
    color, label = _MODE_STYLES.get(mode, (DIM, mode))
    return f"{color}[{label}]{RESET}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: VellumConfig,
    page_count: int,
    mode: str,
    *,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the Vellum startup banner to stderr.

    Args:
        config: Resolved VellumConfig.
        page_count: Number of content pages in the first generation.
        mode: ``"build"`` or ``"watch"``.
        load_ms: Time spent on the first generation in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from vellum import __version__

    badge = _mode_badge(mode)
    header = f"  {PARCHMENT}{BOLD}¶{RESET}  Vellum {DIM}v{__version__}{RESET}  {badge}"

    lines: list[str] = [
        "",
        header,
        f"  {DIM}{'─' * 43}{RESET}",
    ]

    noun = "page" if page_count == 1 else "pages"
    timing = f" {DIM}in {load_ms:.0f}ms{RESET}" if load_ms > 0 else ""
    lines.append(f"  {DIM}├─{RESET} {page_count} {noun} built{timing}")
    lines.append(f"  {DIM}├─{RESET} layouts: {DIM}{config.layouts_path}{RESET}")

    exports = [name for name, on in (("graph", config.export_graph), ("syntax css", config.export_syntax_css)) if on]
    if exports:
        lines.append(f"  {DIM}├─{RESET} exports: {', '.join(exports)}")

    lines.append(f"  {DIM}└─{RESET} output: {DIM}{config.output_path}{RESET}")

    if mode == "watch":
        lines.append("")
        lines.append(f"  {DIM}Watching for changes...{RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {YELLOW}!{RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
