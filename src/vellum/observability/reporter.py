"""Console reporter — verbosity-gated status lines on stderr.

Levels:
    0  errors (always shown)
    1  warnings
    2  information
    3  debugging
    4  trace
"""

from __future__ import annotations

import sys
from typing import TextIO

from vellum.banner import DIM, RED, RESET, YELLOW

ERROR, WARNING, INFO, DEBUG, TRACE = range(5)


class Reporter:
    """Prints messages at or below the configured verbosity.

    Args:
        verbosity: Highest level shown, 0 to 4.
        stream: Output stream; stderr when omitted.

    """

    __slots__ = ("_stream", "verbosity")

    def __init__(self, verbosity: int = 0, stream: TextIO | None = None) -> None:
        self.verbosity = verbosity
        self._stream = stream

    def enabled(self, level: int) -> bool:
        return level <= self.verbosity

    def emit(self, level: int, message: str) -> None:
        if self.enabled(level):
            print(message, file=self._stream or sys.stderr)

    def error(self, message: str) -> None:
        self.emit(ERROR, f"  {RED}error{RESET} {message}")

    def warning(self, message: str) -> None:
        self.emit(WARNING, f"  {YELLOW}!{RESET} {message}")

    def info(self, message: str) -> None:
        self.emit(INFO, f"  {message}")

    def debug(self, message: str) -> None:
        self.emit(DEBUG, f"  {DIM}{message}{RESET}")

    def trace(self, message: str) -> None:
        self.emit(TRACE, f"  {DIM}· {message}{RESET}")
