"""Vellum configuration.

VellumConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

from vellum._errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class VellumConfig:
    """Configuration for one Vellum site.

    Attributes:
        root: Path to the site root directory (contains pages, layouts/, snippets/).
              Always resolved to an absolute path on construction.
        watch: Keep running and rebuild on filesystem changes.
        verbosity: 0 errors, 1 warnings, 2 information, 3 debugging, 4 trace.
        export_graph: Write a Graphviz rendering of the page graph after each build.
        export_syntax_css: Write code-highlighting stylesheets after each build.
        port: Port an external server would use to serve the output.
        output: Output directory; relative paths resolve against ``root``.
        layouts_dir: Directory holding layout pages.
        snippets_dir: Directory holding snippet partials.
        page_suffixes: File suffixes treated as pages.
        quiet_ms: Quiet period a change burst must settle for before a rebuild.
        cooldown_ms: Pause after a successful rebuild; a relevant change ends it early.

    """

    root: Path = field(default_factory=Path.cwd)
    watch: bool = False
    verbosity: int = 0
    export_graph: bool = False
    export_syntax_css: bool = False
    port: int = 80
    output: Path = field(default_factory=lambda: Path("output"))
    layouts_dir: str = "layouts"
    snippets_dir: str = "snippets"
    page_suffixes: tuple[str, ...] = (".md", ".markdown", ".html")
    quiet_ms: int = 1000
    cooldown_ms: int = 100

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; keep root comparable via relative_to().
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if not 0 <= self.verbosity <= 4:
            msg = f"verbosity must be between 0 and 4, got {self.verbosity}"
            raise ConfigurationError(msg)
        if self.quiet_ms < 0 or self.cooldown_ms < 0:
            msg = "quiet_ms and cooldown_ms must not be negative"
            raise ConfigurationError(msg)

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    @property
    def layouts_path(self) -> Path:
        """Absolute path to layouts directory."""
        return self.root / self.layouts_dir

    @property
    def snippets_path(self) -> Path:
        """Absolute path to snippets directory."""
        return self.root / self.snippets_dir
