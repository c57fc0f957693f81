"""Vellum — an incremental static site generator.

Turns a directory of templated content files into output files, and on
every filesystem change re-renders only the pages the change can affect.

Quick start::

    import vellum

    vellum.build("my-site/")

Two modes::

    vellum.build("my-site/")      # Render once
    vellum.watch("my-site/")      # Render, then re-render on change

Pipeline per generation::

    snapshot   content files + frontmatter        (PyYAML)
    graph      layout instances, collection edges (networkx)
    diff       added / removed / modified nodes
    render     templates + markdown               (Jinja2, mistune, Pygments)
    write      changed outputs, stale deletions

"""

__version__ = "0.1.0"
__all__ = [
    "VellumConfig",
    "__version__",
    "build",
    "watch",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import vellum`` fast while providing a clean top-level API.
    """
    if name == "VellumConfig":
        from vellum.config import VellumConfig

        return VellumConfig

    if name == "build":
        from vellum.app import build

        return build

    if name == "watch":
        from vellum.app import watch

        return watch

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
