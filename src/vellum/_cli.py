"""Vellum CLI — vellum build / vellum watch.

Entry point for the ``vellum`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the vellum CLI."""
    parser = argparse.ArgumentParser(
        prog="vellum",
        description="Incremental static site generator.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # vellum build
    build_parser = subparsers.add_parser(
        "build",
        help="Render the site into the output directory",
    )
    build_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    build_parser.add_argument(
        "-w", "--watch", action="store_true", default=None,
        help="Keep running and rebuild on changes",
    )
    _add_common(build_parser)

    # vellum watch
    watch_parser = subparsers.add_parser(
        "watch",
        help="Render the site and rebuild on changes",
    )
    watch_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    _add_common(watch_parser)

    return parser


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v", "--verbose", action="count", default=None, dest="verbosity",
        help="Increase verbosity (repeat up to four times)",
    )
    parser.add_argument(
        "--graph", action="store_true", default=None, dest="export_graph",
        help="Write the page graph to output/graph.dot",
    )
    parser.add_argument(
        "--syntax-css", action="store_true", default=None, dest="export_syntax_css",
        help="Write code-highlighting stylesheets to output/css/",
    )
    parser.add_argument("--output", default=None, help="Output directory")


def _get_version() -> str:
    """Get the package version."""
    from vellum import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from vellum._errors import VellumError
    from vellum.app import build, watch

    overrides = {
        "verbosity": min(args.verbosity, 4) if args.verbosity is not None else None,
        "export_graph": args.export_graph,
        "export_syntax_css": args.export_syntax_css,
        "output": args.output,
    }

    try:
        if args.command == "build":
            build(root=args.root, watch=args.watch, **overrides)
        elif args.command == "watch":
            watch(root=args.root, **overrides)
    except VellumError as exc:
        print(f"  error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
