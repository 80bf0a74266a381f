"""Cessair CLI — cessair build / cessair yarnpm.

Entry point for the ``cessair`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the cessair CLI."""
    parser = argparse.ArgumentParser(
        prog="cessair",
        description="Command line interface tool for site development.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # cessair build
    build_parser = subparsers.add_parser("build", help="build the site")
    build_parser.add_argument("root", nargs="?", default=".", help="Project root directory")
    build_parser.add_argument(
        "--watch",
        action="store_true",
        help="keep watching sources and build incrementally",
    )
    build_parser.add_argument("--output", default=None, help="Output working-copy directory")

    # cessair yarnpm
    yarnpm_parser = subparsers.add_parser(
        "yarnpm",
        help="execute provided commands to yarn or npm",
    )
    yarnpm_parser.add_argument(
        "commands",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the package tool",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from cessair import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    from cessair._errors import CessairError
    from cessair.app import build, yarnpm

    if args.command == "yarnpm":
        sys.exit(yarnpm(args.commands))

    try:
        build(root=args.root, watch=args.watch, output=args.output)
    except CessairError as exc:
        print(f"  {exc}", file=sys.stderr)
        sys.exit(exc.exit_code)
    sys.exit(0)


if __name__ == "__main__":
    main()
