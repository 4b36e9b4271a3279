# SPDX-License-Identifier: MIT
"""Command-line interface for gobuild."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from gobuild.configure.config import BuildOptions
from gobuild.core.errors import GobuildError
from gobuild.core.orchestrator import Orchestrator

# Set up logging
logger = logging.getLogger("gobuild")


def setup_logging(
    quiet: bool = False, quieter: bool = False, verbose: bool = False
) -> None:
    """Configure logging based on verbosity flags.

    -qq wins over -q, which wins over -v. Errors are always shown.
    """
    fmt = "%(levelname)s: %(message)s"
    if quieter:
        level = logging.ERROR
    elif quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    else:
        level = logging.INFO

    logging.basicConfig(level=level, format=fmt, force=True)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    from gobuild import __version__

    parser = argparse.ArgumentParser(
        prog="gobuild",
        description="Build tool to automate building go programs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-lib",
        "--lib",
        dest="library",
        action="store_true",
        help="build all packages as libraries",
    )
    parser.add_argument(
        "-a", dest="build_all", action="store_true", help="build all executables"
    )
    parser.add_argument(
        "-t",
        dest="testing",
        action="store_true",
        help="(not yet implemented) build all tests",
    )
    parser.add_argument(
        "-single-main",
        "--single-main",
        dest="single_main",
        action="store_true",
        help="one main file per executable",
    )
    parser.add_argument(
        "-include-hidden",
        "--include-hidden",
        dest="include_hidden",
        action="store_true",
        help="include hidden directories",
    )
    parser.add_argument("-o", dest="output", default="", help="output file")
    parser.add_argument(
        "-q", dest="quiet", action="store_true", help="only print warnings/errors"
    )
    parser.add_argument(
        "-qq", dest="quieter", action="store_true", help="only print errors"
    )
    parser.add_argument(
        "-v", dest="verbose", action="store_true", help="print debug messages"
    )
    parser.add_argument(
        "-I", dest="include_paths", default="", help="additional include paths"
    )
    parser.add_argument(
        "-clean",
        "--clean",
        dest="clean",
        action="store_true",
        help="delete all temporary files",
    )
    parser.add_argument(
        "-C",
        "--directory",
        default=None,
        help="project root (default: current directory)",
    )
    parser.add_argument(
        "targets",
        nargs="*",
        help="main files to build, or package names with -lib",
    )
    return parser


def options_from_args(args: argparse.Namespace) -> BuildOptions:
    """Translate parsed arguments into BuildOptions."""
    root = Path(args.directory) if args.directory else Path.cwd()
    return BuildOptions(
        root=root,
        targets=list(args.targets),
        library=args.library,
        build_all=args.build_all,
        testing=args.testing,
        single_main=args.single_main,
        include_hidden=args.include_hidden,
        output=args.output,
        include_paths=args.include_paths,
        clean=args.clean,
        verbose=args.verbose,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the gobuild CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(quiet=args.quiet, quieter=args.quieter, verbose=args.verbose)

    options = options_from_args(args)
    if not options.root.is_dir():
        logger.error("Could not read the root path: %s", options.root)
        return 1

    try:
        return Orchestrator(options).run()
    except GobuildError as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
