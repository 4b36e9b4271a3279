# SPDX-License-Identifier: MIT
"""Configuration for a gobuild run.

BuildOptions carries what the user asked for (usually straight from the
command line). Configure handles the environment-dependent parts:
finding programs on PATH and preparing the output location.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from gobuild.core.errors import ToolNotFoundError

logger = logging.getLogger(__name__)

ARCH_ENV_VAR = "GOARCH"


@dataclass
class BuildOptions:
    """Options for a single gobuild invocation.

    Attributes:
        root: Directory to discover sources in (and run the toolchain from).
        targets: Explicit targets: entry files, or package names with library.
        library: Build all (or the named) packages as static libraries.
        build_all: Build every executable.
        testing: Include test files (reserved, test builds are not run).
        single_main: One entry file per executable (isolated grouping).
        include_hidden: Descend into hidden directories.
        output: Output file name, or output directory when ending with "/".
        include_paths: Additional include path passed with -I / -L.
        clean: Delete toolchain artifacts instead of building.
        verbose: Print debug messages (clean prints every removed file).
        arch: Architecture identifier; read from GOARCH when None.
    """

    root: Path = field(default_factory=Path.cwd)
    targets: list[str] = field(default_factory=list)
    library: bool = False
    build_all: bool = False
    testing: bool = False
    single_main: bool = False
    include_hidden: bool = False
    output: str = ""
    include_paths: str = ""
    clean: bool = False
    verbose: bool = False
    arch: str | None = None

    def resolve_arch(self) -> str | None:
        """Architecture from the options, falling back to the environment."""
        if self.arch:
            return self.arch
        return os.environ.get(ARCH_ENV_VAR)


@dataclass
class OutputLayout:
    """Where build products go.

    Attributes:
        prefix: Directory prefix for objects and outputs ("" or ending in "/").
        executable_name: Requested executable name, or None for the default.
    """

    prefix: str = ""
    executable_name: str | None = None

    def path(self, name: str) -> str:
        return f"{self.prefix}{name}"


class Configure:
    """Environment discovery for a build.

    Example:
        config = Configure(root=Path("."))
        compiler = config.find_program("6g", role="compiler")
        layout = config.output_layout("bin/")
    """

    def __init__(self, *, root: Path | str | None = None) -> None:
        self.root = Path(root) if root else Path.cwd()
        self._programs: dict[str, Path] = {}

    def _which(self, name: str) -> Path | None:
        """Find a program in PATH using shutil.which."""
        result = shutil.which(name)
        if result:
            return Path(result)
        return None

    def find_program(self, name: str, *, role: str = "program") -> Path:
        """Locate a program on PATH.

        Args:
            name: Program name (e.g., '6g').
            role: What the program is used for, for the error message.

        Returns:
            Absolute path to the program.

        Raises:
            ToolNotFoundError: If the program is not on PATH.
        """
        if name in self._programs:
            return self._programs[name]

        found = self._which(name)
        if found is None:
            raise ToolNotFoundError(name, role)

        logger.debug("Found %s %s at %s", role, name, found)
        self._programs[name] = found
        return found

    def output_layout(self, output: str) -> OutputLayout:
        """Interpret the -o option.

        - empty: outputs go to the root with default names.
        - ends with "/": an output directory, created if missing.
        - an existing directory: an output directory.
        - anything else: the executable name; parent directories of a
          path like "bin/app" are created.
        """
        if not output:
            return OutputLayout()

        target = self.root / output
        if output.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            return OutputLayout(prefix=output)

        if target.is_dir():
            return OutputLayout(prefix=output + "/")

        if "/" in output:
            parent = target.parent
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error("Could not create %s: %s", parent, e)
        return OutputLayout(executable_name=output)

    def __repr__(self) -> str:
        return f"Configure(root={self.root})"
