# SPDX-License-Identifier: MIT
"""Build scheduling: compile packages in dependency order.

The Scheduler compiles a package after all of its dependencies, each
package exactly once per run. Packages are entered into an index arena
the first time they are seen; the traversal keeps two index sets:

- visited: packages already compiled (successfully or not)
- active: packages on the current traversal path

Reaching an active package again means the graph has a cycle, which
is fatal: the run stops before any process is started for the
packages on the cycle. The traversal uses an explicit stack, so deep
graphs do not run into the interpreter's recursion limit.

Compile failures (nonzero exit) are not fatal. They are recorded in
the BuildResult, whose any_compile_error flag stays set for the rest
of the run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gobuild.core.errors import (
    ArchiveError,
    DependencyCycleError,
    EmptyPackageError,
    LinkError,
)
from gobuild.core.source import ENTRY_PACKAGE

if TYPE_CHECKING:
    from gobuild.configure.config import OutputLayout
    from gobuild.core.package import Package
    from gobuild.core.selector import ExecutableUnit
    from gobuild.tools.invoker import ToolchainInvoker
    from gobuild.tools.toolchain import Toolchain

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Accumulated outcome of a build session.

    Attributes:
        compiled: Packages in the order they were compiled.
        failed: Packages whose compile step exited nonzero.
        any_compile_error: Set by the first compile failure, never reset.
        failed_targets: Requested targets that could not be built.
        linked: Executables produced.
        archived: Static libraries produced.
    """

    compiled: list[Package] = field(default_factory=list)
    failed: list[Package] = field(default_factory=list)
    any_compile_error: bool = False
    failed_targets: list[str] = field(default_factory=list)
    linked: list[str] = field(default_factory=list)
    archived: list[str] = field(default_factory=list)

    def is_compiled(self, package: Package) -> bool:
        return package in self.compiled

    def has_errors(self, package: Package) -> bool:
        return package in self.failed

    def record_compiled(self, package: Package) -> None:
        self.compiled.append(package)

    def record_compile_error(self, package: Package) -> None:
        self.failed.append(package)
        self.any_compile_error = True

    @property
    def succeeded(self) -> bool:
        return not self.any_compile_error and not self.failed_targets

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1


class Scheduler:
    """Compiles, links and archives packages for one build session.

    Example:
        scheduler = Scheduler(invoker, layout)
        scheduler.compile(app_package)
        if not scheduler.result.any_compile_error:
            scheduler.link(unit)
    """

    def __init__(
        self,
        invoker: ToolchainInvoker,
        layout: OutputLayout,
        *,
        include_path: str = "",
        result: BuildResult | None = None,
    ) -> None:
        self.invoker = invoker
        self.layout = layout
        self.include_path = include_path
        self.result = result if result is not None else BuildResult()
        self._nodes: list[Package] = []
        self._index: dict[Package, int] = {}
        self._visited: set[int] = set()
        self._active: set[int] = set()

    @property
    def toolchain(self) -> Toolchain:
        return self.invoker.toolchain

    def _slot(self, package: Package) -> int:
        """Index of package in the arena, adding it if new."""
        index = self._index.get(package)
        if index is None:
            index = len(self._nodes)
            self._nodes.append(package)
            self._index[package] = index
        return index

    def _edges(self, index: int) -> Iterator[int]:
        return iter([self._slot(dep) for dep in self._nodes[index].dependencies])

    def _cycle(self, path: list[int], index: int) -> list[str]:
        names = [self._nodes[i].name for i in path[path.index(index) :]]
        return names + [self._nodes[index].name]

    def compile(self, package: Package) -> None:
        """Compile package after its whole dependency closure.

        Already compiled packages are skipped, so calling this again
        for the same package is a no-op.

        Raises:
            DependencyCycleError: If the dependency graph has a cycle.
            EmptyPackageError: If a package to compile has no files.
            ToolInvocationError: If the compiler could not be run.
        """
        root = self._slot(package)
        if root in self._visited:
            return
        if root in self._active:
            raise DependencyCycleError([package.name, package.name])

        path = [root]
        stack = [self._edges(root)]
        self._active.add(root)

        while stack:
            for dep in stack[-1]:
                if dep in self._visited:
                    continue
                if dep in self._active:
                    raise DependencyCycleError(self._cycle(path, dep))
                self._active.add(dep)
                path.append(dep)
                stack.append(self._edges(dep))
                break
            else:
                stack.pop()
                index = path.pop()
                self._compile_one(self._nodes[index])
                self._visited.add(index)
                self._active.discard(index)

    def _compile_one(self, package: Package) -> None:
        if not package.files:
            raise EmptyPackageError(package.name)

        if package.name != ENTRY_PACKAGE:
            logger.info("Compiling %s...", package.name)
        else:
            logger.info("Compiling %s (%s)...", package.name, package.output_name)
        logger.info("\tfiles: %s", " ".join(package.file_paths))

        obj = self.layout.path(self.toolchain.object_name(package.output_name))
        status = self.invoker.compile(obj, package.file_paths, self.include_path)
        if status != 0:
            logger.warning(
                "Compiler returned with errors (%d) for package %s",
                status,
                package.name,
            )
            self.result.record_compile_error(package)
        self.result.record_compiled(package)

    def link(self, unit: ExecutableUnit) -> str:
        """Link a compiled executable unit.

        Returns:
            Path of the produced executable.

        Raises:
            LinkError: If the linker exits nonzero.
            ToolInvocationError: If the linker could not be run.
        """
        output = self.layout.path(unit.output_name)
        obj = self.layout.path(self.toolchain.object_name(unit.output_name))
        logger.info("Linking %s...", output)

        status = self.invoker.link(output, obj, self.include_path)
        if status != 0:
            raise LinkError(output, status)
        self.result.linked.append(output)
        return output

    def archive(self, package: Package) -> str:
        """Create the static library for a compiled package.

        Returns:
            Path of the produced archive.

        Raises:
            ArchiveError: If the archiver exits nonzero.
            ToolInvocationError: If the archiver could not be run.
        """
        output = self.layout.path(self.toolchain.archive_name(package.output_name))
        obj = self.layout.path(self.toolchain.object_name(package.output_name))
        logger.info("Creating %s...", output)

        status = self.invoker.archive(output, obj)
        if status != 0:
            raise ArchiveError(output, status)
        self.result.archived.append(output)
        return output
