# SPDX-License-Identifier: MIT
"""Target selection: turn user intent into concrete build units.

Executable mode produces one ExecutableUnit per selected entry file.
Each unit carries its own Package, named after the entry package but
distinct from the registered one, holding exactly the files that go
into that executable:

- grouped (default): the entry file followed by every non-entry file
  of the entry package. Sibling entry files are never included.
- isolated (single-main): the entry file alone.

The unit's package depends on the packages imported by its files, so
a compile only pulls in what those files need.

Library mode produces one LibraryUnit per registered package to turn
into a static library.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from gobuild.core.errors import (
    AmbiguousEntryPointError,
    NoEntryPointError,
    UnknownTargetError,
)
from gobuild.core.package import Package

if TYPE_CHECKING:
    from gobuild.core.package import PackageRegistry
    from gobuild.core.source import SourceUnit

logger = logging.getLogger(__name__)


class GroupingPolicy(Enum):
    """Which entry-package files go into each executable."""

    GROUPED = "grouped"
    ISOLATED = "isolated"


@dataclass(frozen=True)
class ExecutableUnit:
    """One executable to compile and link.

    Attributes:
        entry: The entry-defining file.
        shared_files: Non-entry files compiled into this executable.
        output_name: Executable name (without output directory).
        package: Package compiled for this executable.
    """

    entry: SourceUnit
    shared_files: tuple[SourceUnit, ...]
    output_name: str
    package: Package

    @property
    def files(self) -> list[SourceUnit]:
        return [self.entry, *self.shared_files]


@dataclass(frozen=True)
class LibraryUnit:
    """One package to compile and archive."""

    package: Package

    @property
    def name(self) -> str:
        return self.package.name


class TargetSelector:
    """Resolves which executables or libraries to build.

    Attributes:
        registry: Registry holding every discovered package.
        policy: File grouping policy for executables.
        build_all: Build every executable when several exist.
        output_name: Requested executable name (-o), if any.
    """

    def __init__(
        self,
        registry: PackageRegistry,
        *,
        policy: GroupingPolicy = GroupingPolicy.GROUPED,
        build_all: bool = False,
        output_name: str | None = None,
    ) -> None:
        self.registry = registry
        self.policy = policy
        self.build_all = build_all
        self.output_name = output_name

    def executables(self, names: list[str] | None = None) -> list[ExecutableUnit]:
        """Select the executables to build.

        Args:
            names: Explicit entry files from the command line.

        Raises:
            NoEntryPointError: If no file defines an entry point.
            AmbiguousEntryPointError: If several do, none was named and
                build_all is off.
            UnknownTargetError: If a named file is not an entry file.
        """
        candidates = self.registry.entry_point_units()
        if not candidates:
            raise NoEntryPointError()

        if len(candidates) > 1 and not names and not self.build_all:
            raise AmbiguousEntryPointError([unit.path for unit in candidates])

        if names:
            entries = []
            for name in names:
                unit = self.registry.find_entry_unit(name)
                if unit is None:
                    raise UnknownTargetError(name)
                entries.append(unit)
        else:
            entries = candidates

        output_name = self.output_name
        if output_name and len(entries) > 1:
            logger.warning(
                "Ignoring output name %s when building %d executables",
                output_name,
                len(entries),
            )
            output_name = None

        units = [
            self._make_executable(entry, output_name or entry.stem)
            for entry in entries
        ]

        seen: set[str] = set()
        for unit in units:
            if unit.output_name in seen:
                logger.warning(
                    "Several executables are named %s; later ones overwrite "
                    "earlier ones",
                    unit.output_name,
                )
            seen.add(unit.output_name)
        return units

    def _make_executable(self, entry: SourceUnit, output_name: str) -> ExecutableUnit:
        shared: tuple[SourceUnit, ...] = ()
        if self.policy is GroupingPolicy.GROUPED:
            owner = self.registry.get(entry.package)
            if owner is not None:
                shared = tuple(u for u in owner.files if not u.defines_entry_point)

        package = Package(entry.package, output_name=output_name)
        unit = ExecutableUnit(
            entry=entry,
            shared_files=shared,
            output_name=output_name,
            package=package,
        )
        for source in unit.files:
            package.add_file(source)
            for dep_name in source.local_dependencies:
                dep = self.registry.get(dep_name)
                # an entry package importing itself has no usable edge
                if dep is not None and dep_name != entry.package:
                    package.depends(dep)
        return unit

    def libraries(
        self, names: list[str] | None = None
    ) -> tuple[list[LibraryUnit], list[str]]:
        """Select the packages to build as static libraries.

        The entry package is never a library. Packages without files
        (imported but never defined) are skipped.

        Args:
            names: Explicit package names; all registered packages if empty.

        Returns:
            The selected units and the requested names that do not exist.
        """
        wanted = list(names) if names else self.registry.package_names()
        units: list[LibraryUnit] = []
        unknown: list[str] = []

        for name in wanted:
            if name == self.registry.entry_package:
                logger.debug("Skipping package %s, not a library", name)
                continue

            package = self.registry.get(name)
            if package is None:
                unknown.append(name)
                continue

            if not package.files:
                logger.debug("Skipping package %s, no files to compile.", name)
                continue

            units.append(LibraryUnit(package))

        return units, unknown
