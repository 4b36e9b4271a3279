# SPDX-License-Identifier: MIT
"""Packages and the package registry.

A Package groups the SourceUnits that declare the same package name and
records which other packages they import. Packages are created lazily:
importing a package that has no files yet creates an empty Package,
which is only an error once something tries to compile it.

Example:
    registry = PackageRegistry()
    for unit in units:
        registry.register(unit)

    util = registry.get("util")
    main_files = registry.entry_point_units()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from gobuild.core.source import ENTRY_PACKAGE

if TYPE_CHECKING:
    from gobuild.core.source import SourceUnit

logger = logging.getLogger(__name__)


class Package:
    """A named unit of compilation.

    Packages compare by identity. The registry guarantees unique names
    among registered packages; executable packages synthesized by the
    target selector may share a name with a registered one.

    Attributes:
        name: Package name.
        files: Source files, in registration order.
        output_name: Base name of the object/archive/executable produced.
    """

    __slots__ = ("name", "files", "_dependencies", "output_name")

    def __init__(self, name: str, output_name: str | None = None) -> None:
        self.name = name
        self.files: list[SourceUnit] = []
        # dict used as an insertion-ordered set
        self._dependencies: dict[Package, None] = {}
        self.output_name = output_name or name

    @property
    def dependencies(self) -> list[Package]:
        """Direct dependencies, in the order they were first added."""
        return list(self._dependencies)

    def add_file(self, unit: SourceUnit) -> None:
        self.files.append(unit)

    def depends(self, other: Package) -> None:
        """Add a dependency edge. Duplicate and self edges are ignored."""
        if other is self:
            return
        self._dependencies.setdefault(other, None)

    @property
    def file_paths(self) -> list[str]:
        return [unit.path for unit in self.files]

    def __repr__(self) -> str:
        deps = ", ".join(dep.name for dep in self._dependencies)
        return (
            f"Package({self.name!r}, files={len(self.files)}, "
            f"output={self.output_name!r}, deps=[{deps}])"
        )


class PackageRegistry:
    """Owns every Package of a run, indexed by name."""

    def __init__(self, entry_package: str = ENTRY_PACKAGE) -> None:
        self.entry_package = entry_package
        self._packages: dict[str, Package] = {}

    def _get_or_create(self, name: str) -> Package:
        package = self._packages.get(name)
        if package is None:
            package = Package(name)
            self._packages[name] = package
        return package

    def register(self, unit: SourceUnit) -> Package:
        """Add a source unit to its owning package.

        Creates the owning package and every imported package that does
        not exist yet, then records owner -> import edges.

        Returns:
            The owning package.
        """
        owner = self._get_or_create(unit.package)
        owner.add_file(unit)
        for dep_name in unit.local_dependencies:
            owner.depends(self._get_or_create(dep_name))
        return owner

    def get(self, name: str) -> Package | None:
        return self._packages.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(list(self._packages.values()))

    def entry_point_units(self) -> list[SourceUnit]:
        """All files defining an entry point, in registration order."""
        return [
            unit
            for package in self._packages.values()
            for unit in package.files
            if unit.defines_entry_point
        ]

    def entry_point_count(self) -> int:
        return len(self.entry_point_units())

    def package_names(self, include_entry: bool = False) -> list[str]:
        """Sorted names of all registered packages.

        Args:
            include_entry: Also include the entry package name.
        """
        return sorted(
            name
            for name in self._packages
            if include_entry or name != self.entry_package
        )

    def find_entry_unit(self, name: str) -> SourceUnit | None:
        """Find the entry file matching a command-line target name.

        Matches, in order of preference: the exact relative path, the
        path without its ".go" suffix, the file name, then the file stem.
        """
        candidates = self.entry_point_units()
        wanted = PurePosixPath(name.replace("\\", "/"))
        if wanted.parts and wanted.parts[0] == ".":
            wanted = PurePosixPath(*wanted.parts[1:])
        checks = (
            lambda unit: PurePosixPath(unit.path) == wanted,
            lambda unit: PurePosixPath(unit.path).with_suffix("") == wanted,
            lambda unit: PurePosixPath(unit.path).name == wanted.name
            and len(wanted.parts) == 1,
            lambda unit: unit.stem == str(wanted),
        )
        for check in checks:
            for unit in candidates:
                if check(unit):
                    return unit
        return None
