# SPDX-License-Identifier: MIT
"""Toolchain description.

A Toolchain is the coordinated set of programs a build uses: compiler,
linker and archiver, plus the suffix the compiler gives object files.
Switching architectures switches all of them at once.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Toolchain:
    """Programs and conventions for one target architecture.

    Attributes:
        arch: Architecture identifier (e.g., 'amd64').
        compiler: Compiler command (name or absolute path).
        linker: Linker command.
        archiver: Archiver command.
        object_suffix: Suffix of compiled objects (e.g., '.6').
        archive_suffix: Suffix of static libraries.
    """

    arch: str
    compiler: str
    linker: str
    archiver: str
    object_suffix: str
    archive_suffix: str = ".a"

    def object_name(self, name: str) -> str:
        return f"{name}{self.object_suffix}"

    def archive_name(self, name: str) -> str:
        return f"{name}{self.archive_suffix}"

    def with_programs(
        self, *, compiler: str, linker: str, archiver: str
    ) -> Toolchain:
        """Return a copy using the given program paths."""
        return Toolchain(
            arch=self.arch,
            compiler=compiler,
            linker=linker,
            archiver=archiver,
            object_suffix=self.object_suffix,
            archive_suffix=self.archive_suffix,
        )

    def __repr__(self) -> str:
        return (
            f"Toolchain({self.arch!r}, compiler={self.compiler!r}, "
            f"linker={self.linker!r}, archiver={self.archiver!r})"
        )
