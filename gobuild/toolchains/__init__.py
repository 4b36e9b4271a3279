# SPDX-License-Identifier: MIT
"""Toolchain definitions."""

from gobuild.toolchains.gc import (
    ARCHIVER,
    GC_TOOLCHAINS,
    OBJECT_GLOB,
    find_gc_toolchain,
    get_toolchain,
)

__all__ = [
    "ARCHIVER",
    "GC_TOOLCHAINS",
    "OBJECT_GLOB",
    "find_gc_toolchain",
    "get_toolchain",
]
