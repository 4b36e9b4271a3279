# SPDX-License-Identifier: MIT
"""The gc toolchain: per-architecture Go compilers and linkers.

Each architecture has its own compiler and linker named after the
architecture's letter (6 for amd64, 8 for 386, 5 for arm); the object
suffix uses the same letter. All architectures share gopack.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gobuild.core.errors import ConfigureError
from gobuild.tools.toolchain import Toolchain

if TYPE_CHECKING:
    from gobuild.configure.config import Configure

logger = logging.getLogger(__name__)

ARCHIVER = "gopack"

GC_TOOLCHAINS: dict[str, Toolchain] = {
    "amd64": Toolchain("amd64", "6g", "6l", ARCHIVER, ".6"),
    "386": Toolchain("386", "8g", "8l", ARCHIVER, ".8"),
    "arm": Toolchain("arm", "5g", "5l", ARCHIVER, ".5"),
}

# Glob matching every object file any gc toolchain produces.
OBJECT_GLOB = "*.[{}]".format(
    "".join(sorted(tc.object_suffix[1:] for tc in GC_TOOLCHAINS.values()))
)


def get_toolchain(arch: str | None) -> Toolchain:
    """Return the toolchain for an architecture, with unresolved program names.

    Raises:
        ConfigureError: If arch is missing or not supported.
    """
    if not arch or arch not in GC_TOOLCHAINS:
        valid = "/".join(GC_TOOLCHAINS)
        raise ConfigureError(f"please specify a valid GOARCH ({valid})")
    return GC_TOOLCHAINS[arch]


def find_gc_toolchain(arch: str | None, config: Configure) -> Toolchain:
    """Select the toolchain for arch and locate its programs on PATH.

    Raises:
        ConfigureError: If arch is missing or not supported.
        ToolNotFoundError: If any program is not on PATH.
    """
    toolchain = get_toolchain(arch)
    compiler = config.find_program(toolchain.compiler, role="compiler")
    linker = config.find_program(toolchain.linker, role="linker")
    archiver = config.find_program(toolchain.archiver, role="archiver")

    resolved = toolchain.with_programs(
        compiler=str(compiler), linker=str(linker), archiver=str(archiver)
    )
    logger.debug("Using %r", resolved)
    return resolved
