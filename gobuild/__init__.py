# SPDX-License-Identifier: MIT
"""
gobuild: a build tool to automate building go programs.

gobuild discovers the .go files under a directory, groups them into
packages, works out which package imports which, and runs the gc
compiler, linker and gopack in dependency order to produce executables
or static libraries.
"""

from __future__ import annotations

__version__ = "0.2.0"

# Re-export commonly used classes for convenient imports
from gobuild.configure.config import BuildOptions  # noqa: E402
from gobuild.core.orchestrator import Orchestrator  # noqa: E402
from gobuild.core.package import Package, PackageRegistry  # noqa: E402
from gobuild.core.scheduler import BuildResult, Scheduler  # noqa: E402
from gobuild.core.selector import GroupingPolicy, TargetSelector  # noqa: E402

# Public API exports
__all__ = [
    # Version
    "__version__",
    # Core classes
    "BuildOptions",
    "BuildResult",
    "GroupingPolicy",
    "Orchestrator",
    "Package",
    "PackageRegistry",
    "Scheduler",
    "TargetSelector",
]
