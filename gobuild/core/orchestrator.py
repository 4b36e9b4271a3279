# SPDX-License-Identifier: MIT
"""Top-level build driver.

The Orchestrator runs one gobuild invocation:

1. clean mode: delete toolchain artifacts and stop
2. select the toolchain for the architecture and locate its programs
3. prepare the output location
4. discover and parse sources into the PackageRegistry
5. build executables or libraries
6. report the accumulated result as an exit status

Fatal problems raise GobuildError subclasses and end the run at once;
nothing is cleaned up. Compile errors are accumulated: remaining
targets are still compiled, but once any compile has failed no further
executable is linked for the rest of the run. Libraries are archived
unless their own compile failed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gobuild.configure.config import BuildOptions, Configure, OutputLayout
from gobuild.core.errors import CleanError
from gobuild.core.package import PackageRegistry
from gobuild.core.scheduler import BuildResult, Scheduler
from gobuild.core.selector import GroupingPolicy, TargetSelector
from gobuild.core.source import parse_source
from gobuild.toolchains.gc import OBJECT_GLOB, find_gc_toolchain
from gobuild.tools.invoker import SubprocessRunner, ToolchainInvoker, run_clean
from gobuild.util.walker import iter_source_files

if TYPE_CHECKING:
    from gobuild.tools.invoker import ProcessRunner
    from gobuild.tools.toolchain import Toolchain

logger = logging.getLogger(__name__)


class Orchestrator:
    """Drives a complete build for a set of options.

    Example:
        options = BuildOptions(root=Path("."), build_all=True)
        exit_code = Orchestrator(options).run()

    Attributes:
        options: What to build.
        config: Environment discovery (PATH lookup, output location).
        runner: Runs external processes from the project root.
        registry: Packages discovered by the last run.
        result: Outcome of the last run.
    """

    def __init__(
        self,
        options: BuildOptions,
        *,
        runner: ProcessRunner | None = None,
        config: Configure | None = None,
        toolchain: Toolchain | None = None,
    ) -> None:
        self.options = options
        self.config = config or Configure(root=options.root)
        self.runner = runner or SubprocessRunner(cwd=options.root)
        self._toolchain = toolchain
        self.registry = PackageRegistry()
        self.result = BuildResult()

    def run(self) -> int:
        """Run the build and return the process exit status.

        Raises:
            GobuildError: On any fatal condition.
        """
        if self.options.clean:
            self.clean()
            return 0

        toolchain = self._toolchain or find_gc_toolchain(
            self.options.resolve_arch(), self.config
        )
        layout = self.config.output_layout(self.options.output)

        self.discover()

        scheduler = Scheduler(
            ToolchainInvoker(toolchain, self.runner),
            layout,
            include_path=self._include_path(layout),
            result=self.result,
        )
        if self.options.library:
            self.build_libraries(scheduler)
        else:
            self.build_executables(scheduler, layout)

        if self.result.any_compile_error:
            names = ", ".join(p.name for p in self.result.failed)
            logger.error("Build finished with compile errors in: %s", names)
        return self.result.exit_code

    def _include_path(self, layout: OutputLayout) -> str:
        # Dependency objects live in the output directory when one is used.
        if self.options.include_paths:
            return self.options.include_paths
        return layout.prefix.rstrip("/")

    def discover(self) -> PackageRegistry:
        """Parse every source file under the root into the registry."""
        logger.info("Parsing go file(s)...")
        root = self.options.root
        for relpath in iter_source_files(
            root,
            include_hidden=self.options.include_hidden,
            include_tests=self.options.testing,
        ):
            self.registry.register(parse_source(root, relpath))

        logger.debug(
            "Found %d package(s): %s",
            len(self.registry),
            ", ".join(self.registry.package_names(include_entry=True)),
        )
        return self.registry

    def build_executables(self, scheduler: Scheduler, layout: OutputLayout) -> None:
        """Compile and link every selected executable."""
        policy = (
            GroupingPolicy.ISOLATED
            if self.options.single_main
            else GroupingPolicy.GROUPED
        )
        selector = TargetSelector(
            self.registry,
            policy=policy,
            build_all=self.options.build_all,
            output_name=layout.executable_name,
        )

        for unit in selector.executables(self.options.targets):
            scheduler.compile(unit.package)
            if self.result.any_compile_error:
                logger.error("Can't link executable because of compile errors.")
                self.result.failed_targets.append(unit.output_name)
                continue
            scheduler.link(unit)

    def build_libraries(self, scheduler: Scheduler) -> None:
        """Compile and archive every selected library package."""
        if not len(self.registry):
            logger.warning("No packages found to build.")
            return

        selector = TargetSelector(self.registry)
        units, unknown = selector.libraries(self.options.targets)
        for name in unknown:
            logger.error("Package %s doesn't exist.", name)
            self.result.failed_targets.append(name)

        selected = {unit.package for unit in units}
        for unit in units:
            if self.result.is_compiled(unit.package):
                logger.debug("Package %s is already built.", unit.name)
                continue

            logger.debug("Building %s...", unit.name)
            first_new = len(self.result.compiled)
            scheduler.compile(unit.package)

            # Selected dependencies compiled along the way are archived now,
            # since the loop skips them once they are compiled.
            for package in self.result.compiled[first_new:]:
                if package not in selected:
                    continue
                if self.result.has_errors(package):
                    logger.error(
                        "Can't create library %s because of compile errors.",
                        package.name,
                    )
                    self.result.failed_targets.append(package.name)
                    continue
                scheduler.archive(package)

    def clean(self) -> None:
        """Delete every object file in the root.

        Raises:
            ToolNotFoundError: If bash is not available.
            CleanError: If rm exits nonzero.
        """
        status = run_clean(self.runner, OBJECT_GLOB, verbose=self.options.verbose)
        if status != 0:
            raise CleanError(status)
