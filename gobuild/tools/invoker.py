# SPDX-License-Identifier: MIT
"""Synchronous invocation of the external toolchain.

The ToolchainInvoker builds the command lines for the compile, link,
archive and clean steps and hands them to a ProcessRunner. Every call
blocks until the process exits and returns its exit status. A process
that cannot be started raises ToolInvocationError instead.

Tests substitute a fake ProcessRunner so no real process is spawned.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from gobuild.core.errors import ToolInvocationError, ToolNotFoundError

if TYPE_CHECKING:
    from gobuild.tools.toolchain import Toolchain

logger = logging.getLogger(__name__)

ARCHIVE_FLAGS = "crg"


@runtime_checkable
class ProcessRunner(Protocol):
    """Capability to run an external process to completion."""

    def run(
        self, command: Sequence[str], env: Mapping[str, str] | None = None
    ) -> int:
        """Run command and return its exit status.

        Raises:
            ToolInvocationError: If the process could not be started.
        """
        ...


class SubprocessRunner:
    """ProcessRunner backed by subprocess.

    stdin is /dev/null; stdout and stderr pass through to the terminal.
    A process killed by a signal counts as an execution failure, not as
    a nonzero exit.

    Attributes:
        cwd: Working directory for every process.
    """

    def __init__(self, cwd: Path | str | None = None) -> None:
        self.cwd = Path(cwd) if cwd else None

    def run(
        self, command: Sequence[str], env: Mapping[str, str] | None = None
    ) -> int:
        argv = list(command)
        run_env = dict(env) if env is not None else os.environ.copy()
        try:
            result = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                env=run_env,
                cwd=self.cwd,
            )
        except OSError as e:
            raise ToolInvocationError(argv, str(e)) from e
        if result.returncode < 0:
            raise ToolInvocationError(
                argv, f"terminated by signal {-result.returncode}"
            )
        return result.returncode


class ToolchainInvoker:
    """Runs compile, link, archive and clean steps for a toolchain.

    Paths are passed through unchanged; they are relative to the
    runner's working directory (the project root).
    """

    def __init__(self, toolchain: Toolchain, runner: ProcessRunner) -> None:
        self.toolchain = toolchain
        self.runner = runner

    def _run(self, command: list[str]) -> int:
        logger.debug("Running: %s", " ".join(command))
        return self.runner.run(command)

    def compile(
        self, output: str, files: Sequence[str], include_path: str = ""
    ) -> int:
        """Compile files into a single object file."""
        command = [self.toolchain.compiler, "-o", output]
        if include_path:
            command.extend(["-I", include_path])
        command.extend(files)
        return self._run(command)

    def link(self, output: str, obj: str, include_path: str = "") -> int:
        """Link an object file into an executable."""
        command = [self.toolchain.linker, "-o", output]
        if include_path:
            command.extend(["-L", include_path])
        command.append(obj)
        return self._run(command)

    def archive(self, output: str, obj: str) -> int:
        """Create a static library from an object file."""
        command = [self.toolchain.archiver, ARCHIVE_FLAGS, output, obj]
        return self._run(command)


def run_clean(
    runner: ProcessRunner,
    pattern: str,
    *,
    verbose: bool = False,
    shell: str | None = None,
) -> int:
    """Delete files matching a shell glob, the way 'make clean' would.

    Args:
        runner: Runner whose working directory holds the files.
        pattern: Shell glob of files to delete (e.g. '*.[568]').
        verbose: List every removed file.
        shell: Shell to use; bash from PATH when None.

    Raises:
        ToolNotFoundError: If no shell is available.
    """
    if shell is None:
        shell = shutil.which("bash")
        if shell is None:
            raise ToolNotFoundError("bash", "shell")

    rm_flags = "-rfv" if verbose else "-rf"
    script = f"rm {rm_flags} {pattern}"
    logger.info("Running: %s", script)
    return runner.run([shell, "-c", script])
