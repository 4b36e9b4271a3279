# SPDX-License-Identifier: MIT
"""Custom exceptions for gobuild.

All gobuild exceptions inherit from GobuildError. Raising one of them
is fatal for the run: the CLI logs the message and exits with status 1.
Compile errors are not exceptions; they are accumulated in the
BuildResult so that independent targets can still be attempted.
"""

from __future__ import annotations


class GobuildError(Exception):
    """Base class for all gobuild exceptions.

    Attributes:
        message: The error message.
        path: Optional file the error refers to.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class ConfigureError(GobuildError):
    """Invalid configuration, e.g. an unknown or missing GOARCH."""


class ToolNotFoundError(ConfigureError):
    """Required tool was not found.

    Attributes:
        tool: The name of the tool that was not found.
    """

    def __init__(self, tool: str, role: str = "tool") -> None:
        self.tool = tool
        self.role = role
        super().__init__(f"could not find {role} {tool}")


class ToolInvocationError(GobuildError):
    """An external process could not be started or failed to run.

    This is distinct from a process that ran and exited nonzero.
    """

    def __init__(self, command: list[str], reason: str) -> None:
        self.command = command
        self.reason = reason
        name = command[0] if command else "<empty command>"
        super().__init__(f"{name} execution error ({reason})")


class DependencyCycleError(GobuildError):
    """Circular dependency detected in the package graph.

    Attributes:
        cycle: The package names forming the cycle, first name repeated last.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        cycle_str = " -> ".join(cycle)
        super().__init__(
            f"found a recursive dependency in {cycle[0]} ({cycle_str}); "
            "cyclic package imports cannot be linked"
        )


class EmptyPackageError(GobuildError):
    """A package scheduled for compilation has no source files."""

    def __init__(self, package: str) -> None:
        self.package = package
        super().__init__(f"no files found for package {package}")


class NoEntryPointError(GobuildError):
    """No file defines a program entry point."""

    def __init__(self) -> None:
        super().__init__("no main package found")


class AmbiguousEntryPointError(GobuildError):
    """Several entry files exist and none was selected.

    Attributes:
        candidates: Paths of all entry-defining files.
    """

    def __init__(self, candidates: list[str]) -> None:
        self.candidates = candidates
        listing = "".join(f"\n\t{path}" for path in candidates)
        super().__init__(
            "multiple files found with main function.\n"
            "Please specify one or more as command line parameter or\n"
            f"run gobuild with -a. Available main files are:{listing}"
        )


class UnknownTargetError(GobuildError):
    """An explicitly requested target does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"file {name} not found")


class LinkError(GobuildError):
    """The linker returned a nonzero exit status."""

    def __init__(self, output: str, status: int) -> None:
        self.output = output
        self.status = status
        super().__init__(f"linker returned with errors ({status}) for {output}")


class ArchiveError(GobuildError):
    """The archiver returned a nonzero exit status."""

    def __init__(self, output: str, status: int) -> None:
        self.output = output
        self.status = status
        super().__init__(f"archiver returned with errors ({status}) for {output}")


class CleanError(GobuildError):
    """The clean step returned a nonzero exit status."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"rm returned with errors ({status})")


class ParseError(GobuildError):
    """A source file could not be read or has no package clause."""


class WalkError(GobuildError):
    """The source tree could not be traversed."""
