# SPDX-License-Identifier: MIT
"""Shared fixtures for gobuild tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from pathlib import Path

import pytest

from gobuild.core.errors import ToolInvocationError
from gobuild.toolchains.gc import GC_TOOLCHAINS
from gobuild.tools.toolchain import Toolchain


class FakeRunner:
    """ProcessRunner that records commands instead of running them.

    Attributes:
        calls: Every command run, in order.
        statuses: Exit status by output path (the argument after the
            program for gopack, after "-o" otherwise). Default 0.
        unstartable: Program names that fail to start.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.statuses: dict[str, int] = {}
        self.unstartable: set[str] = set()

    def run(
        self, command: Sequence[str], env: Mapping[str, str] | None = None
    ) -> int:
        argv = list(command)
        if argv[0] in self.unstartable:
            raise ToolInvocationError(argv, "no such file or directory")
        self.calls.append(argv)
        return self.statuses.get(self.output_of(argv), 0)

    @staticmethod
    def output_of(argv: list[str]) -> str:
        if "-o" in argv:
            return argv[argv.index("-o") + 1]
        return argv[2] if len(argv) > 2 else ""

    def programs(self) -> list[str]:
        return [call[0] for call in self.calls]

    def outputs(self, program: str) -> list[str]:
        return [self.output_of(call) for call in self.calls if call[0] == program]


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def toolchain() -> Toolchain:
    """The amd64 toolchain with plain program names."""
    return GC_TOOLCHAINS["amd64"]


@pytest.fixture
def write_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write a {relative path: content} source tree below tmp_path."""

    def write(files: dict[str, str]) -> Path:
        for relpath, content in files.items():
            path = tmp_path / relpath
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return tmp_path

    return write


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """Undo the basicConfig(force=True) done by the CLI entry point."""
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
