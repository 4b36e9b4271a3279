# SPDX-License-Identifier: MIT
"""Tests for gobuild.core.orchestrator."""

from __future__ import annotations

from pathlib import Path

import pytest

from gobuild.configure.config import BuildOptions
from gobuild.core.errors import (
    ArchiveError,
    CleanError,
    ConfigureError,
    EmptyPackageError,
    LinkError,
    UnknownTargetError,
)
from gobuild.core.orchestrator import Orchestrator

MAIN = "package main\n\n{imports}\nfunc main() {{\n}}\n"


def main_file(*imports):
    lines = "".join(f'import "./{name}"\n' for name in imports)
    return MAIN.format(imports=lines)


def lib_file(package, *imports):
    lines = "".join(f'import "./{name}"\n' for name in imports)
    return f"package {package}\n\n{lines}\nfunc F() {{}}\n"


def orchestrate(root, runner, toolchain, **kwargs):
    options = BuildOptions(root=root, **kwargs)
    return Orchestrator(options, runner=runner, toolchain=toolchain)


class TestDiscovery:
    def test_discover_registers_every_file(self, write_tree, runner, toolchain):
        root = write_tree(
            {
                "hello.go": main_file("util"),
                "util/util.go": lib_file("util"),
                "util/util_test.go": lib_file("util"),
                ".hidden/x.go": lib_file("x"),
            }
        )
        orch = orchestrate(root, runner, toolchain)
        registry = orch.discover()
        assert registry.package_names(include_entry=True) == ["main", "util"]
        assert registry.get("util").file_paths == ["util/util.go"]

    def test_discover_with_tests_and_hidden(self, write_tree, runner, toolchain):
        root = write_tree(
            {
                "util/util.go": lib_file("util"),
                "util/util_test.go": lib_file("util"),
                ".hidden/x.go": lib_file("x"),
            }
        )
        orch = orchestrate(root, runner, toolchain, testing=True, include_hidden=True)
        registry = orch.discover()
        assert registry.package_names() == ["util", "x"]
        assert registry.get("util").file_paths == [
            "util/util.go",
            "util/util_test.go",
        ]


class TestExecutableMode:
    def test_builds_single_program(self, write_tree, runner, toolchain):
        root = write_tree({"hello.go": main_file(), "helpers.go": "package main\n"})
        assert orchestrate(root, runner, toolchain).run() == 0
        assert runner.calls == [
            ["6g", "-o", "hello.6", "hello.go", "helpers.go"],
            ["6l", "-o", "hello", "hello.6"],
        ]

    def test_single_main_builds_entry_file_alone(self, write_tree, runner, toolchain):
        root = write_tree({"hello.go": main_file(), "helpers.go": "package main\n"})
        assert orchestrate(root, runner, toolchain, single_main=True).run() == 0
        assert runner.calls[0] == ["6g", "-o", "hello.6", "hello.go"]

    def test_build_all_links_every_program(self, write_tree, runner, toolchain):
        root = write_tree(
            {
                "a.go": main_file("util"),
                "b.go": main_file("util"),
                "util/util.go": lib_file("util"),
            }
        )
        assert orchestrate(root, runner, toolchain, build_all=True).run() == 0
        assert runner.programs() == ["6g", "6g", "6l", "6g", "6l"]
        assert runner.outputs("6g") == ["util.6", "a.6", "b.6"]
        assert runner.outputs("6l") == ["a", "b"]

    def test_explicit_target(self, write_tree, runner, toolchain):
        root = write_tree({"a.go": main_file(), "b.go": main_file()})
        assert orchestrate(root, runner, toolchain, targets=["b.go"]).run() == 0
        assert runner.outputs("6l") == ["b"]

    def test_explicit_unknown_target(self, write_tree, runner, toolchain):
        root = write_tree({"a.go": main_file()})
        with pytest.raises(UnknownTargetError):
            orchestrate(root, runner, toolchain, targets=["nope.go"]).run()
        assert runner.calls == []

    def test_output_name(self, write_tree, runner, toolchain):
        root = write_tree({"hello.go": main_file()})
        assert orchestrate(root, runner, toolchain, output="bin/app").run() == 0
        assert runner.calls == [
            ["6g", "-o", "bin/app.6", "hello.go"],
            ["6l", "-o", "bin/app", "bin/app.6"],
        ]
        assert (root / "bin").is_dir()

    def test_output_directory(self, write_tree, runner, toolchain):
        root = write_tree(
            {"hello.go": main_file("util"), "util/u.go": lib_file("util")}
        )
        assert orchestrate(root, runner, toolchain, output="out/").run() == 0
        assert runner.calls == [
            ["6g", "-o", "out/util.6", "-I", "out", "util/u.go"],
            ["6g", "-o", "out/hello.6", "-I", "out", "hello.go"],
            ["6l", "-o", "out/hello", "-L", "out", "out/hello.6"],
        ]

    def test_explicit_include_path(self, write_tree, runner, toolchain):
        root = write_tree({"hello.go": main_file()})
        assert orchestrate(root, runner, toolchain, include_paths="/opt/go").run() == 0
        assert runner.calls == [
            ["6g", "-o", "hello.6", "-I", "/opt/go", "hello.go"],
            ["6l", "-o", "hello", "-L", "/opt/go", "hello.6"],
        ]

    def test_import_of_undefined_package_is_fatal(self, write_tree, runner, toolchain):
        root = write_tree({"hello.go": main_file("ghost")})
        with pytest.raises(EmptyPackageError):
            orchestrate(root, runner, toolchain).run()
        assert runner.calls == []

    def test_link_failure_is_fatal(self, write_tree, runner, toolchain):
        root = write_tree({"hello.go": main_file()})
        runner.statuses["hello"] = 1
        with pytest.raises(LinkError):
            orchestrate(root, runner, toolchain).run()


class TestStickyCompileError:
    """A compile failure suppresses every later link in the same run."""

    def test_failed_compile_skips_link(self, write_tree, runner, toolchain):
        root = write_tree({"hello.go": main_file()})
        runner.statuses["hello.6"] = 1
        assert orchestrate(root, runner, toolchain).run() == 1
        assert runner.programs() == ["6g"]

    def test_later_clean_targets_are_not_linked(self, write_tree, runner, toolchain):
        root = write_tree(
            {
                "a.go": main_file(),
                "b.go": main_file(),
                "c.go": main_file(),
            }
        )
        runner.statuses["a.6"] = 1
        orch = orchestrate(root, runner, toolchain, build_all=True)
        assert orch.run() == 1
        # b and c compile cleanly but are never linked
        assert runner.outputs("6g") == ["a.6", "b.6", "c.6"]
        assert runner.outputs("6l") == []
        assert orch.result.failed_targets == ["a", "b", "c"]

    def test_targets_linked_before_the_failure_stay_linked(
        self, write_tree, runner, toolchain
    ):
        root = write_tree({"a.go": main_file(), "b.go": main_file()})
        runner.statuses["b.6"] = 1
        assert orchestrate(root, runner, toolchain, build_all=True).run() == 1
        assert runner.outputs("6l") == ["a"]

    def test_failing_dependency_suppresses_link(self, write_tree, runner, toolchain):
        root = write_tree(
            {"hello.go": main_file("util"), "util/u.go": lib_file("util")}
        )
        runner.statuses["util.6"] = 1
        assert orchestrate(root, runner, toolchain).run() == 1
        assert runner.outputs("6g") == ["util.6", "hello.6"]
        assert runner.outputs("6l") == []


class TestLibraryMode:
    def test_builds_every_library(self, write_tree, runner, toolchain):
        root = write_tree(
            {
                "hello.go": main_file("b"),
                "a/a.go": lib_file("a"),
                "b/b.go": lib_file("b"),
            }
        )
        assert orchestrate(root, runner, toolchain, library=True).run() == 0
        assert runner.calls == [
            ["6g", "-o", "a.6", "a/a.go"],
            ["gopack", "crg", "a.a", "a.6"],
            ["6g", "-o", "b.6", "b/b.go"],
            ["gopack", "crg", "b.a", "b.6"],
        ]

    def test_dependency_compiled_once_and_archived(self, write_tree, runner, toolchain):
        root = write_tree({"a/a.go": lib_file("a", "b"), "b/b.go": lib_file("b")})
        assert orchestrate(root, runner, toolchain, library=True).run() == 0
        assert runner.outputs("6g") == ["b.6", "a.6"]
        assert runner.outputs("gopack") == ["b.a", "a.a"]

    def test_unselected_dependency_not_archived(self, write_tree, runner, toolchain):
        root = write_tree({"a/a.go": lib_file("a", "b"), "b/b.go": lib_file("b")})
        orch = orchestrate(root, runner, toolchain, library=True, targets=["a"])
        assert orch.run() == 0
        assert runner.outputs("6g") == ["b.6", "a.6"]
        assert runner.outputs("gopack") == ["a.a"]

    def test_fileless_package_skipped(self, write_tree, runner, toolchain):
        root = write_tree({"hello.go": main_file("ghost"), "a/a.go": lib_file("a")})
        assert orchestrate(root, runner, toolchain, library=True).run() == 0
        assert runner.outputs("6g") == ["a.6"]

    def test_unknown_library_fails_run_but_continues(
        self, write_tree, runner, toolchain
    ):
        root = write_tree({"a/a.go": lib_file("a")})
        orch = orchestrate(root, runner, toolchain, library=True, targets=["nope", "a"])
        assert orch.run() == 1
        assert runner.outputs("gopack") == ["a.a"]
        assert orch.result.failed_targets == ["nope"]

    def test_no_packages(self, tmp_path: Path, runner, toolchain):
        assert orchestrate(tmp_path, runner, toolchain, library=True).run() == 0
        assert runner.calls == []

    def test_compile_error_skips_only_failed_archive(
        self, write_tree, runner, toolchain
    ):
        root = write_tree({"a/a.go": lib_file("a"), "b/b.go": lib_file("b")})
        runner.statuses["a.6"] = 1
        orch = orchestrate(root, runner, toolchain, library=True)
        assert orch.run() == 1
        assert runner.outputs("6g") == ["a.6", "b.6"]
        assert runner.outputs("gopack") == ["b.a"]
        assert orch.result.failed_targets == ["a"]

    def test_failed_dependency_does_not_block_dependent_archive(
        self, write_tree, runner, toolchain
    ):
        root = write_tree({"a/a.go": lib_file("a", "b"), "b/b.go": lib_file("b")})
        runner.statuses["b.6"] = 1
        orch = orchestrate(root, runner, toolchain, library=True)
        assert orch.run() == 1
        assert runner.outputs("6g") == ["b.6", "a.6"]
        assert runner.outputs("gopack") == ["a.a"]
        assert orch.result.any_compile_error

    def test_archive_failure_is_fatal(self, write_tree, runner, toolchain):
        root = write_tree({"a/a.go": lib_file("a")})
        runner.statuses["a.a"] = 1
        with pytest.raises(ArchiveError):
            orchestrate(root, runner, toolchain, library=True).run()


class TestToolchainSelection:
    def test_unknown_arch(self, write_tree, runner, monkeypatch):
        monkeypatch.delenv("GOARCH", raising=False)
        root = write_tree({"hello.go": main_file()})
        orch = Orchestrator(BuildOptions(root=root, arch="sparc"), runner=runner)
        with pytest.raises(ConfigureError):
            orch.run()
        assert runner.calls == []

    def test_missing_arch(self, write_tree, runner, monkeypatch):
        monkeypatch.delenv("GOARCH", raising=False)
        root = write_tree({"hello.go": main_file()})
        with pytest.raises(ConfigureError):
            Orchestrator(BuildOptions(root=root), runner=runner).run()


class TestClean:
    @pytest.fixture(autouse=True)
    def _bash(self, monkeypatch):
        monkeypatch.setattr(
            "gobuild.tools.invoker.shutil.which", lambda name: "/bin/bash"
        )

    def test_clean_runs_rm(self, tmp_path: Path, runner):
        orch = Orchestrator(BuildOptions(root=tmp_path, clean=True), runner=runner)
        assert orch.run() == 0
        assert len(runner.calls) == 1
        assert runner.calls[0] == ["/bin/bash", "-c", "rm -rf *.[568]"]

    def test_clean_verbose(self, tmp_path: Path, runner):
        orch = Orchestrator(
            BuildOptions(root=tmp_path, clean=True, verbose=True), runner=runner
        )
        assert orch.run() == 0
        assert runner.calls[0][2] == "rm -rfv *.[568]"

    def test_clean_failure(self, tmp_path: Path, runner):
        orch = Orchestrator(BuildOptions(root=tmp_path, clean=True), runner=runner)
        runner.statuses["rm -rf *.[568]"] = 1
        with pytest.raises(CleanError):
            orch.run()
