# SPDX-License-Identifier: MIT
"""Discovery of source files under a project root."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

from gobuild.core.errors import WalkError

SOURCE_SUFFIX = ".go"
TEST_SUFFIX = "_test.go"


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_test_file(name: str) -> bool:
    return name.endswith(TEST_SUFFIX)


def iter_source_files(
    root: Path | str,
    *,
    include_hidden: bool = False,
    include_tests: bool = False,
) -> Iterator[str]:
    """Yield source files under root, relative to it, with "/" separators.

    Directories and files are visited in sorted order so that discovery
    (and therefore package file order) is reproducible.

    Args:
        root: Directory to walk.
        include_hidden: Descend into hidden directories and accept
            hidden files.
        include_tests: Accept files ending in "_test.go".

    Raises:
        WalkError: If a directory cannot be read.
    """
    root = Path(root)

    def on_error(e: OSError) -> None:
        raise WalkError(f"error while traversing directories: {e}", e.filename)

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(
            d for d in dirnames if include_hidden or not is_hidden(d)
        )
        rel_dir = Path(dirpath).relative_to(root)
        for name in sorted(filenames):
            if not name.endswith(SOURCE_SUFFIX):
                continue
            if is_hidden(name) and not include_hidden:
                continue
            if is_test_file(name) and not include_tests:
                continue
            yield (rel_dir / name).as_posix()
