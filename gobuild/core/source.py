# SPDX-License-Identifier: MIT
"""Source units and the source file parser.

A SourceUnit is the file-level record the rest of gobuild works with:
the file's path relative to the project root, the package it declares,
the local packages it imports and whether it defines a program entry
point.

The parser does not analyze Go syntax. It strips comments and looks
for the package clause, import paths starting with "./" and a
top-level ``func main()``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from gobuild.core.errors import ParseError

logger = logging.getLogger(__name__)

# Name of the package whose files may define program entry points.
ENTRY_PACKAGE = "main"

LOCAL_IMPORT_PREFIX = "./"

# String, raw string and rune literals are matched first so comment
# markers inside them are left alone.
_LITERAL_OR_COMMENT = re.compile(
    r"\"(?:[^\"\\\n]|\\.)*\""
    r"|`[^`]*`"
    r"|'(?:[^'\\\n]|\\.)*'"
    r"|/\*.*?\*/"
    r"|//[^\n]*",
    re.DOTALL,
)
_PACKAGE_CLAUSE = re.compile(r"^\s*package\s+([A-Za-z_]\w*)", re.MULTILINE)
_IMPORT_SINGLE = re.compile(
    r"^\s*import\s+(?:[A-Za-z_.]\w*\s+)?\"([^\"]+)\"", re.MULTILINE
)
_IMPORT_GROUP = re.compile(r"^\s*import\s*\((.*?)\)", re.MULTILINE | re.DOTALL)
_IMPORT_SPEC = re.compile(r"(?:[A-Za-z_.]\w*\s+)?\"([^\"]+)\"")
_MAIN_FUNC = re.compile(r"^func\s+main\s*\(\s*\)", re.MULTILINE)


@dataclass(frozen=True)
class SourceUnit:
    """A parsed source file.

    Attributes:
        path: Path relative to the project root, with "/" separators.
        package: Name of the package the file declares.
        local_dependencies: Names of locally imported packages, unique,
            in the order they first appear.
        defines_entry_point: True if the file is a program's starting unit.
    """

    path: str
    package: str
    local_dependencies: tuple[str, ...] = field(default_factory=tuple)
    defines_entry_point: bool = False

    @property
    def stem(self) -> str:
        """File name without directory and suffix."""
        return Path(self.path).stem


def strip_comments(text: str) -> str:
    """Remove block and line comments from source text.

    Literals are kept as they are, so "//" inside a string is not a comment.
    """

    def replace(match: re.Match[str]) -> str:
        token = match.group(0)
        if token.startswith("/*"):
            return " "
        if token.startswith("//"):
            return ""
        return token

    return _LITERAL_OR_COMMENT.sub(replace, text)


def local_import_name(import_path: str) -> str | None:
    """Return the package name for a local import path.

    Only paths starting with "./" are local; the package name is the
    last path component ("./util/strings" -> "strings").
    """
    if not import_path.startswith(LOCAL_IMPORT_PREFIX):
        return None
    name = import_path.rstrip("/").rsplit("/", 1)[-1]
    if not name or name == ".":
        return None
    return name


def find_import_paths(text: str) -> list[str]:
    """Return every import path in (comment-free) source text, in order."""
    found: list[tuple[int, str]] = []
    for match in _IMPORT_SINGLE.finditer(text):
        found.append((match.start(), match.group(1)))
    for group in _IMPORT_GROUP.finditer(text):
        for spec in _IMPORT_SPEC.finditer(group.group(1)):
            found.append((group.start(1) + spec.start(), spec.group(1)))
    found.sort()
    return [path for _, path in found]


def parse_text(path: str, text: str) -> SourceUnit:
    """Parse source text into a SourceUnit.

    Raises:
        ParseError: If the text has no package clause.
    """
    code = strip_comments(text)

    package_match = _PACKAGE_CLAUSE.search(code)
    if package_match is None:
        raise ParseError("missing package clause", path)
    package = package_match.group(1)

    dependencies: list[str] = []
    for import_path in find_import_paths(code):
        name = local_import_name(import_path)
        if name is not None and name not in dependencies:
            dependencies.append(name)

    defines_entry = package == ENTRY_PACKAGE and _MAIN_FUNC.search(code) is not None

    return SourceUnit(
        path=path,
        package=package,
        local_dependencies=tuple(dependencies),
        defines_entry_point=defines_entry,
    )


def parse_source(root: Path, relpath: str) -> SourceUnit:
    """Read and parse one source file.

    Args:
        root: Project root directory.
        relpath: File path relative to root.

    Returns:
        The parsed SourceUnit.

    Raises:
        ParseError: If the file cannot be read or has no package clause.
    """
    try:
        text = (root / relpath).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"could not read file: {e}", relpath) from e

    unit = parse_text(relpath, text)
    logger.debug(
        "Parsed %s: package %s, imports %s%s",
        relpath,
        unit.package,
        list(unit.local_dependencies),
        " (main)" if unit.defines_entry_point else "",
    )
    return unit
