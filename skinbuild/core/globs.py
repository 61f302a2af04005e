"""
Glob expansion and matching for asset source lists and watch scopes.

Patterns are POSIX-style strings relative to the project root (or
absolute). Supported syntax: ``**`` (any number of directories), ``*``,
``?``, ``[...]`` and ``{a,b}`` alternation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Sequence

_MAGIC = re.compile(r"[*?\[{]")
_BRACES = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternations, leftmost group first.

    >>> expand_braces("*.{eot,ttf}")
    ['*.eot', '*.ttf']
    """
    match = _BRACES.search(pattern)
    if match is None:
        return [pattern]

    head, tail = pattern[: match.start()], pattern[match.end():]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(head + option + tail))
    return expanded


def is_glob(pattern: str) -> bool:
    return _MAGIC.search(pattern) is not None


def split_base(pattern: str) -> tuple[str, str]:
    """Split a pattern into its static directory prefix and the magic rest.

    A pattern without magic characters returns ``(pattern, "")``.
    """
    segments = pattern.split("/")
    for index, segment in enumerate(segments):
        if is_glob(segment):
            base = "/".join(segments[:index])
            if not base and pattern.startswith("/"):
                base = "/"
            return base or ".", "/".join(segments[index:])
    return pattern, ""


def _translate(pattern: str) -> str:
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        c = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:[^/]*/)*")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif c == "*":
            out.append("[^/]*")
            i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(c))
                i += 1
                continue
            body = pattern[i + 1:end]
            if body.startswith("!"):
                body = "^" + body[1:]
            out.append("[" + body.replace("\\", "\\\\") + "]")
            i = end + 1
        else:
            out.append(re.escape(c))
            i += 1
    return "".join(out)


def compile_pattern(pattern: str, root: Path) -> re.Pattern[str]:
    """Compile a (brace-free) glob into a regex over absolute POSIX paths."""
    if pattern.startswith("/"):
        return re.compile(_translate(pattern) + r"\Z")
    prefix = re.escape(root.as_posix().rstrip("/"))
    if pattern.startswith("./"):
        pattern = pattern[2:]
    return re.compile(prefix + "/" + _translate(pattern) + r"\Z")


# =============================================================================
# Expansion
# =============================================================================


@dataclass(frozen=True)
class SourceFile:
    """A matched file and the directory its relative output path hangs off."""

    path: Path
    base: Path

    @property
    def relative(self) -> Path:
        return self.path.relative_to(self.base)


@dataclass
class ExpandedSources:
    files: list[SourceFile] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)

    @property
    def paths(self) -> list[Path]:
        return [source.path for source in self.files]


def expand(patterns: Iterable[str], root: Path) -> ExpandedSources:
    """Resolve patterns to files, in pattern order, each file once.

    Matches of a single glob are sorted so the result does not depend on
    directory listing order. Literal paths that do not exist are
    collected in ``missing``; globs that match nothing are not.
    """
    result = ExpandedSources()
    seen: set[Path] = set()

    def add(path: Path, base: Path) -> None:
        key = path.resolve()
        if key in seen:
            return
        seen.add(key)
        result.files.append(SourceFile(path, base))

    for pattern in patterns:
        for variant in expand_braces(pattern):
            base, rest = split_base(variant)
            base_path = root / base
            if not rest:
                if base_path.is_file():
                    add(base_path, base_path.parent)
                else:
                    result.missing.append(variant)
                continue
            if not base_path.is_dir():
                continue
            for match in sorted(base_path.glob(rest)):
                if match.is_file():
                    add(match, base_path)

    return result


# =============================================================================
# Matching
# =============================================================================


class GlobSet:
    """A group of patterns that can answer "does this path belong here"."""

    def __init__(self, patterns: Sequence[str], root: Path):
        self.patterns = tuple(patterns)
        self.root = root
        self._regexes = [
            compile_pattern(variant, root)
            for pattern in self.patterns
            for variant in expand_braces(pattern)
        ]

    def matches(self, path: Path) -> bool:
        candidate = path.as_posix()
        return any(regex.match(candidate) for regex in self._regexes)

    def base_dirs(self) -> list[Path]:
        """Directories an observer must watch (recursively) to see every match."""
        dirs: list[Path] = []
        for pattern in self.patterns:
            for variant in expand_braces(pattern):
                base, rest = split_base(variant)
                base_path = self.root / base
                if not rest:
                    base_path = base_path.parent
                if base_path not in dirs:
                    dirs.append(base_path)
        return dirs
