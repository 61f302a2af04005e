"""
Adapters around the stylesheet compiler and the script minifier.

Both take already-ordered inputs and return the output text.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

import sass
from jsmin import jsmin

from skinbuild.build.errors import CompileError


def read_source(path: Path) -> str:
    """Read one UTF-8 source; undecodable bytes fail that compile only."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise CompileError(f"{path}: not valid UTF-8 ({e.reason} at byte {e.start})") from e


def _concat(sources: Sequence[Path]) -> str:
    return "\n".join(read_source(path) for path in sources)


def compile_stylesheets(
    sources: Sequence[Path],
    include_paths: Sequence[Path],
    production: bool = False,
) -> str:
    """Concatenate SCSS sources in order and compile them with libsass."""
    try:
        return sass.compile(
            string=_concat(sources),
            include_paths=[str(p) for p in include_paths],
            output_style="compressed" if production else "nested",
            source_comments=not production,
        )
    except sass.CompileError as e:
        raise CompileError(str(e)) from e


def minify_javascript(source: str) -> str:
    try:
        return jsmin(source)
    except Exception as e:
        raise CompileError(f"Minification failed: {e}") from e


def bundle_javascripts(sources: Sequence[Path], production: bool = False) -> str:
    """Concatenate scripts in order, minifying in production."""
    bundle = _concat(sources)
    if production:
        bundle = minify_javascript(bundle)
    return bundle
