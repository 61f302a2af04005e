"""
Synthesis of the SCSS variable document that opens every stylesheet build.

Each known component gets an ``$include-<id>-component`` flag. Active
components are declared ``true`` first; then every registered component
is declared ``false``. Both use ``!default``, so the first declaration
of a flag wins and the template never reads an undefined flag.
"""

from __future__ import annotations

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from skinbuild.build.components import ComponentRegistry


def flag_name(component_id: str) -> str:
    return f"$include-{component_id}-component"


def synthesize(active: Iterable[str], registry: ComponentRegistry) -> str:
    lines = [f"{flag_name(cid)}: true !default;" for cid in active]
    lines.extend(f"{flag_name(cid)}: false !default;" for cid in registry)
    return "\n".join(lines)


def effective_flags(document: str) -> dict[str, bool]:
    """Evaluate a variable document the way Sass ``!default`` does."""
    flags: dict[str, bool] = {}
    for line in document.splitlines():
        name, _, rest = line.partition(":")
        value = rest.strip().split()[0] if rest.strip() else ""
        if name and name not in flags:
            flags[name] = value == "true"
    return flags


@contextmanager
def variable_document(text: str) -> Iterator[Path]:
    """Write the document to a single-use temp file, removed on exit."""
    fd, name = tempfile.mkstemp(prefix="skinbuild-", suffix=".scss")
    path = Path(name)
    try:
        with os.fdopen(fd, "w") as f:
            f.write(text)
        yield path
    finally:
        path.unlink(missing_ok=True)
