"""
Content fingerprinting for production builds.

Writes ``<name>-<hash><ext>`` copies next to the compiled outputs and a
manifest mapping each logical file name to its fingerprinted path.
"""

from __future__ import annotations

import hashlib
import json
import shutil
from pathlib import Path
from typing import Sequence

from skinbuild.build.config import JAVASCRIPT_OUTPUT, MANIFEST_FILE, STYLESHEET_OUTPUT
from skinbuild.core.utils import log

HASH_LENGTH = 10
REVISIONED_OUTPUTS = (STYLESHEET_OUTPUT, JAVASCRIPT_OUTPUT)


def fingerprint(path: Path) -> str:
    """First HASH_LENGTH hex chars of the MD5 of the file contents."""
    return hashlib.md5(path.read_bytes()).hexdigest()[:HASH_LENGTH]


def revisioned_name(relative: str, digest: str) -> str:
    """``css/styles.css`` -> ``css/styles-<digest>.css``"""
    path = Path(relative)
    return path.with_name(f"{path.stem}-{digest}{path.suffix}").as_posix()


def write_manifest(
    skin_dir: Path,
    outputs: Sequence[str] = REVISIONED_OUTPUTS,
) -> dict[str, str]:
    """Fingerprint the compiled outputs under ``skin_dir``.

    Outputs that do not exist (e.g. after a compile failure) are skipped
    with a warning. Returns the manifest that was written.
    """
    manifest: dict[str, str] = {}
    for relative in outputs:
        source = skin_dir / relative
        if not source.exists():
            log.warning(f"Not fingerprinting {relative}: file not found in {skin_dir}")
            continue
        target = revisioned_name(relative, fingerprint(source))
        shutil.copyfile(source, skin_dir / target)
        manifest[Path(relative).name] = target

    (skin_dir / MANIFEST_FILE).write_text(json.dumps(manifest, indent=2) + "\n")
    return manifest
