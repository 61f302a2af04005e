"""
Build inspection for skinbuild.

Shows each site's active components, asset lists and output state
without writing anything.
"""

from __future__ import annotations

import json

from skinbuild.build.config import MANIFEST_FILE, OUTPUT_DIRS, SiteConfig
from skinbuild.build.context import BuildContext
from skinbuild.build.errors import UnknownComponentError
from skinbuild.core.utils import log

VARIABLE_DOCUMENT_PLACEHOLDER = "<variables>"


def inspect_site(context: BuildContext, site: SiteConfig) -> bool:
    """Print one site's build inputs. Returns False if the site cannot build."""
    log.header(site.name)
    log.table_row("Skin path", site.skin_path)
    log.table_row("Template path", site.template_path)

    try:
        active = context.resolver.resolve(site)
    except UnknownComponentError as e:
        log.error(str(e))
        return False

    log.table_row("Active components", ", ".join(active))

    assets = context.assets
    sections = {
        "Stylesheets": assets.stylesheets(site, VARIABLE_DOCUMENT_PLACEHOLDER),
        "Include paths": assets.include_paths(site),
        "JavaScripts": assets.javascripts(site),
        "Modernizr": assets.modernizr(site),
        "Images": assets.images(site),
        "Fonts": assets.fonts(site),
    }
    for title, entries in sections.items():
        log.info("")
        log.info(f"{title}:")
        for entry in entries:
            log.dim(f"  {entry}")

    skin_dir = context.config.skin_dir(site)
    log.info("")
    log.info("Outputs:")
    for name in OUTPUT_DIRS:
        status = "present" if (skin_dir / name).exists() else "missing"
        log.table_row(f"  {name}/", status)

    manifest = skin_dir / MANIFEST_FILE
    if manifest.exists():
        try:
            entries = json.loads(manifest.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            log.warning(f"{MANIFEST_FILE} is unreadable, rebuild with --production: {e}")
        else:
            for logical, revisioned in entries.items():
                log.table_row(f"  {logical}", revisioned)
    return True


def inspect_build(context: BuildContext) -> int:
    if not context.config.sites:
        log.warning("No sites configured")
        return 0

    log.info(f"Root: {context.config.root}")
    log.info(f"Production: {context.config.production}")
    ok = [inspect_site(context, site) for site in context.config.sites]
    return 0 if all(ok) else 1
