"""
Build phases for skinbuild.

Each phase takes the build context and the sites to process. Compile
and component errors are reported per site and the phase moves on to
the next site; filesystem errors propagate.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable, Sequence

from skinbuild.build.compilers import (
    bundle_javascripts,
    compile_stylesheets,
    minify_javascript,
    read_source,
)
from skinbuild.build.config import (
    JAVASCRIPT_OUTPUT,
    MANIFEST_FILE,
    MODERNIZR_OUTPUT,
    OUTPUT_DIRS,
    STYLESHEET_OUTPUT,
    SiteConfig,
)
from skinbuild.build.context import BuildContext
from skinbuild.build.errors import CompileError, UnknownComponentError
from skinbuild.build.manifest import write_manifest
from skinbuild.build.variables import synthesize, variable_document
from skinbuild.core.globs import ExpandedSources, expand
from skinbuild.core.utils import log, plural


def _each_site(
    context: BuildContext,
    phase: str,
    sites: Sequence[SiteConfig],
    build: Callable[[BuildContext, SiteConfig], None],
) -> None:
    for site in sites:
        try:
            build(context, site)
        except (CompileError, UnknownComponentError) as e:
            context.report_failure(site, phase, e)


def _warn_missing(site: SiteConfig, sources: ExpandedSources) -> None:
    for missing in sources.missing:
        log.warning(f"[{site.name}] Source not found, skipping: {missing}")


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


# =============================================================================
# Clean
# =============================================================================


def clean_site(skin_dir: Path) -> list[Path]:
    """Remove compiled output under a skin directory. Missing targets are fine."""
    removed: list[Path] = []
    for name in OUTPUT_DIRS:
        target = skin_dir / name
        if target.exists():
            shutil.rmtree(target)
            removed.append(target)

    manifest = skin_dir / MANIFEST_FILE
    if manifest.exists():
        manifest.unlink()
        removed.append(manifest)
    return removed


def clean(context: BuildContext, sites: Sequence[SiteConfig]) -> None:
    for site in sites:
        removed = clean_site(context.config.skin_dir(site))
        log.info(f"[{site.name}] Cleaned {plural(len(removed), 'target')}")


# =============================================================================
# Stylesheets / JavaScripts
# =============================================================================


def _build_stylesheets(context: BuildContext, site: SiteConfig) -> None:
    # Unknown components must abort before anything is written
    active = context.resolver.resolve(site)
    root = context.config.root

    with variable_document(synthesize(active, context.catalog.registry)) as document:
        sources = expand(context.assets.stylesheets(site, str(document)), root)
        _warn_missing(site, sources)
        include_paths = [root / p for p in context.assets.include_paths(site)]
        css = compile_stylesheets(sources.paths, include_paths, context.config.production)

    _write(context.config.skin_dir(site) / STYLESHEET_OUTPUT, css)
    context.reload.notify_css_reload(site.skin_path, Path(STYLESHEET_OUTPUT).name)
    log.success(f"[{site.name}] Compiled stylesheets")


def build_stylesheets(context: BuildContext, sites: Sequence[SiteConfig]) -> None:
    _each_site(context, "stylesheets", sites, _build_stylesheets)


def _build_javascripts(context: BuildContext, site: SiteConfig) -> None:
    sources = expand(context.assets.javascripts(site), context.config.root)
    _warn_missing(site, sources)
    bundle = bundle_javascripts(sources.paths, context.config.production)

    _write(context.config.skin_dir(site) / JAVASCRIPT_OUTPUT, bundle)
    context.reload.notify_reload(site.skin_path)
    log.success(f"[{site.name}] Compiled JavaScripts ({plural(len(sources.files), 'file')})")


def build_javascripts(context: BuildContext, sites: Sequence[SiteConfig]) -> None:
    _each_site(context, "javascripts", sites, _build_javascripts)


def _build_modernizr(context: BuildContext, site: SiteConfig) -> None:
    # Modernizr sits in the page head, so it ships apart from the main bundle
    sources = expand(context.assets.modernizr(site), context.config.root)
    _warn_missing(site, sources)
    if not sources.files:
        return

    script = read_source(sources.files[0].path)
    if context.config.production:
        script = minify_javascript(script)

    _write(context.config.skin_dir(site) / MODERNIZR_OUTPUT, script)
    context.reload.notify_reload(site.skin_path)
    log.success(f"[{site.name}] Compiled Modernizr")


def build_modernizr(context: BuildContext, sites: Sequence[SiteConfig]) -> None:
    _each_site(context, "modernizr", sites, _build_modernizr)


# =============================================================================
# Images / Fonts
# =============================================================================


def copy_sources(sources: ExpandedSources, destination: Path) -> int:
    """Copy matched files, keeping their path relative to the glob base."""
    for source in sources.files:
        target = destination / source.relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source.path, target)
    return len(sources.files)


def _copy_images(context: BuildContext, site: SiteConfig) -> None:
    sources = expand(context.assets.images(site), context.config.root)
    _warn_missing(site, sources)
    count = copy_sources(sources, context.config.skin_dir(site) / "images")
    context.reload.notify_reload(site.skin_path)
    log.success(f"[{site.name}] Copied {plural(count, 'image')}")


def copy_images(context: BuildContext, sites: Sequence[SiteConfig]) -> None:
    _each_site(context, "images", sites, _copy_images)


def _copy_fonts(context: BuildContext, site: SiteConfig) -> None:
    sources = expand(context.assets.fonts(site), context.config.root)
    count = copy_sources(sources, context.config.skin_dir(site) / "fonts")
    context.reload.notify_reload(site.skin_path)
    log.success(f"[{site.name}] Copied {plural(count, 'font')}")


def copy_fonts(context: BuildContext, sites: Sequence[SiteConfig]) -> None:
    _each_site(context, "fonts", sites, _copy_fonts)


# =============================================================================
# Manifest
# =============================================================================


def build_manifest(context: BuildContext, sites: Sequence[SiteConfig]) -> None:
    # Fingerprinted names would stop live reload from matching the page's
    # existing asset URLs, so development builds never get a manifest.
    if not context.config.production:
        log.info("Skipping manifest: not a production build")
        return

    for site in sites:
        manifest = write_manifest(context.config.skin_dir(site))
        log.success(f"[{site.name}] Wrote {MANIFEST_FILE} ({len(manifest)} entries)")
