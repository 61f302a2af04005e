"""
Ordered source lists per asset class.

Every list is a tuple of project-relative paths or globs, deduplicated
keeping first occurrences. Nothing here touches the filesystem, so the
same site and catalog always produce the same lists.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from skinbuild.build.components import ComponentCatalog, ComponentResolver
from skinbuild.build.config import BOILERPLATE_DIR, FONT_AWESOME_DIR, FOUNDATION_DIR, SiteConfig
from skinbuild.core.utils import uniq


class AssetClass(str, Enum):
    STYLESHEETS = "stylesheets"
    JAVASCRIPTS = "javascripts"
    MODERNIZR = "modernizr"
    IMAGES = "images"
    FONTS = "fonts"


FONT_EXTENSIONS = "{eot,otf,svg,ttf,woff,woff2}"

STYLESHEET_INCLUDE_PATHS = (
    f"{FOUNDATION_DIR}/scss",
    f"{FONT_AWESOME_DIR}/scss",
    f"{BOILERPLATE_DIR}/assets/stylesheets",
)

# jQuery, then the no-conflict shim, then Foundation core
JAVASCRIPT_BASE = (
    f"{FOUNDATION_DIR}/js/vendor/jquery.js",
    f"{BOILERPLATE_DIR}/assets/javascripts/no-conflict.js",
    f"{FOUNDATION_DIR}/js/foundation/foundation.js",
)
JAVASCRIPT_BOILERPLATE = f"{BOILERPLATE_DIR}/assets/javascripts/magento-boilerplate.js"
FOUNDATION_PLUGIN = FOUNDATION_DIR + "/js/foundation/foundation.{name}.js"

MODERNIZR_SOURCE = f"{FOUNDATION_DIR}/js/vendor/modernizr.js"

VENDOR_IMAGES = (f"{BOILERPLATE_DIR}/assets/images/**/*",)
VENDOR_FONTS = (f"{FONT_AWESOME_DIR}/fonts/*.{FONT_EXTENSIONS}",)


class AssetListBuilder:
    """Composes per-site source lists for each asset class."""

    def __init__(self, catalog: ComponentCatalog):
        self.resolver = ComponentResolver(catalog)

    def build(
        self,
        site: SiteConfig,
        asset_class: AssetClass,
        variable_document: Optional[str] = None,
    ) -> tuple[str, ...]:
        asset_class = AssetClass(asset_class)
        if asset_class is AssetClass.STYLESHEETS:
            if variable_document is None:
                raise ValueError("stylesheet lists need the variable document location")
            return self.stylesheets(site, variable_document)
        if asset_class is AssetClass.JAVASCRIPTS:
            return self.javascripts(site)
        if asset_class is AssetClass.MODERNIZR:
            return self.modernizr(site)
        if asset_class is AssetClass.IMAGES:
            return self.images(site)
        return self.fonts(site)

    def stylesheets(self, site: SiteConfig, variable_document: str) -> tuple[str, ...]:
        return uniq([
            variable_document,
            *site.compilation.stylesheets,
            f"{site.skin_path}/assets/stylesheets/styles.scss",
        ])

    def include_paths(self, site: SiteConfig) -> tuple[str, ...]:
        return uniq([
            *STYLESHEET_INCLUDE_PATHS,
            *site.compilation.include_paths,
            f"{site.skin_path}/assets/stylesheets",
        ])

    def javascripts(self, site: SiteConfig) -> tuple[str, ...]:
        plugins = [FOUNDATION_PLUGIN.format(name=name) for name in self.resolver.javascripts(site)]
        return uniq([
            *JAVASCRIPT_BASE,
            *plugins,
            *site.compilation.javascripts,
            JAVASCRIPT_BOILERPLATE,
            f"{site.skin_path}/assets/javascripts/**/*.js",
        ])

    def modernizr(self, site: SiteConfig) -> tuple[str, ...]:
        return (MODERNIZR_SOURCE,)

    def images(self, site: SiteConfig) -> tuple[str, ...]:
        # Overlapping globs are fine: copying the same file twice is harmless
        return (
            *VENDOR_IMAGES,
            *site.compilation.images,
            f"{site.skin_path}/assets/images/**/*",
        )

    def fonts(self, site: SiteConfig) -> tuple[str, ...]:
        return (
            *VENDOR_FONTS,
            f"{site.skin_path}/assets/fonts/*.{FONT_EXTENSIONS}",
        )
