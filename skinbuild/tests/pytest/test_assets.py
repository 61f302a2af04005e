"""
Tests for per-site asset source lists.
"""

from __future__ import annotations

import pytest

from skinbuild.build.assets import (
    JAVASCRIPT_BASE,
    JAVASCRIPT_BOILERPLATE,
    MODERNIZR_SOURCE,
    STYLESHEET_INCLUDE_PATHS,
    VENDOR_FONTS,
    VENDOR_IMAGES,
    AssetClass,
    AssetListBuilder,
)
from skinbuild.build.components import default_catalog
from skinbuild.build.config import CompilationPaths, SiteConfig

pytestmark = pytest.mark.evergreen

DOC = "/tmp/skinbuild-vars.scss"


@pytest.fixture
def builder() -> AssetListBuilder:
    return AssetListBuilder(default_catalog())


# =============================================================================
# Stylesheets
# =============================================================================


class TestStylesheets:
    def test_document_first_skin_last(self, builder, site):
        sources = builder.stylesheets(site, DOC)
        assert sources == (DOC, f"{site.skin_path}/assets/stylesheets/styles.scss")

    def test_overrides_between(self, builder):
        site = SiteConfig(
            "acme", "default",
            compilation=CompilationPaths(stylesheets=("extra/a.scss", "extra/b.scss")),
        )
        sources = builder.stylesheets(site, DOC)
        assert sources[1:3] == ("extra/a.scss", "extra/b.scss")

    def test_duplicate_override_kept_once(self, builder):
        skin_styles = "skin/frontend/acme/default/assets/stylesheets/styles.scss"
        site = SiteConfig(
            "acme", "default",
            compilation=CompilationPaths(stylesheets=(skin_styles, "extra/a.scss", "extra/a.scss")),
        )
        assert builder.stylesheets(site, DOC) == (DOC, skin_styles, "extra/a.scss")

    def test_include_paths(self, builder):
        site = SiteConfig(
            "acme", "default",
            compilation=CompilationPaths(include_paths=("lib/scss", STYLESHEET_INCLUDE_PATHS[0])),
        )
        paths = builder.include_paths(site)
        assert paths == (
            *STYLESHEET_INCLUDE_PATHS,
            "lib/scss",
            "skin/frontend/acme/default/assets/stylesheets",
        )

    def test_build_requires_document(self, builder, site):
        with pytest.raises(ValueError):
            builder.build(site, AssetClass.STYLESHEETS)


# =============================================================================
# JavaScripts
# =============================================================================


class TestJavascripts:
    def test_layout(self, builder):
        site = SiteConfig(
            "acme", "default",
            components=("orbit",),
            compilation=CompilationPaths(javascripts=("vendor/slick.js",)),
        )
        scripts = builder.javascripts(site)

        assert scripts[:3] == JAVASCRIPT_BASE
        assert scripts[-2:] == (JAVASCRIPT_BOILERPLATE, f"{site.skin_path}/assets/javascripts/**/*.js")
        assert scripts.index("vendor/slick.js") == len(scripts) - 3
        plugins = scripts[3:-3]
        assert all("/js/foundation/foundation." in p for p in plugins)
        assert plugins[-1].endswith("foundation.orbit.js")

    def test_shared_plugin_listed_once(self, builder):
        site = SiteConfig("acme", "default", components=("dropdown", "split-buttons"))
        scripts = builder.javascripts(site)
        dropdown = [s for s in scripts if s.endswith("foundation.dropdown.js")]
        assert len(dropdown) == 1

    def test_no_duplicates(self, builder):
        site = SiteConfig(
            "acme", "default",
            components=("grid", "forms", "accordion"),
            compilation=CompilationPaths(javascripts=(JAVASCRIPT_BASE[0],)),
        )
        scripts = builder.javascripts(site)
        assert len(scripts) == len(set(scripts))

    def test_deterministic(self, builder):
        site = SiteConfig("acme", "default", components=("tabs", "reveal", "orbit"))
        assert builder.javascripts(site) == builder.javascripts(site)
        assert builder.javascripts(site) == AssetListBuilder(default_catalog()).javascripts(site)


# =============================================================================
# Modernizr / Images / Fonts
# =============================================================================


class TestOtherClasses:
    def test_modernizr(self, builder, site):
        assert builder.modernizr(site) == (MODERNIZR_SOURCE,)

    def test_images(self, builder):
        site = SiteConfig(
            "acme", "default",
            compilation=CompilationPaths(images=("shared/images/**/*",)),
        )
        assert builder.images(site) == (
            *VENDOR_IMAGES,
            "shared/images/**/*",
            "skin/frontend/acme/default/assets/images/**/*",
        )

    def test_fonts(self, builder, site):
        fonts = builder.fonts(site)
        assert fonts[: len(VENDOR_FONTS)] == VENDOR_FONTS
        assert fonts[-1].startswith(f"{site.skin_path}/assets/fonts/*.")

    def test_build_dispatches_by_name(self, builder, site):
        assert builder.build(site, "images") == builder.images(site)
        assert builder.build(site, AssetClass.FONTS) == builder.fonts(site)
        assert builder.build(site, "stylesheets", DOC) == builder.stylesheets(site, DOC)

    def test_unknown_asset_class(self, builder, site):
        with pytest.raises(ValueError):
            builder.build(site, "sprites")


class TestSiteIsolation:
    def test_each_site_gets_its_own_paths(self, builder):
        first = SiteConfig("acme", "default")
        second = SiteConfig("acme", "outlet")
        assert builder.javascripts(first)[-1].startswith("skin/frontend/acme/default/")
        assert builder.javascripts(second)[-1].startswith("skin/frontend/acme/outlet/")
        assert builder.images(first) != builder.images(second)
