"""
Shared pytest fixtures for skinbuild tests.

Provides a throwaway project tree with the vendor files the default
asset lists point at, and factories for sites and build contexts.

Test Tier Markers:
  @pytest.mark.evergreen - Tests that always run, never skip
  @pytest.mark.dev       - Development/WIP tests, toggle-able
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from skinbuild.build.components import DEFAULT_COMPONENTS
from skinbuild.build.config import (
    BOILERPLATE_DIR,
    FONT_AWESOME_DIR,
    FOUNDATION_DIR,
    BuildConfig,
    SiteConfig,
    normalize_config,
)
from skinbuild.build.context import BuildContext


# =============================================================================
# Test Data Constants
# =============================================================================

SITE_STYLESHEET = """
@if $include-accordion-component {
  .accordion { color: red; }
}
@if $include-orbit-component {
  .orbit { color: green; }
}
.site { color: blue; }
"""

SITE_SCRIPT = "// site script\nvar site = 'theme';\n"


def _write(path: Path, text: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def write_vendor_tree(root: Path) -> None:
    """Create the vendor files referenced by the default asset lists."""
    _write(root / FOUNDATION_DIR / "js/vendor/jquery.js", "/* jquery */\nvar jQuery = {};\n")
    _write(root / FOUNDATION_DIR / "js/vendor/modernizr.js", "/* modernizr */\nvar Modernizr = {};\n")
    _write(root / FOUNDATION_DIR / "js/foundation/foundation.js", "/* foundation */\nvar Foundation = {};\n")
    plugins = {script for scripts in DEFAULT_COMPONENTS.values() for script in scripts}
    for plugin in plugins:
        _write(
            root / FOUNDATION_DIR / f"js/foundation/foundation.{plugin}.js",
            f"/* plugin {plugin} */\nFoundation.{plugin} = true;\n",
        )
    (root / FOUNDATION_DIR / "scss").mkdir(parents=True, exist_ok=True)
    (root / FONT_AWESOME_DIR / "scss").mkdir(parents=True, exist_ok=True)
    (root / BOILERPLATE_DIR / "assets/stylesheets").mkdir(parents=True, exist_ok=True)

    _write(root / BOILERPLATE_DIR / "assets/javascripts/no-conflict.js", "/* no-conflict */\n")
    _write(root / BOILERPLATE_DIR / "assets/javascripts/magento-boilerplate.js", "/* boilerplate */\n")
    _write(root / BOILERPLATE_DIR / "assets/images/logo.png", "png")
    _write(root / BOILERPLATE_DIR / "assets/images/icons/cart.svg", "<svg/>")
    _write(root / FONT_AWESOME_DIR / "fonts/fontawesome-webfont.woff", "woff")
    _write(root / FONT_AWESOME_DIR / "fonts/README.md", "not a font")


def write_site_tree(root: Path, site: SiteConfig, stylesheet: str = SITE_STYLESHEET) -> None:
    skin = root / site.skin_path
    _write(skin / "assets/stylesheets/styles.scss", stylesheet)
    _write(skin / "assets/javascripts/theme.js", SITE_SCRIPT)
    _write(skin / "assets/images/banner.jpg", "jpg")
    _write(skin / "assets/fonts/brand.ttf", "ttf")
    _write(root / site.template_path / "template/page.phtml", "<div></div>")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A project directory with the vendor tree in place."""
    root = tmp_path / "project"
    root.mkdir()
    write_vendor_tree(root)
    return root.resolve()


@pytest.fixture
def make_config(project_root: Path) -> Callable[..., BuildConfig]:
    """Build a normalized config rooted at project_root, writing site trees."""

    def factory(sites: list[dict[str, Any]] | None = None, production: bool = False) -> BuildConfig:
        if sites is None:
            sites = [{"package": "acme", "theme": "default"}]
        config = normalize_config(
            {"production": production, "sites": sites},
            root=project_root,
        )
        for site in config.sites:
            write_site_tree(project_root, site)
        return config

    return factory


@pytest.fixture
def make_context(make_config: Callable[..., BuildConfig]) -> Callable[..., BuildContext]:
    def factory(sites: list[dict[str, Any]] | None = None, production: bool = False) -> BuildContext:
        return BuildContext.create(make_config(sites, production))

    return factory


@pytest.fixture
def site() -> SiteConfig:
    return SiteConfig(package="acme", theme="default", components=("accordion",))


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test tiers."""
    config.addinivalue_line(
        "markers",
        "evergreen: tests that always run, never skip (production tests)"
    )
    config.addinivalue_line(
        "markers",
        "dev: development/WIP tests, toggle-able for active development"
    )
