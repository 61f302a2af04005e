"""
Build configuration for skinbuild.

Constants, dataclasses, loading and normalization of user configuration.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from skinbuild.build.errors import ConfigError

# =============================================================================
# Constants
# =============================================================================

# Vendor packages, relative to the project root
BOILERPLATE_DIR = "node_modules/magento-boilerplate"
FOUNDATION_DIR = f"{BOILERPLATE_DIR}/node_modules/foundation-sites"
FONT_AWESOME_DIR = f"{BOILERPLATE_DIR}/node_modules/font-awesome"

# Compiled output, relative to a site's skin path
OUTPUT_DIRS = ("css", "fonts", "images", "js")
STYLESHEET_OUTPUT = "css/styles.css"
JAVASCRIPT_OUTPUT = "js/scripts.js"
MODERNIZR_OUTPUT = "js/modernizr.js"
MANIFEST_FILE = "rev-manifest.json"

CONFIG_FILENAMES = ("skinbuild.json", "skinbuild.yaml", "skinbuild.yml")

DEFAULT_SERVER_PORT = 3000


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class CompilationPaths:
    """Extra sources a site adds to the vendor and theme defaults."""

    stylesheets: tuple[str, ...] = ()
    javascripts: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    include_paths: tuple[str, ...] = ()


@dataclass(frozen=True)
class WatchPaths:
    """Extra globs to watch on top of the site's own asset trees."""

    stylesheets: tuple[str, ...] = ()
    javascripts: tuple[str, ...] = ()
    images: tuple[str, ...] = ()
    others: tuple[str, ...] = ()


@dataclass(frozen=True)
class SiteConfig:
    """One themed destination of the build."""

    package: str
    theme: str
    components: tuple[str, ...] = ()
    compilation: CompilationPaths = field(default_factory=CompilationPaths)
    watch: WatchPaths = field(default_factory=WatchPaths)
    server: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), hash=False)

    @property
    def template_path(self) -> str:
        return f"app/design/frontend/{self.package}/{self.theme}"

    @property
    def skin_path(self) -> str:
        return f"skin/frontend/{self.package}/{self.theme}"

    @property
    def name(self) -> str:
        return f"{self.package}/{self.theme}"


@dataclass(frozen=True)
class BuildConfig:
    """Normalized configuration for a build run."""

    root: Path
    production: bool = False
    sites: tuple[SiteConfig, ...] = ()

    def skin_dir(self, site: SiteConfig) -> Path:
        return self.root / site.skin_path

    def template_dir(self, site: SiteConfig) -> Path:
        return self.root / site.template_path


# =============================================================================
# Normalization
# =============================================================================


def _section(raw: Mapping[str, Any], key: str, where: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"{where}.{key} must be a mapping, got {type(value).__name__}")
    return value


def _paths(raw: Mapping[str, Any], keys: tuple[str, ...], where: str) -> tuple[str, ...]:
    """Read a list of strings, accepting any of the given key spellings."""
    value = None
    for key in keys:
        if key in raw:
            value = raw[key]
            break
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"{where}.{keys[0]} must be a list of strings")
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(f"{where}.{keys[0]} must be a list of strings, found {item!r}")
    return tuple(value)


def _normalize_site(raw: Any, index: int) -> SiteConfig:
    where = f"sites[{index}]"
    if not isinstance(raw, Mapping):
        raise ConfigError(f"{where} must be a mapping")

    for key in ("package", "theme"):
        value = raw.get(key)
        if not isinstance(value, str) or not value:
            raise ConfigError(f"{where}.{key} is required and must be a non-empty string")

    compilation = _section(raw, "compilation", where)
    watch = _section(raw, "watch", where)
    server = _section(raw, "server", where)

    return SiteConfig(
        package=raw["package"],
        theme=raw["theme"],
        components=_paths(raw, ("components",), where),
        compilation=CompilationPaths(
            stylesheets=_paths(compilation, ("stylesheets",), f"{where}.compilation"),
            javascripts=_paths(compilation, ("javascripts",), f"{where}.compilation"),
            images=_paths(compilation, ("images",), f"{where}.compilation"),
            include_paths=_paths(
                compilation, ("includePaths", "include_paths"), f"{where}.compilation"
            ),
        ),
        watch=WatchPaths(
            stylesheets=_paths(watch, ("stylesheets",), f"{where}.watch"),
            javascripts=_paths(watch, ("javascripts",), f"{where}.watch"),
            images=_paths(watch, ("images",), f"{where}.watch"),
            others=_paths(watch, ("others",), f"{where}.watch"),
        ),
        server=MappingProxyType(dict(server)),
    )


def normalize_config(
    raw: Optional[Mapping[str, Any]],
    root: Optional[Path] = None,
    production: Optional[bool] = None,
) -> BuildConfig:
    """Merge user configuration over the defaults and validate its shape.

    ``production`` overrides the value found in ``raw`` when given.
    Raises ConfigError on the first malformed field.
    """
    raw = raw or {}
    if not isinstance(raw, Mapping):
        raise ConfigError("configuration must be a mapping")

    merged: dict[str, Any] = {"production": False, "sites": []}
    merged.update(raw)
    if production is not None:
        merged["production"] = production

    if not isinstance(merged["production"], bool):
        raise ConfigError("production must be a boolean")

    sites = merged["sites"] or []
    if not isinstance(sites, (list, tuple)):
        raise ConfigError("sites must be a list")

    return BuildConfig(
        root=(root or Path.cwd()).resolve(),
        production=merged["production"],
        sites=tuple(_normalize_site(site, i) for i, site in enumerate(sites)),
    )


# =============================================================================
# Loading
# =============================================================================


def find_config(directory: Path) -> Optional[Path]:
    """Return the first default config file present in a directory."""
    for name in CONFIG_FILENAMES:
        candidate = directory / name
        if candidate.exists():
            return candidate
    return None


def load_config(path: Path, production: Optional[bool] = None) -> BuildConfig:
    """Load JSON or YAML configuration; paths resolve against its directory."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"{path.name} is not valid: {e}") from e

    return normalize_config(data, root=path.resolve().parent, production=production)
