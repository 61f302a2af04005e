"""
Component catalog and per-site component resolution.

The catalog is immutable configuration data: build it once and pass it
to every resolver and list builder call.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterator, Mapping, Sequence

from skinbuild.build.config import SiteConfig
from skinbuild.build.errors import UnknownComponentError


@dataclass(frozen=True)
class ComponentDescriptor:
    """A UI component and the auxiliary Foundation scripts it needs."""

    id: str
    javascripts: tuple[str, ...] = ()


class ComponentRegistry(Mapping[str, ComponentDescriptor]):
    """Read-only, order-preserving mapping of component id to descriptor."""

    def __init__(self, descriptors: Sequence[ComponentDescriptor]):
        self._descriptors = MappingProxyType({d.id: d for d in descriptors})

    @classmethod
    def from_mapping(cls, table: Mapping[str, Sequence[str]]) -> "ComponentRegistry":
        return cls([ComponentDescriptor(cid, tuple(scripts)) for cid, scripts in table.items()])

    def lookup(self, component_id: str) -> ComponentDescriptor:
        try:
            return self._descriptors[component_id]
        except KeyError:
            raise UnknownComponentError([component_id]) from None

    def __getitem__(self, component_id: str) -> ComponentDescriptor:
        return self._descriptors[component_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)


@dataclass(frozen=True)
class ComponentCatalog:
    """The registry together with the components every site gets."""

    registry: ComponentRegistry
    required: tuple[str, ...]

    def __post_init__(self) -> None:
        unknown = [cid for cid in self.required if cid not in self.registry]
        if unknown:
            raise UnknownComponentError(unknown)


# Foundation 5 components known to the boilerplate, mapped to the
# foundation.<name>.js plugins they need.
DEFAULT_COMPONENTS: dict[str, list[str]] = {
    "grid": ["interchange"],
    "accordion": ["accordion"],
    "alert-boxes": ["alert"],
    "block-grid": [],
    "breadcrumbs": [],
    "button-groups": [],
    "buttons": [],
    "clearing": ["clearing"],
    "dropdown": ["dropdown"],
    "dropdown-buttons": [],
    "equalizer": ["equalizer"],
    "flex-video": [],
    "forms": ["abide"],
    "icon-bar": [],
    "inline-lists": [],
    "joyride": ["joyride"],
    "keystrokes": [],
    "labels": [],
    "magellan": ["magellan"],
    "orbit": ["orbit"],
    "pagination": [],
    "panels": [],
    "pricing-tables": [],
    "progress-bars": [],
    "range-slider": ["slider"],
    "reveal": ["reveal"],
    "side-nav": [],
    "split-buttons": ["dropdown"],
    "sub-nav": [],
    "switches": [],
    "tables": [],
    "tabs": ["tab"],
    "thumbs": [],
    "tooltips": ["tooltip"],
    "top-bar": ["topbar"],
    "type": [],
    "offcanvas": ["offcanvas"],
    "visibility": [],
}

# Needed by the boilerplate templates themselves
DEFAULT_REQUIRED_COMPONENTS: tuple[str, ...] = (
    "grid",
    "alert-boxes",
    "breadcrumbs",
    "equalizer",
    "forms",
    "inline-lists",
    "pagination",
    "tables",
    "top-bar",
    "type",
    "visibility",
)


def default_catalog() -> ComponentCatalog:
    return ComponentCatalog(
        registry=ComponentRegistry.from_mapping(DEFAULT_COMPONENTS),
        required=DEFAULT_REQUIRED_COMPONENTS,
    )


class ComponentResolver:
    """Computes the active component set of a site."""

    def __init__(self, catalog: ComponentCatalog):
        self.catalog = catalog

    def resolve(self, site: SiteConfig) -> tuple[str, ...]:
        """Required components followed by the site's own selection.

        Duplicates are kept: the variable document tolerates repeated
        declarations. Raises UnknownComponentError naming every unknown
        id, before anything is resolved.
        """
        active = self.catalog.required + tuple(site.components)
        unknown = [cid for cid in active if cid not in self.catalog.registry]
        if unknown:
            raise UnknownComponentError(unknown)
        return active

    def is_active(self, site: SiteConfig, component_id: str) -> bool:
        if component_id not in self.catalog.registry:
            raise UnknownComponentError([component_id])
        return component_id in self.resolve(site)

    def javascripts(self, site: SiteConfig) -> list[str]:
        """Auxiliary script ids of the active set, in activation order."""
        registry = self.catalog.registry
        return [
            script
            for cid in self.resolve(site)
            for script in registry.lookup(cid).javascripts
        ]
