"""Shared state handed to every phase of a build run."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from skinbuild.build.assets import AssetListBuilder
from skinbuild.build.components import ComponentCatalog, ComponentResolver, default_catalog
from skinbuild.build.config import BuildConfig, SiteConfig
from skinbuild.core.reload import ReloadHub
from skinbuild.core.utils import log


@dataclass(frozen=True)
class Failure:
    """A non-fatal error reported by one phase for one site."""

    site: str
    phase: str
    message: str


@dataclass
class BuildContext:
    config: BuildConfig
    catalog: ComponentCatalog
    reload: ReloadHub = field(default_factory=ReloadHub)
    failures: list[Failure] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.resolver = ComponentResolver(self.catalog)
        self.assets = AssetListBuilder(self.catalog)
        self._lock = threading.Lock()

    @classmethod
    def create(
        cls,
        config: BuildConfig,
        catalog: Optional[ComponentCatalog] = None,
    ) -> "BuildContext":
        return cls(config=config, catalog=catalog or default_catalog())

    def report_failure(self, site: SiteConfig, phase: str, error: Exception) -> None:
        """Notification channel for errors that must not stop the run."""
        failure = Failure(site.name, phase, str(error))
        with self._lock:
            self.failures.append(failure)
        log.error(f"[{site.name}] {phase} failed: {error}")
