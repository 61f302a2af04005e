"""
Watch mode for skinbuild.

Every site gets four watch scopes. A change inside a scope re-runs the
phases the dispatch table names for it, for that site only; the
"others" scope only asks browsers to reload.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Sequence

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from skinbuild.build.config import SiteConfig
from skinbuild.core.globs import GlobSet
from skinbuild.core.utils import log

if TYPE_CHECKING:
    from skinbuild.build.orchestrator import BuildOrchestrator


# =============================================================================
# Scopes and Dispatch Table
# =============================================================================


class WatchScope(str, Enum):
    STYLESHEETS = "stylesheets"
    JAVASCRIPTS = "javascripts"
    IMAGES = "images"
    OTHERS = "others"


# Scope -> phases to re-run. An empty entry means reload only.
SCOPE_TASKS: dict[WatchScope, tuple[str, ...]] = {
    WatchScope.STYLESHEETS: ("stylesheets",),
    WatchScope.JAVASCRIPTS: ("javascripts", "modernizr"),
    WatchScope.IMAGES: ("images",),
    WatchScope.OTHERS: (),
}


def scope_patterns(site: SiteConfig) -> dict[WatchScope, tuple[str, ...]]:
    skin = site.skin_path
    return {
        WatchScope.STYLESHEETS: (f"{skin}/assets/stylesheets/**/*.scss", *site.watch.stylesheets),
        WatchScope.JAVASCRIPTS: (f"{skin}/assets/javascripts/**/*.js", *site.watch.javascripts),
        WatchScope.IMAGES: (f"{skin}/assets/images/**/*", *site.watch.images),
        WatchScope.OTHERS: (f"{site.template_path}/**/*", *site.watch.others),
    }


@dataclass(frozen=True)
class WatchBinding:
    """One scope of one site."""

    site: SiteConfig
    scope: WatchScope
    globs: GlobSet


# =============================================================================
# Reactor
# =============================================================================


class WatchReactor:
    """Routes changed paths to site-scoped rebuilds."""

    def __init__(self, orchestrator: "BuildOrchestrator", sites: Optional[Sequence[SiteConfig]] = None):
        self.orchestrator = orchestrator
        root = orchestrator.context.config.root
        if sites is None:
            sites = orchestrator.context.config.sites
        self.bindings = [
            WatchBinding(site, scope, GlobSet(patterns, root))
            for site in sites
            for scope, patterns in scope_patterns(site).items()
        ]
        self._count_lock = threading.Lock()
        self.dispatch_count = 0

    def classify(self, path: Path) -> list[WatchBinding]:
        return [binding for binding in self.bindings if binding.globs.matches(path)]

    def dispatch(self, binding: WatchBinding) -> None:
        """Run what the dispatch table says for one scope of one site."""
        with self._count_lock:
            self.dispatch_count += 1

        tasks = SCOPE_TASKS[binding.scope]
        for name in tasks:
            self.orchestrator.run(name, [binding.site])
        if not tasks:
            self.orchestrator.context.reload.notify_reload(binding.site.skin_path)

    def handle(self, path: Path) -> list[threading.Thread]:
        """Dispatch every binding the path matches, each on its own thread.

        Rebuilds are not coalesced: two quick changes run two rebuilds and
        whichever finishes last wins.
        """
        threads = []
        for binding in self.classify(path):
            log.info(f"  [{binding.site.name}] {path.name} changed -> {binding.scope.value}")
            thread = threading.Thread(target=self._dispatch_logged, args=(binding,), daemon=True)
            thread.start()
            threads.append(thread)
        return threads

    def _dispatch_logged(self, binding: WatchBinding) -> None:
        try:
            self.dispatch(binding)
        except Exception as e:
            # Watch mode must survive a failed rebuild
            log.error(f"[{binding.site.name}] Rebuild of {binding.scope.value} failed: {e}")

    def watch_dirs(self) -> list[Path]:
        """Existing base directories, without ones nested in another."""
        candidates: list[Path] = []
        for binding in self.bindings:
            for directory in binding.globs.base_dirs():
                if directory in candidates:
                    continue
                if not directory.is_dir():
                    log.warning(f"  Not watching {directory}: directory not found")
                    continue
                candidates.append(directory)

        return [
            d for d in candidates
            if not any(other != d and other in d.parents for other in candidates)
        ]


# =============================================================================
# File System Event Handler
# =============================================================================


class ScopeEventHandler(FileSystemEventHandler):
    """Forwards file events to the reactor."""

    def __init__(self, reactor: WatchReactor):
        super().__init__()
        self.reactor = reactor

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.reactor.handle(Path(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.reactor.handle(Path(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.reactor.handle(Path(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.reactor.handle(Path(event.dest_path))


def start_observer(reactor: WatchReactor) -> Observer:
    """Schedule the reactor on every watch directory and start observing."""
    observer = Observer()
    handler = ScopeEventHandler(reactor)

    log.header("Watching")
    for directory in reactor.watch_dirs():
        observer.schedule(handler, str(directory), recursive=True)
        log.info(f"  Watching: {directory}")

    observer.start()
    return observer
