"""
Build orchestrator for skinbuild.

Tasks are named actions over a list of sites. The default pipeline is a
small DAG of phases run in waves: every phase whose prerequisites have
finished starts together, and the next wave waits for all of them.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from skinbuild.build import phases
from skinbuild.build.config import SiteConfig
from skinbuild.build.context import BuildContext
from skinbuild.build.errors import BuildError, UnknownTaskError
from skinbuild.build.extension import Extension
from skinbuild.core.timing import TimingContext, format_duration, timing_summary
from skinbuild.core.utils import log

TaskAction = Callable[[Sequence[SiteConfig]], Any]

COMPILE_GROUP = ("stylesheets", "javascripts", "modernizr", "images", "fonts")

# phase -> phases that must finish first
PIPELINE: dict[str, tuple[str, ...]] = {
    "clean": (),
    **{name: ("clean",) for name in COMPILE_GROUP},
    "manifest": COMPILE_GROUP,
    "custom": ("manifest",),
}


# =============================================================================
# Task Registry
# =============================================================================


@dataclass(frozen=True)
class Task:
    name: str
    action: TaskAction
    description: str = ""
    after: tuple[str, ...] = ()


class TaskRegistry:
    """Named tasks known to one orchestrator. Handed to extensions."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def register(
        self,
        name: str,
        action: TaskAction,
        description: str = "",
        after: Iterable[str] = (),
    ) -> Task:
        """Add a task. ``after`` orders it behind tasks registered alongside it."""
        if name in self._tasks:
            raise BuildError(f"Task already registered: {name}")
        task = Task(name, action, description, tuple(after))
        self._tasks[name] = task
        return task

    def get(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(
                f"Unknown task: {name}. Known tasks: {', '.join(self._tasks)}"
            ) from None

    def names(self) -> list[str]:
        return list(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks


def waves(graph: Mapping[str, Sequence[str]]) -> list[list[str]]:
    """Group a dependency graph into waves that can each run concurrently.

    Order inside a wave follows the graph's own order. Raises BuildError
    on unknown prerequisites or cycles.
    """
    for name, requires in graph.items():
        unknown = [r for r in requires if r not in graph]
        if unknown:
            raise BuildError(f"{name} depends on unknown phase(s): {', '.join(unknown)}")

    done: set[str] = set()
    result: list[list[str]] = []
    while len(done) < len(graph):
        ready = [
            name for name, requires in graph.items()
            if name not in done and all(r in done for r in requires)
        ]
        if not ready:
            pending = [name for name in graph if name not in done]
            raise BuildError(f"Dependency cycle between: {', '.join(pending)}")
        result.append(ready)
        done.update(ready)
    return result


# =============================================================================
# Build Orchestrator
# =============================================================================


class BuildOrchestrator:
    """Runs named tasks and the phase pipeline for all configured sites."""

    def __init__(self, context: BuildContext, extension: Optional[Extension] = None):
        self.context = context
        self.extension = extension or Extension()
        self.tasks = TaskRegistry()
        self.timings: dict[str, float] = {}
        self.servers: list = []
        self.observer = None
        self.extension_tasks: Optional[list[str]] = None
        self._register_builtin()

    def _register_builtin(self) -> None:
        ctx = self.context
        register = self.tasks.register
        register("clean", lambda sites: phases.clean(ctx, sites), "Remove compiled output")
        register("stylesheets", lambda sites: phases.build_stylesheets(ctx, sites), "Compile SCSS")
        register("javascripts", lambda sites: phases.build_javascripts(ctx, sites), "Bundle scripts")
        register("modernizr", lambda sites: phases.build_modernizr(ctx, sites), "Copy Modernizr")
        register("images", lambda sites: phases.copy_images(ctx, sites), "Copy images")
        register("fonts", lambda sites: phases.copy_fonts(ctx, sites), "Copy fonts")
        register("manifest", lambda sites: phases.build_manifest(ctx, sites), "Fingerprint outputs")
        register("custom", self._run_extension, "Run the extension hook")
        register("default", lambda sites: self.run_graph(PIPELINE, sites), "Full build")
        register("serve", self._serve, "Start live reload servers")
        register("watch", self._watch, "Serve and rebuild on change")

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    def run(self, name: str, sites: Optional[Sequence[SiteConfig]] = None) -> None:
        """Run one task for the given sites (default: every configured site)."""
        task = self.tasks.get(name)
        if sites is None:
            sites = self.context.config.sites

        log.debug(f"Starting '{name}'")
        start = time.monotonic()
        with TimingContext(self.timings, name):
            task.action(sites)
        log.debug(f"Finished '{name}' after {format_duration(time.monotonic() - start)}")

    def run_graph(
        self,
        graph: Mapping[str, Sequence[str]],
        sites: Optional[Sequence[SiteConfig]] = None,
    ) -> None:
        for wave in waves(graph):
            self.run_wave(wave, sites)

    def run_wave(self, names: Sequence[str], sites: Optional[Sequence[SiteConfig]] = None) -> None:
        """Run tasks concurrently and wait until all of them have finished.

        The first exception raised by any task is re-raised after the
        whole wave has completed.
        """
        if len(names) == 1:
            self.run(names[0], sites)
            return

        with ThreadPoolExecutor(max_workers=len(names), thread_name_prefix="phase") as pool:
            futures = [pool.submit(self.run, name, sites) for name in names]
        errors = [f.exception() for f in futures if f.exception() is not None]
        if errors:
            raise errors[0]

    def _run_extension(self, sites: Sequence[SiteConfig]) -> None:
        # The hook registers once per orchestrator; later runs reuse its tasks
        if self.extension_tasks is None:
            before = set(self.tasks.names())
            self.extension.extend(self.tasks)
            self.extension_tasks = [name for name in self.tasks.names() if name not in before]

        added = self.extension_tasks
        if not added:
            return

        log.info(f"Running extension tasks: {', '.join(added)}")
        graph = {
            name: tuple(dep for dep in self.tasks.get(name).after if dep in added)
            for name in added
        }
        self.run_graph(graph, sites)

    # -------------------------------------------------------------------------
    # Serving
    # -------------------------------------------------------------------------

    def _serve(self, sites: Sequence[SiteConfig]) -> None:
        from skinbuild.commands.serve import start_servers

        self.servers.extend(start_servers(self.context, sites))

    def _watch(self, sites: Sequence[SiteConfig]) -> None:
        from skinbuild.commands.watch import WatchReactor, start_observer

        self.run("serve", sites)
        self.observer = start_observer(WatchReactor(self, sites))

    def shutdown(self) -> None:
        """Stop the observer and servers started by serve/watch."""
        if self.observer is not None:
            self.observer.stop()
            self.observer.join(timeout=5)
            self.observer = None
        for server in self.servers:
            server.stop()
        self.servers.clear()

    def report(self) -> None:
        phase_timings = {k: v for k, v in self.timings.items() if k in PIPELINE}
        if phase_timings:
            log.dim(timing_summary(phase_timings))
        if self.context.failures:
            log.header(f"{len(self.context.failures)} failure(s)")
            for failure in self.context.failures:
                log.error(f"[{failure.site}] {failure.phase}: {failure.message}")
