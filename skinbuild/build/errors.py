"""Error types raised by the build pipeline."""

from __future__ import annotations


class BuildError(Exception):
    """Base class for every error the pipeline raises on purpose."""


class ConfigError(BuildError):
    """The build configuration has the wrong shape."""


class UnknownComponentError(BuildError):
    """A component id is not present in the component registry."""

    def __init__(self, component_ids: list[str]):
        self.component_ids = list(component_ids)
        names = ", ".join(repr(c) for c in self.component_ids)
        super().__init__(f"Unknown component(s): {names}")


class CompileError(BuildError):
    """Stylesheet or script compilation failed."""


class UnknownTaskError(BuildError):
    """No task is registered under the requested name."""
