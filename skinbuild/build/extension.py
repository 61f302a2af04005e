"""
Extension point for user-defined tasks.

An extension receives the orchestrator's TaskRegistry during the
``custom`` phase and may register further tasks on it.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Callable

from skinbuild.build.errors import ConfigError

if TYPE_CHECKING:
    from skinbuild.build.orchestrator import TaskRegistry


class Extension:
    """Base extension: does nothing."""

    def extend(self, tasks: "TaskRegistry") -> None:
        return None


class CallableExtension(Extension):
    """Adapts a plain ``callback(tasks)`` function."""

    def __init__(self, callback: Callable[["TaskRegistry"], object]):
        self.callback = callback

    def extend(self, tasks: "TaskRegistry") -> None:
        self.callback(tasks)


def as_extension(obj: object) -> Extension:
    if isinstance(obj, Extension):
        return obj
    if hasattr(obj, "extend"):
        return CallableExtension(obj.extend)
    if callable(obj):
        return CallableExtension(obj)
    raise ConfigError(f"{obj!r} is neither an extension nor callable")


def load_extension(target: str) -> Extension:
    """Import ``package.module:attribute`` and wrap it as an Extension."""
    module_name, _, attribute = target.partition(":")
    if not module_name or not attribute:
        raise ConfigError(f"Extension must look like 'module:attribute', got {target!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import extension module {module_name!r}: {e}") from e

    try:
        obj = getattr(module, attribute)
    except AttributeError:
        raise ConfigError(f"Module {module_name!r} has no attribute {attribute!r}") from None

    return as_extension(obj)
