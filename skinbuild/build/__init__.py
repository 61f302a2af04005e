"""
skinbuild.build - Component resolution, asset lists and phase orchestration.
"""

from skinbuild.build.config import (
    BOILERPLATE_DIR,
    FONT_AWESOME_DIR,
    FOUNDATION_DIR,
    BuildConfig,
    CompilationPaths,
    SiteConfig,
    WatchPaths,
    load_config,
    normalize_config,
)
from skinbuild.build.errors import (
    BuildError,
    CompileError,
    ConfigError,
    UnknownComponentError,
    UnknownTaskError,
)
from skinbuild.build.components import (
    ComponentCatalog,
    ComponentDescriptor,
    ComponentRegistry,
    ComponentResolver,
    default_catalog,
)
from skinbuild.build.assets import AssetClass, AssetListBuilder
from skinbuild.build.variables import synthesize
from skinbuild.build.context import BuildContext
from skinbuild.build.extension import Extension
from skinbuild.build.orchestrator import PIPELINE, BuildOrchestrator, TaskRegistry

__all__ = [
    # Constants
    "BOILERPLATE_DIR",
    "FONT_AWESOME_DIR",
    "FOUNDATION_DIR",
    "PIPELINE",
    # Configuration
    "BuildConfig",
    "CompilationPaths",
    "SiteConfig",
    "WatchPaths",
    "load_config",
    "normalize_config",
    # Errors
    "BuildError",
    "CompileError",
    "ConfigError",
    "UnknownComponentError",
    "UnknownTaskError",
    # Components
    "ComponentCatalog",
    "ComponentDescriptor",
    "ComponentRegistry",
    "ComponentResolver",
    "default_catalog",
    # Assets
    "AssetClass",
    "AssetListBuilder",
    "synthesize",
    # Orchestration
    "BuildContext",
    "BuildOrchestrator",
    "Extension",
    "TaskRegistry",
]
