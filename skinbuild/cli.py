"""
Main CLI for the skinbuild tool.

Every built-in task is a subcommand; running without one performs the
default build.
"""

from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Optional, Sequence

from skinbuild import __version__
from skinbuild.build.config import BuildConfig, find_config, load_config, normalize_config
from skinbuild.build.context import BuildContext
from skinbuild.build.errors import BuildError
from skinbuild.build.extension import load_extension
from skinbuild.build.inspect import inspect_build
from skinbuild.build.orchestrator import BuildOrchestrator
from skinbuild.core.utils import log


# =============================================================================
# Argument Parsing
# =============================================================================

TASK_COMMANDS = {
    "clean": "Remove compiled output of every site",
    "stylesheets": "Compile SCSS into css/styles.css",
    "javascripts": "Bundle scripts into js/scripts.js",
    "modernizr": "Copy (and in production minify) Modernizr",
    "images": "Copy vendor, override and skin images",
    "fonts": "Copy vendor and skin fonts",
    "manifest": "Fingerprint outputs (production only)",
    "custom": "Run the extension hook",
    "default": "clean, compile everything, manifest, custom",
    "serve": "Start live reload servers (static baseDir or server.proxy)",
    "watch": "Serve and rebuild on change",
}


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skinbuild",
        description="Multi-site theme asset builder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  skinbuild                          # Full build (same as 'default')
  skinbuild --production             # Minified, fingerprinted build
  skinbuild stylesheets              # Only recompile stylesheets
  skinbuild watch                    # Serve, watch and live reload
  skinbuild --config site.yaml inspect
        """,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Config file (default: skinbuild.json/.yaml/.yml in the current directory)",
    )
    parser.add_argument(
        "--production",
        action="store_true",
        default=None,
        help="Force a production build regardless of the config file",
    )
    parser.add_argument(
        "--extension",
        help="Extension hook for the custom phase, as module:attribute",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug output")

    subparsers = parser.add_subparsers(dest="command", title="commands", metavar="<command>")
    for name, help_text in TASK_COMMANDS.items():
        subparsers.add_parser(name, help=help_text)
    subparsers.add_parser("inspect", help="Show active components and asset lists per site")

    return parser


def resolve_config(args: argparse.Namespace) -> BuildConfig:
    path = args.config or find_config(Path.cwd())
    if path is None:
        log.warning("No config file found, building with no sites")
        return normalize_config({}, production=args.production)
    log.debug(f"Config: {path}")
    return load_config(path, production=args.production)


def wait_for_interrupt(orchestrator: BuildOrchestrator) -> None:
    log.info("")
    log.info("Watching for changes... (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        log.header("Shutting down")
    finally:
        orchestrator.shutdown()


# =============================================================================
# Main
# =============================================================================


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        log.set_color(False)
    log.verbose = args.verbose
    command = args.command or "default"

    try:
        config = resolve_config(args)
        context = BuildContext.create(config)

        if command == "inspect":
            return inspect_build(context)

        extension = load_extension(args.extension) if args.extension else None
        orchestrator = BuildOrchestrator(context, extension)

        log.header(f"skinbuild {command}" + (" (production)" if config.production else ""))
        orchestrator.run(command)

        if command in ("serve", "watch"):
            wait_for_interrupt(orchestrator)

        orchestrator.report()
        return 1 if context.failures else 0

    except KeyboardInterrupt:
        log.warning("Build interrupted")
        return 130
    except BuildError as e:
        log.error(str(e))
        return 1
    except OSError as e:
        log.error(f"Filesystem error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
