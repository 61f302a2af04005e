"""
skinbuild - multi-site theme asset builder.

Compiles stylesheets, bundles scripts and copies images and fonts for
every configured site, with optional fingerprinting, file watching and
live reload.

Usage:
    python -m skinbuild [options] <command>
"""

__version__ = "0.1.0"
