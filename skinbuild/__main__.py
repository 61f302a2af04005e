"""
Entry point for running skinbuild as a module: python -m skinbuild
"""

import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
