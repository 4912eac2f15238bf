#!/usr/bin/env python3
"""Score the note classifier against the labelled accuracy cases.

Thin wrapper around ``quill.accuracy.cli`` for running from a checkout
without installing the package. See --help for options.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from quill.accuracy.cli import main

if __name__ == "__main__":
    main()
