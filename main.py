#!/usr/bin/env python3
"""RosterMine launcher entry point"""

import sys

try:
    import aiohttp  # noqa
    import pydantic  # noqa
except ImportError as e:
    print(f"Critical import failed: {e}")
    print("Please run: pip install -e .")
    sys.exit(1)

from rostermine.cli import run

if __name__ == "__main__":
    run()
