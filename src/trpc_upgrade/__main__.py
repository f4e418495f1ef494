"""
Entry point for module execution (``python -m trpc_upgrade``).

This module delegates execution to the CLI handler in ``trpc_upgrade.cli.__main__``.
"""

import sys
from trpc_upgrade.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
