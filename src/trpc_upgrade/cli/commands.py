"""
CLI Command Handlers Facade.

Re-exports the handlers from `trpc_upgrade.cli.handlers` so the dispatcher and
tests have a single import point.
"""

from trpc_upgrade.cli.handlers.convert import (
  handle_convert,
  _convert_single_file,
  _print_batch_summary,
)
from trpc_upgrade.cli.handlers.rules import handle_rules

__all__ = [
  "_convert_single_file",
  "_print_batch_summary",
  "handle_convert",
  "handle_rules",
]
