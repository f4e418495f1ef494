"""
Rules Command Handler.

Renders the migration tables (proxy hooks and utils methods) as Rich tables.
"""

from rich.table import Table

from trpc_upgrade.core.mappings import HOOK_RULES, UTIL_METHODS
from trpc_upgrade.utils.console import console


def handle_rules() -> int:
  """
  Prints the hook-to-options and utils-to-client tables.

  Returns:
      int: Exit code (always 0).
  """
  hooks = Table(title="Proxy Hooks")
  hooks.add_column("Proxy hook", style="cyan")
  hooks.add_column("Options producer", style="green")
  hooks.add_column("Hook imported from")
  for rule in HOOK_RULES:
    hooks.add_row(rule.hook, rule.producer, rule.library)

  utils = Table(title="Utils Methods")
  utils.add_column("utils.<path>.", style="cyan")
  utils.add_column("queryClient.", style="green")
  for proxy_method, client_method in UTIL_METHODS.items():
    utils.add_row(proxy_method, client_method)

  console.print(hooks)
  console.print(utils)
  return 0
