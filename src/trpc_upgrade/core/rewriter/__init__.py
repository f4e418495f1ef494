"""
Rewriter Package.

The rules applied by the ``ScopeWalker`` to every function-like scope:

- ``RebindAccessorRule``: legacy client import -> accessor hook binding.
- ``HooksToOptionsRule``: proxy hooks -> bare hook fed by an options producer.
- ``SuspenseDestructuringRule``: ``[data, query]`` tuples -> single binding plus ``.data``.
- ``UtilsProxyRule``: ``useUtils()`` proxy calls -> caching client calls.
"""

from typing import List

from trpc_upgrade.core.rewriter.hooks_to_options import HooksToOptionsRule
from trpc_upgrade.core.rewriter.imports import RebindAccessorRule, ensure_imported
from trpc_upgrade.core.rewriter.interface import RewriteRule
from trpc_upgrade.core.rewriter.suspense import SuspenseDestructuringRule
from trpc_upgrade.core.rewriter.utils_proxy import UtilsProxyRule


def default_rules() -> List[RewriteRule]:
  """The rules in the order they are applied to each scope."""
  return [
    RebindAccessorRule(),
    HooksToOptionsRule(),
    SuspenseDestructuringRule(),
    UtilsProxyRule(),
  ]


__all__ = [
  "HooksToOptionsRule",
  "RebindAccessorRule",
  "RewriteRule",
  "SuspenseDestructuringRule",
  "UtilsProxyRule",
  "default_rules",
  "ensure_imported",
]
