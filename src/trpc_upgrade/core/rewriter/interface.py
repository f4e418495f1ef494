"""
Interface definition for Rewrite Rules.

This module defines the abstract base class that every rule applied by the
``ScopeWalker`` implements.
"""

from abc import ABC, abstractmethod

from trpc_upgrade.core.context import PassContext


class RewriteRule(ABC):
  """
  Abstract contract for a rule applied to one function-like scope.

  Rules re-resolve the scope through ``context.current_scope()`` after every
  edit they apply, since edits invalidate node handles.
  """

  name: str = "rule"

  @abstractmethod
  def apply(self, context: PassContext) -> bool:
    """
    Executes the rule on the current scope.

    Args:
        context: The shared pass context.

    Returns:
        bool: True if the source was rewritten.
    """
    pass
