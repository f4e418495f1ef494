"""
Scope Walker.

Visits every function-like node (function declarations, function expressions
and arrow functions) once, in document order, and applies the rule list to
each. The per-rule results are OR-ed into the pass result instead of a shared
mutable flag.
"""

from typing import List, Optional

from trpc_upgrade.core.context import PassContext
from trpc_upgrade.core.rewriter import RewriteRule, default_rules
from trpc_upgrade.core.rewriter.imports import detect_legacy_import


class ScopeWalker:
  """
  Drives the rules over all scopes of one document.
  """

  def __init__(self, rules: Optional[List[RewriteRule]] = None):
    self.rules = rules if rules is not None else default_rules()

  def run(self, context: PassContext) -> bool:
    """
    Applies every rule to every scope.

    Args:
        context: Pass context for the document being rewritten.

    Returns:
        bool: True if any rule rewrote the source.
    """
    context.legacy_import_present = detect_legacy_import(context)

    changed = False
    total = len(context.document.functions())
    for index in range(total):
      context.scope_index = index
      scope = context.current_scope()
      with context.tracer.phase(f"Scope {index}", kind=scope.type, line=context.line(scope)):
        for rule in self.rules:
          if rule.apply(context):
            changed = True

    return changed
