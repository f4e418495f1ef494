"""
Hook-to-Options Rewriter.

Rewrites proxy hook calls into a bare hook fed by an options producer::

    trpc.post.list.useQuery(input)
    # becomes
    useQuery(trpc.post.list.queryOptions(input))

and imports the bare hook from its library. Hook kinds are processed in the
order of ``HOOK_RULES``; a call can only match one kind since the property
names are distinct.
"""

from typing import List

from trpc_upgrade.core.codec import Edit
from trpc_upgrade.core.context import PassContext
from trpc_upgrade.core.mappings import HOOK_RULES, HookRule
from trpc_upgrade.core.matching import Match, call, member, property_name
from trpc_upgrade.core.rewriter.imports import ensure_imported
from trpc_upgrade.core.rewriter.interface import RewriteRule


class HooksToOptionsRule(RewriteRule):
  name = "hooks-to-options"

  def apply(self, context: PassContext) -> bool:
    changed = False
    for rule in HOOK_RULES:
      if self._rewrite_hook(context, rule):
        ensure_imported(context, rule.library, rule.hook)
        changed = True
    return changed

  def _rewrite_hook(self, context: PassContext, rule: HookRule) -> bool:
    document = context.document
    pattern = call(callee=member(prop=property_name(rule.hook, bind="method")), bind="call")

    matches: List[Match] = []
    for node in document.find("call_expression", within=context.current_scope()):
      result = pattern(node)
      if result:
        matches.append(result)

    if not matches:
      return False

    edits = []
    for match in matches:
      site = match["call"]
      context.tracer.match(self.name, context.snippet(site), context.line(site))
      edits.append(Edit.insert(site.start_byte, f"{rule.hook}("))
      edits.append(Edit.replace(match["method"], rule.producer))
      edits.append(Edit.insert(site.end_byte, ")"))

    before = [context.snippet(match["call"]) for match in matches]
    document.apply(edits)
    for snippet in before:
      context.tracer.edit(self.name, snippet, f"{rule.hook}({rule.producer})")
    return True
