"""
Tests for the ScopeWalker traversal and result folding.
"""

from trpc_upgrade.core.codec import Edit
from trpc_upgrade.core.rewriter import RewriteRule
from trpc_upgrade.core.walker import ScopeWalker


class RecordingRule(RewriteRule):
  name = "recording"

  def __init__(self):
    self.visited = []

  def apply(self, context):
    scope = context.current_scope()
    self.visited.append((context.scope_index, scope.type))
    return False


class RenameOnceRule(RewriteRule):
  """Renames the first scope's first identifier, reporting a change only then."""

  name = "rename-once"

  def apply(self, context):
    if context.scope_index != 0:
      return False
    target = context.document.find("identifier", within=context.current_scope())[0]
    return context.document.apply([Edit.replace(target, "renamed")])


CODE = "function a() {\n  const b = () => 1;\n}\nconst c = function () {};\n"


def test_visits_every_scope_in_document_order(make_context):
  rule = RecordingRule()
  changed = ScopeWalker([rule]).run(make_context(CODE))

  assert changed is False
  assert [index for index, _ in rule.visited] == [0, 1, 2]
  assert rule.visited[0][1] == "function_declaration"
  assert rule.visited[1][1] == "arrow_function"


def test_results_are_or_folded(make_context):
  recorder = RecordingRule()
  ctx = make_context(CODE)

  changed = ScopeWalker([RenameOnceRule(), recorder]).run(ctx)

  assert changed is True
  assert ctx.document.code.startswith("function renamed()")
  # Scope handles are re-resolved after the edit, so later rules still see every scope.
  assert len(recorder.visited) == 3


def test_phases_recorded_per_scope(make_context):
  ctx = make_context(CODE)
  ScopeWalker([RecordingRule()]).run(ctx)

  starts = [e["description"] for e in ctx.tracer.export() if e["type"] == "phase"]
  assert starts == ["Scope 0", "Scope 1", "Scope 2"]


def test_legacy_import_detected_before_rules(make_context):
  ctx = make_context("import { trpc } from '~/utils/trpc';\nfunction a() {}\n")
  ScopeWalker([RecordingRule()]).run(ctx)
  assert ctx.legacy_import_present is True
