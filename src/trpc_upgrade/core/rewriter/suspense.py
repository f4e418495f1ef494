"""
Suspense-Destructuring Normalizer.

``const [data, query] = useSuspenseQuery(opts);`` becomes::

    const query = useSuspenseQuery(opts);
    const data = query.data;

Only a single declarator whose pattern holds exactly two plain identifiers is
rewritten, and only when the declaration is a statement of its own. The
initializer may call the bare hook or the proxy form
(``trpc.post.get.useSuspenseQuery``).
"""

from trpc_upgrade.core.codec import DECLARATION_KINDS, Edit, node_text, significant_children
from trpc_upgrade.core.context import PassContext
from trpc_upgrade.core.mappings import SUSPENSE_HOOKS
from trpc_upgrade.core.matching import any_of, array_pattern, call, declarator, identifier, member, property_name
from trpc_upgrade.core.rewriter.interface import RewriteRule

STATEMENT_PARENTS = frozenset({"statement_block", "program"})

SUSPENSE_CALL = call(callee=any_of(identifier(SUSPENSE_HOOKS), member(prop=property_name(SUSPENSE_HOOKS))))

SUSPENSE_TUPLE = declarator(
  name=array_pattern(identifier(bind="data"), identifier(bind="query"), bind="pattern"),
  value=SUSPENSE_CALL,
)


class SuspenseDestructuringRule(RewriteRule):
  name = "suspense-destructuring"

  def apply(self, context: PassContext) -> bool:
    document = context.document
    edits = []

    for statement in document.find(DECLARATION_KINDS, within=context.current_scope()):
      declarators = [c for c in significant_children(statement) if c.type == "variable_declarator"]
      if len(declarators) != 1:
        continue

      result = SUSPENSE_TUPLE(declarators[0])
      if not result:
        if SUSPENSE_CALL(declarators[0].child_by_field_name("value")):
          context.tracer.inspection(context.snippet(statement), result.reason)
        continue

      container = statement.parent
      if container is None or container.type not in STATEMENT_PARENTS:
        # e.g. a `for (...)` initializer, where no statement can follow.
        where = container.type if container is not None else "nothing"
        context.tracer.inspection(context.snippet(statement), f"declaration inside {where}")
        continue

      data_name = node_text(result["data"])
      query_name = node_text(result["query"])
      terminator = document.terminator(statement)
      indent = document.line_indent(statement)

      edits.append(Edit.replace(result["pattern"], query_name))
      edits.append(
        Edit.insert(statement.end_byte, f"{document.newline}{indent}const {data_name} = {query_name}.data{terminator}")
      )
      context.tracer.edit(self.name, context.snippet(statement), f"const {data_name} = {query_name}.data")

    return document.apply(edits)
