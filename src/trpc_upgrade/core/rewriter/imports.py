"""
Import Rewriter.

Keeps import declarations consistent with the rewrites performed by the other
rules:

1.  **Rebinding**: ``import { trpc } from '~/utils/trpc'`` becomes
    ``import { useTRPC } from '~/utils/trpc'`` and every outermost function
    using ``trpc`` gets ``const trpc = useTRPC();`` ahead of its other
    statements (after any directive prologue), so the body keeps working
    unchanged. Expression-bodied arrows are given a block body first.
2.  **Injection**: ``ensure_imported`` adds ``import { x } from 'lib'`` after
    the last import unless ``x`` is already imported from ``lib``. Presence is
    re-queried from the live tree on every call.
"""

from typing import List, Optional, Sequence, Set

from tree_sitter import Node

from trpc_upgrade.core.codec import (
  Edit,
  SourceDocument,
  ancestors,
  declared_names,
  is_function_like,
  iter_descendants,
  node_text,
  significant_children,
  string_value,
)
from trpc_upgrade.core.context import PassContext
from trpc_upgrade.core.rewriter.interface import RewriteRule

REFERENCE_KINDS = ("identifier", "shorthand_property_identifier")

PARAMETER_NAME_KINDS = frozenset({"identifier", "shorthand_property_identifier_pattern"})

_MIRRORED_STATEMENTS = frozenset(
  {"lexical_declaration", "variable_declaration", "expression_statement", "return_statement"}
)


def find_specifiers(document: SourceDocument, library: str, name: str, unaliased: bool = False) -> List[Node]:
  """
  Finds ``import { name } from 'library'`` specifiers.

  Args:
      document: The source document.
      library: Module path as written in the import source.
      name: Imported (not local) name of the specifier.
      unaliased: If True, ignore specifiers renamed with ``as``.

  Returns:
      List[Node]: Matching ``import_specifier`` nodes in document order.
  """
  found = []
  for statement in document.imports():
    if string_value(statement.child_by_field_name("source")) != library:
      continue
    for specifier in document.find("import_specifier", within=statement):
      if node_text(specifier.child_by_field_name("name")) != name:
        continue
      if unaliased and specifier.child_by_field_name("alias") is not None:
        continue
      found.append(specifier)
  return found


def is_imported(document: SourceDocument, library: str, specifier: str) -> bool:
  return bool(find_specifiers(document, library, specifier))


def last_directive(statements: Sequence[Node]) -> Optional[Node]:
  """Last statement of a directive prologue ('use client', 'use strict'), if any."""
  anchor = None
  for statement in statements:
    if statement.type == "comment":
      continue
    children = significant_children(statement)
    if statement.type == "expression_statement" and len(children) == 1 and children[0].type == "string":
      anchor = statement
      continue
    break
  return anchor


def ensure_imported(context: PassContext, library: str, specifier: str) -> bool:
  """
  Adds ``import { specifier } from 'library'`` unless already present.

  The new declaration goes right after the last existing import. Files with
  no imports get it after the directive prologue, or before the first
  statement.

  Args:
      context: The pass context holding the document.
      library: Module path to import from.
      specifier: Name to import.

  Returns:
      bool: True if a declaration was inserted.
  """
  document = context.document
  if is_imported(document, library, specifier):
    return False

  quote = document.quote()
  newline = document.newline
  imports = document.imports()

  if imports:
    last = imports[-1]
    declaration = f"import {{ {specifier} }} from {quote}{library}{quote}{document.terminator(last)}"
    edit = Edit.insert(last.end_byte, newline + declaration)
  else:
    declaration = f"import {{ {specifier} }} from {quote}{library}{quote};"
    anchor = last_directive(document.root.named_children)
    if anchor is not None:
      edit = Edit.insert(anchor.end_byte, newline + declaration)
    else:
      first = next((s for s in document.root.named_children if s.type != "comment"), None)
      offset = first.start_byte if first is not None else 0
      edit = Edit.insert(offset, declaration + newline + (newline if first is not None else ""))

  document.apply([edit])
  context.tracer.import_added(library, specifier)
  return True


def detect_legacy_import(context: PassContext) -> bool:
  """Checks for ``import { <trpc_import_name> } from '<trpc_file>'``."""
  config = context.config
  return bool(find_specifiers(context.document, config.trpc_file, config.trpc_import_name, unaliased=True))


def references(document: SourceDocument, scope: Node, name: str) -> bool:
  return bool(document.find(REFERENCE_KINDS, within=scope, predicate=lambda n: node_text(n) == name))


def _parameter_names(scope: Node) -> Set[str]:
  params = scope.child_by_field_name("parameters") or scope.child_by_field_name("parameter")
  if params is None:
    return set()
  return {node_text(n) for n in iter_descendants(params) if n.type in PARAMETER_NAME_KINDS}


def _binds(scope: Node, name: str) -> bool:
  """Whether a function-like scope declares ``name`` as a parameter or in its body block."""
  body = scope.child_by_field_name("body")
  declared = declared_names(body) if body is not None and body.type == "statement_block" else set()
  return name in declared or name in _parameter_names(scope)


def _enclosing_statement(node: Node) -> Optional[Node]:
  current = node
  while current.parent is not None and current.parent.type not in ("program", "statement_block"):
    current = current.parent
  return current if current.parent is not None else None


class RebindAccessorRule(RewriteRule):
  """
  Rebinds the legacy client import to the accessor hook inside a scope.

  A scope qualifies when the legacy import existed before the pass, it
  references the import name, and neither it nor an enclosing function
  already declares that name. The binding goes after the body's directive
  prologue. Expression-bodied arrows get a block body holding the binding
  and a ``return`` of the original expression.
  """

  name = "rebind-accessor"

  def apply(self, context: PassContext) -> bool:
    if not context.legacy_import_present:
      return False

    document = context.document
    config = context.config
    local_name = config.trpc_import_name
    scope = context.current_scope()

    body = scope.child_by_field_name("body")
    if body is None or not references(document, scope, local_name):
      return False
    if _binds(scope, local_name):
      return False
    if any(is_function_like(enclosing) and _binds(enclosing, local_name) for enclosing in ancestors(scope)):
      return False

    edits = [
      Edit.replace(specifier, config.trpc_accessor)
      for specifier in find_specifiers(document, config.trpc_file, local_name, unaliased=True)
    ]
    binding = f"const {local_name} = {config.trpc_accessor}()"
    if body.type == "statement_block":
      edits.append(self._bind_in_block(document, body, binding))
    else:
      edits.append(self._bind_in_expression(document, scope, body, binding))

    before = context.snippet(scope)
    document.apply(edits)
    context.tracer.edit(self.name, before, binding)
    return True

  def _bind_in_block(self, document: SourceDocument, body: Node, binding: str) -> Edit:
    statements = significant_children(body)
    directive = last_directive(statements)
    following = [s for s in statements if directive is None or s.start_byte >= directive.end_byte]
    first = following[0] if following else None

    if directive is not None:
      offset = directive.end_byte
      indent = document.line_indent(directive)
    elif first is not None and first.start_point[0] > body.start_point[0]:
      offset = body.start_byte + 1
      indent = document.line_indent(first)
    else:
      offset = body.start_byte + 1
      indent = document.line_indent(body) + "  "

    if first is not None and first.type in _MIRRORED_STATEMENTS:
      terminator = document.terminator(first)
    elif directive is not None:
      terminator = document.terminator(directive)
    else:
      terminator = ";"

    return Edit.insert(offset, document.newline + indent + binding + terminator)

  def _bind_in_expression(self, document: SourceDocument, scope: Node, body: Node, binding: str) -> Edit:
    statement = _enclosing_statement(scope)
    terminator = document.terminator(statement) if statement is not None else ";"
    outer = document.line_indent(scope)
    inner = outer + "  "
    newline = document.newline
    block = (
      f"{{{newline}"
      f"{inner}{binding}{terminator}{newline}"
      f"{inner}return {document.text(body)}{terminator}{newline}"
      f"{outer}}}"
    )
    return Edit.replace(body, block)
