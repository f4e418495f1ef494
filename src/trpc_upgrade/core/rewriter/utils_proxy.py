"""
Utils-Proxy Migrator.

Replaces the deprecated utilities accessor with the shared caching client::

    const utils = trpc.useUtils();
    utils.post.list.invalidate();
    # becomes
    const queryClient = useQueryClient();
    queryClient.invalidateQueries(trpc.post.list.queryFilter());

The rule runs in two phases. Resolution first collects every accessor
declaration in the scope and then resolves every identifier carrying one of
the declared names across the *whole* tree, classifying each occurrence as a
proxy call site or a near miss. Only then are all edits (call sites and
declarations) applied as one batch, so no lookup ever sees a partially renamed
tree.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from tree_sitter import Node

from trpc_upgrade.core.codec import Edit, declared_names, node_text, same_node
from trpc_upgrade.core.context import PassContext
from trpc_upgrade.core.mappings import PROXY_ACCESSORS, UTIL_METHODS
from trpc_upgrade.core.matching import call, declarator, identifier, member, member_chain, property_name
from trpc_upgrade.core.rewriter.imports import ensure_imported
from trpc_upgrade.core.rewriter.interface import RewriteRule

ACCESSOR_CALL = call(callee=member(prop=property_name(PROXY_ACCESSORS, bind="accessor")), bind="call")

BOUND_ACCESSOR = declarator(name=identifier(bind="name"), value=ACCESSOR_CALL, bind="declarator")


@dataclass
class ProxySite:
  """A resolved ``name.path.method(args)`` call."""

  call: Node
  root: Node
  method: Node
  mapped: str


@dataclass
class AccessorDeclaration:
  """A ``const name = x.useUtils()`` declaration."""

  declarator: Node
  name: Node
  call: Node


@dataclass
class Resolution:
  declarations: List[AccessorDeclaration] = field(default_factory=list)
  sites: List[ProxySite] = field(default_factory=list)


def _enclosing_block(node: Node) -> Optional[Node]:
  current = node.parent
  while current is not None and current.type != "statement_block":
    current = current.parent
  return current


class UtilsProxyRule(RewriteRule):
  name = "utils-proxy"

  def apply(self, context: PassContext) -> bool:
    resolution = self._resolve(context)
    if not resolution.declarations:
      return False

    config = context.config
    edits: List[Edit] = []

    for site in resolution.sites:
      context.tracer.match(self.name, context.snippet(site.call), context.line(site.call))
      edits.append(Edit.insert(site.call.start_byte, f"{config.query_client_name}.{site.mapped}("))
      edits.append(Edit.replace(site.root, config.proxy_root))
      edits.append(Edit.replace(site.method, config.query_filter))
      edits.append(Edit.insert(site.call.end_byte, ")"))

    for declaration in resolution.declarations:
      context.tracer.edit(
        self.name,
        context.snippet(declaration.declarator),
        f"{config.query_client_name} = {config.query_client_hook}()",
      )
      edits.append(Edit.replace(declaration.call, f"{config.query_client_hook}()"))
      edits.append(Edit.replace(declaration.name, config.query_client_name))

    context.document.apply(edits)
    ensure_imported(context, config.query_client_library, config.query_client_hook)
    return True

  # --- Phase 1: resolution (read-only) ---

  def _resolve(self, context: PassContext) -> Resolution:
    document = context.document
    resolution = Resolution()

    for node in document.find("call_expression", within=context.current_scope()):
      if not ACCESSOR_CALL(node):
        continue
      declaration = self._declaration_for(context, node)
      if declaration is not None:
        resolution.declarations.append(declaration)

    names: Dict[str, List[Node]] = {}
    for declaration in resolution.declarations:
      names.setdefault(node_text(declaration.name), []).append(declaration.name)

    seen: Set[Tuple[int, int]] = set()
    for local_name, declared in names.items():
      for occurrence in document.find("identifier", predicate=lambda n, name=local_name: node_text(n) == name):
        key = (occurrence.start_byte, occurrence.end_byte)
        if key in seen or any(same_node(occurrence, d) for d in declared):
          continue
        seen.add(key)
        site = self._classify(context, occurrence)
        if site is not None:
          resolution.sites.append(site)

    return resolution

  def _declaration_for(self, context: PassContext, accessor_call: Node) -> Optional[AccessorDeclaration]:
    """Binds an accessor call to its declarator, or reports why it cannot."""
    arguments = accessor_call.child_by_field_name("arguments")
    if arguments is not None and arguments.named_child_count:
      context.tracer.inspection(context.snippet(accessor_call), "accessor called with arguments")
      return None

    parent = accessor_call.parent
    result = BOUND_ACCESSOR(parent)
    if not result or not same_node(result["call"], accessor_call):
      context.warn("utils accessor is not bound to a plain identifier; left untouched", accessor_call)
      return None

    if context.config.query_client_name in declared_names(_enclosing_block(parent)):
      context.warn(
        f"'{context.config.query_client_name}' is already declared in this block; utils accessor left untouched",
        parent,
      )
      return None

    return AccessorDeclaration(declarator=result["declarator"], name=result["name"], call=accessor_call)

  def _classify(self, context: PassContext, occurrence: Node) -> Optional[ProxySite]:
    """
    Matches ``occurrence.path.method(...)`` and validates the method.

    Returns None (after a diagnostic where relevant) for every other shape.
    """
    parent = occurrence.parent
    if parent is not None and parent.type == "variable_declarator" and same_node(
      parent.child_by_field_name("name"), occurrence
    ):
      # Another declaration of the same name, handled by its own scope.
      return None

    if parent is None or parent.type != "member_expression" or not same_node(
      parent.child_by_field_name("object"), occurrence
    ):
      context.warn("reference to the utils accessor is not a proxy call; left untouched", parent or occurrence)
      return None

    chain = parent
    while (
      chain.parent is not None
      and chain.parent.type == "member_expression"
      and same_node(chain.parent.child_by_field_name("object"), chain)
    ):
      chain = chain.parent

    call_node = chain.parent
    if call_node is None or call_node.type != "call_expression" or not same_node(
      call_node.child_by_field_name("function"), chain
    ):
      context.warn("failed to walk up the tree to find the utils method call", chain)
      return None

    _, properties = member_chain(chain)
    if len(properties) < 2:
      context.warn("failed to identify the utils method: missing procedure path", call_node)
      return None

    method = properties[-1]
    method_name = node_text(method)
    if method.type != "property_identifier" or method_name not in UTIL_METHODS:
      context.warn(f"failed to identify the utils method: unsupported method '{method_name}'", call_node)
      return None

    return ProxySite(call=call_node, root=occurrence, method=method, mapped=UTIL_METHODS[method_name])
