"""
Declarative Structural Matchers.

Small composable predicates over tree-sitter nodes. Every matcher is a callable
``(node) -> MatchResult`` where the result is either a ``Match`` carrying the
named bindings collected along the way, or a falsy ``NoMatch`` carrying the
reason the shape was rejected. Rules use the reason to report near misses.

Example:

.. code-block:: python

    hook_call = call(callee=member(prop=property_name("useQuery", bind="method")), bind="call")
    result = hook_call(node)
    if result:
      method = result["method"]
"""

from dataclasses import dataclass, field
from typing import Callable, Collection, Dict, List, Optional, Tuple, Union

from tree_sitter import Node

from trpc_upgrade.core.codec import node_text, significant_children

NameSpec = Union[None, str, Collection[str]]


@dataclass(frozen=True)
class Match:
  """Successful match of ``node`` with the nodes bound by sub-matchers."""

  node: Node
  bindings: Dict[str, Node] = field(default_factory=dict)

  def __bool__(self) -> bool:
    return True

  def __getitem__(self, key: str) -> Node:
    return self.bindings[key]

  def get(self, key: str) -> Optional[Node]:
    return self.bindings.get(key)


@dataclass(frozen=True)
class NoMatch:
  """Rejected match. ``reason`` describes the first constraint that failed."""

  reason: str = ""

  def __bool__(self) -> bool:
    return False


MatchResult = Union[Match, NoMatch]
Matcher = Callable[[Optional[Node]], MatchResult]


def _name_ok(value: str, constraint: NameSpec) -> bool:
  if constraint is None:
    return True
  if isinstance(constraint, str):
    return value == constraint
  return value in constraint


def _describe(constraint: NameSpec) -> str:
  if isinstance(constraint, str):
    return f"'{constraint}'"
  return "one of " + ", ".join(sorted(constraint))


def _success(node: Node, bind: Optional[str], *parts: Match) -> Match:
  bindings: Dict[str, Node] = {}
  for part in parts:
    bindings.update(part.bindings)
  if bind:
    bindings[bind] = node
  return Match(node, bindings)


def _sub(matcher: Optional[Matcher], node: Optional[Node], label: str) -> MatchResult:
  if matcher is None:
    return Match(node) if node is not None else NoMatch(f"missing {label}")
  result = matcher(node)
  if not result:
    return NoMatch(f"{label}: {result.reason}")
  return result


def node_of(kind: Union[str, Collection[str]], bind: Optional[str] = None) -> Matcher:
  """Matches any node of the given type(s)."""
  kinds = {kind} if isinstance(kind, str) else set(kind)

  def match(node: Optional[Node]) -> MatchResult:
    if node is None or node.type not in kinds:
      return NoMatch(f"expected {'/'.join(sorted(kinds))}, found {node.type if node is not None else 'nothing'}")
    return _success(node, bind)

  return match


def _named(kind: str, name: NameSpec, bind: Optional[str]) -> Matcher:
  def match(node: Optional[Node]) -> MatchResult:
    if node is None or node.type != kind:
      return NoMatch(f"expected {kind}, found {node.type if node is not None else 'nothing'}")
    text = node_text(node)
    if not _name_ok(text, name):
      return NoMatch(f"expected {_describe(name)}, found '{text}'")
    return _success(node, bind)

  return match


def identifier(name: NameSpec = None, bind: Optional[str] = None) -> Matcher:
  """Matches a plain identifier, optionally constrained by name."""
  return _named("identifier", name, bind)


def property_name(name: NameSpec = None, bind: Optional[str] = None) -> Matcher:
  """Matches the property part of a member expression (``a.<prop>``)."""
  return _named("property_identifier", name, bind)


def member(obj: Optional[Matcher] = None, prop: Optional[Matcher] = None, bind: Optional[str] = None) -> Matcher:
  """Matches ``obj.prop``."""

  def match(node: Optional[Node]) -> MatchResult:
    if node is None or node.type != "member_expression":
      return NoMatch(f"expected member access, found {node.type if node is not None else 'nothing'}")
    obj_result = _sub(obj, node.child_by_field_name("object"), "object")
    if not obj_result:
      return obj_result
    prop_result = _sub(prop, node.child_by_field_name("property"), "property")
    if not prop_result:
      return prop_result
    return _success(node, bind, obj_result, prop_result)

  return match


def call(callee: Optional[Matcher] = None, args: Optional[int] = None, bind: Optional[str] = None) -> Matcher:
  """Matches ``callee(...)``; ``args`` constrains the argument count when given."""

  def match(node: Optional[Node]) -> MatchResult:
    if node is None or node.type != "call_expression":
      return NoMatch(f"expected call, found {node.type if node is not None else 'nothing'}")
    callee_result = _sub(callee, node.child_by_field_name("function"), "callee")
    if not callee_result:
      return callee_result
    if args is not None:
      arguments = node.child_by_field_name("arguments")
      count = len(significant_children(arguments)) if arguments is not None else 0
      if arguments is None or arguments.type != "arguments" or count != args:
        return NoMatch(f"expected {args} argument(s), found {count}")
    return _success(node, bind, callee_result)

  return match


def declarator(name: Optional[Matcher] = None, value: Optional[Matcher] = None, bind: Optional[str] = None) -> Matcher:
  """Matches a ``variable_declarator`` (``name = value``)."""

  def match(node: Optional[Node]) -> MatchResult:
    if node is None or node.type != "variable_declarator":
      return NoMatch(f"expected declarator, found {node.type if node is not None else 'nothing'}")
    name_result = _sub(name, node.child_by_field_name("name"), "binding")
    if not name_result:
      return name_result
    value_result = _sub(value, node.child_by_field_name("value"), "initializer")
    if not value_result:
      return value_result
    return _success(node, bind, name_result, value_result)

  return match


def array_pattern(*elements: Matcher, bind: Optional[str] = None) -> Matcher:
  """Matches ``[a, b, ...]`` with exactly ``len(elements)`` elements."""

  def match(node: Optional[Node]) -> MatchResult:
    if node is None or node.type != "array_pattern":
      return NoMatch(f"expected array pattern, found {node.type if node is not None else 'nothing'}")
    children = significant_children(node)
    if len(children) != len(elements) or _has_holes(node):
      return NoMatch(f"expected {len(elements)} element(s), found {len(children)}")
    results: List[Match] = []
    for index, (element, child) in enumerate(zip(elements, children)):
      result = _sub(element, child, f"element {index}")
      if not result:
        return result
      results.append(result)
    return _success(node, bind, *results)

  return match


def _has_holes(node: Node) -> bool:
  # ``[, b]`` parses as '[' ',' identifier ']': a comma with no element before it.
  expecting_element = True
  for child in node.children:
    if child.type == "comment":
      continue
    if child.type == ",":
      if expecting_element:
        return True
      expecting_element = True
    elif child.is_named:
      expecting_element = False
  return False


def any_of(*matchers: Matcher) -> Matcher:
  """Returns the first successful match among ``matchers``."""

  def match(node: Optional[Node]) -> MatchResult:
    reasons = []
    for matcher in matchers:
      result = matcher(node)
      if result:
        return result
      reasons.append(result.reason)
    return NoMatch(" or ".join(reasons))

  return match


def member_chain(node: Node) -> Tuple[Node, List[Node]]:
  """
  Flattens a dotted member expression.

  ``a.b.c`` yields ``(a, [b, c])`` where ``a`` is the innermost object node and
  the list holds the property nodes from left to right. Non-member input
  yields ``(node, [])``.
  """
  properties: List[Node] = []
  current = node
  while current.type == "member_expression":
    prop = current.child_by_field_name("property")
    if prop is not None:
      properties.append(prop)
    current = current.child_by_field_name("object")
  properties.reverse()
  return current, properties
