"""
TSX Source Codec.

This module wraps the tree-sitter TSX/TypeScript grammars behind a small,
mutable ``SourceDocument``. Tree-sitter trees are read-only, so mutation is
expressed as batches of byte-range ``Edit`` objects which are spliced into the
source before the document is re-parsed. Bytes outside the edited ranges are
never touched, which keeps formatting and comments intact.

Node handles returned by queries belong to the tree they were read from.
After ``SourceDocument.apply`` every previously obtained handle is stale and
must be looked up again.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Collection, Iterator, List, Optional, Sequence, Set, Tuple, Union

from tree_sitter import Node
from tree_sitter_language_pack import get_parser

FUNCTION_KINDS = frozenset({"function_declaration", "function_expression", "function", "arrow_function"})

IMPORT_KIND = "import_statement"

DECLARATION_KINDS = frozenset({"lexical_declaration", "variable_declaration"})

# Suffix -> grammar. Plain ``.ts`` cannot use the TSX grammar because of
# angle-bracket type assertions.
LANGUAGE_BY_SUFFIX = {
  ".ts": "typescript",
  ".mts": "typescript",
  ".cts": "typescript",
  ".tsx": "tsx",
  ".js": "tsx",
  ".jsx": "tsx",
  ".mjs": "tsx",
  ".cjs": "tsx",
}

Kinds = Union[str, Collection[str]]


class SourceParseError(ValueError):
  """Raised when the source text cannot be parsed without syntax errors."""


def language_for(path: Union[str, Path]) -> str:
  """
  Selects the grammar for a file based on its suffix.

  Args:
      path: File path (only the suffix is inspected).

  Returns:
      str: ``"typescript"`` or ``"tsx"``.
  """
  return LANGUAGE_BY_SUFFIX.get(Path(path).suffix.lower(), "tsx")


def node_text(node: Optional[Node]) -> str:
  """Decodes the source text covered by a node ("" for None)."""
  if node is None or node.text is None:
    return ""
  return node.text.decode("utf-8")


def significant_children(node: Node) -> List[Node]:
  """Named children of a node, excluding comments."""
  return [child for child in node.named_children if child.type != "comment"]


def is_function_like(node: Optional[Node]) -> bool:
  return node is not None and node.is_named and node.type in FUNCTION_KINDS


def iter_descendants(node: Node) -> Iterator[Node]:
  """
  Yields a node and all of its descendants in pre-order (document order).

  Uses an explicit stack so deeply nested JSX does not hit the recursion limit.
  """
  stack = [node]
  while stack:
    current = stack.pop()
    yield current
    stack.extend(reversed(current.children))


def ancestors(node: Node) -> Iterator[Node]:
  current = node.parent
  while current is not None:
    yield current
    current = current.parent


def string_value(node: Optional[Node]) -> str:
  """Unquotes a string literal node (``'a'`` -> ``a``)."""
  text = node_text(node)
  if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
    return text[1:-1]
  return text


def declared_names(block: Optional[Node]) -> Set[str]:
  """
  Names bound by the variable declarations directly inside a statement block.

  Only plain identifier bindings are collected; nested blocks are not searched.
  """
  names: Set[str] = set()
  if block is None:
    return names
  for statement in block.named_children:
    if statement.type not in DECLARATION_KINDS:
      continue
    for declarator in statement.named_children:
      if declarator.type != "variable_declarator":
        continue
      name = declarator.child_by_field_name("name")
      if name is not None and name.type == "identifier":
        names.add(node_text(name))
  return names


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
  """Compares two handles from the same tree by kind and byte range."""
  if a is None or b is None:
    return False
  return a.type == b.type and a.start_byte == b.start_byte and a.end_byte == b.end_byte


@dataclass(frozen=True)
class Edit:
  """
  A single byte-range substitution.

  Insertions are edits with ``start == end``. Edits sharing the same start
  offset are emitted in the order they were created.
  """

  start: int
  end: int
  text: str

  @classmethod
  def insert(cls, offset: int, text: str) -> "Edit":
    return cls(offset, offset, text)

  @classmethod
  def replace(cls, node: Node, text: str) -> "Edit":
    return cls(node.start_byte, node.end_byte, text)

  @property
  def is_insertion(self) -> bool:
    return self.start == self.end


class SourceDocument:
  """
  A parsed unit of TSX/TypeScript source with batch editing support.

  Attributes:
      language (str): Grammar name used by the parser.
      source (bytes): Current UTF-8 source.
      tree: The tree-sitter ``Tree`` for ``source``.
  """

  def __init__(self, source: str, language: str = "tsx"):
    """
    Parses the source text.

    Args:
        source: The source code.
        language: Grammar name (``"tsx"`` or ``"typescript"``).

    Raises:
        SourceParseError: If the grammar reports syntax errors.
    """
    self.language = language
    self._parser = get_parser(language)
    self.source = source.encode("utf-8")
    self.tree = self._parse(self.source)
    self._original = self.source
    # Per applied batch: (start, end, inserted length) in pre-batch offsets.
    self._batches: List[List[Tuple[int, int, int]]] = []

  def _parse(self, source: bytes):
    tree = self._parser.parse(source)
    if tree.root_node.has_error:
      error = next((n for n in iter_descendants(tree.root_node) if n.type == "ERROR" or n.is_missing), None)
      where = f" at line {error.start_point[0] + 1}" if error is not None else ""
      raise SourceParseError(f"Unable to parse {self.language} source{where}")
    return tree

  @property
  def root(self) -> Node:
    return self.tree.root_node

  @property
  def code(self) -> str:
    """Serializes the document back to text."""
    return self.source.decode("utf-8")

  def text(self, node: Optional[Node]) -> str:
    return node_text(node)

  # --- Queries ---

  def find(
    self,
    kinds: Kinds,
    within: Optional[Node] = None,
    predicate: Optional[Callable[[Node], bool]] = None,
  ) -> List[Node]:
    """
    Finds named nodes of the given kind(s) inside a subtree.

    Args:
        kinds: A node type or a collection of node types.
        within: Subtree root (defaults to the whole document).
        predicate: Optional additional filter.

    Returns:
        List[Node]: Matching nodes in document order.
    """
    wanted = {kinds} if isinstance(kinds, str) else set(kinds)
    start = within if within is not None else self.root
    return [
      node
      for node in iter_descendants(start)
      if node.is_named and node.type in wanted and (predicate is None or predicate(node))
    ]

  def functions(self) -> List[Node]:
    """Function-like nodes (declarations, expressions, arrows) in document order."""
    return self.find(FUNCTION_KINDS)

  def imports(self) -> List[Node]:
    """Top-level import declarations in document order."""
    return [child for child in self.root.named_children if child.type == IMPORT_KIND]

  # --- Formatting helpers ---

  @property
  def newline(self) -> str:
    return "\r\n" if b"\r\n" in self.source else "\n"

  def line_indent(self, node: Node) -> str:
    """Leading whitespace of the line on which ``node`` starts."""
    line_start = self.source.rfind(b"\n", 0, node.start_byte) + 1
    indent = bytearray()
    for byte in self.source[line_start : node.start_byte]:
      if byte not in (0x20, 0x09):
        break
      indent.append(byte)
    return indent.decode("utf-8")

  def terminator(self, statement: Node) -> str:
    """Returns ';' if the statement is terminated by a semicolon, else ''."""
    return ";" if node_text(statement).rstrip().endswith(";") else ""

  def quote(self) -> str:
    """Quote character used by existing import sources (single quote by default)."""
    for statement in self.imports():
      source = statement.child_by_field_name("source")
      if source is not None and source.text:
        return source.text[:1].decode("utf-8")
    return "'"

  # --- Mutation ---

  def apply(self, edits: Sequence[Edit]) -> bool:
    """
    Splices a batch of edits into the source and re-parses.

    Args:
        edits: Edits expressed against the current source.

    Returns:
        bool: True if any edit was applied.

    Raises:
        ValueError: If two replacements overlap.
    """
    if not edits:
      return False

    replacements = sorted((e for e in edits if not e.is_insertion), key=lambda e: e.start)
    for previous, current in zip(replacements, replacements[1:]):
      if current.start < previous.end:
        raise ValueError(f"Overlapping edits at byte {current.start}")
    for edit in edits:
      if edit.is_insertion and any(r.start < edit.start < r.end for r in replacements):
        raise ValueError(f"Insertion inside a replaced range at byte {edit.start}")

    # Insertions sort ahead of a replacement sharing their offset so that they
    # end up in front of the replacement text.
    ordered = sorted(
      enumerate(edits),
      key=lambda item: (item[1].start, 0 if item[1].is_insertion else 1, item[0]),
    )

    buffer = self.source
    for _, edit in reversed(ordered):
      buffer = buffer[: edit.start] + edit.text.encode("utf-8") + buffer[edit.end :]

    self.tree = self._parse(buffer)
    self.source = buffer
    self._batches.append([(edit.start, edit.end, len(edit.text.encode("utf-8"))) for _, edit in ordered])
    return True

  def original_offset(self, offset: int) -> int:
    """
    Maps a byte offset of the current source back to the source as parsed.

    Offsets inside inserted or replacement text map to the start of the edit.
    """
    for batch in reversed(self._batches):
      delta = 0
      mapped = None
      for start, end, length in batch:
        new_start = start + delta
        if offset < new_start:
          break
        if offset < new_start + length:
          mapped = start
          break
        delta += length - (end - start)
      offset = mapped if mapped is not None else offset - delta
    return offset

  def original_line(self, node: Node) -> int:
    """1-based line on which ``node`` starts in the source as parsed."""
    return self._original.count(b"\n", 0, self.original_offset(node.start_byte)) + 1
