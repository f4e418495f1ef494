"""
Pass Context Module.

Holds the state shared by the rules during one pass over one source unit:
the document being edited, configuration, the scope being processed, and the
diagnostics collected so far. A fresh context is created per unit, so units
can be processed independently.
"""

import logging
from typing import List, Optional

from tree_sitter import Node

from trpc_upgrade.config import RuntimeConfig
from trpc_upgrade.core.codec import SourceDocument
from trpc_upgrade.core.tracer import TraceLogger, get_tracer

logger = logging.getLogger(__name__)

_SNIPPET_LIMIT = 120


class PassContext:
  """
  Shared state container for the rules of a single pass.

  Attributes:
      document (SourceDocument): The unit being rewritten.
      config (RuntimeConfig): Validated runtime configuration.
      tracer (TraceLogger): Event recorder.
      warnings (List[str]): Diagnostics emitted so far.
      scope_index (int): Position of the current scope among ``document.functions()``.
      legacy_import_present (bool): Whether the legacy client import existed before the pass.
  """

  def __init__(self, document: SourceDocument, config: RuntimeConfig, tracer: Optional[TraceLogger] = None):
    self.document = document
    self.config = config
    self.tracer = tracer or get_tracer()
    self.warnings: List[str] = []
    self.scope_index = 0
    self.legacy_import_present = False

  def current_scope(self) -> Node:
    """
    Re-resolves the scope being processed against the current tree.

    Rules do not create or remove functions, so the n-th function-like node
    identifies the same scope before and after an edit.
    """
    return self.document.functions()[self.scope_index]

  def snippet(self, node: Node) -> str:
    text = " ".join(self.document.text(node).split())
    if len(text) > _SNIPPET_LIMIT:
      text = text[: _SNIPPET_LIMIT - 3] + "..."
    return text

  def line(self, node: Node) -> int:
    """Line of ``node`` in the input, unaffected by edits applied so far."""
    return self.document.original_line(node)

  def warn(self, message: str, node: Optional[Node] = None) -> None:
    """
    Records a non-fatal diagnostic for a site left unmodified.

    Diagnostics are reported by the caller of the engine, which knows the
    file; here they are only logged at debug level.

    Args:
        message: Description of the mismatch.
        node: Offending node, used for the line number and snippet.
    """
    line = None
    if node is not None:
      line = self.line(node)
      message = f"line {line}: {message} `{self.snippet(node)}`"
    self.warnings.append(message)
    self.tracer.diagnostic(message, line)
    logger.debug(message)
