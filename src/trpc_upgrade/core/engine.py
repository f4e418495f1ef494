"""
Orchestration Engine for Source Rewrites.

This module provides the `ASTEngine`, the primary driver for one rewrite pass
over one unit of TSX/TypeScript source.

The Engine pipeline consists of:

1.  **Precondition Check**: required configuration must be present; otherwise
    the run aborts with ``ConfigurationError`` before anything is parsed.
2.  **Parsing**: the source is parsed into a ``SourceDocument``. Syntax errors
    produce a failed ``ConversionResult``; no partial output is emitted.
3.  **Scope Walk**: the ``ScopeWalker`` applies the rules to every scope. An
    edit that leaves the source unparseable fails the result the same way.
4.  **Serialization**: skipped when no rule fired; the result then carries
    ``changed=False`` and ``output`` is None.
"""

import logging
from typing import List, Optional

from trpc_upgrade.config import RuntimeConfig
from trpc_upgrade.core.codec import SourceDocument, SourceParseError
from trpc_upgrade.core.context import PassContext
from trpc_upgrade.core.conversion_result import ConversionResult
from trpc_upgrade.core.rewriter import RewriteRule
from trpc_upgrade.core.tracer import TraceLogger, get_tracer, reset_tracer
from trpc_upgrade.core.walker import ScopeWalker

logger = logging.getLogger(__name__)


class ASTEngine:
  """
  The main rewrite unit.

  Holds configuration only; all per-run state lives in a fresh ``PassContext``
  so one engine may process many files.
  """

  def __init__(self, config: RuntimeConfig, rules: Optional[List[RewriteRule]] = None):
    """
    Initializes the Engine.

    Args:
        config: Runtime configuration. ``trpc_file`` and ``trpc_import_name`` are required.
        rules: Optional rule list overriding the default rule set.

    Raises:
        ConfigurationError: If required configuration is missing.
    """
    self.config = config.require()
    self.rules = rules

  def parse(self, code: str, language: str = "tsx") -> SourceDocument:
    """
    Parses source text into a document.

    Raises:
        SourceParseError: If the input has syntax errors.
    """
    return SourceDocument(code, language=language)

  def run(self, code: str, language: str = "tsx") -> ConversionResult:
    """
    Executes the full rewrite pipeline.

    Args:
        code: The input source string.
        language: Grammar to parse with (``"tsx"`` or ``"typescript"``).

    Returns:
        ConversionResult: Rewritten code, change flag, and diagnostics.
    """
    reset_tracer()
    tracer = get_tracer()
    with tracer.phase("Rewrite Pipeline", trpc_file=self.config.trpc_file, name=self.config.trpc_import_name):
      try:
        with tracer.phase("Parsing", language=language):
          document = self.parse(code, language)
      except SourceParseError as e:
        return self._failure(code, f"Parse Error: {e}", [], tracer)

      context = PassContext(document, self.config, tracer)
      try:
        with tracer.phase("Scope Walk"):
          changed = ScopeWalker(self.rules).run(context)
      except ValueError as e:
        # An edit batch that fails to re-parse; the input is returned untouched.
        logger.debug("Rewrite aborted: %s", e)
        return self._failure(code, f"Rewrite Error: {e}", context.warnings, tracer)

    return ConversionResult(
      code=document.code if changed else code,
      changed=changed,
      warnings=context.warnings,
      success=True,
      trace_events=tracer.export(),
    )

  @staticmethod
  def _failure(code: str, error: str, warnings: List[str], tracer: TraceLogger) -> ConversionResult:
    return ConversionResult(
      code=code,
      warnings=warnings,
      errors=[error],
      success=False,
      trace_events=tracer.export(),
    )
