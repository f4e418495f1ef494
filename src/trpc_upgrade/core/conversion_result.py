"""
Data structures representing the output of a rewrite pass.

This module defines the `ConversionResult` Pydantic model, which encapsulates
the rewritten code, whether anything changed, diagnostics, and the trace log.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ConversionResult(BaseModel):
  """
  Container for the results of a single source unit.
  """

  code: str = Field(default="", description="The rewritten source (the input itself when unchanged).")
  changed: bool = Field(default=False, description="True if at least one rule rewrote the source.")
  warnings: List[str] = Field(default_factory=list, description="Non-fatal diagnostics for skipped sites.")
  errors: List[str] = Field(default_factory=list, description="Fatal errors (e.g. parse failures).")
  success: bool = Field(
    default=True,
    description="True if the pass completed without fatal errors.",
  )
  trace_events: List[Dict[str, Any]] = Field(default_factory=list, description="Execution trace log data.")

  @property
  def has_errors(self) -> bool:
    """
    Check if the result contains any error messages.

    Returns:
        True if one or more errors are present.
    """
    return len(self.errors) > 0

  @property
  def output(self) -> Optional[str]:
    """
    The rewritten source, or None when nothing changed.

    Callers should skip write-back on None; it is not an error.
    """
    if self.success and self.changed:
      return self.code
    return None
