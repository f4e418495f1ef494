"""
Rewrite Trace.

Structured record of one pass over one unit, dumped by ``convert --json-trace``:

- ``phase``: the pipeline, parsing, the scope walk and each visited scope, nested.
- ``match``: a call site accepted by a rule, with its line in the input.
- ``edit``: a rewrite, with the site text before and the text produced.
- ``import``: an import declaration added to the unit.
- ``diagnostic``: a site left untouched with a warning.
- ``inspection``: a near miss skipped without a warning.

Events carry sequential ids and the id of their enclosing phase, so the dump
for a given input is stable across runs.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class TraceEventType(str, Enum):
  PHASE = "phase"
  MATCH = "match"
  EDIT = "edit"
  IMPORT = "import"
  DIAGNOSTIC = "diagnostic"
  INSPECTION = "inspection"


@dataclass
class TraceEvent:
  id: int
  type: TraceEventType
  description: str
  phase: Optional[int] = None
  metadata: Dict[str, Any] = field(default_factory=dict)

  def to_dict(self) -> Dict[str, Any]:
    return {
      "id": self.id,
      "type": self.type.value,
      "description": self.description,
      "phase": self.phase,
      "metadata": dict(self.metadata),
    }


class TraceLogger:
  """
  Records rewrite events for later inspection.
  """

  def __init__(self):
    self._events: List[TraceEvent] = []
    self._phases: List[int] = []

  @contextmanager
  def phase(self, name: str, /, **metadata: Any) -> Iterator[int]:
    """
    Groups the events recorded inside the block under a named phase.

    Args:
        name: Phase label (e.g. ``"Scope 3"``).
        **metadata: Extra JSON-ready details (node kind, line, language).

    Yields:
        int: The phase event id.
    """
    event = self._record(TraceEventType.PHASE, name, metadata)
    self._phases.append(event.id)
    try:
      yield event.id
    finally:
      self._phases.pop()

  def match(self, rule: str, site: str, line: int):
    self._record(TraceEventType.MATCH, f"{rule} matched {site}", {"rule": rule, "site": site, "line": line})

  def edit(self, rule: str, before: str, after: str):
    self._record(TraceEventType.EDIT, f"Rewrote via {rule}", {"rule": rule, "before": before, "after": after})

  def import_added(self, library: str, specifier: str):
    self._record(
      TraceEventType.IMPORT,
      f"Imported {specifier} from {library}",
      {"library": library, "specifier": specifier},
    )

  def diagnostic(self, message: str, line: Optional[int] = None):
    self._record(TraceEventType.DIAGNOSTIC, message, {"line": line})

  def inspection(self, site: str, reason: str):
    """Logs a candidate a rule looked at and skipped on purpose."""
    self._record(TraceEventType.INSPECTION, f"Skipped '{site}'", {"reason": reason})

  def _record(self, event_type: TraceEventType, description: str, metadata: Dict[str, Any]) -> TraceEvent:
    event = TraceEvent(
      id=len(self._events) + 1,
      type=event_type,
      description=description,
      phase=self._phases[-1] if self._phases else None,
      metadata=metadata,
    )
    self._events.append(event)
    return event

  def export(self) -> List[Dict[str, Any]]:
    """Returns the events as JSON-ready dicts, in recording order."""
    return [event.to_dict() for event in self._events]


_GLOBAL_TRACER = TraceLogger()


def get_tracer() -> TraceLogger:
  return _GLOBAL_TRACER


def reset_tracer():
  global _GLOBAL_TRACER
  _GLOBAL_TRACER = TraceLogger()
