"""
Convert Command Handler.

This module implements the logic for the `trpc-upgrade convert` command.
It orchestrates:
1. Configuration loading (pyproject.toml + CLI overrides).
2. Source discovery (single file or recursive directory walk).
3. Rewriting via the Engine.
4. Output writing (in place, mirrored into --out, or a diff for --dry-run).
5. Trace logging and the batch summary.
"""

import difflib
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.markup import escape
from rich.table import Table

from trpc_upgrade.config import ConfigurationError, RuntimeConfig
from trpc_upgrade.core.codec import LANGUAGE_BY_SUFFIX, language_for
from trpc_upgrade.core.conversion_result import ConversionResult
from trpc_upgrade.core.engine import ASTEngine
from trpc_upgrade.utils.console import (
  console,
  log_error,
  log_info,
  log_success,
  log_warning,
)

SKIPPED_DIRS = frozenset({"node_modules"})


def handle_convert(
  input_path: Path,
  output_path: Optional[Path],
  trpc_file: Optional[str],
  trpc_import_name: Optional[str],
  dry_run: bool,
  settings: Dict[str, Any],
  json_trace_path: Optional[Path] = None,
) -> int:
  """
  Handles the 'convert' command execution.

  Args:
      input_path: Path to the source file or directory to rewrite.
      output_path: Where rewritten code is saved. Defaults to rewriting in place.
      trpc_file: Override for the legacy client module path.
      trpc_import_name: Override for the legacy client import name.
      dry_run: If True, print unified diffs and write nothing.
      settings: Extra ``RuntimeConfig`` fields from ``--config``.
      json_trace_path: Optional path to dump execution trace JSON (single file only).

  Returns:
      int: Exit code (0 for success, 1 for failure).
  """
  if not input_path.exists():
    log_error(f"Input not found: {escape(str(input_path))}")
    return 1

  config = RuntimeConfig.load(
    trpc_file=trpc_file,
    trpc_import_name=trpc_import_name,
    overrides=settings,
    search_path=input_path if input_path.is_dir() else input_path.parent,
  )

  try:
    engine = ASTEngine(config)
  except ConfigurationError as e:
    log_error(escape(f"{e}. Pass --trpc-file/--trpc-import-name or set them under [tool.trpc_upgrade]."))
    return 1

  batch_results: Dict[str, ConversionResult] = {}

  if input_path.is_file():
    result = _convert_single_file(input_path, output_path, engine, dry_run, json_trace_path)
    batch_results[input_path.name] = result

  else:
    sources = _collect_sources(input_path)
    if not sources:
      log_warning(f"No source files found in {escape(str(input_path))}")
      return 0

    if json_trace_path:
      log_warning("--json-trace is only supported for single files; ignoring it.")

    log_info(f"Processing {len(sources)} files from {escape(str(input_path))}...")

    for src_file in sources:
      rel_path = src_file.relative_to(input_path)
      dest_file = output_path / rel_path if output_path else None
      batch_results[str(rel_path)] = _convert_single_file(src_file, dest_file, engine, dry_run)

  _print_batch_summary(batch_results)
  return 1 if any(not r.success for r in batch_results.values()) else 0


def _collect_sources(root: Path) -> List[Path]:
  """Source files under ``root``, skipping node_modules and hidden directories."""
  found = []
  for path in sorted(root.rglob("*")):
    if not path.is_file() or path.suffix.lower() not in LANGUAGE_BY_SUFFIX:
      continue
    rel_parts = path.relative_to(root).parts[:-1]
    if any(part in SKIPPED_DIRS or part.startswith(".") for part in rel_parts):
      continue
    found.append(path)
  return found


def _convert_single_file(
  input_path: Path,
  output_path: Optional[Path],
  engine: ASTEngine,
  dry_run: bool,
  json_trace_path: Optional[Path] = None,
) -> ConversionResult:
  """
  Rewrites a single file.

  Args:
      input_path: Source file path.
      output_path: Destination file path (None rewrites in place).
      engine: Configured engine.
      dry_run: Print a diff instead of writing.
      json_trace_path: Path to save trace event logs.

  Returns:
      ConversionResult: Result object containing status and code.
  """
  try:
    code = input_path.read_text(encoding="utf-8")
    result = engine.run(code, language=language_for(input_path))

    if json_trace_path and result.trace_events:
      try:
        json_trace_path.parent.mkdir(parents=True, exist_ok=True)
        with open(json_trace_path, "wt", encoding="utf-8") as f:
          json.dump(result.trace_events, f, indent=2)
        log_info(f"Trace saved to [path]{escape(str(json_trace_path))}[/path]")
      except OSError as e:
        log_error(f"Failed to write trace: {escape(str(e))}")

    if not result.success:
      log_error(f"Failed to rewrite {escape(str(input_path))}: {escape('; '.join(result.errors))}")
      return result

    for warning in result.warnings:
      log_warning(f"[path]{escape(str(input_path))}[/path] {escape(warning)}")

    output = result.output
    if output is None:
      return result

    if dry_run:
      diff = difflib.unified_diff(
        code.splitlines(keepends=True),
        output.splitlines(keepends=True),
        fromfile=str(input_path),
        tofile=str(output_path or input_path),
      )
      print("".join(diff))
      return result

    destination = output_path or input_path
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(output, encoding="utf-8")
    log_success(f"Rewrote: [path]{escape(str(input_path))}[/path] -> [path]{escape(str(destination))}[/path]")
    return result

  except Exception as e:
    log_error(f"Failed to rewrite {escape(str(input_path))}: {escape(str(e))}")
    return ConversionResult(success=False, errors=[str(e)])


def _print_batch_summary(results: Dict[str, ConversionResult]) -> None:
  """
  Renders a summary table of rewrite results to the console.

  Args:
      results: Dictionary mapping filenames to results.
  """
  total = len(results)
  rewritten = sum(1 for r in results.values() if r.success and r.changed)
  failures = sum(1 for r in results.values() if not r.success)
  flagged = [name for name, r in results.items() if not r.success or r.warnings]

  if not flagged:
    log_success(f"Batch Complete: {rewritten}/{total} files rewritten, {total - rewritten} unchanged.")
    return

  table = Table(title="Migration Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename in flagged:
    res = results[filename]
    if not res.success:
      status = "❌ Failed"
      issues = "; ".join(res.errors) if res.errors else "Unknown Error"
    else:
      status = "✏️ Rewritten" if res.changed else "⚠️ Unchanged"
      issues = "; ".join(res.warnings)
    table.add_row(escape(filename), status, escape(issues))

  console.print(table)
  console.print(
    f"\n[bold]Summary:[/bold] {rewritten} rewritten, {total - rewritten - failures} unchanged, {failures} failed."
  )
