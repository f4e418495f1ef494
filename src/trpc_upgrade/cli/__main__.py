"""
Main Entry Point for the trpc-upgrade CLI.

This module handles argument parsing and dispatches to the command handlers
exposed by `trpc_upgrade.cli.commands`.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from trpc_upgrade import __version__
from trpc_upgrade.cli import commands
from trpc_upgrade.config import parse_cli_key_values


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="trpc-upgrade: migrate tRPC React hooks to TanStack React Query")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command", required=True)

  # --- Command: CONVERT ---
  cmd_conv = subparsers.add_parser("convert", help="Rewrite a source file or directory")
  cmd_conv.add_argument("path", type=Path, help="Input source file or directory")
  cmd_conv.add_argument("--trpc-file", default=None, help="Import path of the legacy client (default: from toml)")
  cmd_conv.add_argument(
    "--trpc-import-name", default=None, help="Name the legacy client is imported as (default: from toml)"
  )
  cmd_conv.add_argument("--out", type=Path, help="Output destination (file or dir). Default: rewrite in place")
  cmd_conv.add_argument("--dry-run", action="store_true", help="Print a diff instead of writing files")
  cmd_conv.add_argument(
    "--json-trace", type=Path, default=None, help="Dump the execution trace of a single file to a JSON file."
  )
  cmd_conv.add_argument(
    "--config",
    nargs="*",
    help="Extra settings in key=value format (e.g. query_client_name=client)",
  )

  # --- Command: RULES ---
  subparsers.add_parser("rules", help="Show the hook and utility method migration tables")

  args = parser.parse_args(argv)

  if args.command == "convert":
    settings = parse_cli_key_values(args.config)
    return commands.handle_convert(
      args.path,
      args.out,
      args.trpc_file,
      args.trpc_import_name,
      args.dry_run,
      settings,
      args.json_trace,
    )

  elif args.command == "rules":
    return commands.handle_rules()

  return 0


if __name__ == "__main__":
  sys.exit(main())
