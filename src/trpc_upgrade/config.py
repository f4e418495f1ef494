"""
Runtime Configuration Store.

Holds the two values every run needs (the module path of the legacy tRPC
client and the name it is imported under) together with the fixed names used
in the generated code. Values come from ``[tool.trpc_upgrade]`` in the nearest
``pyproject.toml`` and are overridden by command-line arguments.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib

TOOL_SECTION = "trpc_upgrade"


class ConfigurationError(ValueError):
  """Raised when required configuration is missing."""


class RuntimeConfig(BaseModel):
  """
  Global configuration container for the rewrite engine.
  """

  trpc_file: Optional[str] = Field(None, description="Import path of the legacy client module (e.g. '~/utils/trpc').")
  trpc_import_name: Optional[str] = Field(None, description="Local name of the legacy client import (e.g. 'trpc').")

  trpc_accessor: str = Field("useTRPC", description="Accessor hook replacing the legacy import.")
  proxy_root: str = Field("trpc", description="Identifier used as the root of rewritten proxy paths.")
  query_filter: str = Field("queryFilter", description="Proxy method producing a query filter.")
  query_client_name: str = Field("queryClient", description="Local name bound to the caching client.")
  query_client_hook: str = Field("useQueryClient", description="Hook returning the caching client.")
  query_client_library: str = Field("@tanstack/react-query", description="Module exporting the client hook.")

  def require(self) -> "RuntimeConfig":
    """
    Validates that the required fields are present.

    Returns:
        RuntimeConfig: ``self``, for chaining.

    Raises:
        ConfigurationError: If ``trpc_file`` or ``trpc_import_name`` is missing.
    """
    missing = [name for name in ("trpc_file", "trpc_import_name") if not getattr(self, name)]
    if missing:
      raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")
    return self

  @classmethod
  def load(
    cls,
    trpc_file: Optional[str] = None,
    trpc_import_name: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    search_path: Optional[Path] = None,
  ) -> "RuntimeConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        trpc_file: Override for the legacy module path.
        trpc_import_name: Override for the legacy import name.
        overrides: Additional ``key=value`` settings (e.g. ``proxy_root``).
        search_path: Directory to start searching for TOML config.

    Returns:
        RuntimeConfig: The merged configuration (not yet validated by ``require``).
    """
    start_dir = search_path or Path.cwd()
    toml_config, _ = _load_toml_settings(start_dir)

    merged = {key: value for key, value in toml_config.items() if key in cls.model_fields}
    merged.update({key: value for key, value in (overrides or {}).items() if key in cls.model_fields})
    if trpc_file:
      merged["trpc_file"] = trpc_file
    if trpc_import_name:
      merged["trpc_import_name"] = trpc_import_name

    return cls(**merged)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches the directory and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError):
        return {}, None

      section = data.get("tool", {}).get(TOOL_SECTION, {})
      # Accept the camelCase spelling used by the JS codemod options too.
      aliases = {"trpcFile": "trpc_file", "trpcImportName": "trpc_import_name"}
      return {aliases.get(key, key): value for key, value in section.items()}, parent

  return {}, None


def parse_cli_key_values(items: Optional[List[str]]) -> Dict[str, Any]:
  """
  Parses a list of 'key=value' strings into a dictionary.

  Args:
      items: Raw strings from the command line.

  Returns:
      Dict[str, Any]: Parsed settings. Entries without '=' are ignored.
  """
  result: Dict[str, Any] = {}
  if not items:
    return result

  for item in items:
    if "=" not in item:
      continue
    key, value = item.split("=", 1)
    result[key.strip()] = value.strip()

  return result
