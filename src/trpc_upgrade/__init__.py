"""
trpc-upgrade Package.

A deterministic source rewriter migrating React components from the classic
tRPC React hooks (``trpc.post.list.useQuery(...)``, ``trpc.useUtils()``) to
the TanStack React Query integration (``useQuery(trpc.post.list.queryOptions(...))``,
``useQueryClient()``).

Usage
-----

Simple String Conversion
^^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    import trpc_upgrade
    code = "import { trpc } from '~/utils/trpc';\\n..."
    result = trpc_upgrade.transform(code, trpc_file="~/utils/trpc", trpc_import_name="trpc")
    if result is None:
      print("nothing to migrate")

Advanced Usage (Engine)
^^^^^^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from trpc_upgrade import ASTEngine, RuntimeConfig

    config = RuntimeConfig(trpc_file="~/utils/trpc", trpc_import_name="trpc")
    res = ASTEngine(config).run(code)
    for warning in res.warnings:
      print(warning)
"""

from typing import Any, Optional

from trpc_upgrade.config import ConfigurationError, RuntimeConfig
from trpc_upgrade.core.codec import SourceParseError
from trpc_upgrade.core.conversion_result import ConversionResult
from trpc_upgrade.core.engine import ASTEngine

__version__ = "0.1.0"


def transform(
  code: str,
  trpc_file: Optional[str] = None,
  trpc_import_name: Optional[str] = None,
  language: str = "tsx",
  **overrides: Any,
) -> Optional[str]:
  """
  Rewrites one unit of source code.

  Args:
      code (str): The source code to rewrite.
      trpc_file (str): Import path of the legacy client module (e.g. "~/utils/trpc").
      trpc_import_name (str): Name the legacy client is imported as (e.g. "trpc").
      language (str): Grammar to parse with ("tsx" or "typescript").
      **overrides: Other ``RuntimeConfig`` fields (e.g. ``query_client_name``).

  Returns:
      Optional[str]: The rewritten source, or None when no rule applied.

  Raises:
      ConfigurationError: If ``trpc_file`` or ``trpc_import_name`` is missing.
      ValueError: If the source cannot be parsed.
  """
  config = RuntimeConfig(trpc_file=trpc_file, trpc_import_name=trpc_import_name, **overrides)
  result = ASTEngine(config).run(code, language=language)

  if not result.success:
    raise ValueError("Rewrite failed:\n" + "\n".join(result.errors))

  return result.output


__all__ = [
  "ASTEngine",
  "ConfigurationError",
  "ConversionResult",
  "RuntimeConfig",
  "SourceParseError",
  "transform",
  "__version__",
]
