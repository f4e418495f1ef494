"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Tracer isolation between tests.
- A recording Rich console for asserting on CLI output.
- Shared configuration and document factories.
"""

import sys
from pathlib import Path

import pytest
from rich.console import Console

# Add src to path so we can import 'trpc_upgrade' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from trpc_upgrade.config import RuntimeConfig  # noqa: E402
from trpc_upgrade.core.codec import SourceDocument  # noqa: E402
from trpc_upgrade.core.context import PassContext  # noqa: E402
from trpc_upgrade.core.tracer import reset_tracer  # noqa: E402
from trpc_upgrade.utils.console import THEME, reset_console, set_console  # noqa: E402

TRPC_FILE = "~/utils/trpc"
TRPC_NAME = "trpc"


@pytest.fixture(autouse=True)
def clean_tracer():
  """Each test starts with an empty global trace."""
  reset_tracer()
  yield
  reset_tracer()


@pytest.fixture
def recorded_console():
  """
  Swaps the global console for a wide recording one.

  Yields:
      Console: Use ``export_text()`` to read what was printed or logged.
  """
  console = Console(theme=THEME, record=True, width=200, force_terminal=False)
  set_console(console)
  yield console
  reset_console()


@pytest.fixture
def config() -> RuntimeConfig:
  return RuntimeConfig(trpc_file=TRPC_FILE, trpc_import_name=TRPC_NAME)


@pytest.fixture
def make_context(config):
  """Factory building a ``PassContext`` over a fresh document."""

  def _make(code: str, language: str = "tsx") -> PassContext:
    return PassContext(SourceDocument(code, language=language), config)

  return _make
