"""
Tests for the utils-proxy migration.

Verifies:
1. ``const utils = trpc.useUtils()`` becomes ``const queryClient = useQueryClient()``.
2. Every ``utils.<path>.<method>(...)`` call becomes a caching client call fed by a query filter.
3. Near misses are reported as warnings and leave the site untouched while valid
   sites in the same unit are still rewritten.
"""

import pytest

from trpc_upgrade.config import RuntimeConfig
from trpc_upgrade.core.engine import ASTEngine
from trpc_upgrade.core.mappings import UTIL_METHODS
from trpc_upgrade.core.rewriter import UtilsProxyRule


def _run(config, code: str):
  return ASTEngine(config, rules=[UtilsProxyRule()]).run(code)


def test_invalidate_exact_output(config):
  code = (
    "import { trpc } from '~/utils/trpc';\n"
    "function C() {\n"
    "  const utils = trpc.useUtils();\n"
    "  utils.post.list.invalidate();\n"
    "}\n"
  )

  res = _run(config, code)

  assert res.warnings == []
  assert res.code == (
    "import { trpc } from '~/utils/trpc';\n"
    "import { useQueryClient } from '@tanstack/react-query';\n"
    "function C() {\n"
    "  const queryClient = useQueryClient();\n"
    "  queryClient.invalidateQueries(trpc.post.list.queryFilter());\n"
    "}\n"
  )


@pytest.mark.parametrize("method", sorted(UTIL_METHODS))
def test_every_mapped_method(config, method):
  code = f"function C() {{\n  const utils = trpc.useUtils();\n  utils.post.{method}(input, extra);\n}}\n"

  res = _run(config, code)

  assert f"queryClient.{UTIL_METHODS[method]}(trpc.post.queryFilter(input, extra));" in res.code


def test_use_context_accessor_and_nested_callbacks(config):
  code = (
    "function C() {\n"
    "  const ctx = trpc.useContext();\n"
    "  const m = useMutation({\n"
    "    onSuccess: async () => {\n"
    "      await ctx.post.byId.cancel({ id });\n"
    "      ctx.post.byId.setData({ id }, (old) => old);\n"
    "    },\n"
    "  });\n"
    "}\n"
  )

  res = _run(config, code)

  assert "const queryClient = useQueryClient();" in res.code
  assert "await queryClient.cancelQuery(trpc.post.byId.queryFilter({ id }));" in res.code
  assert "queryClient.setQueryData(trpc.post.byId.queryFilter({ id }, (old) => old));" in res.code
  assert "ctx" not in res.code


def test_malformed_site_warns_and_others_still_rewritten(config):
  code = (
    "function C() {\n"
    "  const utils = trpc.useUtils();\n"
    "  utils.post();\n"
    "  utils.post.list.invalidate();\n"
    "}\n"
  )

  res = _run(config, code)

  assert res.success
  assert res.changed
  assert "  utils.post();\n" in res.code
  assert "queryClient.invalidateQueries(trpc.post.list.queryFilter());" in res.code
  assert len(res.warnings) == 1
  assert "missing procedure path" in res.warnings[0]
  assert res.warnings[0].startswith("line 3:")


def test_unmapped_method_left_untouched(config):
  code = "function C() {\n  const utils = trpc.useUtils();\n  utils.post.add.isMutating();\n}\n"

  res = _run(config, code)

  assert "utils.post.add.isMutating();" in res.code
  assert any("unsupported method 'isMutating'" in w for w in res.warnings)


def test_non_call_reference_warns(config):
  code = "function C() {\n  const utils = trpc.useUtils();\n  pass(utils);\n  const p = utils.post.list;\n}\n"

  res = _run(config, code)

  assert len(res.warnings) == 2
  assert "not a proxy call" in res.warnings[0]
  assert "failed to walk up the tree" in res.warnings[1]


def test_accessor_with_arguments_is_skipped(config):
  code = "function C() {\n  const theme = React.useContext(ThemeContext);\n  theme.colors.primary.get();\n}\n"

  res = _run(config, code)

  assert not res.changed
  assert res.warnings == []


def test_unbound_accessor_warns(config):
  res = _run(config, "function C() {\n  trpc.useUtils().post.list.invalidate();\n}\n")
  assert not res.changed
  assert "not bound to a plain identifier" in res.warnings[0]


def test_existing_query_client_blocks_rewrite(config):
  code = (
    "function C() {\n"
    "  const queryClient = useQueryClient();\n"
    "  const utils = trpc.useUtils();\n"
    "  utils.post.list.invalidate();\n"
    "}\n"
  )

  res = _run(config, code)

  assert not res.changed
  assert "already declared" in res.warnings[0]


def test_two_components_each_get_a_client(config):
  code = (
    "function A() {\n"
    "  const utils = trpc.useUtils();\n"
    "  utils.a.invalidate();\n"
    "}\n"
    "function B() {\n"
    "  const utils = trpc.useUtils();\n"
    "  utils.b.refetch();\n"
    "}\n"
  )

  res = _run(config, code)

  assert res.code.count("const queryClient = useQueryClient();") == 2
  assert "queryClient.invalidateQueries(trpc.a.queryFilter());" in res.code
  assert "queryClient.refetchQueries(trpc.b.queryFilter());" in res.code
  assert res.code.count("import { useQueryClient }") == 1
  assert res.warnings == []


def test_hoisted_names_follow_config():
  config = RuntimeConfig(
    trpc_file="~/utils/trpc",
    trpc_import_name="trpc",
    proxy_root="api",
    query_client_name="client",
  )
  code = "function C() {\n  const utils = trpc.useUtils();\n  utils.post.list.invalidate();\n}\n"

  res = _run(config, code)

  assert "const client = useQueryClient();" in res.code
  assert "client.invalidateQueries(api.post.list.queryFilter());" in res.code
