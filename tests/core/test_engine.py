"""
Tests for the ASTEngine output contract.

Verifies:
1. The end-to-end rewrite of a component using every rule.
2. Unchanged input yields the ``None`` sentinel.
3. A second pass over the output is a no-op.
4. Missing configuration aborts before parsing; parse errors and unparseable
   edits fail the result.
5. Warning lines refer to the input text.
"""

import pytest

import trpc_upgrade
from trpc_upgrade.config import ConfigurationError, RuntimeConfig
from trpc_upgrade.core.codec import Edit
from trpc_upgrade.core.engine import ASTEngine
from trpc_upgrade.core.rewriter import RewriteRule

COMPONENT = """\
'use client';

import { trpc } from '~/utils/trpc';

export function Posts() {
  const utils = trpc.useUtils();
  const posts = trpc.post.list.useQuery({ limit: 10 });
  const create = trpc.post.create.useMutation({
    onSuccess: () => {
      utils.post.list.invalidate();
    },
  });
  return <List posts={posts.data} onCreate={create.mutate} />;
}
"""

EXPECTED = """\
'use client';

import { useTRPC } from '~/utils/trpc';
import { useQuery } from '@tanstack/react-query';
import { useMutation } from '@tanstack/react-query';
import { useQueryClient } from '@tanstack/react-query';

export function Posts() {
  const trpc = useTRPC();
  const queryClient = useQueryClient();
  const posts = useQuery(trpc.post.list.queryOptions({ limit: 10 }));
  const create = useMutation(trpc.post.create.mutationOptions({
    onSuccess: () => {
      queryClient.invalidateQueries(trpc.post.list.queryFilter());
    },
  }));
  return <List posts={posts.data} onCreate={create.mutate} />;
}
"""


def test_full_component(config):
  res = ASTEngine(config).run(COMPONENT)

  assert res.success
  assert res.changed
  assert res.warnings == []
  assert res.output == EXPECTED


def test_second_pass_is_noop(config):
  first = ASTEngine(config).run(COMPONENT)
  second = ASTEngine(config).run(first.code)

  assert second.success
  assert not second.changed
  assert second.output is None
  assert second.code == first.code


def test_unchanged_input_returns_sentinel(config):
  code = "export const a = 1;\n"
  res = ASTEngine(config).run(code)

  assert res.success
  assert res.output is None
  assert res.code == code


def test_missing_config_raises_before_parsing():
  with pytest.raises(ConfigurationError, match="trpc_import_name"):
    ASTEngine(RuntimeConfig(trpc_file="~/utils/trpc"))


def test_parse_error_yields_failed_result(config):
  res = ASTEngine(config).run("export function (")

  assert not res.success
  assert res.has_errors
  assert res.errors[0].startswith("Parse Error")
  assert res.output is None


def test_typescript_language(config):
  code = "import { trpc } from '~/utils/trpc';\nexport function useList() {\n  return trpc.post.list.useQuery(<Input>x);\n}\n"
  res = ASTEngine(config).run(code, language="typescript")
  assert "return useQuery(trpc.post.list.queryOptions(<Input>x));" in res.code


def test_engine_is_reusable_across_units(config):
  engine = ASTEngine(config)
  first = engine.run(COMPONENT)
  second = engine.run(COMPONENT)
  assert first.code == second.code
  assert second.warnings == []


def test_transform_api(config):
  out = trpc_upgrade.transform(COMPONENT, trpc_file="~/utils/trpc", trpc_import_name="trpc")
  assert out == EXPECTED
  assert trpc_upgrade.transform("const a = 1;\n", trpc_file="x", trpc_import_name="y") is None


def test_transform_api_errors():
  with pytest.raises(ConfigurationError):
    trpc_upgrade.transform("const a = 1;\n")
  with pytest.raises(ValueError, match="Parse Error"):
    trpc_upgrade.transform("const = ;", trpc_file="x", trpc_import_name="y")


@pytest.mark.parametrize(
  "code",
  [
    "import { trpc } from '~/utils/trpc';\nfunction C() {\n  return trpc.a.b;\n}\n",
    "function C() {\n  trpc.a.useSubscription(input, { onData() {} });\n}\n",
    "function C() {\n  const [d, q] = useSuspenseQuery(opts);\n}\n",
    "function C() {\n  const utils = trpc.useContext();\n  utils.a.b.fetch();\n}\n",
  ],
  ids=["rebind", "hooks", "suspense", "utils"],
)
def test_each_rule_is_idempotent(config, code):
  first = ASTEngine(config).run(code)
  assert first.changed

  second = ASTEngine(config).run(first.code)
  assert second.output is None


class BreakingRule(RewriteRule):
  name = "breaking"

  def apply(self, context):
    return context.document.apply([Edit.insert(0, "function (")])


def test_unparseable_edit_yields_failed_result(config):
  code = "function C() {}\n"
  res = ASTEngine(config, rules=[BreakingRule()]).run(code)

  assert not res.success
  assert res.errors[0].startswith("Rewrite Error")
  assert res.code == code
  assert res.output is None


def test_warning_lines_refer_to_input(config):
  """Lines stay those of the input even after the binding shifts the body down."""
  code = (
    "import { trpc } from '~/utils/trpc';\n"
    "function C() {\n"
    "  const utils = trpc.useUtils();\n"
    "  utils.post();\n"
    "}\n"
  )

  res = ASTEngine(config).run(code)

  assert res.changed
  assert len(res.warnings) == 1
  assert res.warnings[0].startswith("line 4:")
