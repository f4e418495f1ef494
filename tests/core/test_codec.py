"""
Tests for the tree-sitter Source Codec.

Verifies:
1. Parsing and serialization are lossless.
2. Batch edits splice in creation order and reject overlaps.
3. Formatting helpers mirror the file's existing style.
"""

import pytest

from trpc_upgrade.core.codec import (
  Edit,
  SourceDocument,
  SourceParseError,
  declared_names,
  language_for,
  string_value,
)


def test_roundtrip_preserves_source():
  code = "// header\nimport { a } from 'a'\n\nexport function A() {\n    return <div>{a}</div>\n}\n"
  doc = SourceDocument(code)
  assert doc.code == code


def test_parse_error_raises():
  with pytest.raises(SourceParseError):
    SourceDocument("const = ;")


def test_parse_error_is_value_error():
  """Callers catching ValueError also catch parse failures."""
  with pytest.raises(ValueError):
    SourceDocument("function (")


def test_language_for_suffix():
  assert language_for("a/b/page.tsx") == "tsx"
  assert language_for("hooks.ts") == "typescript"
  assert language_for("legacy.MTS") == "typescript"
  assert language_for("index.jsx") == "tsx"
  assert language_for("README") == "tsx"


def test_typescript_grammar_accepts_angle_assertions():
  doc = SourceDocument("const x = <number>y;\n", language="typescript")
  assert doc.code == "const x = <number>y;\n"


def test_functions_in_document_order():
  code = "function a() {}\nconst b = () => 1;\nconst c = function () { return () => 2; };\n"
  doc = SourceDocument(code)
  kinds = [node.type for node in doc.functions()]
  assert len(kinds) == 4
  assert kinds[0] == "function_declaration"
  assert kinds[1] == "arrow_function"
  assert kinds[3] == "arrow_function"


def test_imports_are_top_level_only():
  doc = SourceDocument("import a from 'a';\nimport { b } from \"b\";\nconst c = 1;\n")
  sources = [string_value(stmt.child_by_field_name("source")) for stmt in doc.imports()]
  assert sources == ["a", "b"]


def test_apply_keeps_creation_order_for_same_offset():
  doc = SourceDocument("const a = 1;")
  name = doc.find("identifier")[0]

  doc.apply([Edit.insert(name.start_byte, "x"), Edit.replace(name, "b"), Edit.insert(name.start_byte, "y")])

  assert doc.code == "const xyb = 1;"


def test_apply_insertion_at_replacement_end():
  doc = SourceDocument("f(a);")
  arg = doc.find("identifier", predicate=lambda n: doc.text(n) == "a")[0]

  doc.apply([Edit.replace(arg, "b"), Edit.insert(arg.end_byte, ", c")])

  assert doc.code == "f(b, c);"


def test_apply_rejects_overlapping_replacements():
  doc = SourceDocument("const abc = 1;")
  with pytest.raises(ValueError, match="Overlapping"):
    doc.apply([Edit(0, 5, "let"), Edit(3, 8, "x")])


def test_apply_rejects_insertion_inside_replacement():
  doc = SourceDocument("const abc = 1;")
  with pytest.raises(ValueError, match="Insertion"):
    doc.apply([Edit(0, 5, "let"), Edit.insert(2, "x")])


def test_apply_empty_batch_is_noop():
  doc = SourceDocument("const a = 1;")
  assert doc.apply([]) is False
  assert doc.code == "const a = 1;"


def test_original_line_survives_edits():
  doc = SourceDocument("a();\nb();\nc();\n")
  doc.apply([Edit.insert(0, "x();\ny();\n")])
  a_call = doc.find("call_expression", predicate=lambda n: doc.text(n) == "a()")[0]
  doc.apply([Edit.replace(a_call, "a(\n1\n)")])

  calls = {doc.text(n): n for n in doc.find("call_expression")}
  assert doc.original_line(calls["c()"]) == 3
  assert doc.original_line(calls["b()"]) == 2
  # Nodes inside inserted text map to where the insertion was made.
  assert doc.original_line(calls["y()"]) == 1
  assert doc.original_line(calls["a(\n1\n)"]) == 1


def test_apply_invalidates_by_reparse():
  """After an edit, fresh queries see the new tree."""
  doc = SourceDocument("const a = 1;")
  doc.apply([Edit.replace(doc.find("identifier")[0], "renamed")])
  assert [doc.text(n) for n in doc.find("identifier")] == ["renamed"]


def test_apply_producing_invalid_source_raises_and_keeps_document():
  doc = SourceDocument("const a = 1;")
  with pytest.raises(SourceParseError):
    doc.apply([Edit.replace(doc.find("identifier")[0], "")])
  assert doc.code == "const a = 1;"


def test_formatting_helpers():
  code = "import { a } from \"a\"\r\nfunction f() {\r\n    const x = 1\r\n}\r\n"
  doc = SourceDocument(code)
  declaration = doc.find("lexical_declaration")[0]

  assert doc.newline == "\r\n"
  assert doc.quote() == '"'
  assert doc.line_indent(declaration) == "    "
  assert doc.terminator(declaration) == ""


def test_quote_defaults_to_single():
  doc = SourceDocument("const a = 1;\n")
  assert doc.quote() == "'"
  assert doc.newline == "\n"
  assert doc.terminator(doc.find("lexical_declaration")[0]) == ";"


def test_declared_names_direct_children_only():
  doc = SourceDocument("function f() { const a = 1, b = 2; let [c] = x; if (y) { const d = 3; } }")
  body = doc.functions()[0].child_by_field_name("body")
  assert declared_names(body) == {"a", "b"}
