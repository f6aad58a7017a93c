"""Tests for declaration readers."""

import json

import pytest

from docindex.errors import SourceFormatError
from docindex.indexing.sources import (
    discover_sidebar_files,
    load_declarations,
    load_input,
    load_sidebar_tree,
    parse_sidebar_js,
)
from tests.unit.sidebar_fixtures import CALL_BUILDER_SIDEBAR, MODULE, call_builder_declarations


def _write_sidebar(root, rel, text=CALL_BUILDER_SIDEBAR):
    path = root.joinpath(*rel.split("/")) / "sidebar-items.js"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestLoadDeclarations:

    def test_json_list(self, tmp_path):
        path = tmp_path / "decls.json"
        path.write_text(json.dumps(call_builder_declarations()))
        assert load_declarations(path) == call_builder_declarations()

    def test_json_wrapped(self, tmp_path):
        path = tmp_path / "decls.json"
        path.write_text(json.dumps({"declarations": call_builder_declarations()}))
        assert len(load_declarations(path)) == 5

    def test_jsonl(self, tmp_path):
        path = tmp_path / "decls.jsonl"
        lines = [json.dumps(d) for d in call_builder_declarations()]
        path.write_text("\n".join(lines[:2]) + "\n\n" + "\n".join(lines[2:]) + "\n")
        assert load_declarations(path) == call_builder_declarations()

    def test_yaml(self, tmp_path):
        path = tmp_path / "decls.yaml"
        path.write_text(
            "declarations:\n"
            "  - module_path: ink_env::call\n"
            "    kind: mod\n"
            "    name: call_builder\n"
        )
        assert load_declarations(path) == [
            {"module_path": "ink_env::call", "kind": "mod", "name": "call_builder"},
        ]

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "decls.yml"
        path.write_text("")
        assert load_declarations(path) == []

    def test_non_dict_records_passed_through(self, tmp_path):
        path = tmp_path / "decls.json"
        path.write_text('[1, "x", {"kind": "fn"}]')
        assert load_declarations(path) == [1, "x", {"kind": "fn"}]

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "decls.json"
        path.write_text("[{")
        with pytest.raises(SourceFormatError):
            load_declarations(path)

    def test_invalid_jsonl_reports_line(self, tmp_path):
        path = tmp_path / "decls.jsonl"
        path.write_text('{"kind": "fn"}\nnot json\n')
        with pytest.raises(SourceFormatError) as exc_info:
            load_declarations(path)
        assert exc_info.value.line == 2

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "decls.yaml"
        path.write_text("a: [unclosed\n")
        with pytest.raises(SourceFormatError):
            load_declarations(path)

    def test_object_without_declarations(self, tmp_path):
        path = tmp_path / "decls.json"
        path.write_text('{"kind": "fn"}')
        with pytest.raises(SourceFormatError):
            load_declarations(path)

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "decls.txt"
        path.write_text("")
        with pytest.raises(SourceFormatError):
            load_declarations(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceFormatError):
            load_declarations(tmp_path / "nope.json")


class TestParseSidebarJs:

    def test_call_builder(self):
        decls = parse_sidebar_js(CALL_BUILDER_SIDEBAR, MODULE)

        assert len(decls) == 5
        assert decls[0] == {
            "module_path": ["ink_env", "call", "call_builder"],
            "kind": "fn",
            "name": "build_call",
            "summary": "Returns a new [`CallBuilder`] to build up the parameters to a cross-contract call.",
        }
        assert {d["kind"] for d in decls} == {"fn", "mod", "struct", "trait"}

    def test_link_column(self):
        decls = parse_sidebar_js('initSidebarItems({"fn":[["f","s","fn.f.html"]]});', "a")
        assert decls[0]["link"] == "fn.f.html"

    def test_surrounding_whitespace_ignored(self):
        assert parse_sidebar_js("\n initSidebarItems({});\n", "a") == []

    @pytest.mark.parametrize(
        "text",
        [
            '{"fn": []}',
            "initSidebarItems({);",
            "initSidebarItems([]);",
            'initSidebarItems({"fn": "x"});',
        ],
    )
    def test_invalid(self, text):
        with pytest.raises(SourceFormatError):
            parse_sidebar_js(text, "a")

    def test_odd_rows_left_for_collector(self):
        decls = parse_sidebar_js('initSidebarItems({"fn":[[], 3]});', "a")
        assert decls == [
            {"module_path": ["a"], "kind": "fn"},
            {"module_path": ["a"], "kind": "fn"},
        ]


class TestSidebarTree:

    def test_discover_uses_relative_directories(self, tmp_path):
        _write_sidebar(tmp_path, "ink_env/call/call_builder")
        _write_sidebar(tmp_path, "ink_env", 'initSidebarItems({"mod":[["call",""]]});')

        found = [module for module, _ in discover_sidebar_files(tmp_path)]
        assert found == [("ink_env",), ("ink_env", "call", "call_builder")]

    def test_root_sidebar_ignored(self, tmp_path):
        (tmp_path / "sidebar-items.js").write_text("initSidebarItems({});")
        assert list(discover_sidebar_files(tmp_path)) == []

    def test_load_tree(self, tmp_path):
        _write_sidebar(tmp_path, "ink_env/call/call_builder")
        decls = load_sidebar_tree(tmp_path)
        assert len(decls) == 5
        assert all(d["module_path"] == ["ink_env", "call", "call_builder"] for d in decls)

    def test_load_input_dispatches(self, tmp_path):
        _write_sidebar(tmp_path / "docs", "a")
        decl_file = tmp_path / "decls.json"
        decl_file.write_text("[]")

        assert len(load_input(tmp_path / "docs")) == 5
        assert load_input(decl_file) == []

    def test_bare_sidebar_file_rejected(self, tmp_path):
        path = _write_sidebar(tmp_path, "a")
        with pytest.raises(SourceFormatError):
            load_declarations(path)
