"""Tests for EntryCollector grouping, skip-and-report and duplicate policy."""

import logging

import pytest

from docindex.indexing.collector import DUPLICATE, MALFORMED, EntryCollector
from docindex.indexing.models import EntryOrdering, ItemKind, RawDeclaration
from tests.unit.sidebar_fixtures import MODULE, call_builder_declarations


def _decl(**overrides) -> dict:
    defaults = dict(kind="fn", name="build_call", summary="Returns a new CallBuilder.")
    defaults.update(overrides)
    return defaults


def _names(result, kind):
    return [e.name for e in result.index.entries(kind)]


class TestGrouping:

    def test_call_builder_scenario(self):
        result = EntryCollector().collect(MODULE, call_builder_declarations())

        assert result.warnings == []
        assert result.index.module_path == ("ink_env", "call", "call_builder")
        assert _names(result, ItemKind.FUNCTION) == ["build_call"]
        assert _names(result, ItemKind.MODULE) == ["seal"]
        assert _names(result, ItemKind.STRUCT) == ["CallBuilder", "CallParams"]
        assert _names(result, ItemKind.TRAIT) == ["IndicateReturnType"]

    def test_empty_summary_kept(self):
        result = EntryCollector().collect(MODULE, call_builder_declarations())
        (seal,) = result.index.entries(ItemKind.MODULE)
        assert seal.summary == ""

    def test_missing_summary_becomes_empty(self):
        result = EntryCollector().collect("a", [{"kind": "mod", "name": "seal"}])
        assert result.index.entries(ItemKind.MODULE)[0].summary == ""

    def test_kind_aliases_accepted(self):
        result = EntryCollector().collect("a", [_decl(kind="function")])
        assert _names(result, ItemKind.FUNCTION) == ["build_call"]

    def test_link_preserved(self):
        result = EntryCollector().collect("a", [_decl(link="fn.build_call.html")])
        assert result.index.entries(ItemKind.FUNCTION)[0].link == "fn.build_call.html"

    def test_raw_declaration_objects_accepted(self):
        raw = RawDeclaration(module_path="a", kind="struct", name="CallParams")
        result = EntryCollector().collect("a", [raw])
        assert _names(result, ItemKind.STRUCT) == ["CallParams"]

    def test_empty_input(self):
        result = EntryCollector().collect("a", [])
        assert result.index.items == {}
        assert result.warnings == []

    def test_declaration_order(self):
        collector = EntryCollector(EntryOrdering.DECLARATION)
        result = collector.collect(MODULE, call_builder_declarations())
        assert _names(result, ItemKind.STRUCT) == ["CallParams", "CallBuilder"]
        assert result.index.ordering is EntryOrdering.DECLARATION

    def test_alphabetical_is_codepoint_order(self):
        decls = [_decl(kind="struct", name=n) for n in ("beta", "Alpha", "alpha", "_x")]
        result = EntryCollector().collect("a", decls)
        assert _names(result, ItemKind.STRUCT) == ["Alpha", "_x", "alpha", "beta"]

    def test_invalid_module_path_raises(self):
        with pytest.raises(ValueError):
            EntryCollector().collect("", [_decl()])


class TestMalformed:

    @pytest.mark.parametrize(
        "decl",
        [
            {"kind": "fn", "summary": "no name"},
            {"name": "build_call", "summary": "no kind"},
            _decl(name=""),
            _decl(name="   "),
            _decl(name=42),
            _decl(name="not an ident"),
            _decl(kind="class"),
            _decl(summary=["not", "text"]),
            _decl(link=""),
            _decl(summary="bad \ud800"),
            _decl(link="fn.\udc00.html"),
            "not a mapping",
            None,
        ],
    )
    def test_excluded_with_one_warning(self, decl):
        result = EntryCollector().collect("a", [decl])
        assert result.index.entry_count() == 0
        assert len(result.warnings) == 1
        assert result.warnings[0].code == MALFORMED
        assert result.warnings[0].index == 0

    def test_collection_continues_after_malformed(self):
        decls = [{"kind": "fn"}, _decl(), {"name": "orphan"}, _decl(kind="struct", name="S")]
        result = EntryCollector().collect("a", decls)

        assert _names(result, ItemKind.FUNCTION) == ["build_call"]
        assert _names(result, ItemKind.STRUCT) == ["S"]
        assert [w.index for w in result.warnings] == [0, 2]

    def test_wrong_module_is_malformed(self):
        result = EntryCollector().collect("a", [_decl(module_path="b")])
        assert result.index.entry_count() == 0
        assert result.warnings[0].code == MALFORMED
        assert "'b'" in result.warnings[0].message

    def test_warning_names_the_problem(self):
        result = EntryCollector().collect("a", [{"kind": "fn"}])
        assert result.warnings[0].message == "missing name"
        assert result.warnings[0].module == "a"

    def test_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            EntryCollector().collect("a", [{"kind": "fn"}])
        assert "Skipping malformed declaration #0" in caplog.text


class TestDuplicates:

    def test_first_declaration_wins(self):
        decls = [_decl(summary="first"), _decl(summary="second")]
        result = EntryCollector().collect("a", decls)

        entries = result.index.entries(ItemKind.FUNCTION)
        assert len(entries) == 1
        assert entries[0].summary == "first"
        assert len(result.warnings) == 1
        assert result.warnings[0].code == DUPLICATE
        assert result.warnings[0].index == 1

    def test_same_name_different_kind_is_not_duplicate(self):
        decls = [_decl(kind="fn", name="seal"), _decl(kind="mod", name="seal")]
        result = EntryCollector().collect("a", decls)
        assert result.warnings == []
        assert result.index.entry_count() == 2

    def test_alias_and_tag_collide(self):
        decls = [_decl(kind="fn"), _decl(kind="function")]
        result = EntryCollector().collect("a", decls)
        assert result.index.entry_count() == 1
        assert [w.code for w in result.warnings] == [DUPLICATE]

    def test_no_duplicate_pairs_in_output(self):
        decls = call_builder_declarations() * 3
        result = EntryCollector().collect(MODULE, decls)
        for kind in result.index.kinds():
            names = [e.name for e in result.index.entries(kind)]
            assert len(names) == len(set(names))
        assert len(result.warnings) == 10

    def test_logged(self, caplog):
        with caplog.at_level(logging.WARNING):
            EntryCollector().collect("a", [_decl(), _decl()])
        assert "Duplicate fn entry 'build_call'" in caplog.text


class TestCollectAll:

    def test_groups_by_module(self):
        decls = call_builder_declarations() + [
            {"module_path": "ink_env::call", "kind": "mod", "name": "call_builder"},
        ]
        results = EntryCollector().collect_all(decls)

        assert list(results) == ["ink_env::call", MODULE]
        assert results[MODULE].index.entry_count() == 5
        assert results["ink_env::call"].index.entry_count() == 1

    def test_module_path_as_list(self):
        results = EntryCollector().collect_all([_decl(module_path=["a", "b"])])
        assert list(results) == ["a::b"]

    def test_missing_module_path_reported_under_empty_key(self):
        results = EntryCollector().collect_all([_decl(), _decl(module_path="a")])

        assert results[""].index.entry_count() == 0
        assert [w.index for w in results[""].warnings] == [0]
        assert results["a"].warnings == []

    @pytest.mark.parametrize("path", ["", "a::", "a::b c", 7, ["a", None]])
    def test_invalid_module_path_is_malformed(self, path):
        results = EntryCollector().collect_all([_decl(module_path=path)])
        assert list(results) == [""]
        assert results[""].warnings[0].code == MALFORMED

    def test_warning_positions_are_stream_relative(self):
        decls = [
            _decl(module_path="a"),
            _decl(module_path="b"),
            _decl(module_path="a"),
        ]
        results = EntryCollector().collect_all(decls)
        assert [w.index for w in results["a"].warnings] == [2]
