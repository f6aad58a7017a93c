"""Deterministic serialization of module sidebar indexes."""

import json
import logging
from typing import Any, Iterable, Optional, Sequence

from docindex.errors import IndexInvariantError
from docindex.indexing.models import (
    DEFAULT_KIND_ORDER,
    EntryOrdering,
    IndexEntry,
    ItemKind,
    ModuleIndex,
)
from docindex.utils.validators import validate_text

logger = logging.getLogger(__name__)

FORMAT_JSON = "json"
FORMAT_SIDEBAR_JS = "sidebar-js"
OUTPUT_FORMATS = (FORMAT_JSON, FORMAT_SIDEBAR_JS)

SIDEBAR_JS_PREFIX = "initSidebarItems("
SIDEBAR_JS_SUFFIX = ");"

# Compact separators so output matches what rustdoc writes
_COMPACT = {"separators": (",", ":"), "ensure_ascii": False}


class IndexSerializer:
    """Turns a ModuleIndex into a stable text artifact.

    Kinds are emitted in ``kind_order`` regardless of how the index was
    built, and entries are sorted by name unless the index was collected in
    declaration order. Serializing the same index twice yields identical
    bytes.
    """

    def __init__(self, kind_order: Optional[Sequence[ItemKind]] = None) -> None:
        order = list(kind_order) if kind_order else list(DEFAULT_KIND_ORDER)
        if len(set(order)) != len(order):
            raise ValueError("kind_order lists a kind more than once")
        # Anything the caller left out goes last, in default order
        order.extend(kind for kind in DEFAULT_KIND_ORDER if kind not in order)
        self._kind_order: tuple[ItemKind, ...] = tuple(order)

    @property
    def kind_order(self) -> tuple[ItemKind, ...]:
        return self._kind_order

    def to_mapping(self, index: ModuleIndex) -> dict[str, list[dict[str, str]]]:
        mapping: dict[str, list[dict[str, str]]] = {}
        for kind, entries in self._ordered_sections(index):
            mapping[kind.value] = [self._entry_dict(entry) for entry in entries]
        return mapping

    def serialize(self, index: ModuleIndex, fmt: str = FORMAT_SIDEBAR_JS) -> str:
        if fmt == FORMAT_JSON:
            return json.dumps(self.to_mapping(index), **_COMPACT)
        if fmt == FORMAT_SIDEBAR_JS:
            sections = {
                kind.value: [self._entry_row(entry) for entry in entries]
                for kind, entries in self._ordered_sections(index)
            }
            return SIDEBAR_JS_PREFIX + json.dumps(sections, **_COMPACT) + SIDEBAR_JS_SUFFIX
        raise ValueError(f"Unknown output format: {fmt!r} (expected one of {OUTPUT_FORMATS})")

    def serialize_batch(self, indexes: Iterable[ModuleIndex]) -> str:
        """One JSON document covering many modules, keyed by module path."""
        combined: dict[str, Any] = {}
        for index in indexes:
            if index.key in combined:
                raise IndexInvariantError(index.key, "module appears twice in batch")
            combined[index.key] = self.to_mapping(index)
        # Sort modules only; kinds inside a module keep precedence order
        ordered = {key: combined[key] for key in sorted(combined)}
        return json.dumps(ordered, indent=2, ensure_ascii=False) + "\n"

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _ordered_sections(
        self, index: ModuleIndex
    ) -> list[tuple[ItemKind, list[IndexEntry]]]:
        self._check_invariants(index)
        by_kind = {ItemKind.parse(kind): entries for kind, entries in index.items.items()}

        sections: list[tuple[ItemKind, list[IndexEntry]]] = []
        for kind in self._kind_order:
            entries = list(by_kind.get(kind, ()))
            if not entries:
                continue
            if index.ordering != EntryOrdering.DECLARATION:
                entries.sort(key=lambda e: e.name)
            sections.append((kind, entries))
        return sections

    @staticmethod
    def _check_invariants(index: ModuleIndex) -> None:
        seen_kinds: set[ItemKind] = set()
        for raw_kind, entries in index.items.items():
            try:
                kind = ItemKind.parse(raw_kind)
            except ValueError as exc:
                raise IndexInvariantError(index.key, str(exc)) from exc
            if kind in seen_kinds:
                raise IndexInvariantError(index.key, f"kind {kind.value!r} listed twice")
            seen_kinds.add(kind)

            names: set[str] = set()
            for entry in entries:
                if not isinstance(entry, IndexEntry):
                    raise IndexInvariantError(
                        index.key, f"{kind.value} section holds {type(entry).__name__}"
                    )
                if entry.name in names:
                    logger.error(
                        "Duplicate %s entry %r reached serializer for %s",
                        kind.value, entry.name, index.key,
                    )
                    raise IndexInvariantError(
                        index.key, f"duplicate {kind.value} entry {entry.name!r}"
                    )
                for field, text in (("summary", entry.summary), ("link", entry.link)):
                    if text is None:
                        continue
                    try:
                        validate_text(text, f"{field} of {entry.name!r}")
                    except ValueError as exc:
                        raise IndexInvariantError(index.key, str(exc)) from exc
                names.add(entry.name)

    @staticmethod
    def _entry_dict(entry: IndexEntry) -> dict[str, str]:
        data = {"name": entry.name, "summary": entry.summary}
        if entry.link is not None:
            data["link"] = entry.link
        return data

    @staticmethod
    def _entry_row(entry: IndexEntry) -> list[str]:
        if entry.link is not None:
            return [entry.name, entry.summary, entry.link]
        return [entry.name, entry.summary]
