"""Read-only access to a published sidebar index."""

import logging
import re
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from docindex.indexing.models import ItemKind, join_module_path
from docindex.indexing.store import IndexStore

logger = logging.getLogger(__name__)

# Lightweight cross-reference markup used in summaries: [`Name`] or [`Name::method`]
_XREF_RE = re.compile(r"\[`([^`\]]+)`\]")


class SidebarQuery:
    """Looks up sidebar sections of a combined index by module path.

    Never mutates the underlying mapping; missing modules and missing kinds
    both come back empty.
    """

    def __init__(self, mapping: Mapping[str, Any]) -> None:
        self._mapping = MappingProxyType(dict(mapping))

    @classmethod
    def from_store(cls, store: IndexStore) -> Optional["SidebarQuery"]:
        data = store.load_combined()
        if data is None:
            return None
        return cls(data)

    def modules(self) -> list[str]:
        return sorted(self._mapping)

    def get(self, module_path: Union[str, tuple[str, ...]]) -> Optional[Mapping[str, Any]]:
        section = self._mapping.get(self._key(module_path))
        if not isinstance(section, Mapping):
            return None
        return MappingProxyType(section)

    def entries(
        self, module_path: Union[str, tuple[str, ...]], kind: Union[str, ItemKind]
    ) -> list[dict[str, Any]]:
        section = self.get(module_path)
        if section is None:
            return []
        rows = section.get(ItemKind.parse(kind).value)
        if not isinstance(rows, list):
            return []
        return [dict(row) for row in rows if isinstance(row, Mapping)]

    def render_text(self, module_path: Union[str, tuple[str, ...]], plain_xrefs: bool = True) -> str:
        section = self.get(module_path)
        if section is None:
            return ""

        lines = [self._key(module_path)]
        for tag in section:
            try:
                kind = ItemKind.parse(tag)
            except ValueError:
                logger.debug("Skipping unknown kind %r in %s", tag, self._key(module_path))
                continue
            rows = self.entries(module_path, kind)
            if not rows:
                continue
            lines.append("")
            lines.append(kind.label)
            for row in rows:
                summary = row.get("summary") or ""
                if plain_xrefs:
                    summary = _XREF_RE.sub(r"\1", summary)
                line = f"  {row.get('name', '')}"
                if summary:
                    line += f" - {summary}"
                lines.append(line)
        return "\n".join(lines)

    @staticmethod
    def _key(module_path: Union[str, tuple[str, ...]]) -> str:
        if isinstance(module_path, str):
            return module_path
        return join_module_path(tuple(module_path))
