"""Per-module documentation sidebar indexes."""

from .models import (
    CollectionResult,
    CollectionWarning,
    EntryOrdering,
    IndexEntry,
    ItemKind,
    ModuleIndex,
    RawDeclaration,
)
from .collector import EntryCollector
from .serializer import IndexSerializer
from .store import IndexStore
from .builder import BuildReport, IndexBuilder
from .query import SidebarQuery

__all__ = [
    "CollectionResult",
    "CollectionWarning",
    "EntryOrdering",
    "IndexEntry",
    "ItemKind",
    "ModuleIndex",
    "RawDeclaration",
    "EntryCollector",
    "IndexSerializer",
    "IndexStore",
    "BuildReport",
    "IndexBuilder",
    "SidebarQuery",
]
