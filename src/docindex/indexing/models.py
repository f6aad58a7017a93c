"""Data models for per-module documentation sidebar indexes."""

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

MODULE_PATH_SEPARATOR = "::"


class ItemKind(str, Enum):
    FUNCTION = "fn"
    MODULE = "mod"
    MACRO = "macro"
    STRUCT = "struct"
    ENUM = "enum"
    UNION = "union"
    TRAIT = "trait"
    TYPE_ALIAS = "type"
    CONSTANT = "constant"
    STATIC = "static"
    PRIMITIVE = "primitive"
    KEYWORD = "keyword"

    @classmethod
    def parse(cls, value: Union[str, "ItemKind"]) -> "ItemKind":
        """Resolve a sidebar tag or one of its long-form aliases."""
        if isinstance(value, ItemKind):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Item kind must be a string, got {type(value).__name__}")
        tag = value.strip().lower()
        try:
            return cls(tag)
        except ValueError:
            pass
        kind = _KIND_ALIASES.get(tag)
        if kind is None:
            raise ValueError(f"Unknown item kind: {value!r}")
        return kind

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]


_KIND_ALIASES: dict[str, ItemKind] = {
    "function": ItemKind.FUNCTION,
    "module": ItemKind.MODULE,
    "interface": ItemKind.TRAIT,
    "type-alias": ItemKind.TYPE_ALIAS,
    "typedef": ItemKind.TYPE_ALIAS,
    "const": ItemKind.CONSTANT,
}

# Section headings used when rendering a sidebar
_KIND_LABELS: dict[ItemKind, str] = {
    ItemKind.FUNCTION: "Functions",
    ItemKind.MODULE: "Modules",
    ItemKind.MACRO: "Macros",
    ItemKind.STRUCT: "Structs",
    ItemKind.ENUM: "Enums",
    ItemKind.UNION: "Unions",
    ItemKind.TRAIT: "Traits",
    ItemKind.TYPE_ALIAS: "Type Definitions",
    ItemKind.CONSTANT: "Constants",
    ItemKind.STATIC: "Statics",
    ItemKind.PRIMITIVE: "Primitive Types",
    ItemKind.KEYWORD: "Keywords",
}

DEFAULT_KIND_ORDER: tuple[ItemKind, ...] = (
    ItemKind.FUNCTION,
    ItemKind.MODULE,
    ItemKind.MACRO,
    ItemKind.STRUCT,
    ItemKind.ENUM,
    ItemKind.UNION,
    ItemKind.TRAIT,
    ItemKind.TYPE_ALIAS,
    ItemKind.CONSTANT,
    ItemKind.STATIC,
    ItemKind.PRIMITIVE,
    ItemKind.KEYWORD,
)


class EntryOrdering(str, Enum):
    ALPHABETICAL = "alphabetical"
    DECLARATION = "declaration"


def split_module_path(value: Union[str, list[str], tuple[str, ...]]) -> tuple[str, ...]:
    """Normalise ``a::b::c`` or a segment sequence into a tuple of segments."""
    if isinstance(value, str):
        parts = value.split(MODULE_PATH_SEPARATOR)
    else:
        parts = list(value)
    return tuple(p.strip() if isinstance(p, str) else p for p in parts)


def join_module_path(segments: tuple[str, ...]) -> str:
    return MODULE_PATH_SEPARATOR.join(segments)


class RawDeclaration(BaseModel):
    """One item declaration as handed over by an upstream extractor.

    Only ``module_path`` is required here; the collector decides whether the
    remaining fields are usable, so nothing else is validated at this layer.
    """

    module_path: tuple[str, ...]
    kind: Optional[Any] = None
    name: Optional[Any] = None
    summary: Optional[Any] = None
    link: Optional[Any] = None

    @field_validator("module_path", mode="before")
    @classmethod
    def _split_path(cls, v: Any) -> Any:
        if isinstance(v, (str, list, tuple)):
            return split_module_path(v)
        return v

    @property
    def module_key(self) -> str:
        return join_module_path(self.module_path)


class IndexEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    summary: str = ""
    link: Optional[str] = None


class ModuleIndex(BaseModel):
    """Immutable sidebar index of a single documented module."""

    model_config = ConfigDict(frozen=True)

    module_path: tuple[str, ...]
    items: Mapping[ItemKind, tuple[IndexEntry, ...]] = Field(default_factory=dict, validate_default=True)
    ordering: EntryOrdering = EntryOrdering.ALPHABETICAL

    @field_validator("module_path", mode="before")
    @classmethod
    def _split_path(cls, v: Any) -> Any:
        if isinstance(v, (str, list)):
            return split_module_path(v)
        return v

    @field_validator("items")
    @classmethod
    def _freeze_items(cls, v: Mapping) -> Mapping:
        return MappingProxyType(dict(v))

    @property
    def key(self) -> str:
        return join_module_path(self.module_path)

    def entries(self, kind: ItemKind) -> tuple[IndexEntry, ...]:
        return self.items.get(kind, ())

    def kinds(self) -> list[ItemKind]:
        return [kind for kind, entries in self.items.items() if entries]

    def entry_count(self) -> int:
        return sum(len(entries) for entries in self.items.values())


class CollectionWarning(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str  # "malformed" | "duplicate"
    module: str
    message: str
    index: int = -1


class CollectionResult(BaseModel):
    index: ModuleIndex
    warnings: list[CollectionWarning] = Field(default_factory=list)
