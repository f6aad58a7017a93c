"""Exception taxonomy for sidebar index generation."""

from typing import Optional


class DocIndexError(Exception):
    """Base exception for all docindex failures."""


class MalformedDeclarationError(DocIndexError):
    """A raw declaration is missing a usable name, kind or module path."""

    def __init__(self, reason: str, index: int = -1):
        self.reason = reason
        self.index = index
        super().__init__(reason)


class DuplicateEntryError(DocIndexError):
    """The same (kind, name) pair was declared twice in one module."""

    def __init__(self, module: str, kind: str, name: str):
        self.module = module
        self.kind = kind
        self.name = name
        super().__init__(f"Duplicate {kind} entry {name!r} in module {module!r}")


class IndexInvariantError(DocIndexError):
    """A ModuleIndex reached the serializer in an inconsistent state."""

    def __init__(self, module: str, detail: str):
        self.module = module
        self.detail = detail
        super().__init__(f"Index invariant violated for {module!r}: {detail}")


class SourceFormatError(DocIndexError):
    """An input file could not be read as declarations."""

    def __init__(self, source: str, detail: str, line: Optional[int] = None):
        self.source = source
        self.detail = detail
        self.line = line
        where = f"{source}:{line}" if line is not None else source
        super().__init__(f"Cannot read declarations from {where}: {detail}")
