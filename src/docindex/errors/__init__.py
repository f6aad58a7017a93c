"""Error types and user-facing error translation."""

from .exceptions import (
    DocIndexError,
    DuplicateEntryError,
    IndexInvariantError,
    MalformedDeclarationError,
    SourceFormatError,
)
from .translator import ErrorTranslator, UserFriendlyError

__all__ = [
    "DocIndexError",
    "DuplicateEntryError",
    "IndexInvariantError",
    "MalformedDeclarationError",
    "SourceFormatError",
    "ErrorTranslator",
    "UserFriendlyError",
]
