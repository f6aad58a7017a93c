"""Validation utilities for module path segments and item names."""

import re

_IDENTIFIER_RE = re.compile(r"^(r#)?[A-Za-z_][A-Za-z0-9_]*$")


def validate_item_name(name: str) -> str:
    """
    Validate a documented item name.

    Accepts plain identifiers and raw identifiers (``r#type``).

    Args:
        name: Item name to validate

    Returns:
        Validated name

    Raises:
        ValueError: If name is empty or not an identifier
    """
    if not name:
        raise ValueError("Item name cannot be empty")

    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid item name: {name!r}")

    return name


def validate_module_path(segments: tuple[str, ...]) -> tuple[str, ...]:
    """
    Validate module path segments before they are used as directory names.

    Args:
        segments: Module path segments, outermost first

    Returns:
        Validated segments

    Raises:
        ValueError: If the path is empty or any segment is not an identifier
    """
    if not segments:
        raise ValueError("Module path cannot be empty")

    for segment in segments:
        if not isinstance(segment, str) or not segment:
            raise ValueError(f"Empty module path segment in {segments!r}")
        # Raw identifiers are not valid directory names
        if not _IDENTIFIER_RE.match(segment) or segment.startswith("r#"):
            raise ValueError(f"Invalid module path segment: {segment!r}")

    return segments


def validate_text(value: str, field: str = "text") -> str:
    """
    Validate free text that ends up in a UTF-8 artifact.

    Lone surrogates survive JSON decoding but cannot be written to disk.

    Raises:
        ValueError: If the text is not encodable as UTF-8
    """
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ValueError(
            f"{field} holds a character that is not valid UTF-8 at offset {exc.start}"
        ) from None
    return value
