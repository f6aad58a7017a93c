"""Readers that turn input files into raw declaration records."""

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Union

import yaml

from docindex.errors import SourceFormatError
from docindex.indexing.models import join_module_path, split_module_path
from docindex.indexing.serializer import SIDEBAR_JS_PREFIX, SIDEBAR_JS_SUFFIX

logger = logging.getLogger(__name__)

SIDEBAR_FILE_NAME = "sidebar-items.js"
MAX_SOURCE_SIZE = 50_000_000


def load_declarations(path: Path) -> list[Any]:
    """Read declaration records from a .json, .jsonl or .yaml file.

    Records are returned as-is; anything that is not a usable declaration is
    left for the collector to report.
    """
    path = Path(path)
    try:
        if path.stat().st_size > MAX_SOURCE_SIZE:
            raise SourceFormatError(str(path), "file too large")
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceFormatError(str(path), exc.strerror or str(exc)) from exc

    suffix = path.suffix.lower()
    if suffix == ".json":
        return _unwrap(path, _parse_json(path, text))
    if suffix == ".jsonl":
        return list(_parse_json_lines(path, text))
    if suffix in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise SourceFormatError(str(path), f"invalid YAML: {exc}") from exc
        return _unwrap(path, data)
    if path.name == SIDEBAR_FILE_NAME or suffix == ".js":
        raise SourceFormatError(
            str(path), "sidebar artifacts need a module path; pass their directory instead"
        )
    raise SourceFormatError(str(path), f"unsupported file type {suffix or '(none)'!r}")


def parse_sidebar_js(
    text: str, module_path: Union[str, tuple[str, ...], list[str]], source: str = "<string>"
) -> list[dict[str, Any]]:
    """Read an ``initSidebarItems({...});`` artifact back into declarations."""
    body = text.strip()
    if not (body.startswith(SIDEBAR_JS_PREFIX) and body.endswith(SIDEBAR_JS_SUFFIX)):
        raise SourceFormatError(source, "not an initSidebarItems(...) call")
    payload = body[len(SIDEBAR_JS_PREFIX):-len(SIDEBAR_JS_SUFFIX)]
    data = _parse_json(Path(source), payload)
    if not isinstance(data, dict):
        raise SourceFormatError(source, "sidebar payload must be an object")

    segments = split_module_path(module_path)
    declarations: list[dict[str, Any]] = []
    for kind, rows in data.items():
        if not isinstance(rows, list):
            raise SourceFormatError(source, f"section {kind!r} must be a list")
        for row in rows:
            record: dict[str, Any] = {"module_path": list(segments), "kind": kind}
            if isinstance(row, list) and row:
                record["name"] = row[0]
                if len(row) > 1:
                    record["summary"] = row[1]
                if len(row) > 2:
                    record["link"] = row[2]
            elif isinstance(row, dict):
                record.update({k: v for k, v in row.items() if k != "module_path"})
            # Other row shapes keep only kind; the collector flags them
            declarations.append(record)
    return declarations


def discover_sidebar_files(root: Path) -> Iterator[tuple[tuple[str, ...], Path]]:
    """Yield (module_path, file) for every sidebar-items.js under ``root``.

    The module path is the file's directory relative to ``root``.
    """
    root = Path(root)
    found = sorted(root.rglob(SIDEBAR_FILE_NAME), key=lambda p: p.parent.relative_to(root).parts)
    for path in found:
        rel_parts = path.parent.relative_to(root).parts
        if not rel_parts:
            logger.warning("Ignoring %s: sidebar at the root has no module path", path)
            continue
        yield tuple(rel_parts), path


def load_sidebar_tree(root: Path) -> list[dict[str, Any]]:
    """Collect declarations from every sidebar-items.js under a docs tree."""
    declarations: list[dict[str, Any]] = []
    for module_path, path in discover_sidebar_files(root):
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceFormatError(str(path), exc.strerror or str(exc)) from exc
        records = parse_sidebar_js(text, module_path, source=str(path))
        logger.debug(
            "Read %d declarations for %s from %s",
            len(records), join_module_path(module_path), path,
        )
        declarations.extend(records)
    return declarations


def load_input(path: Path) -> list[Any]:
    """Load declarations from a declaration file or a directory of sidebar artifacts."""
    path = Path(path)
    if path.is_dir():
        return load_sidebar_tree(path)
    return load_declarations(path)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _parse_json(path: Path, text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise SourceFormatError(str(path), f"invalid JSON: {exc.msg}", line=exc.lineno) from exc


def _parse_json_lines(path: Path, text: str) -> Iterator[Any]:
    for lineno, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        try:
            yield json.loads(line)
        except json.JSONDecodeError as exc:
            raise SourceFormatError(str(path), f"invalid JSON: {exc.msg}", line=lineno) from exc


def _unwrap(path: Path, data: Any) -> list[Any]:
    if isinstance(data, dict) and "declarations" in data:
        data = data["declarations"]
    if data is None:
        return []
    if not isinstance(data, list):
        raise SourceFormatError(str(path), "expected a list of declarations")
    return data
