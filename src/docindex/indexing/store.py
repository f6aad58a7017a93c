"""Writes sidebar index artifacts to an output directory."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from docindex.indexing.models import ModuleIndex
from docindex.indexing.serializer import FORMAT_JSON, FORMAT_SIDEBAR_JS
from docindex.utils.atomic_io import atomic_write_text
from docindex.utils.validators import validate_module_path

logger = logging.getLogger(__name__)

_FILE_NAMES = {
    FORMAT_SIDEBAR_JS: "sidebar-items.js",
    FORMAT_JSON: "sidebar-items.json",
}
DEFAULT_COMBINED_FILE = "sidebar-index.json"


class IndexStore:
    """Lays out artifacts as ``<output_dir>/<segment>/.../sidebar-items.js``."""

    def __init__(self, output_dir: Path, combined_file_name: str = DEFAULT_COMBINED_FILE) -> None:
        self._base_dir = Path(output_dir)
        self._combined_file_name = combined_file_name

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _module_dir(self, module_path: tuple[str, ...]) -> Path:
        segments = validate_module_path(module_path)
        result = self._base_dir.joinpath(*segments)
        # Segments are identifiers, but check anyway before writing
        if not result.resolve().is_relative_to(self._base_dir.resolve()):
            raise ValueError(f"Invalid module path: {module_path!r}")
        return result

    def module_file(self, module_path: tuple[str, ...], fmt: str = FORMAT_SIDEBAR_JS) -> Path:
        try:
            file_name = _FILE_NAMES[fmt]
        except KeyError:
            raise ValueError(f"Unknown output format: {fmt!r}") from None
        return self._module_dir(module_path) / file_name

    @property
    def combined_path(self) -> Path:
        return self._base_dir / self._combined_file_name

    def write_module(self, index: ModuleIndex, text: str, fmt: str = FORMAT_SIDEBAR_JS) -> Path:
        path = self.module_file(index.module_path, fmt)
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(path, text)
        logger.debug("Wrote %s", path)
        return path

    def write_combined(self, text: str) -> Path:
        path = self.combined_path
        path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(path, text)
        logger.debug("Wrote %s", path)
        return path

    def load_combined(self) -> Optional[dict[str, Any]]:
        path = self.combined_path
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Corrupt sidebar index at %s, ignoring: %s", path, exc)
            return None
        if not isinstance(data, dict):
            logger.warning("Sidebar index at %s is not an object, ignoring", path)
            return None
        return data
