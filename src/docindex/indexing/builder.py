"""Orchestrates a full sidebar index generation run."""

from pathlib import Path
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from docindex.errors import IndexInvariantError
from docindex.indexing.collector import DeclarationInput, EntryCollector
from docindex.indexing.models import CollectionWarning, EntryOrdering, ItemKind, ModuleIndex
from docindex.indexing.serializer import FORMAT_SIDEBAR_JS, IndexSerializer
from docindex.indexing.store import IndexStore
from docindex.utils.rich_logging import get_logger

logger = get_logger(__name__)


class BuildReport(BaseModel):
    """Outcome of one generation run: artifacts plus everything skipped."""

    output_format: str = FORMAT_SIDEBAR_JS
    indexes: dict[str, ModuleIndex] = Field(default_factory=dict)
    artifacts: dict[str, str] = Field(default_factory=dict)
    warnings: list[CollectionWarning] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> dict[str, int]:
        return {
            "modules": len(self.artifacts),
            "entries": sum(self.indexes[key].entry_count() for key in self.artifacts),
            "warnings": len(self.warnings),
            "failures": len(self.failures),
        }


class IndexBuilder:
    """Collects, serializes and optionally writes every module in a run.

    A module whose index fails serialization is recorded in
    ``BuildReport.failures`` and produces no artifact; the remaining modules
    are still built.
    """

    def __init__(
        self,
        ordering: EntryOrdering = EntryOrdering.ALPHABETICAL,
        kind_order: Optional[list[ItemKind]] = None,
        output_format: str = FORMAT_SIDEBAR_JS,
    ) -> None:
        self._collector = EntryCollector(ordering)
        self._serializer = IndexSerializer(kind_order)
        self._format = output_format

    @property
    def serializer(self) -> IndexSerializer:
        return self._serializer

    def build(self, declarations: Iterable[DeclarationInput]) -> BuildReport:
        report = BuildReport(output_format=self._format)
        results = self._collector.collect_all(declarations)

        for key, result in results.items():
            report.warnings.extend(result.warnings)
            if not key:
                # Declarations with no module path only contribute warnings
                continue
            self.add_index(report, result.index)

        summary = report.summary()
        logger.info(
            "Built %d module indexes (%d entries, %d warnings, %d failures)",
            summary["modules"], summary["entries"], summary["warnings"], summary["failures"],
        )
        return report

    def add_index(self, report: BuildReport, index: ModuleIndex) -> None:
        """Serialize one already-collected index into ``report``."""
        report.indexes[index.key] = index
        try:
            report.artifacts[index.key] = self._serializer.serialize(index, self._format)
        except IndexInvariantError as exc:
            logger.for_module(index.key).error("Artifact not generated: %s", exc.detail)
            report.artifacts.pop(index.key, None)
            report.failures[index.key] = str(exc)

    def write(self, report: BuildReport, store: IndexStore) -> list[Path]:
        """Persist every artifact in ``report`` plus the combined index."""
        written: list[Path] = []
        for key in sorted(report.artifacts):
            index = report.indexes[key]
            written.append(store.write_module(index, report.artifacts[key], report.output_format))

        good = [report.indexes[key] for key in sorted(report.artifacts)]
        written.append(store.write_combined(self._serializer.serialize_batch(good)))
        logger.info("Wrote %d files to %s", len(written), store.base_dir)
        return written
