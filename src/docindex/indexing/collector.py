"""Groups raw item declarations into per-module sidebar indexes."""

from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from docindex.errors import DuplicateEntryError, MalformedDeclarationError
from docindex.indexing.models import (
    CollectionResult,
    CollectionWarning,
    EntryOrdering,
    IndexEntry,
    ItemKind,
    ModuleIndex,
    RawDeclaration,
    join_module_path,
    split_module_path,
)
from docindex.utils.rich_logging import get_logger
from docindex.utils.validators import validate_item_name, validate_module_path, validate_text

logger = get_logger(__name__)

DeclarationInput = Union[RawDeclaration, Mapping[str, Any]]

MALFORMED = "malformed"
DUPLICATE = "duplicate"


class EntryCollector:
    """Builds a ModuleIndex from raw declarations, skipping bad ones.

    Malformed declarations and repeated (kind, name) pairs never abort a
    collection: each one is dropped and reported as a single warning. The
    first declaration of a name wins.
    """

    def __init__(self, ordering: EntryOrdering = EntryOrdering.ALPHABETICAL) -> None:
        self._ordering = EntryOrdering(ordering)

    @property
    def ordering(self) -> EntryOrdering:
        return self._ordering

    def collect(
        self,
        module_path: Union[str, tuple[str, ...], list[str]],
        declarations: Iterable[DeclarationInput],
    ) -> CollectionResult:
        segments = validate_module_path(split_module_path(module_path))
        module_key = join_module_path(segments)
        log = logger.for_module(module_key)

        grouped: dict[ItemKind, dict[str, IndexEntry]] = {}
        warnings: list[CollectionWarning] = []

        for position, raw in enumerate(declarations):
            try:
                kind, entry = self._validate(raw, segments, position)
                self._check_duplicate(grouped, module_key, kind, entry.name)
            except MalformedDeclarationError as exc:
                log.warning("Skipping malformed declaration #%d: %s", position, exc.reason)
                warnings.append(CollectionWarning(
                    code=MALFORMED, module=module_key, message=exc.reason, index=position,
                ))
                continue
            except DuplicateEntryError as exc:
                log.warning("Dropping declaration #%d: %s", position, exc)
                warnings.append(CollectionWarning(
                    code=DUPLICATE, module=module_key, message=str(exc), index=position,
                ))
                continue
            grouped.setdefault(kind, {})[entry.name] = entry

        index = ModuleIndex(
            module_path=segments,
            items={kind: self._order(entries) for kind, entries in grouped.items()},
            ordering=self._ordering,
        )
        log.debug("Collected %d entries (%d skipped)", index.entry_count(), len(warnings))
        return CollectionResult(index=index, warnings=warnings)

    def collect_all(self, declarations: Iterable[DeclarationInput]) -> dict[str, CollectionResult]:
        """Split a flat declaration stream by module and collect each module.

        Declarations without a usable module path cannot be attributed to any
        module; they are reported under the empty module key ``""``.
        """
        by_module: dict[tuple[str, ...], list[tuple[int, Any]]] = {}
        orphans: list[CollectionWarning] = []

        for position, raw in enumerate(declarations):
            segments = self._module_path_of(raw)
            if segments is None:
                reason = "missing or invalid module_path"
                logger.warning("Skipping declaration #%d: %s", position, reason)
                orphans.append(CollectionWarning(
                    code=MALFORMED, module="", message=reason, index=position,
                ))
                continue
            by_module.setdefault(segments, []).append((position, raw))

        results: dict[str, CollectionResult] = {}
        for segments in sorted(by_module):
            items = by_module[segments]
            result = self.collect(segments, (raw for _, raw in items))
            # Report positions relative to the whole stream, not the module slice
            positions = [position for position, _ in items]
            result.warnings = [
                w.model_copy(update={"index": positions[w.index]}) for w in result.warnings
            ]
            results[result.index.key] = result

        if orphans:
            results[""] = CollectionResult(
                index=ModuleIndex.model_construct(
                    module_path=(), items=MappingProxyType({}), ordering=self._ordering,
                ),
                warnings=orphans,
            )
        return results

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _module_path_of(raw: Any) -> Optional[tuple[str, ...]]:
        if isinstance(raw, RawDeclaration):
            value = raw.module_path
        elif isinstance(raw, Mapping):
            value = raw.get("module_path")
        else:
            return None
        if not isinstance(value, (str, list, tuple)):
            return None
        try:
            return validate_module_path(split_module_path(value))
        except ValueError:
            return None

    def _validate(
        self, raw: Any, segments: tuple[str, ...], position: int
    ) -> tuple[ItemKind, IndexEntry]:
        if isinstance(raw, Mapping):
            data = dict(raw)
            data.setdefault("module_path", segments)
            try:
                raw = RawDeclaration.model_validate(data)
            except ValidationError as exc:
                raise MalformedDeclarationError(
                    f"invalid declaration record: {exc.errors()[0]['msg']}", position
                ) from exc
        elif not isinstance(raw, RawDeclaration):
            raise MalformedDeclarationError(
                f"expected a mapping, got {type(raw).__name__}", position
            )

        if raw.module_path != segments:
            raise MalformedDeclarationError(
                f"declared for module {raw.module_key!r}, "
                f"not {join_module_path(segments)!r}",
                position,
            )

        if raw.kind is None:
            raise MalformedDeclarationError("missing kind", position)
        try:
            kind = ItemKind.parse(raw.kind)
        except ValueError as exc:
            raise MalformedDeclarationError(str(exc), position) from exc

        if raw.name is None:
            raise MalformedDeclarationError("missing name", position)
        if not isinstance(raw.name, str) or not raw.name.strip():
            raise MalformedDeclarationError("name must be a non-empty string", position)
        name = raw.name.strip()
        try:
            validate_item_name(name)
        except ValueError as exc:
            raise MalformedDeclarationError(str(exc), position) from exc

        summary = "" if raw.summary is None else raw.summary
        if not isinstance(summary, str):
            raise MalformedDeclarationError(
                f"summary of {name!r} must be a string", position
            )

        link = raw.link
        if link is not None and (not isinstance(link, str) or not link):
            raise MalformedDeclarationError(
                f"link of {name!r} must be a non-empty string", position
            )

        try:
            validate_text(summary, f"summary of {name!r}")
            if link is not None:
                validate_text(link, f"link of {name!r}")
        except ValueError as exc:
            raise MalformedDeclarationError(str(exc), position) from exc

        return kind, IndexEntry(name=name, summary=summary, link=link)

    @staticmethod
    def _check_duplicate(
        grouped: dict[ItemKind, dict[str, IndexEntry]],
        module_key: str,
        kind: ItemKind,
        name: str,
    ) -> None:
        if name in grouped.get(kind, {}):
            raise DuplicateEntryError(module_key, kind.value, name)

    def _order(self, entries: dict[str, IndexEntry]) -> tuple[IndexEntry, ...]:
        # dicts keep insertion order, which is declaration order
        if self._ordering is EntryOrdering.DECLARATION:
            return tuple(entries.values())
        return tuple(sorted(entries.values(), key=lambda e: e.name))
