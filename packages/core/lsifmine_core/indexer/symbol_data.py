"""Symbol aggregate: the canonical subgraph of one logical symbol.

A ``SymbolData`` owns the symbol's result set and emits its definition,
type definition, implementation, reference and hover edges and its moniker
at most once, however many occurrences of the symbol are visited. Each
``resolve_*``/``generate_moniker_*`` method is idempotent; the
``SymbolState`` record tells which parts are already materialized.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from lsifmine_core.indexer.descriptors import PackageCoordinates
from lsifmine_core.indexer.model import LanguageModel, SourceLocation
from lsifmine_core.protocol import (
    Document,
    EdgeLabel,
    Emitter,
    HoverResult,
    ItemProperty,
    Moniker,
    MonikerKind,
    PackageManager,
    Project,
    Range,
    ResultSet,
    TextRange,
    Vertex,
    VertexLabel,
    result_vertex,
)

if TYPE_CHECKING:
    from lsifmine_core.indexer.repository import Repository

logger = logging.getLogger(__name__)


@dataclass
class SymbolState:
    """Which parts of a symbol's subgraph have been materialized (or attempted)."""

    has_definition: bool = False
    has_type_definition: bool = False
    has_implementation: bool = False
    has_hover: bool = False
    has_moniker: bool = False


class SymbolData:
    """Aggregate for one definition identity."""

    def __init__(
        self,
        id: str,
        definition_document: Document,
        project: Project,
        emitter: Emitter,
        repository: Repository,
    ) -> None:
        self.id = id
        self.definition_document = definition_document
        self.project = project
        self.state = SymbolState()
        self._emitter = emitter
        self._repository = repository
        self._lock = threading.RLock()
        self._result_set: ResultSet | None = None
        self._moniker: Moniker | None = None
        self._reference_result: Vertex | None = None
        self._linked_ranges: set[int] = set()
        self._definition_items: set[int] = set()
        self._reference_items: set[int] = set()

    @property
    def result_set(self) -> ResultSet | None:
        return self._result_set

    @property
    def moniker(self) -> Moniker | None:
        return self._moniker

    @property
    def linked_range_ids(self) -> set[int]:
        return set(self._linked_ranges)

    def ensure_result_set(self, source_range: Range) -> ResultSet:
        """Create the result set on first use and link ``source_range`` to it."""
        with self._lock:
            if self._result_set is None:
                self._result_set = self._emitter.emit(ResultSet(id=self._emitter.next_id()))
            if source_range.id not in self._linked_ranges:
                self._emitter.edge(EdgeLabel.NEXT, source_range.id, self._result_set.id)
                self._linked_ranges.add(source_range.id)
            return self._result_set

    # Monikers

    def generate_moniker_export(
        self, identifier: str, coordinates: PackageCoordinates | None = None
    ) -> Moniker:
        return self._attach_moniker(MonikerKind.EXPORT, identifier, coordinates)

    def generate_moniker_local(self, identifier: str) -> Moniker:
        return self._attach_moniker(MonikerKind.LOCAL, identifier, None)

    def generate_moniker_import(
        self, identifier: str, coordinates: PackageCoordinates | None = None
    ) -> Moniker:
        return self._attach_moniker(MonikerKind.IMPORT, identifier, coordinates)

    def _attach_moniker(
        self,
        kind: MonikerKind,
        identifier: str,
        coordinates: PackageCoordinates | None,
    ) -> Moniker:
        with self._lock:
            if self._moniker is not None:
                # First classification wins.
                return self._moniker
            result_set = self._require_result_set()
            scheme = self.project.kind
            if coordinates is not None and coordinates.manager != PackageManager.UNKNOWN:
                scheme = coordinates.manager.value
            moniker = self._emitter.emit(
                Moniker(
                    id=self._emitter.next_id(),
                    kind=kind,
                    scheme=scheme,
                    identifier=identifier,
                )
            )
            self._emitter.edge(EdgeLabel.MONIKER, result_set.id, moniker.id)
            if coordinates is not None:
                package = self._repository.get_or_create_package_information(
                    key=coordinates.key,
                    name=coordinates.name,
                    version=coordinates.version,
                    manager=coordinates.manager,
                    repository_type=coordinates.repository_type,
                    repository_url=coordinates.repository_url,
                )
                self._emitter.edge(EdgeLabel.PACKAGE_INFORMATION, moniker.id, package.id)
            self._moniker = moniker
            self.state.has_moniker = True
            return moniker

    # Language features

    def resolve_definition(self, definition_location: SourceLocation) -> None:
        with self._lock:
            if self.state.has_definition:
                return
            result_set = self._require_result_set()
            definition_range = self._repository.get_or_create_range(
                self.definition_document, definition_location.range
            )
            definition_result = self._emitter.emit(
                result_vertex(self._emitter.next_id(), VertexLabel.DEFINITION_RESULT)
            )
            self._emitter.edge(EdgeLabel.DEFINITION, result_set.id, definition_result.id)
            self._emitter.multi_edge(
                EdgeLabel.ITEM,
                definition_result.id,
                [definition_range.id],
                document=self.definition_document.id,
            )
            self.state.has_definition = True

    def resolve_type_definition(
        self, model: LanguageModel, document: Document, source_range: TextRange
    ) -> None:
        with self._lock:
            if self.state.has_type_definition:
                return
            self.state.has_type_definition = True
            location = model.type_definition(document.uri, source_range.start)
            if location is None:
                return
            result_set = self._require_result_set()
            target_document = self._repository.get_or_create_document(location.uri, self.project)
            target_range = self._repository.get_or_create_range(target_document, location.range)
            type_definition_result = self._emitter.emit(
                result_vertex(self._emitter.next_id(), VertexLabel.TYPE_DEFINITION_RESULT)
            )
            self._emitter.edge(EdgeLabel.TYPE_DEFINITION, result_set.id, type_definition_result.id)
            self._emitter.multi_edge(
                EdgeLabel.ITEM,
                type_definition_result.id,
                [target_range.id],
                document=target_document.id,
            )

    def resolve_implementation(
        self, model: LanguageModel, document: Document, source_range: TextRange
    ) -> None:
        with self._lock:
            if self.state.has_implementation:
                return
            self.state.has_implementation = True
            locations = model.implementations(document.uri, source_range.start)
            if not locations:
                return
            result_set = self._require_result_set()

            ranges_by_document: dict[int, list[int]] = {}
            for location in locations:
                target_document = self._repository.get_or_create_document(
                    location.uri, self.project
                )
                target_range = self._repository.get_or_create_range(
                    target_document, location.range
                )
                ids = ranges_by_document.setdefault(target_document.id, [])
                if target_range.id not in ids:
                    ids.append(target_range.id)

            implementation_result = self._emitter.emit(
                result_vertex(self._emitter.next_id(), VertexLabel.IMPLEMENTATION_RESULT)
            )
            self._emitter.edge(EdgeLabel.IMPLEMENTATION, result_set.id, implementation_result.id)
            for document_id, range_ids in ranges_by_document.items():
                self._emitter.multi_edge(
                    EdgeLabel.ITEM, implementation_result.id, range_ids, document=document_id
                )

    def resolve_reference(
        self,
        source_document: Document,
        definition_location: SourceLocation,
        source_range: Range,
    ) -> None:
        """Record ``source_range`` as a reference of the symbol.

        The reference result is created once; the definition range is listed
        once under ``definitions`` and every other range once under
        ``references``.
        """
        with self._lock:
            result_set = self._require_result_set()
            if self._reference_result is None:
                self._reference_result = self._emitter.emit(
                    result_vertex(self._emitter.next_id(), VertexLabel.REFERENCE_RESULT)
                )
                self._emitter.edge(EdgeLabel.REFERENCES, result_set.id, self._reference_result.id)

            definition_range = self._repository.get_or_create_range(
                self.definition_document, definition_location.range
            )
            if definition_range.id not in self._definition_items:
                self._emitter.multi_edge(
                    EdgeLabel.ITEM,
                    self._reference_result.id,
                    [definition_range.id],
                    document=self.definition_document.id,
                    property=ItemProperty.DEFINITIONS,
                )
                self._definition_items.add(definition_range.id)

            if source_range.id == definition_range.id or source_range.id in self._reference_items:
                return
            self._emitter.multi_edge(
                EdgeLabel.ITEM,
                self._reference_result.id,
                [source_range.id],
                document=source_document.id,
                property=ItemProperty.REFERENCES,
            )
            self._reference_items.add(source_range.id)

    def resolve_hover(
        self, model: LanguageModel, document: Document, source_range: TextRange
    ) -> None:
        with self._lock:
            if self.state.has_hover:
                return
            self.state.has_hover = True
            contents = model.hover(document.uri, source_range.start)
            if not contents or not contents.strip():
                return
            result_set = self._require_result_set()
            hover = self._emitter.emit(HoverResult(id=self._emitter.next_id(), contents=contents))
            self._emitter.edge(EdgeLabel.HOVER, result_set.id, hover.id)

    def reference_range_ids(self) -> set[int]:
        with self._lock:
            return set(self._reference_items)

    def _require_result_set(self) -> ResultSet:
        if self._result_set is None:
            raise RuntimeError(f"Result set of symbol {self.id} used before ensure_result_set()")
        return self._result_set
