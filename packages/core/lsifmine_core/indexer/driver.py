"""Occurrence resolution driver.

The driver is invoked once per interesting syntax node. For one occurrence
it walks:

    start -> position resolved -> declaration found | missing
          -> hover only | full resolution -> done

and returns an explicit ``Resolved``, ``Skipped`` or ``Failed`` result.
Failures never escape: they are logged with the occurrence context and the
run continues with the next occurrence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from lsifmine_core.indexer.model import DeclarationRef, SourceLocation
from lsifmine_core.indexer.monikers import get_moniker_identifier
from lsifmine_core.indexer.symbol_data import SymbolData
from lsifmine_core.pathing import canonicalize_uri, is_file_uri
from lsifmine_core.protocol import (
    Document,
    EdgeLabel,
    HoverResult,
    MonikerKind,
    Range,
    ResultSet,
    TextRange,
)

if TYPE_CHECKING:
    from lsifmine_core.indexer.session import IndexingSession

logger = logging.getLogger(__name__)


class ResolutionMode(str, Enum):
    """How much of the graph an occurrence produced."""

    HOVER_ONLY = "hover_only"
    FULL = "full"


@dataclass(frozen=True)
class Resolved:
    """The occurrence was attached to the graph."""

    declaration: DeclarationRef
    mode: ResolutionMode = ResolutionMode.FULL
    symbol: SymbolData | None = None


@dataclass(frozen=True)
class Skipped:
    """Nothing to index for the occurrence (e.g. unresolvable symbol)."""

    reason: str


@dataclass(frozen=True)
class Failed:
    """Unexpected failure; the occurrence was abandoned."""

    reason: str


OccurrenceResult = Resolved | Skipped | Failed


def symbol_key(location: SourceLocation) -> str:
    """Definition identity of a symbol: its declaration's canonical location."""
    start, end = location.range.start, location.range.end
    return (
        f"{canonicalize_uri(location.uri)}#"
        f"{start.line}:{start.character}-{end.line}:{end.character}"
    )


class OccurrenceDriver:
    """Resolves one occurrence at a time against a session."""

    def __init__(self, session: IndexingSession) -> None:
        self._session = session
        self._hover_result_sets: dict[int, ResultSet] = {}

    def resolve(
        self,
        document: Document,
        offset: int,
        length: int,
        source_range: TextRange,
        needs_implementation: bool,
        moniker_kind: MonikerKind,
        node_kind: str = "",
    ) -> OccurrenceResult:
        try:
            step = self._resolve_position(document, offset, length)
            if not isinstance(step, Resolved):
                return step
            return self._resolve_declaration(
                document, source_range, step.declaration, needs_implementation, moniker_kind
            )
        except Exception as e:
            logger.exception(
                "Failed to resolve occurrence %s@%d (%s)", document.uri, offset, node_kind or "?"
            )
            return Failed(reason=f"{type(e).__name__}: {e}")

    def _resolve_position(self, document: Document, offset: int, length: int) -> OccurrenceResult:
        try:
            declaration = self._session.model.resolve_declaration(document.uri, offset, length)
        except Exception as e:
            logger.warning(
                "Language model failed at %s@%d: %s", document.uri, offset, e, exc_info=True
            )
            return Failed(reason=f"{type(e).__name__}: {e}")
        if declaration is None:
            logger.debug("No declaration at %s@%d", document.uri, offset)
            return Skipped(reason="no declaration")
        return Resolved(declaration=declaration)

    def _resolve_declaration(
        self,
        document: Document,
        source_range: TextRange,
        declaration: DeclarationRef,
        needs_implementation: bool,
        moniker_kind: MonikerKind,
    ) -> OccurrenceResult:
        session = self._session
        location = session.model.declaration_location(declaration)
        if location is None:
            return self._resolve_hover_only(document, source_range, declaration)

        repository = session.repository
        source = repository.get_or_create_range(document, source_range)
        definition_document = repository.get_or_create_document(location.uri, session.project)
        symbol = repository.get_or_create_symbol(
            symbol_key(location), definition_document, session.project
        )

        symbol.ensure_result_set(source)
        if not symbol.state.has_moniker:
            self._generate_moniker(symbol, declaration, location, moniker_kind)
        symbol.resolve_definition(location)
        symbol.resolve_type_definition(session.model, document, source_range)
        if needs_implementation:
            symbol.resolve_implementation(session.model, document, source_range)
        symbol.resolve_reference(document, location, source)
        symbol.resolve_hover(session.model, document, source_range)
        return Resolved(declaration=declaration, mode=ResolutionMode.FULL, symbol=symbol)

    def _resolve_hover_only(
        self, document: Document, source_range: TextRange, declaration: DeclarationRef
    ) -> OccurrenceResult:
        contents = self._session.model.hover(document.uri, source_range.start)
        if not contents or not contents.strip():
            return Skipped(reason="no definition location and no hover")

        source = self._session.repository.get_or_create_range(document, source_range)
        if source.id not in self._hover_result_sets:
            self._hover_result_sets[source.id] = self._attach_hover(source, contents)
        return Resolved(declaration=declaration, mode=ResolutionMode.HOVER_ONLY)

    def _attach_hover(self, source: Range, contents: str) -> ResultSet:
        emitter = self._session.emitter
        result_set = emitter.emit(ResultSet(id=emitter.next_id()))
        emitter.edge(EdgeLabel.NEXT, source.id, result_set.id)
        hover = emitter.emit(HoverResult(id=emitter.next_id(), contents=contents))
        emitter.edge(EdgeLabel.HOVER, result_set.id, hover.id)
        return result_set

    def _generate_moniker(
        self,
        symbol: SymbolData,
        declaration: DeclarationRef,
        location: SourceLocation,
        moniker_kind: MonikerKind,
    ) -> None:
        identifier = get_moniker_identifier(declaration)
        if not identifier:
            return
        monikers = self._session.monikers
        if moniker_kind == MonikerKind.EXPORT:
            symbol.generate_moniker_export(identifier, monikers.export_coordinates())
        elif moniker_kind == MonikerKind.LOCAL:
            symbol.generate_moniker_local(identifier)
        elif not is_file_uri(location.uri):
            # Imports only name declarations that live outside the source tree.
            symbol.generate_moniker_import(identifier, monikers.resolve_coordinates(declaration))
