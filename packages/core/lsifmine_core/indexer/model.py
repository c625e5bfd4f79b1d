"""Language model collaborators of the indexer.

The indexer does not resolve declarations itself. A language model turns a
source span into the declaration it refers to, locates that declaration and
answers hover / type definition / implementation queries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from lsifmine_core.pathing import canonicalize_uri
from lsifmine_core.protocol import Position, TextRange


class DeclarationKind(str, Enum):
    """Kinds of declarations the moniker identifier scheme distinguishes."""

    TYPE = "type"
    FIELD = "field"
    LOCAL_VARIABLE = "local_variable"
    METHOD = "method"
    PACKAGE = "package"
    OTHER = "other"


@dataclass(frozen=True)
class SourceLocation:
    """Where a declaration lives: a document uri plus a range."""

    uri: str
    range: TextRange


@dataclass(eq=False)
class DeclarationRef:
    """A resolved declaration (the element a source span refers to).

    ``binary_path`` is set for declarations read from compiled code (a jar
    or class folder) and names that container; ``classpath_container`` is the
    raw classpath entry the container was contributed by.
    """

    kind: DeclarationKind
    name: str
    parent: DeclarationRef | None = None
    qualified_name: str | None = None
    signature: str | None = None
    binary_path: str | None = None
    classpath_container: str | None = None
    module_name: str | None = None

    @property
    def is_binary(self) -> bool:
        return self.binary_path is not None


class LanguageModel(ABC):
    """Resolution capabilities the indexer consumes."""

    @abstractmethod
    def resolve_declaration(self, uri: str, offset: int, length: int) -> DeclarationRef | None:
        """Return the declaration the span at ``offset`` refers to, or None.

        Raises:
            ResolutionError: If the underlying project model fails
        """
        pass

    @abstractmethod
    def declaration_location(self, declaration: DeclarationRef) -> SourceLocation | None:
        """Return where ``declaration`` lives, or None if it is synthetic."""
        pass

    def hover(self, uri: str, position: Position) -> str | None:
        """Return hover text for the symbol at ``position``."""
        return None

    def type_definition(self, uri: str, position: Position) -> SourceLocation | None:
        """Return the location of the type of the symbol at ``position``."""
        return None

    def implementations(self, uri: str, position: Position) -> list[SourceLocation]:
        """Return the implementations of the type or method at ``position``."""
        return []


@dataclass
class _DeclarationFacts:
    location: SourceLocation | None = None
    hover: str | None = None
    type_definition: SourceLocation | None = None
    implementations: list[SourceLocation] = field(default_factory=list)


class StaticLanguageModel(LanguageModel):
    """In-memory language model fed by explicit registrations.

    Useful for tests and for callers that already hold resolution results
    (e.g. from a compiler run) and only need the graph construction.
    """

    def __init__(self) -> None:
        self._facts: dict[DeclarationRef, _DeclarationFacts] = {}
        self._by_offset: dict[tuple[str, int], DeclarationRef] = {}
        self._by_position: dict[tuple[str, int, int], DeclarationRef] = {}

    def add_declaration(
        self,
        declaration: DeclarationRef,
        location: SourceLocation | None = None,
        hover: str | None = None,
        type_definition: SourceLocation | None = None,
        implementations: list[SourceLocation] | None = None,
    ) -> DeclarationRef:
        self._facts[declaration] = _DeclarationFacts(
            location=location,
            hover=hover,
            type_definition=type_definition,
            implementations=list(implementations or []),
        )
        return declaration

    def add_occurrence(
        self, uri: str, offset: int, position: Position, declaration: DeclarationRef
    ) -> None:
        uri = canonicalize_uri(uri)
        self._by_offset[(uri, offset)] = declaration
        self._by_position[(uri, position.line, position.character)] = declaration

    def resolve_declaration(self, uri: str, offset: int, length: int) -> DeclarationRef | None:
        return self._by_offset.get((canonicalize_uri(uri), offset))

    def declaration_location(self, declaration: DeclarationRef) -> SourceLocation | None:
        facts = self._facts.get(declaration)
        return facts.location if facts else None

    def hover(self, uri: str, position: Position) -> str | None:
        facts = self._facts_at(uri, position)
        return facts.hover if facts else None

    def type_definition(self, uri: str, position: Position) -> SourceLocation | None:
        facts = self._facts_at(uri, position)
        return facts.type_definition if facts else None

    def implementations(self, uri: str, position: Position) -> list[SourceLocation]:
        facts = self._facts_at(uri, position)
        return list(facts.implementations) if facts else []

    def _facts_at(self, uri: str, position: Position) -> _DeclarationFacts | None:
        declaration = self._by_position.get(
            (canonicalize_uri(uri), position.line, position.character)
        )
        if declaration is None:
            return None
        return self._facts.get(declaration)
