"""Vertex types of the code-navigation index graph.

Every vertex carries a session-unique integer id and a label. The
``to_dict()`` form is the LSIF JSON shape consumed by downstream tools.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class VertexLabel(str, Enum):
    """Labels of the vertices the indexer emits."""

    PROJECT = "project"
    DOCUMENT = "document"
    RANGE = "range"
    RESULT_SET = "resultSet"
    MONIKER = "moniker"
    PACKAGE_INFORMATION = "packageInformation"
    DEFINITION_RESULT = "definitionResult"
    REFERENCE_RESULT = "referenceResult"
    TYPE_DEFINITION_RESULT = "typeDefinitionResult"
    IMPLEMENTATION_RESULT = "implementationResult"
    HOVER_RESULT = "hoverResult"


RESULT_LABELS = frozenset(
    {
        VertexLabel.DEFINITION_RESULT,
        VertexLabel.REFERENCE_RESULT,
        VertexLabel.TYPE_DEFINITION_RESULT,
        VertexLabel.IMPLEMENTATION_RESULT,
    }
)


class MonikerKind(str, Enum):
    """Visibility of a symbol relative to its declaring module."""

    EXPORT = "export"
    IMPORT = "import"
    LOCAL = "local"


class PackageManager(str, Enum):
    """Origin of a symbol's package coordinates."""

    JDK = "jdk"
    MAVEN = "maven"
    GRADLE = "gradle"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Position:
    """A zero-based line/character position."""

    line: int
    character: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class TextRange:
    """A start/end pair inside one document."""

    start: Position
    end: Position

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def of(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> TextRange:
        return cls(Position(start_line, start_char), Position(end_line, end_char))


@dataclass
class Vertex:
    """Base class of every graph vertex."""

    id: int
    label: VertexLabel

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": "vertex", "label": self.label.value}


@dataclass
class Project(Vertex):
    """One build unit. ``kind`` is the project's language id."""

    label: VertexLabel = field(default=VertexLabel.PROJECT, init=False)
    kind: str = "java"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "kind": self.kind}


@dataclass
class Document(Vertex):
    """One source file, created once per distinct uri."""

    label: VertexLabel = field(default=VertexLabel.DOCUMENT, init=False)
    uri: str = ""
    language_id: str = "java"
    project_id: int | None = None
    range_ids: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "uri": self.uri, "languageId": self.language_id}


@dataclass
class Range(Vertex):
    """A span of text inside a document."""

    label: VertexLabel = field(default=VertexLabel.RANGE, init=False)
    range: TextRange = field(default_factory=lambda: TextRange.of(0, 0, 0, 0))
    document_id: int = 0

    @property
    def start(self) -> Position:
        return self.range.start

    @property
    def end(self) -> Position:
        return self.range.end

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), **self.range.to_dict()}


@dataclass
class ResultSet(Vertex):
    """Hub vertex shared by all ranges of one logical symbol."""

    label: VertexLabel = field(default=VertexLabel.RESULT_SET, init=False)


@dataclass
class Moniker(Vertex):
    """Portable, scheme-qualified identifier of a symbol."""

    label: VertexLabel = field(default=VertexLabel.MONIKER, init=False)
    kind: MonikerKind = MonikerKind.LOCAL
    scheme: str = ""
    identifier: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "kind": self.kind.value,
            "scheme": self.scheme,
            "identifier": self.identifier,
        }


@dataclass
class PackageInformation(Vertex):
    """Package coordinates shared by every symbol of one module."""

    label: VertexLabel = field(default=VertexLabel.PACKAGE_INFORMATION, init=False)
    name: str = ""
    version: str = ""
    manager: PackageManager = PackageManager.UNKNOWN
    repository_type: str = ""
    repository_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = {
            **super().to_dict(),
            "name": self.name,
            "manager": self.manager.value,
            "version": self.version,
        }
        if self.repository_type or self.repository_url:
            data["repository"] = {"type": self.repository_type, "url": self.repository_url}
        return data


@dataclass
class HoverResult(Vertex):
    """Hover text attached to a result set."""

    label: VertexLabel = field(default=VertexLabel.HOVER_RESULT, init=False)
    contents: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "result": {"contents": {"kind": "markdown", "value": self.contents}},
        }


def result_vertex(id: int, label: VertexLabel) -> Vertex:
    """Create one of the payload-free result vertices."""
    if label not in RESULT_LABELS:
        raise ValueError(f"Not a result vertex label: {label.value}")
    return Vertex(id=id, label=label)
