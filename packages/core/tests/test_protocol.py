"""Tests for the graph schema and record emission."""

from __future__ import annotations

from pathlib import Path

import pytest
from lsifmine_core.protocol import (
    Document,
    EdgeLabel,
    Emitter,
    ItemProperty,
    JsonLinesSink,
    Moniker,
    MonikerKind,
    PackageInformation,
    PackageManager,
    Project,
    Range,
    ResultSet,
    TextRange,
    VertexLabel,
    load_records,
    result_vertex,
)


class TestVertices:
    """Tests for vertex serialization."""

    def test_project_kind(self) -> None:
        """Project carries its language id as kind."""
        assert Project(id=1).to_dict() == {
            "id": 1,
            "type": "vertex",
            "label": "project",
            "kind": "java",
        }

    def test_range_shape(self) -> None:
        """Range serializes start/end positions inline."""
        data = Range(id=3, range=TextRange.of(1, 2, 1, 5), document_id=2).to_dict()
        assert data["label"] == "range"
        assert data["start"] == {"line": 1, "character": 2}
        assert data["end"] == {"line": 1, "character": 5}

    def test_moniker_shape(self) -> None:
        """Moniker serializes kind, scheme and identifier."""
        data = Moniker(
            id=4, kind=MonikerKind.EXPORT, scheme="maven", identifier="a.B/c:()V"
        ).to_dict()
        assert data["kind"] == "export"
        assert data["scheme"] == "maven"
        assert data["identifier"] == "a.B/c:()V"

    def test_package_information_repository_optional(self) -> None:
        """Repository block is only present when SCM data is known."""
        bare = PackageInformation(id=5, name="g/a", version="1.0", manager=PackageManager.MAVEN)
        assert "repository" not in bare.to_dict()

        with_scm = PackageInformation(
            id=6,
            name="g/a",
            version="1.0",
            manager=PackageManager.MAVEN,
            repository_type="git",
            repository_url="https://example.com/g/a",
        )
        assert with_scm.to_dict()["repository"] == {
            "type": "git",
            "url": "https://example.com/g/a",
        }

    def test_result_vertex_rejects_other_labels(self) -> None:
        """Only payload-free result labels build plain result vertices."""
        assert result_vertex(7, VertexLabel.REFERENCE_RESULT).label == VertexLabel.REFERENCE_RESULT
        with pytest.raises(ValueError):
            result_vertex(8, VertexLabel.DOCUMENT)


class TestEmitter:
    """Tests for the append-only emitter."""

    def test_ids_are_monotonic(self) -> None:
        """Ids increase across vertices and edges."""
        emitter = Emitter()
        project = emitter.emit(Project(id=emitter.next_id()))
        document = emitter.emit(Document(id=emitter.next_id(), uri="file:///a.java"))
        edge = emitter.multi_edge(EdgeLabel.CONTAINS, project.id, [document.id])

        assert [project.id, document.id, edge.id] == [1, 2, 3]
        assert [r["label"] for r in emitter.records()] == ["project", "document", "contains"]

    def test_item_edge_shape(self) -> None:
        """Item edges carry document and property."""
        emitter = Emitter()
        edge = emitter.multi_edge(
            EdgeLabel.ITEM, 10, [11, 12], document=3, property=ItemProperty.REFERENCES
        )
        assert edge.to_dict() == {
            "id": 1,
            "type": "edge",
            "label": "item",
            "outV": 10,
            "inVs": [11, 12],
            "document": 3,
            "property": "references",
        }

    def test_json_lines_roundtrip(self, tmp_path: Path) -> None:
        """Records written to a JSON lines sink load back in order."""
        dump = tmp_path / "out" / "dump.lsif"
        with JsonLinesSink(dump) as sink:
            emitter = Emitter(sink)
            result_set = emitter.emit(ResultSet(id=emitter.next_id()))
            emitter.edge(EdgeLabel.NEXT, 99, result_set.id)

        records = load_records(dump)
        assert [r["label"] for r in records] == ["resultSet", "next"]
        assert records[1]["inV"] == result_set.id

    def test_streaming_keeps_only_count(self, tmp_path: Path) -> None:
        """A sink-backed emitter does not hold on to written elements."""
        with JsonLinesSink(tmp_path / "dump.lsif") as sink:
            emitter = Emitter(sink)
            for _ in range(3):
                emitter.emit(ResultSet(id=emitter.next_id()))

        assert emitter.count == 3
        assert emitter.elements == []
        assert emitter.records() == []

    def test_retain_with_sink(self, tmp_path: Path) -> None:
        """Retention can be requested alongside a sink."""
        with JsonLinesSink(tmp_path / "dump.lsif") as sink:
            emitter = Emitter(sink, retain=True)
            emitter.emit(ResultSet(id=emitter.next_id()))

        assert emitter.count == 1
        assert [r["label"] for r in emitter.records()] == ["resultSet"]
