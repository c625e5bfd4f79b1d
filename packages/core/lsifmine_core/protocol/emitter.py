"""Append-only emission of graph elements.

The emitter hands out ids and forwards each record of one indexing run to
an optional sink (e.g. an LSIF JSON lines dump on disk). Without a sink it
keeps the ordered record stream in memory instead.
"""

from __future__ import annotations

import itertools
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, TypeVar

from lsifmine_core.protocol.edges import Edge, EdgeLabel, ItemProperty, MultiEdge
from lsifmine_core.protocol.vertices import Vertex

logger = logging.getLogger(__name__)

ElementT = TypeVar("ElementT", Vertex, Edge, MultiEdge)


class RecordSink(ABC):
    """Destination of emitted records."""

    @abstractmethod
    def write(self, record: dict[str, Any]) -> None:
        """Persist one record."""
        pass

    def close(self) -> None:
        """Flush and release resources."""
        pass


class JsonLinesSink(RecordSink):
    """Writes one JSON object per line (the LSIF dump format)."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self._path.open("w", encoding="utf-8")

    @property
    def path(self) -> Path:
        return self._path

    def write(self, record: dict[str, Any]) -> None:
        self._file.write(json.dumps(record, separators=(",", ":")))
        self._file.write("\n")

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> JsonLinesSink:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class Emitter:
    """Allocates element ids and passes every emitted vertex and edge on.

    Elements are retained in memory when ``retain`` is true, which defaults
    to having no sink. A streaming run only keeps the element count.
    """

    def __init__(self, sink: RecordSink | None = None, retain: bool | None = None) -> None:
        self._ids = itertools.count(1)
        self._elements: list[Vertex | Edge | MultiEdge] = []
        self._sink = sink
        self._retain = sink is None if retain is None else retain
        self._count = 0

    def next_id(self) -> int:
        return next(self._ids)

    def emit(self, element: ElementT) -> ElementT:
        self._count += 1
        if self._retain:
            self._elements.append(element)
        if self._sink is not None:
            self._sink.write(element.to_dict())
        return element

    def edge(self, label: EdgeLabel, out_v: int, in_v: int) -> Edge:
        return self.emit(Edge(id=self.next_id(), label=label, out_v=out_v, in_v=in_v))

    def multi_edge(
        self,
        label: EdgeLabel,
        out_v: int,
        in_vs: list[int],
        document: int | None = None,
        property: ItemProperty | None = None,
    ) -> MultiEdge:
        return self.emit(
            MultiEdge(
                id=self.next_id(),
                label=label,
                out_v=out_v,
                in_vs=list(in_vs),
                document=document,
                property=property,
            )
        )

    @property
    def count(self) -> int:
        """Number of elements emitted so far."""
        return self._count

    @property
    def elements(self) -> list[Vertex | Edge | MultiEdge]:
        return list(self._elements)

    def records(self) -> list[dict[str, Any]]:
        return [element.to_dict() for element in self._elements]

    def close(self) -> None:
        if self._sink is not None:
            self._sink.close()
            logger.debug("Closed record sink after %d elements", self._count)


def load_records(path: Path | str) -> list[dict[str, Any]]:
    """Read an LSIF JSON lines dump back into records."""
    records: list[dict[str, Any]] = []
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            records.append(json.loads(line))
    return records
