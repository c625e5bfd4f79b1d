"""Edge types of the code-navigation index graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EdgeLabel(str, Enum):
    """Labels of the edges the indexer emits."""

    CONTAINS = "contains"
    NEXT = "next"
    MONIKER = "moniker"
    PACKAGE_INFORMATION = "packageInformation"
    ITEM = "item"
    DEFINITION = "textDocument/definition"
    REFERENCES = "textDocument/references"
    TYPE_DEFINITION = "textDocument/typeDefinition"
    IMPLEMENTATION = "textDocument/implementation"
    HOVER = "textDocument/hover"


class ItemProperty(str, Enum):
    """Role of the ranges listed by an ``item`` edge of a reference result."""

    DEFINITIONS = "definitions"
    REFERENCES = "references"


@dataclass
class Edge:
    """A one-to-one edge (``outV`` -> ``inV``)."""

    id: int
    label: EdgeLabel
    out_v: int
    in_v: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "edge",
            "label": self.label.value,
            "outV": self.out_v,
            "inV": self.in_v,
        }


@dataclass
class MultiEdge:
    """A one-to-many edge (``outV`` -> ``inVs``), optionally scoped to a document."""

    id: int
    label: EdgeLabel
    out_v: int
    in_vs: list[int] = field(default_factory=list)
    document: int | None = None
    property: ItemProperty | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": "edge",
            "label": self.label.value,
            "outV": self.out_v,
            "inVs": list(self.in_vs),
        }
        if self.document is not None:
            data["document"] = self.document
        if self.property is not None:
            data["property"] = self.property.value
        return data
