"""Graph schema of the code-navigation index.

Vertices (documents, ranges, result sets, monikers, package information)
and edges (definition, references, type definition, implementation, hover)
plus the emitter that streams them out in emission order.
"""

from lsifmine_core.protocol.edges import Edge, EdgeLabel, ItemProperty, MultiEdge
from lsifmine_core.protocol.emitter import (
    Emitter,
    JsonLinesSink,
    RecordSink,
    load_records,
)
from lsifmine_core.protocol.vertices import (
    Document,
    HoverResult,
    Moniker,
    MonikerKind,
    PackageInformation,
    PackageManager,
    Position,
    Project,
    Range,
    ResultSet,
    TextRange,
    Vertex,
    VertexLabel,
    result_vertex,
)

__all__ = [
    # Vertices
    "Document",
    "HoverResult",
    "Moniker",
    "MonikerKind",
    "PackageInformation",
    "PackageManager",
    "Position",
    "Project",
    "Range",
    "ResultSet",
    "TextRange",
    "Vertex",
    "VertexLabel",
    "result_vertex",
    # Edges
    "Edge",
    "EdgeLabel",
    "ItemProperty",
    "MultiEdge",
    # Emission
    "Emitter",
    "JsonLinesSink",
    "RecordSink",
    "load_records",
]
