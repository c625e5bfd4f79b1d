"""Node-kind dispatch.

A traversal reports every interesting syntax node as a ``SyntaxNode``; the
single ``dispatch`` function decides the moniker kind and whether
implementations are looked up, then hands the occurrence to the driver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from lsifmine_core.indexer.driver import OccurrenceDriver, OccurrenceResult
from lsifmine_core.indexer.monikers import classify_modifiers
from lsifmine_core.protocol import Document, MonikerKind, TextRange


class NodeKind(str, Enum):
    """Syntax node kinds the indexer reacts to."""

    SIMPLE_NAME = "simple_name"
    SIMPLE_TYPE = "simple_type"
    SINGLE_VARIABLE_DECLARATION = "single_variable_declaration"
    ENUM_DECLARATION = "enum_declaration"
    ENUM_CONSTANT = "enum_constant"
    TYPE_DECLARATION = "type_declaration"
    METHOD_DECLARATION = "method_declaration"
    VARIABLE_DECLARATION_FRAGMENT = "variable_declaration_fragment"


class FragmentOwner(str, Enum):
    """Declaration a variable fragment belongs to."""

    LOCAL_STATEMENT = "local_statement"
    FIELD = "field"


IMPLEMENTATION_PARENTS = frozenset({NodeKind.TYPE_DECLARATION, NodeKind.METHOD_DECLARATION})


@dataclass(frozen=True)
class SyntaxNode:
    """One visited node, reduced to what resolution needs.

    ``offset``/``length``/``range`` locate the node's name (or the node itself
    for names and types). ``modifiers`` are the declaration's modifiers, or
    the owning statement's/field's modifiers for a variable fragment.
    """

    kind: NodeKind
    offset: int
    length: int
    range: TextRange
    modifiers: frozenset[str] = field(default_factory=frozenset)
    parent_kind: NodeKind | None = None
    owner: FragmentOwner | None = None
    text: str = ""


def dispatch(
    node: SyntaxNode, driver: OccurrenceDriver, document: Document
) -> OccurrenceResult | None:
    """Resolve one node. Returns None for nodes that are not indexed."""
    kind = node.kind
    needs_implementation = False

    if kind in (NodeKind.SIMPLE_NAME, NodeKind.SIMPLE_TYPE):
        moniker_kind = MonikerKind.IMPORT
        needs_implementation = node.parent_kind in IMPLEMENTATION_PARENTS
    elif kind == NodeKind.ENUM_CONSTANT:
        # Enum constants are implicitly public static final.
        moniker_kind = MonikerKind.EXPORT
    elif kind in (
        NodeKind.TYPE_DECLARATION,
        NodeKind.ENUM_DECLARATION,
        NodeKind.METHOD_DECLARATION,
        NodeKind.SINGLE_VARIABLE_DECLARATION,
    ):
        moniker_kind = classify_modifiers(node.modifiers)
    elif kind == NodeKind.VARIABLE_DECLARATION_FRAGMENT:
        if node.owner is None:
            return None
        moniker_kind = classify_modifiers(node.modifiers)
    else:
        raise ValueError(f"Unhandled node kind: {kind}")

    return driver.resolve(
        document=document,
        offset=node.offset,
        length=node.length,
        source_range=node.range,
        needs_implementation=needs_implementation,
        moniker_kind=moniker_kind,
        node_kind=kind.value,
    )
