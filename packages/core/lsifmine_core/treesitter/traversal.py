"""Java source traversal over tree-sitter syntax trees.

Walks a parsed ``.java`` file in pre-order and reports the nodes the
indexer reacts to as ``SyntaxNode`` values. A declaration is reported
before the identifier that names it, so its own classification reaches the
symbol aggregate first.

Offsets and lengths are UTF-8 byte offsets into the file; ranges are
zero-based lines with UTF-16 character columns.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from lsifmine_core.indexer.dispatch import FragmentOwner, NodeKind, SyntaxNode
from lsifmine_core.protocol import Position, TextRange
from lsifmine_core.treesitter.manager import TreeSitterManager, get_treesitter_manager

logger = logging.getLogger(__name__)

TYPE_DECLARATIONS = frozenset(
    {"class_declaration", "interface_declaration", "annotation_type_declaration"}
)
METHOD_DECLARATIONS = frozenset({"method_declaration", "constructor_declaration"})
PARAMETER_DECLARATIONS = frozenset({"formal_parameter", "catch_formal_parameter"})

# Wrappers between a type reference and the declaration it belongs to.
TYPE_REFERENCE_WRAPPERS = frozenset(
    {"superclass", "super_interfaces", "extends_interfaces", "type_list", "throws"}
)

FRAGMENT_OWNERS: dict[str, FragmentOwner] = {
    "local_variable_declaration": FragmentOwner.LOCAL_STATEMENT,
    "field_declaration": FragmentOwner.FIELD,
    "constant_declaration": FragmentOwner.FIELD,
}


class _SourceText:
    """Converts tree-sitter byte points into LSP positions."""

    def __init__(self, source: bytes) -> None:
        self.source = source
        self._lines = source.split(b"\n")

    def position(self, point: Any) -> Position:
        row, column = point[0], point[1]
        line = self._lines[row] if row < len(self._lines) else b""
        prefix = line[:column].decode("utf-8", errors="replace")
        return Position(line=row, character=len(prefix.encode("utf-16-le")) // 2)

    def range_of(self, node: Any) -> TextRange:
        return TextRange(start=self.position(node.start_point), end=self.position(node.end_point))

    def text_of(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _modifiers(node: Any | None) -> frozenset[str]:
    if node is None:
        return frozenset()
    for child in node.children:
        if child.type == "modifiers":
            return frozenset(grandchild.type for grandchild in child.children)
    return frozenset()


def _declaration_parent(node: Any) -> NodeKind | None:
    parent = node.parent
    while parent is not None and parent.type in TYPE_REFERENCE_WRAPPERS:
        parent = parent.parent
    if parent is None:
        return None
    if parent.type in TYPE_DECLARATIONS:
        return NodeKind.TYPE_DECLARATION
    if parent.type == "enum_declaration":
        return NodeKind.ENUM_DECLARATION
    if parent.type in METHOD_DECLARATIONS:
        return NodeKind.METHOD_DECLARATION
    return None


def _name_node(
    text: _SourceText,
    kind: NodeKind,
    name: Any,
    modifiers: frozenset[str] = frozenset(),
    owner: FragmentOwner | None = None,
) -> SyntaxNode:
    return SyntaxNode(
        kind=kind,
        offset=name.start_byte,
        length=name.end_byte - name.start_byte,
        range=text.range_of(name),
        modifiers=modifiers,
        owner=owner,
        text=text.text_of(name),
    )


def _visit(node: Any, text: _SourceText) -> SyntaxNode | None:
    node_type = node.type
    name = node.child_by_field_name("name")

    if node_type in TYPE_DECLARATIONS and name is not None:
        return _name_node(text, NodeKind.TYPE_DECLARATION, name, _modifiers(node))
    if node_type == "enum_declaration" and name is not None:
        return _name_node(text, NodeKind.ENUM_DECLARATION, name, _modifiers(node))
    if node_type == "enum_constant" and name is not None:
        return _name_node(text, NodeKind.ENUM_CONSTANT, name)
    if node_type in METHOD_DECLARATIONS and name is not None:
        return _name_node(text, NodeKind.METHOD_DECLARATION, name, _modifiers(node))
    if node_type == "enhanced_for_statement" and name is not None:
        # The loop variable is declared inline, not as a formal parameter.
        return _name_node(text, NodeKind.SINGLE_VARIABLE_DECLARATION, name, _modifiers(node))
    if node_type in PARAMETER_DECLARATIONS and name is not None:
        return _name_node(text, NodeKind.SINGLE_VARIABLE_DECLARATION, name, _modifiers(node))
    if node_type == "variable_declarator" and name is not None:
        owner = FRAGMENT_OWNERS.get(node.parent.type) if node.parent is not None else None
        if owner is None:
            return None
        return _name_node(
            text,
            NodeKind.VARIABLE_DECLARATION_FRAGMENT,
            name,
            _modifiers(node.parent),
            owner,
        )
    if node_type in ("identifier", "type_identifier"):
        kind = NodeKind.SIMPLE_NAME if node_type == "identifier" else NodeKind.SIMPLE_TYPE
        return SyntaxNode(
            kind=kind,
            offset=node.start_byte,
            length=node.end_byte - node.start_byte,
            range=text.range_of(node),
            parent_kind=_declaration_parent(node),
            text=text.text_of(node),
        )
    return None


def iter_syntax_nodes(root: Any, source: bytes) -> Iterator[SyntaxNode]:
    """Yield the indexed nodes of a tree in pre-order."""
    text = _SourceText(source)
    stack = [root]
    while stack:
        node = stack.pop()
        visited = _visit(node, text)
        if visited is not None:
            yield visited
        stack.extend(reversed(node.children))


class JavaSourceTraversal:
    """Parses Java files and yields their indexed syntax nodes."""

    def __init__(self, manager: TreeSitterManager | None = None) -> None:
        self.manager = manager or get_treesitter_manager()

    def is_available(self) -> bool:
        return self.manager.is_available()

    def nodes(self, file_path: Path | str, content: str | None = None) -> Iterator[SyntaxNode]:
        parsed = self.manager.parse(file_path, content)
        if parsed.root_node.has_error:
            logger.debug("Syntax errors in %s; indexing the recoverable nodes", file_path)
        yield from iter_syntax_nodes(parsed.root_node, parsed.source)
