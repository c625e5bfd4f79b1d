"""Tree-sitter integration for Java source traversal.

This module provides:
- A cached parser manager with content-hash invalidation
- A pre-order traversal reporting the syntax nodes the indexer resolves
"""

from lsifmine_core.treesitter.manager import (
    EXTENSION_TO_LANGUAGE,
    CachedTree,
    TreeSitterLanguage,
    TreeSitterManager,
    detect_language,
    get_treesitter_manager,
)
from lsifmine_core.treesitter.traversal import JavaSourceTraversal, iter_syntax_nodes

__all__ = [
    # Languages
    "TreeSitterLanguage",
    "EXTENSION_TO_LANGUAGE",
    "detect_language",
    # Manager
    "CachedTree",
    "TreeSitterManager",
    "get_treesitter_manager",
    # Traversal
    "JavaSourceTraversal",
    "iter_syntax_nodes",
]
