"""Parser lifecycle and parse-tree cache for Java sources.

One process-wide ``TreeSitterManager`` loads the Java grammar from
tree-sitter-language-pack on first use and keeps recently parsed files in
an LRU cache keyed by resolved path. A cached tree is reused only while the
file's content hash is unchanged.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class TreeSitterLanguage(str, Enum):
    """Grammars the traversal can parse."""

    JAVA = "java"


EXTENSION_TO_LANGUAGE: dict[str, TreeSitterLanguage] = {
    ".java": TreeSitterLanguage.JAVA,
}


def detect_language(file_path: str | Path) -> TreeSitterLanguage | None:
    """Grammar for a file, by extension (case-insensitive)."""
    return EXTENSION_TO_LANGUAGE.get(Path(str(file_path)).suffix.lower())


def content_digest(source: bytes) -> str:
    return hashlib.sha256(source).hexdigest()[:16]


@dataclass
class CachedTree:
    """A parsed file together with the bytes it was parsed from."""

    tree: Any  # tree_sitter.Tree
    source: bytes
    content_hash: str
    language: TreeSitterLanguage

    @property
    def root_node(self) -> Any:
        return self.tree.root_node


class TreeSitterManager:
    """Holds the loaded grammars and the parse-tree cache.

    Grammars load lazily; a missing tree-sitter-language-pack is reported
    once through ``is_available()`` instead of failing at import time.
    """

    _instance: TreeSitterManager | None = None
    _lock = threading.Lock()

    def __init__(self, cache_size: int = 100):
        self._cache_size = max(cache_size, 0)
        self._parsers: dict[TreeSitterLanguage, Any] = {}
        self._trees: OrderedDict[str, CachedTree] = OrderedDict()
        self._state_lock = threading.Lock()
        self._available: bool | None = None
        self._hits = 0
        self._misses = 0

    @classmethod
    def get_instance(cls, cache_size: int = 100) -> TreeSitterManager:
        """Process-wide manager; ``cache_size`` only applies on first call."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls(cache_size=cache_size)
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the process-wide manager so the next call builds a fresh one."""
        with cls._lock:
            cls._instance = None

    def is_available(self) -> bool:
        if self._available is None:
            try:
                import tree_sitter_language_pack  # noqa: F401
            except ImportError:
                self._available = False
                logger.warning(
                    "tree-sitter-language-pack is not installed; Java sources cannot be parsed"
                )
            else:
                self._available = True
        return self._available

    def get_parser(self, language: TreeSitterLanguage) -> Any:
        """Return the (shared) parser of ``language``.

        Raises:
            ImportError: If tree-sitter-language-pack is not installed
        """
        if not self.is_available():
            raise ImportError(
                "Parsing Java sources requires tree-sitter-language-pack "
                "(pip install tree-sitter-language-pack)"
            )
        with self._state_lock:
            parser = self._parsers.get(language)
            if parser is None:
                from tree_sitter_language_pack import get_parser

                parser = self._parsers[language] = get_parser(language.value)
                logger.debug("Loaded %s grammar", language.value)
            return parser

    def parse(self, file_path: str | Path, content: str | None = None) -> CachedTree:
        """Parse ``file_path`` (or ``content`` on its behalf).

        Raises:
            ImportError: If tree-sitter is not available
            ValueError: If the file is not a supported source file
            OSError: If ``content`` is None and the file cannot be read
        """
        path = Path(file_path).resolve()
        language = detect_language(path)
        if language is None:
            raise ValueError(f"Not a supported source file: {path.name}")

        if content is None:
            content = path.read_text(encoding="utf-8", errors="replace")
        source = content.encode("utf-8")
        digest = content_digest(source)
        key = str(path)

        with self._state_lock:
            cached = self._trees.get(key)
            if cached is not None and cached.content_hash == digest:
                self._trees.move_to_end(key)
                self._hits += 1
                return cached
            self._misses += 1

        parsed = CachedTree(
            tree=self.get_parser(language).parse(source),
            source=source,
            content_hash=digest,
            language=language,
        )
        with self._state_lock:
            self._trees[key] = parsed
            self._trees.move_to_end(key)
            while len(self._trees) > self._cache_size:
                self._trees.popitem(last=False)
        return parsed

    def invalidate(self, file_path: str | Path) -> None:
        with self._state_lock:
            self._trees.pop(str(Path(file_path).resolve()), None)

    def invalidate_all(self) -> None:
        with self._state_lock:
            self._trees.clear()

    def get_cache_stats(self) -> dict[str, int]:
        with self._state_lock:
            return {
                "cached_trees": len(self._trees),
                "max_size": self._cache_size,
                "hits": self._hits,
                "misses": self._misses,
            }


def get_treesitter_manager(cache_size: int = 100) -> TreeSitterManager:
    return TreeSitterManager.get_instance(cache_size=cache_size)
