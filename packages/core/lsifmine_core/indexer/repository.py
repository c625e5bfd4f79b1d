"""Identity repository: the dedup caches of one indexing run.

The repository guarantees at most one vertex (or aggregate) per distinct key
for the lifetime of a session:

- documents by canonical uri
- ranges by (document, span)
- build descriptor models by descriptor path
- runtime library manifests by library root
- package information vertices by package key
- symbol aggregates by definition identity

Failed or partial metadata lookups are cached like successful ones so the
same descriptor is never loaded twice.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from lsifmine_core.indexer.descriptors import (
    DescriptorLoader,
    LibraryManifest,
    ManifestReader,
    ProjectModel,
)
from lsifmine_core.indexer.exceptions import DescriptorLoadError, ManifestReadError
from lsifmine_core.indexer.symbol_data import SymbolData
from lsifmine_core.pathing import canonicalize_uri
from lsifmine_core.protocol import (
    Document,
    EdgeLabel,
    Emitter,
    PackageInformation,
    PackageManager,
    Project,
    Range,
    TextRange,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Repository:
    """Per-session identity caches.

    Lookups are compare-and-insert under a lock, so concurrent callers asking
    for the same key receive the same object. Metadata loading (filesystem
    I/O) runs under a per-key lock instead of the shared one.
    """

    def __init__(self, emitter: Emitter, language_id: str = "java") -> None:
        self._emitter = emitter
        self._language_id = language_id
        self._lock = threading.RLock()
        self._load_locks: dict[str, threading.Lock] = {}
        self._documents: dict[str, Document] = {}
        self._ranges: dict[tuple[int, TextRange], Range] = {}
        self._module_metadata: dict[str, ProjectModel] = {}
        self._library_metadata: dict[str, LibraryManifest] = {}
        self._packages: dict[str, PackageInformation] = {}
        self._symbols: dict[str, SymbolData] = {}

    # Vertices

    def get_or_create_document(self, uri: str, project: Project) -> Document:
        """Return the document of ``uri``, creating and emitting it on first use."""
        key = canonicalize_uri(uri)

        def create() -> Document:
            document = self._emitter.emit(
                Document(
                    id=self._emitter.next_id(),
                    uri=key,
                    language_id=self._language_id,
                    project_id=project.id,
                )
            )
            self._emitter.multi_edge(EdgeLabel.CONTAINS, project.id, [document.id])
            logger.debug("Enlisted document %s (id=%d)", key, document.id)
            return document

        return self._get_or_create(self._documents, key, create)

    def get_or_create_range(self, document: Document, text_range: TextRange) -> Range:
        """Return the range vertex for ``text_range`` inside ``document``."""
        key = (document.id, text_range)

        def create() -> Range:
            range_vertex = self._emitter.emit(
                Range(id=self._emitter.next_id(), range=text_range, document_id=document.id)
            )
            document.range_ids.append(range_vertex.id)
            return range_vertex

        return self._get_or_create(self._ranges, key, create)

    def get_or_create_package_information(
        self,
        key: str,
        name: str,
        version: str,
        manager: PackageManager,
        repository_type: str = "",
        repository_url: str = "",
    ) -> PackageInformation:
        """Return the package information vertex shared by all symbols of one module."""

        def create() -> PackageInformation:
            return self._emitter.emit(
                PackageInformation(
                    id=self._emitter.next_id(),
                    name=name,
                    version=version,
                    manager=manager,
                    repository_type=repository_type,
                    repository_url=repository_url,
                )
            )

        return self._get_or_create(self._packages, key, create)

    def get_or_create_symbol(
        self, definition_identity: str, definition_document: Document, project: Project
    ) -> SymbolData:
        """Return the one aggregate of ``definition_identity``."""

        def create() -> SymbolData:
            logger.debug("New symbol %s", definition_identity)
            return SymbolData(
                id=definition_identity,
                definition_document=definition_document,
                project=project,
                emitter=self._emitter,
                repository=self,
            )

        return self._get_or_create(self._symbols, definition_identity, create)

    # Metadata

    def get_or_create_module_metadata(
        self, descriptor: Path, loader: DescriptorLoader
    ) -> ProjectModel:
        """Return the (possibly empty) project model of a build descriptor.

        Load failures are logged and cached as an empty model.
        """
        key = str(descriptor)

        def load() -> ProjectModel:
            try:
                model = loader.load(descriptor)
            except DescriptorLoadError as e:
                logger.warning("Using empty package metadata: %s", e)
                return ProjectModel()
            return model or ProjectModel()

        return self._get_or_load(self._module_metadata, key, load)

    def get_or_create_library_metadata(
        self, library_root: Path, reader: ManifestReader
    ) -> LibraryManifest:
        """Return the (possibly empty) manifest of a runtime library root."""
        key = str(library_root)

        def load() -> LibraryManifest:
            try:
                manifest = reader.read(library_root)
            except ManifestReadError as e:
                logger.warning("Using empty library metadata: %s", e)
                return LibraryManifest()
            return manifest or LibraryManifest()

        return self._get_or_load(self._library_metadata, key, load)

    # Introspection

    @property
    def documents(self) -> list[Document]:
        with self._lock:
            return list(self._documents.values())

    @property
    def symbols(self) -> list[SymbolData]:
        with self._lock:
            return list(self._symbols.values())

    def find_document(self, uri: str) -> Document | None:
        with self._lock:
            return self._documents.get(canonicalize_uri(uri))

    def find_symbol(self, definition_identity: str) -> SymbolData | None:
        with self._lock:
            return self._symbols.get(definition_identity)

    # Internals

    def _get_or_create(self, cache: dict, key: object, factory: Callable[[], T]) -> T:
        with self._lock:
            existing = cache.get(key)
            if existing is not None:
                return existing
            created = factory()
            cache[key] = created
            return created

    def _get_or_load(self, cache: dict[str, T], key: str, load: Callable[[], T]) -> T:
        with self._lock:
            existing = cache.get(key)
            if existing is not None:
                return existing
            key_lock = self._load_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                existing = cache.get(key)
            if existing is not None:
                return existing
            loaded = load()
            with self._lock:
                cache[key] = loaded
                self._load_locks.pop(key, None)
            return loaded
