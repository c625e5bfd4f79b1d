"""Indexing session: the explicit context of one indexing run.

A session owns everything whose identity must be stable across the run
(the emitter and its id counter, the repository caches, the project vertex)
and is passed to every component that needs it. Sessions share nothing:
caches are torn down with the session.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lsifmine_core.indexer.descriptors import (
    DescriptorLoader,
    JarManifestReader,
    ManifestReader,
    PomDescriptorLoader,
)
from lsifmine_core.indexer.driver import OccurrenceDriver
from lsifmine_core.indexer.model import LanguageModel
from lsifmine_core.indexer.monikers import MonikerResolver
from lsifmine_core.indexer.repository import Repository
from lsifmine_core.protocol import (
    Document,
    EdgeLabel,
    Emitter,
    Project,
    RecordSink,
)
from lsifmine_core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


class IndexingSession:
    """State of one indexing run over one project."""

    def __init__(
        self,
        model: LanguageModel,
        settings: Settings | None = None,
        project_root: Path | str | None = None,
        sink: RecordSink | None = None,
        descriptor_loader: DescriptorLoader | None = None,
        manifest_reader: ManifestReader | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.model = model
        self.project_root = Path(project_root) if project_root is not None else None
        self.emitter = Emitter(sink)
        self.project = self.emitter.emit(
            Project(id=self.emitter.next_id(), kind=self.settings.language_id)
        )
        self.repository = Repository(self.emitter, language_id=self.settings.language_id)
        self.monikers = MonikerResolver(
            settings=self.settings,
            repository=self.repository,
            descriptor_loader=descriptor_loader or PomDescriptorLoader(),
            manifest_reader=manifest_reader or JarManifestReader(),
            project_root=self.project_root,
        )
        self.driver = OccurrenceDriver(self)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def open_document(self, uri: str) -> Document:
        """Return the document vertex of a file about to be traversed."""
        return self.repository.get_or_create_document(uri, self.project)

    def close(self) -> None:
        """Link every document to its ranges and release the sink.

        Safe to call more than once.
        """
        if self._closed:
            return
        for document in self.repository.documents:
            if document.range_ids:
                self.emitter.multi_edge(EdgeLabel.CONTAINS, document.id, document.range_ids)
        self.emitter.close()
        self._closed = True
        logger.info(
            "Closed indexing session: %d documents, %d symbols, %d elements",
            len(self.repository.documents),
            len(self.repository.symbols),
            self.emitter.count,
        )

    def __enter__(self) -> IndexingSession:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
