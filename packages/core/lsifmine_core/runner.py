"""Indexing run orchestration.

Drives the Java traversal over a set of source files, dispatching every
reported node into one ``IndexingSession``.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Iterable
from pathlib import Path

from lsifmine_core.indexer import (
    DescriptorLoader,
    IndexerError,
    IndexingSession,
    LanguageModel,
    ManifestReader,
    dispatch,
)
from lsifmine_core.pathing import path_to_uri
from lsifmine_core.protocol import RecordSink
from lsifmine_core.settings import Settings, get_settings
from lsifmine_core.treesitter import JavaSourceTraversal, get_treesitter_manager

logger = logging.getLogger(__name__)


def index_sources(
    paths: Iterable[Path | str],
    model: LanguageModel,
    settings: Settings | None = None,
    project_root: Path | str | None = None,
    sink: RecordSink | None = None,
    traversal: JavaSourceTraversal | None = None,
    descriptor_loader: DescriptorLoader | None = None,
    manifest_reader: ManifestReader | None = None,
) -> IndexingSession:
    """Index the given source files into a new, closed session.

    A file that cannot be read or parsed is logged and skipped; it never
    aborts the run.

    Raises:
        IndexerError: If no Java parser is available
    """
    settings = settings or get_settings()
    traversal = traversal or JavaSourceTraversal(
        get_treesitter_manager(cache_size=settings.treesitter_cache_size)
    )
    if not traversal.is_available():
        raise IndexerError("Java source traversal requires tree-sitter-language-pack")
    session = IndexingSession(
        model=model,
        settings=settings,
        project_root=project_root,
        sink=sink,
        descriptor_loader=descriptor_loader,
        manifest_reader=manifest_reader,
    )

    start_time = time.monotonic()
    outcomes: Counter[str] = Counter()
    with session:
        for path in paths:
            path = Path(path)
            document = session.open_document(path_to_uri(path))
            try:
                for node in traversal.nodes(path):
                    result = dispatch(node, session.driver, document)
                    if result is not None:
                        outcomes[type(result).__name__] += 1
            except (OSError, ValueError) as e:
                logger.warning("Skipping %s: %s", path, e)
                outcomes["unreadable_files"] += 1

    logger.info(
        "Indexed %d documents in %.2fs (%s)",
        len(session.repository.documents),
        time.monotonic() - start_time,
        ", ".join(f"{name}={count}" for name, count in sorted(outcomes.items())) or "empty",
    )
    logger.debug("Parse cache: %s", traversal.manager.get_cache_stats())
    return session


def index_project(
    project_root: Path | str,
    model: LanguageModel,
    settings: Settings | None = None,
    sink: RecordSink | None = None,
) -> IndexingSession:
    """Index every source file of a project root matching ``settings.source_glob``."""
    settings = settings or get_settings()
    root = Path(project_root).resolve()
    paths = sorted(p for p in root.glob(settings.source_glob) if p.is_file())
    logger.info("Indexing %d files below %s", len(paths), root)
    return index_sources(paths, model, settings=settings, project_root=root, sink=sink)
