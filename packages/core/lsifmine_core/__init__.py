"""lsifmine core: code-navigation index construction for Java sources.

The indexer turns resolved symbol occurrences into an LSIF-style graph of
documents, ranges, result sets, monikers and package information that
downstream tools use for go-to-definition, find-references and
cross-repository symbol lookup.
"""

from __future__ import annotations

from pathlib import Path

from lsifmine_core.indexer import IndexingSession, LanguageModel
from lsifmine_core.protocol import RecordSink
from lsifmine_core.settings import Settings

__all__ = [
    "IndexingSession",
    "LanguageModel",
    "Settings",
    # Entry functions (lazy import)
    "index_project",
    "index_sources",
]


def index_project(
    project_root: Path | str,
    model: LanguageModel,
    settings: Settings | None = None,
    sink: RecordSink | None = None,
) -> IndexingSession:
    """Index all Java sources of a project.

    Args:
        project_root: Root directory of the project
        model: Language model resolving declarations
        settings: Indexer settings (environment defaults if not provided)
        sink: Optional record sink, e.g. a JsonLinesSink

    Returns:
        The closed IndexingSession holding the emitted graph
    """
    from lsifmine_core.runner import index_project as _index_project

    return _index_project(project_root, model, settings=settings, sink=sink)


def index_sources(
    paths: list[Path | str],
    model: LanguageModel,
    settings: Settings | None = None,
    sink: RecordSink | None = None,
) -> IndexingSession:
    """Index an explicit list of Java source files."""
    from lsifmine_core.runner import index_sources as _index_sources

    return _index_sources(paths, model, settings=settings, sink=sink)
