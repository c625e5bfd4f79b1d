"""Symbol resolution and index-graph construction.

Given a located syntax node, the indexer resolves its declaration through a
language model, deduplicates vertices for the whole run, classifies the
symbol (export / local / import), resolves its package coordinates and
emits one consistent subgraph per logical symbol.
"""

from lsifmine_core.indexer.descriptors import (
    DescriptorLoader,
    JarManifestReader,
    LibraryManifest,
    ManifestReader,
    PackageCoordinates,
    PomDescriptorLoader,
    ProjectModel,
    find_descriptor,
)
from lsifmine_core.indexer.dispatch import FragmentOwner, NodeKind, SyntaxNode, dispatch
from lsifmine_core.indexer.driver import (
    Failed,
    OccurrenceDriver,
    OccurrenceResult,
    Resolved,
    ResolutionMode,
    Skipped,
    symbol_key,
)
from lsifmine_core.indexer.exceptions import (
    DescriptorLoadError,
    IndexerError,
    ManifestReadError,
    ResolutionError,
)
from lsifmine_core.indexer.model import (
    DeclarationKind,
    DeclarationRef,
    LanguageModel,
    SourceLocation,
    StaticLanguageModel,
)
from lsifmine_core.indexer.monikers import (
    MonikerResolver,
    classify_modifiers,
    get_moniker_identifier,
)
from lsifmine_core.indexer.repository import Repository
from lsifmine_core.indexer.session import IndexingSession
from lsifmine_core.indexer.symbol_data import SymbolData, SymbolState

__all__ = [
    # Session
    "IndexingSession",
    "Repository",
    "SymbolData",
    "SymbolState",
    # Driver
    "OccurrenceDriver",
    "OccurrenceResult",
    "Resolved",
    "Skipped",
    "Failed",
    "ResolutionMode",
    "symbol_key",
    # Dispatch
    "NodeKind",
    "FragmentOwner",
    "SyntaxNode",
    "dispatch",
    # Monikers
    "MonikerResolver",
    "classify_modifiers",
    "get_moniker_identifier",
    # Language model
    "DeclarationKind",
    "DeclarationRef",
    "LanguageModel",
    "SourceLocation",
    "StaticLanguageModel",
    # Descriptors
    "DescriptorLoader",
    "PomDescriptorLoader",
    "ManifestReader",
    "JarManifestReader",
    "LibraryManifest",
    "PackageCoordinates",
    "ProjectModel",
    "find_descriptor",
    # Exceptions
    "IndexerError",
    "DescriptorLoadError",
    "ManifestReadError",
    "ResolutionError",
]
