"""Indexer-specific exceptions."""


class IndexerError(Exception):
    """Base class for indexer errors."""

    pass


class DescriptorLoadError(IndexerError):
    """Raised when a build descriptor (e.g. a ``.pom``) cannot be read or parsed.

    The repository caches the failure as empty metadata so the same
    descriptor is not retried for every occurrence.
    """

    pass


class ManifestReadError(IndexerError):
    """Raised when a library manifest cannot be read."""

    pass


class ResolutionError(IndexerError):
    """Raised when the language model fails while resolving an occurrence."""

    pass
