"""Shared uri/path helpers for document identity."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse

FILE_SCHEME = "file"


def path_to_uri(path: str | Path) -> str:
    """Turn a filesystem path into a canonical ``file://`` uri.

    Rules:
    - resolve to an absolute path
    - collapse redundant separators/segments
    """
    return Path(path).resolve().as_uri()


def canonicalize_uri(uri: str) -> str:
    """Canonicalize a document uri so equal files compare equal.

    Non-file uris (e.g. ``jdt://`` class file handles) are kept verbatim;
    file uris get their path normalized via PurePosixPath.
    """
    uri = uri.strip()
    if not is_file_uri(uri):
        return uri
    path = str(PurePosixPath(unquote(urlparse(uri).path)))
    return PurePosixPath(path).as_uri() if path.startswith("/") else uri


def is_file_uri(uri: str) -> bool:
    return urlparse(uri).scheme == FILE_SCHEME
