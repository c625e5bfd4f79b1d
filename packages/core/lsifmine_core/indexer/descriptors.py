"""Build descriptor and library manifest readers.

These are the filesystem collaborators of the package coordinate chain:

- ``PomDescriptorLoader`` reads the Maven model of a ``.pom`` file
- ``JarManifestReader`` reads ``META-INF/MANIFEST.MF`` of a runtime library
- ``find_descriptor`` locates a ``.pom`` below an artifact folder
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from lsifmine_core.indexer.exceptions import DescriptorLoadError, ManifestReadError
from lsifmine_core.protocol import PackageManager

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIX = ".pom"
MANIFEST_PATH = "META-INF/MANIFEST.MF"

_PROPERTY_REF = re.compile(r"\$\{([^}]+)\}")
_VERSION_START = re.compile(r"-(\d+(\.|$))")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")
_REPEATED_DOTS = re.compile(r"\.{2,}")


@dataclass(frozen=True)
class ProjectModel:
    """The parts of a build descriptor the moniker resolver needs."""

    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    scm_url: str | None = None
    scm_provider_type: str | None = None


@dataclass(frozen=True)
class LibraryManifest:
    """Main attributes of a runtime library manifest."""

    implementation_version: str | None = None
    module_name: str | None = None


class DescriptorLoader(ABC):
    """Loads the project model of a build descriptor file."""

    @abstractmethod
    def load(self, descriptor: Path) -> ProjectModel | None:
        """Load ``descriptor``.

        Raises:
            DescriptorLoadError: If the descriptor cannot be read or parsed
        """
        pass


class ManifestReader(ABC):
    """Reads the manifest of a library root (jar file or class folder)."""

    @abstractmethod
    def read(self, library_root: Path) -> LibraryManifest | None:
        """Read the manifest below ``library_root``.

        Raises:
            ManifestReadError: If the manifest exists but cannot be read
        """
        pass


def _tag_local_name(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", 1)[1]
    return tag


def _child(node: ET.Element | None, local_name: str) -> ET.Element | None:
    if node is None:
        return None
    for child in node:
        if _tag_local_name(child.tag) == local_name:
            return child
    return None


def _text(node: ET.Element | None, local_name: str) -> str | None:
    child = _child(node, local_name)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def scm_provider(connection: str | None) -> str | None:
    """Return the provider of an SCM connection url (``scm:git:...`` -> ``git``)."""
    if not connection or not connection.startswith("scm:"):
        return None
    rest = connection[len("scm:") :]
    for separator in (":", "|"):
        if separator in rest:
            provider = rest.split(separator, 1)[0]
            return provider or None
    return None


class PomDescriptorLoader(DescriptorLoader):
    """Reads groupId/artifactId/version/SCM from a Maven POM.

    groupId and version fall back to the ``<parent>`` block, and simple
    ``${...}`` references to ``<properties>`` or ``project.*`` are expanded.
    """

    def load(self, descriptor: Path) -> ProjectModel | None:
        try:
            root = ET.parse(descriptor).getroot()
        except (OSError, ET.ParseError) as e:
            raise DescriptorLoadError(f"Cannot read build descriptor {descriptor}: {e}") from e

        if _tag_local_name(root.tag) != "project":
            logger.debug("Not a Maven project descriptor: %s", descriptor)
            return None

        parent = _child(root, "parent")
        group_id = _text(root, "groupId") or _text(parent, "groupId")
        artifact_id = _text(root, "artifactId")
        version = _text(root, "version") or _text(parent, "version")

        properties: dict[str, str] = {}
        props = _child(root, "properties")
        if props is not None:
            for prop in props:
                if prop.text is not None:
                    properties[_tag_local_name(prop.tag)] = prop.text.strip()
        for key, value in (
            ("project.groupId", group_id),
            ("project.artifactId", artifact_id),
            ("project.version", version),
        ):
            if value is not None:
                properties.setdefault(key, value)

        scm = _child(root, "scm")
        connection = _text(scm, "connection") or _text(scm, "developerConnection")

        return ProjectModel(
            group_id=_interpolate(group_id, properties),
            artifact_id=_interpolate(artifact_id, properties),
            version=_interpolate(version, properties),
            scm_url=_interpolate(_text(scm, "url"), properties),
            scm_provider_type=scm_provider(_interpolate(connection, properties)),
        )


def _interpolate(value: str | None, properties: dict[str, str]) -> str | None:
    if value is None:
        return None
    return _PROPERTY_REF.sub(lambda m: properties.get(m.group(1), m.group(0)), value)


def parse_manifest(content: str) -> dict[str, str]:
    """Parse the main section of a manifest into attribute -> value."""
    attributes: dict[str, str] = {}
    last_key: str | None = None
    for raw_line in content.splitlines():
        if not raw_line.strip():
            # Main section ends at the first blank line.
            break
        if raw_line.startswith(" ") and last_key is not None:
            attributes[last_key] += raw_line[1:]
            continue
        if ":" not in raw_line:
            continue
        key, value = raw_line.split(":", 1)
        last_key = key.strip()
        attributes[last_key] = value.strip()
    return attributes


def automatic_module_name(library_root: Path) -> str | None:
    """Derive a module name from a jar file name (``guava-31.1.jar`` -> ``guava``)."""
    stem = library_root.name
    if stem.endswith(".jar"):
        stem = stem[: -len(".jar")]
    match = _VERSION_START.search(stem)
    if match:
        stem = stem[: match.start()]
    name = _REPEATED_DOTS.sub(".", _NON_ALNUM.sub(".", stem)).strip(".")
    return name or None


class JarManifestReader(ManifestReader):
    """Reads manifests from jar files or exploded class folders."""

    def read(self, library_root: Path) -> LibraryManifest | None:
        content = self._read_content(library_root)
        if content is None:
            if library_root.suffix == ".jar":
                return LibraryManifest(module_name=automatic_module_name(library_root))
            return None
        attributes = parse_manifest(content)
        return LibraryManifest(
            implementation_version=attributes.get("Implementation-Version"),
            module_name=attributes.get("Automatic-Module-Name")
            or automatic_module_name(library_root),
        )

    def _read_content(self, library_root: Path) -> str | None:
        try:
            if library_root.is_dir():
                manifest = library_root / MANIFEST_PATH
                if not manifest.is_file():
                    return None
                return manifest.read_text(encoding="utf-8", errors="replace")
            if not zipfile.is_zipfile(library_root):
                return None
            with zipfile.ZipFile(library_root) as jar:
                if MANIFEST_PATH not in jar.namelist():
                    return None
                return jar.read(MANIFEST_PATH).decode("utf-8", errors="replace")
        except (OSError, zipfile.BadZipFile) as e:
            raise ManifestReadError(f"Cannot read manifest of {library_root}: {e}") from e


def find_descriptor(folder: Path, max_depth: int) -> Path | None:
    """Find the first ``.pom`` file in ``folder`` or up to ``max_depth`` levels below it.

    Entries are visited in sorted order so the result is deterministic.
    """
    if max_depth < 0 or not folder.is_dir():
        return None
    try:
        entries = sorted(folder.iterdir())
    except OSError as e:
        logger.warning("Cannot list %s while searching for a descriptor: %s", folder, e)
        return None

    subfolders: list[Path] = []
    for entry in entries:
        if entry.is_file() and entry.name.endswith(DESCRIPTOR_SUFFIX):
            return entry
        if entry.is_dir():
            subfolders.append(entry)

    for subfolder in subfolders:
        found = find_descriptor(subfolder, max_depth - 1)
        if found is not None:
            return found
    return None


@dataclass(frozen=True)
class PackageCoordinates:
    """Resolved package coordinates of a symbol's declaring module.

    ``key`` identifies the module (descriptor path or runtime module name)
    and is the dedup key of the package information vertex.
    """

    key: str
    name: str = ""
    version: str = ""
    manager: PackageManager = PackageManager.UNKNOWN
    repository_type: str = ""
    repository_url: str = ""
