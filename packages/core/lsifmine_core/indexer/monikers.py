"""Moniker resolution: visibility, identifiers and package coordinates.

Package coordinates are resolved through an ordered chain, first success
wins:

1. Runtime library: the declaration comes from a classpath container
   recognised as the platform runtime; coordinates are the module name and
   the manifest's implementation version.
2. Build tool project: a ``.pom`` found next to the declaration's artifact
   (one folder up for Maven repositories, two for the Gradle cache).
3. Unresolved: no coordinates; the moniker is still emitted.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from pathlib import Path

from lsifmine_core.indexer.descriptors import (
    DescriptorLoader,
    ManifestReader,
    PackageCoordinates,
    ProjectModel,
    find_descriptor,
)
from lsifmine_core.indexer.model import DeclarationKind, DeclarationRef
from lsifmine_core.indexer.repository import Repository
from lsifmine_core.protocol import MonikerKind, PackageManager
from lsifmine_core.settings import ProjectBuildTool, Settings

logger = logging.getLogger(__name__)

PUBLIC_MODIFIER = "public"
PROJECT_DESCRIPTOR = "pom.xml"

# Folders between a packaged artifact and the folder holding its descriptor.
DESCRIPTOR_DISTANCE: dict[ProjectBuildTool, int] = {
    ProjectBuildTool.MAVEN: 1,
    ProjectBuildTool.GRADLE: 2,
}

BUILD_TOOL_MANAGER: dict[ProjectBuildTool, PackageManager] = {
    ProjectBuildTool.MAVEN: PackageManager.MAVEN,
    ProjectBuildTool.GRADLE: PackageManager.GRADLE,
}


def classify_modifiers(modifiers: Iterable[str]) -> MonikerKind:
    """A declaration is exported when it is public, local otherwise."""
    return MonikerKind.EXPORT if PUBLIC_MODIFIER in set(modifiers) else MonikerKind.LOCAL


def get_moniker_identifier(declaration: DeclarationRef) -> str | None:
    """Build the moniker identifier of a declaration.

    - type: fully qualified name
    - field / local variable: ``<enclosing>/<name>``
    - method: ``<enclosing>/<name>:<erased signature>``
    - anything else: its simple name

    Returns None if the enclosing-scope chain cycles.
    """
    segments: list[str] = []
    seen: set[DeclarationRef] = set()
    current: DeclarationRef | None = declaration
    head = ""

    while current is not None:
        if current in seen:
            logger.warning("Enclosing scope cycle while naming %s", declaration.name)
            return None
        seen.add(current)

        if current.kind == DeclarationKind.TYPE:
            head = current.qualified_name or current.name
            break
        if current.kind in (DeclarationKind.FIELD, DeclarationKind.LOCAL_VARIABLE):
            segments.append(current.name)
        elif current.kind == DeclarationKind.METHOD:
            segments.append(f"{current.name}:{current.signature or ''}")
        else:
            head = current.name
            break
        current = current.parent

    if not head and segments:
        head = segments.pop()
    return "/".join([head, *reversed(segments)])


class MonikerResolver:
    """Resolves package coordinates for one indexing session."""

    def __init__(
        self,
        settings: Settings,
        repository: Repository,
        descriptor_loader: DescriptorLoader,
        manifest_reader: ManifestReader,
        project_root: Path | None = None,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._descriptor_loader = descriptor_loader
        self._manifest_reader = manifest_reader
        self._project_root = project_root
        self._descriptor_lookups: dict[Path, Path | None] = {}
        self._lock = threading.Lock()
        self._export_coordinates: PackageCoordinates | None = None
        self._export_resolved = False

    @property
    def build_tool(self) -> ProjectBuildTool:
        return self._settings.build_tool

    def is_runtime_library(self, declaration: DeclarationRef) -> bool:
        container = declaration.classpath_container or ""
        prefixes = self._settings.runtime_container_prefixes
        return any(container.startswith(prefix) for prefix in prefixes)

    def resolve_coordinates(self, declaration: DeclarationRef) -> PackageCoordinates | None:
        """Run the package coordinate chain for a declaration.

        Only declarations read from compiled code have coordinates.
        """
        if not declaration.is_binary:
            return None
        binary_path = Path(declaration.binary_path or "")

        if self.is_runtime_library(declaration):
            return self._runtime_coordinates(declaration, binary_path)

        descriptor = self._find_build_descriptor(binary_path)
        if descriptor is None:
            logger.debug("No build descriptor for %s", binary_path)
            return None
        model = self._repository.get_or_create_module_metadata(descriptor, self._descriptor_loader)
        return _coordinates_from_model(
            key=str(descriptor),
            model=model,
            manager=BUILD_TOOL_MANAGER[self.build_tool],
        )

    def export_coordinates(self) -> PackageCoordinates | None:
        """Coordinates of the publishing project, used for exported symbols.

        Only available in publish mode with a Maven or Gradle build.
        """
        if not self._settings.publish or self.build_tool not in BUILD_TOOL_MANAGER:
            return None
        with self._lock:
            if not self._export_resolved:
                self._export_coordinates = self._load_export_coordinates()
                self._export_resolved = True
            return self._export_coordinates

    def _runtime_coordinates(
        self, declaration: DeclarationRef, library_root: Path
    ) -> PackageCoordinates:
        manifest = self._repository.get_or_create_library_metadata(
            library_root, self._manifest_reader
        )
        module_name = declaration.module_name or manifest.module_name or ""
        key = f"module:{module_name}" if module_name else f"library:{library_root}"
        return PackageCoordinates(
            key=key,
            name=module_name,
            version=manifest.implementation_version or "",
            manager=PackageManager.JDK,
        )

    def _find_build_descriptor(self, binary_path: Path) -> Path | None:
        distance = DESCRIPTOR_DISTANCE.get(self.build_tool)
        if distance is None or len(binary_path.parents) < distance:
            return None
        folder = binary_path.parents[distance - 1]

        with self._lock:
            if folder in self._descriptor_lookups:
                return self._descriptor_lookups[folder]
        descriptor = find_descriptor(folder, self._settings.descriptor_search_depth)
        with self._lock:
            self._descriptor_lookups.setdefault(folder, descriptor)
        return descriptor

    def _load_export_coordinates(self) -> PackageCoordinates:
        manager = BUILD_TOOL_MANAGER[self.build_tool]
        model = ProjectModel()
        key = "project"
        if self._project_root is not None:
            key = f"project:{self._project_root}"
            descriptor = self._project_root / PROJECT_DESCRIPTOR
            if self.build_tool == ProjectBuildTool.MAVEN and descriptor.is_file():
                model = self._repository.get_or_create_module_metadata(
                    descriptor, self._descriptor_loader
                )
        model = ProjectModel(
            group_id=self._settings.project_group_id or model.group_id,
            artifact_id=self._settings.project_artifact_id or model.artifact_id,
            version=self._settings.project_version or model.version,
            scm_url=model.scm_url,
            scm_provider_type=model.scm_provider_type,
        )
        return _coordinates_from_model(key=key, model=model, manager=manager)


def _coordinates_from_model(
    key: str, model: ProjectModel, manager: PackageManager
) -> PackageCoordinates:
    name = ""
    if model.group_id and model.artifact_id:
        name = f"{model.group_id}/{model.artifact_id}"
    return PackageCoordinates(
        key=key,
        name=name,
        version=model.version or "",
        manager=manager,
        repository_type=model.scm_provider_type or "",
        repository_url=model.scm_url or "",
    )
