"""Tests for build descriptor and manifest readers."""

from __future__ import annotations

import zipfile
from pathlib import Path

import pytest
from lsifmine_core.indexer.descriptors import (
    JarManifestReader,
    PomDescriptorLoader,
    automatic_module_name,
    find_descriptor,
    parse_manifest,
    scm_provider,
)
from lsifmine_core.indexer.exceptions import DescriptorLoadError

GUAVA_POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <parent>
    <groupId>com.google.guava</groupId>
    <artifactId>guava-parent</artifactId>
    <version>31.1-jre</version>
  </parent>
  <artifactId>guava</artifactId>
  <properties>
    <scm.host>github.com</scm.host>
  </properties>
  <scm>
    <url>https://${scm.host}/google/guava</url>
    <connection>scm:git:https://github.com/google/guava.git</connection>
  </scm>
</project>
"""


def write_jar(path: Path, manifest: str | None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as jar:
        if manifest is not None:
            jar.writestr("META-INF/MANIFEST.MF", manifest)
        jar.writestr("com/example/A.class", b"\xca\xfe\xba\xbe")
    return path


class TestPomDescriptorLoader:
    """Tests for Maven POM loading."""

    def test_parent_fallback_and_interpolation(self, tmp_path: Path) -> None:
        """groupId/version come from <parent>, properties are expanded."""
        pom = tmp_path / "guava-31.1-jre.pom"
        pom.write_text(GUAVA_POM, encoding="utf-8")

        model = PomDescriptorLoader().load(pom)

        assert model is not None
        assert model.group_id == "com.google.guava"
        assert model.artifact_id == "guava"
        assert model.version == "31.1-jre"
        assert model.scm_url == "https://github.com/google/guava"
        assert model.scm_provider_type == "git"

    def test_missing_fields_are_none(self, tmp_path: Path) -> None:
        """A minimal descriptor yields a partial model."""
        pom = tmp_path / "a.pom"
        pom.write_text("<project><artifactId>a</artifactId></project>", encoding="utf-8")

        model = PomDescriptorLoader().load(pom)

        assert model is not None
        assert model.artifact_id == "a"
        assert model.group_id is None
        assert model.version is None
        assert model.scm_url is None

    def test_malformed_descriptor_raises(self, tmp_path: Path) -> None:
        """Unparseable XML is reported as a DescriptorLoadError."""
        pom = tmp_path / "broken.pom"
        pom.write_text("<project><groupId>", encoding="utf-8")

        with pytest.raises(DescriptorLoadError):
            PomDescriptorLoader().load(pom)

    def test_not_a_project(self, tmp_path: Path) -> None:
        """Other XML documents are ignored."""
        pom = tmp_path / "other.pom"
        pom.write_text("<settings/>", encoding="utf-8")
        assert PomDescriptorLoader().load(pom) is None


class TestScmProvider:
    """Tests for SCM connection parsing."""

    def test_providers(self) -> None:
        """Provider is the segment after ``scm:``."""
        assert scm_provider("scm:git:https://github.com/a/b.git") == "git"
        assert scm_provider("scm:svn|http://svn.example.com/repo") == "svn"

    def test_invalid(self) -> None:
        """Non-SCM strings have no provider."""
        assert scm_provider(None) is None
        assert scm_provider("https://github.com/a/b") is None
        assert scm_provider("scm:") is None


class TestManifest:
    """Tests for manifest parsing and reading."""

    def test_parse_main_section_with_continuation(self) -> None:
        """Continuation lines are joined and other sections ignored."""
        content = (
            "Manifest-Version: 1.0\n"
            "Implementation-Version: 17.0.2\n"
            "Automatic-Module-Name: java.ba\n"
            " se\n"
            "\n"
            "Name: com/example/\n"
            "Implementation-Version: 0.0\n"
        )
        attributes = parse_manifest(content)
        assert attributes["Implementation-Version"] == "17.0.2"
        assert attributes["Automatic-Module-Name"] == "java.base"

    def test_automatic_module_name(self) -> None:
        """Module names are derived from jar file names."""
        assert automatic_module_name(Path("guava-31.1-jre.jar")) == "guava"
        assert automatic_module_name(Path("commons-lang3-3.12.0.jar")) == "commons.lang3"
        assert automatic_module_name(Path("-1.0.jar")) is None

    def test_read_jar_manifest(self, tmp_path: Path) -> None:
        """Version and module name are read from a jar."""
        jar = write_jar(
            tmp_path / "rt.jar",
            "Manifest-Version: 1.0\nImplementation-Version: 1.8.0_292\n",
        )
        manifest = JarManifestReader().read(jar)
        assert manifest is not None
        assert manifest.implementation_version == "1.8.0_292"
        assert manifest.module_name == "rt"

    def test_jar_without_manifest(self, tmp_path: Path) -> None:
        """A jar without manifest still has a derived module name."""
        jar = write_jar(tmp_path / "lib-2.0.jar", None)
        manifest = JarManifestReader().read(jar)
        assert manifest is not None
        assert manifest.implementation_version is None
        assert manifest.module_name == "lib"

    def test_class_folder(self, tmp_path: Path) -> None:
        """Exploded class folders are supported."""
        root = tmp_path / "classes"
        (root / "META-INF").mkdir(parents=True)
        (root / "META-INF" / "MANIFEST.MF").write_text(
            "Implementation-Version: 2.1\nAutomatic-Module-Name: org.example.lib\n",
            encoding="utf-8",
        )
        manifest = JarManifestReader().read(root)
        assert manifest is not None
        assert manifest.module_name == "org.example.lib"

    def test_missing_library(self, tmp_path: Path) -> None:
        """Nothing is read for a folder without a manifest."""
        assert JarManifestReader().read(tmp_path) is None


class TestFindDescriptor:
    """Tests for the bounded descriptor search."""

    def test_finds_sibling(self, tmp_path: Path) -> None:
        """A descriptor next to the artifact is found at depth 0."""
        (tmp_path / "a-1.0.jar").touch()
        (tmp_path / "a-1.0.pom").touch()
        assert find_descriptor(tmp_path, max_depth=0) == tmp_path / "a-1.0.pom"

    def test_finds_nested(self, tmp_path: Path) -> None:
        """Descriptors in sub folders are found within the depth bound."""
        nested = tmp_path / "hash2"
        nested.mkdir()
        (tmp_path / "hash1").mkdir()
        (nested / "a-1.0.pom").touch()
        assert find_descriptor(tmp_path, max_depth=1) == nested / "a-1.0.pom"

    def test_depth_bound(self, tmp_path: Path) -> None:
        """Descriptors deeper than the bound are not found."""
        deep = tmp_path / "x" / "y" / "z"
        deep.mkdir(parents=True)
        (deep / "a.pom").touch()
        assert find_descriptor(tmp_path, max_depth=2) is None
        assert find_descriptor(tmp_path, max_depth=3) == deep / "a.pom"

    def test_missing_folder(self, tmp_path: Path) -> None:
        """A folder that does not exist yields nothing."""
        assert find_descriptor(tmp_path / "missing", max_depth=3) is None
