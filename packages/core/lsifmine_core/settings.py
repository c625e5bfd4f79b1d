"""Indexer settings using pydantic-settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

JRE_CONTAINER = "org.eclipse.jdt.launching.JRE_CONTAINER"


class ProjectBuildTool(str, Enum):
    """Build tool of the project being indexed."""

    MAVEN = "maven"
    GRADLE = "gradle"
    NONE = "none"


class Settings(BaseSettings):
    """Indexer settings loaded from ``LSIF_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LSIF_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Project
    language_id: str = Field(
        default="java",
        description="Language id stamped on the Project vertex and on documents",
    )
    build_tool: ProjectBuildTool = Field(
        default=ProjectBuildTool.NONE,
        description="Build tool of the indexed project (maven, gradle, none)",
    )
    publish: bool = Field(
        default=False,
        description="Publish mode: exported symbols carry the project's own coordinates",
    )
    project_group_id: str | None = Field(
        default=None,
        description="Override of the publishing project's groupId",
    )
    project_artifact_id: str | None = Field(
        default=None,
        description="Override of the publishing project's artifactId",
    )
    project_version: str | None = Field(
        default=None,
        description="Override of the publishing project's version",
    )

    # Package coordinate resolution
    runtime_container_prefixes: list[str] = Field(
        default_factory=lambda: [JRE_CONTAINER],
        description="Classpath container paths recognised as the platform runtime library",
    )
    descriptor_search_depth: int = Field(
        default=3,
        ge=0,
        description="Maximum directory depth searched below an artifact folder for a *.pom",
    )

    # Traversal
    source_glob: str = Field(
        default="**/*.java",
        description="Glob selecting the source files of a project root",
    )
    treesitter_cache_size: int = Field(
        default=100,
        description="Maximum number of parsed syntax trees to cache",
    )


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
