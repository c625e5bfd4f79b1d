"""Shared fixtures for the indexer tests."""

from __future__ import annotations

from collections import Counter
from typing import Any

import pytest
from lsifmine_core.indexer import IndexingSession, StaticLanguageModel
from lsifmine_core.settings import Settings


def make_settings(**overrides: Any) -> Settings:
    """Settings isolated from the environment's .env file."""
    return Settings(_env_file=None, **overrides)


def label_counts(session: IndexingSession) -> Counter[str]:
    return Counter(record["label"] for record in session.emitter.records())


def records_with_label(session: IndexingSession, label: str) -> list[dict[str, Any]]:
    return [record for record in session.emitter.records() if record["label"] == label]


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def model() -> StaticLanguageModel:
    return StaticLanguageModel()


@pytest.fixture
def session(model: StaticLanguageModel, settings: Settings) -> IndexingSession:
    return IndexingSession(model=model, settings=settings)
