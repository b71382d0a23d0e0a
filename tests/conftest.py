"""Pytest configuration and fixtures."""

import json
from pathlib import Path
from typing import Any

import pytest

from edgy.document import load_document
from edgy.knowledge import DEFAULT_KNOWLEDGE_DIR, KnowledgeBase, load_knowledge
from edgy.models import AnalysisInput


@pytest.fixture
def sample_input_path() -> Path:
    """Path to the three-screen sample document (Login, Login - Error, Dashboard)."""
    return Path(__file__).parent / "fixtures" / "sample_input.json"


@pytest.fixture
def sample_document(sample_input_path: Path) -> AnalysisInput:
    return load_document(sample_input_path)


@pytest.fixture
def sample_data(sample_input_path: Path) -> dict[str, Any]:
    return json.loads(sample_input_path.read_text(encoding="utf-8"))


@pytest.fixture
def knowledge() -> KnowledgeBase:
    """The bundled knowledge base."""
    return load_knowledge(DEFAULT_KNOWLEDGE_DIR)

