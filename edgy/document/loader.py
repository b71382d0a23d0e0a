"""Read extracted design documents from JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..models import AnalysisInput


def parse_document(data: Any) -> AnalysisInput:
    """Build an AnalysisInput from already-decoded JSON."""
    if not isinstance(data, dict):
        raise ValueError("analysis input must be a JSON object")
    return AnalysisInput.from_dict(data)


def load_document(path: Path) -> AnalysisInput:
    """
    Load an analysis input document from disk.

    Raises ValueError for content that is not a usable document; I/O errors
    propagate unchanged.
    """
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"{path.name} is not valid JSON: {e}") from e
    return parse_document(data)
