"""Design document loading."""

from .loader import load_document, parse_document

__all__ = ["load_document", "parse_document"]
