"""Document ingestion: turning uploads into plain text."""

from fairclause.ingestion.text_source import (
    SourceDocument,
    TextSourceAdapter,
    detect_mime_type,
    infer_contract_type,
    text_source,
)

__all__ = [
    "SourceDocument",
    "TextSourceAdapter",
    "detect_mime_type",
    "infer_contract_type",
    "text_source",
]
