"""TextSource Adapter - first stage of the analysis pipeline.

This module normalizes an uploaded file (raw bytes, base64 payload, stream
or path) or an already-extracted text into plain text plus metadata. PDF is
read with PyMuPDF, Word documents with python-docx, text as UTF-8.
"""

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import docx
import fitz  # PyMuPDF

from app.config import get_settings
from fairclause.errors import IngestionError

logger = logging.getLogger("fairclause.ingestion")

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"
TEXT_MIME = "text/plain"
GENERIC_MIME = "application/octet-stream"

SUPPORTED_MIME_TYPES = frozenset({PDF_MIME, DOCX_MIME, TEXT_MIME})

# Storage layers sometimes rewrite "contract.docx" as "contract_docx"
EXTENSION_MIME_TYPES: list[tuple[tuple[str, ...], str]] = [
    ((".pdf", "_pdf"), PDF_MIME),
    ((".docx", "_docx"), DOCX_MIME),
    ((".doc", "_doc"), DOC_MIME),
    ((".txt", "_txt"), TEXT_MIME),
]

CONTRACT_TYPE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(rent|rental|lease|tenant|tenancy|landlord)"), "rental"),
    (re.compile(r"\b(employ\w*|job|offer letter|salary)"), "employment"),
    (re.compile(r"\b(nda|non-disclosure|confidentiality agreement)\b"), "nda"),
    (re.compile(r"\b(services?|consult\w*|statement of work)"), "service"),
]


@dataclass
class SourceDocument:
    """Plain text and metadata extracted from one source."""
    filename: str
    mime_type: str
    size_bytes: int
    text: str
    page_count: int = 1

    @property
    def word_count(self) -> int:
        """Number of whitespace-separated words in the text."""
        return len(self.text.split())

    @property
    def is_empty(self) -> bool:
        """Check if the document has no extractable text."""
        return self.word_count == 0


def detect_mime_type(filename: str, declared: str | None = None) -> str:
    """Resolve the mime type of an upload.

    A specific declared type wins; a missing or generic one is inferred from
    the file name.

    Args:
        filename: Name of the uploaded file.
        declared: Mime type declared by the client, if any.

    Returns:
        Resolved mime type, or the declared/generic type when nothing matches.
    """
    if declared and declared != GENERIC_MIME:
        return declared

    name = filename.lower()
    for suffixes, mime_type in EXTENSION_MIME_TYPES:
        if name.endswith(suffixes):
            return mime_type

    return declared or GENERIC_MIME


def infer_contract_type(filename: str = "", text: str = "") -> str:
    """Guess the contract type from the file name, then the opening text.

    Returns:
        One of "rental", "employment", "nda", "service" or "contract".
    """
    for haystack in (filename.lower(), text[:500].lower()):
        if not haystack:
            continue
        for pattern, contract_type in CONTRACT_TYPE_PATTERNS:
            if pattern.search(haystack):
                return contract_type
    return "contract"


class TextSourceAdapter:
    """Extracts plain text from uploaded documents."""

    def __init__(self, max_upload_bytes: int | None = None) -> None:
        self.max_upload_bytes = max_upload_bytes or get_settings().max_upload_bytes

    def from_text(self, text: str, filename: str = "document.txt") -> SourceDocument:
        """Wrap already-extracted text (e.g. from the document store)."""
        cleaned = self._clean_text(text)
        return SourceDocument(
            filename=filename,
            mime_type=TEXT_MIME,
            size_bytes=len(text.encode("utf-8")),
            text=cleaned,
        )

    def from_bytes(
        self,
        content: bytes,
        filename: str,
        mime_type: str | None = None,
    ) -> SourceDocument:
        """Extract text from raw file bytes.

        Args:
            content: Raw file bytes.
            filename: Name of the source file.
            mime_type: Declared mime type; inferred from the name when missing.

        Returns:
            SourceDocument with extracted text and metadata.

        Raises:
            IngestionError: If the file is too large, unsupported, unreadable
                or contains no text.
        """
        if len(content) > self.max_upload_bytes:
            raise IngestionError(
                f"File {filename} is {len(content)} bytes; limit is {self.max_upload_bytes}"
            )

        resolved = detect_mime_type(filename, mime_type)
        if resolved not in SUPPORTED_MIME_TYPES:
            raise IngestionError(f"Unsupported file type: {resolved}")

        try:
            if resolved == PDF_MIME:
                text, page_count = self._extract_pdf(content)
            elif resolved == DOCX_MIME:
                text, page_count = self._extract_docx(content), 1
            else:
                text, page_count = self._extract_txt(content), 1
        except IngestionError:
            raise
        except Exception as e:
            raise IngestionError(f"Failed to extract text from {filename}: {e}") from e

        document = SourceDocument(
            filename=filename,
            mime_type=resolved,
            size_bytes=len(content),
            text=self._clean_text(text),
            page_count=page_count,
        )

        if document.is_empty:
            raise IngestionError(f"No text could be extracted from {filename}")

        logger.info(
            f"Extracted {document.word_count} words from {filename} "
            f"({resolved}, {document.page_count} pages)"
        )
        return document

    def from_base64(
        self,
        payload: str,
        filename: str,
        mime_type: str | None = None,
    ) -> SourceDocument:
        """Extract text from a base64-encoded file (data URLs accepted)."""
        if payload.startswith("data:") and "," in payload:
            payload = payload.split(",", 1)[1]
        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise IngestionError(f"Invalid base64 payload for {filename}: {e}") from e
        return self.from_bytes(content, filename, mime_type)

    def from_stream(
        self,
        stream: BinaryIO,
        filename: str,
        mime_type: str | None = None,
    ) -> SourceDocument:
        """Extract text from a file-like object."""
        return self.from_bytes(stream.read(), filename, mime_type)

    def from_file(self, file_path: str | Path, mime_type: str | None = None) -> SourceDocument:
        """Extract text from a file on disk."""
        path = Path(file_path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise IngestionError(f"Cannot read {path}: {e}") from e
        return self.from_bytes(content, path.name, mime_type)

    def _extract_pdf(self, content: bytes) -> tuple[str, int]:
        with fitz.open(stream=content, filetype="pdf") as doc:
            pages = [page.get_text("text") for page in doc]
        return "\n\n".join(pages), len(pages)

    def _extract_docx(self, content: bytes) -> str:
        document = docx.Document(io.BytesIO(content))
        return "\n".join(paragraph.text for paragraph in document.paragraphs)

    def _extract_txt(self, content: bytes) -> str:
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise IngestionError(f"Text file is not valid UTF-8: {e}") from e

    def _clean_text(self, text: str) -> str:
        """Clean extracted text by normalizing whitespace.

        Args:
            text: Raw extracted text.

        Returns:
            Cleaned text with normalized whitespace.
        """
        # Replace multiple newlines with double newline (paragraph break)
        text = re.sub(r"\n{3,}", "\n\n", text)

        # Replace multiple spaces with single space
        text = re.sub(r"[ \t]{2,}", " ", text)

        return text.strip()


# Global instance for dependency injection
text_source = TextSourceAdapter()
