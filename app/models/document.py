"""Document data models."""

from datetime import datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStatus(str, Enum):
    """Status of document processing."""
    UPLOADED = "uploaded"
    ANALYZED = "analyzed"
    PARTIALLY_ANALYZED = "partially_analyzed"


class Document(BaseModel):
    """An uploaded legal document and its extracted text."""
    id: UUID = Field(default_factory=uuid4)
    filename: str
    content_type: str
    status: DocumentStatus = DocumentStatus.UPLOADED
    size_bytes: int = 0
    page_count: int = 0
    word_count: int = 0
    contract_type: str = "contract"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    raw_text: str = ""


class DocumentResponse(BaseModel):
    """Response schema for document operations."""
    id: UUID
    filename: str
    content_type: str
    status: DocumentStatus
    size_bytes: int
    page_count: int
    word_count: int
    contract_type: str
    created_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> "DocumentResponse":
        return cls(
            id=document.id,
            filename=document.filename,
            content_type=document.content_type,
            status=document.status,
            size_bytes=document.size_bytes,
            page_count=document.page_count,
            word_count=document.word_count,
            contract_type=document.contract_type,
            created_at=document.created_at,
        )
