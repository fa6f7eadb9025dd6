"""Document upload, retrieval and analysis routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from app.api.dependencies import get_orchestrator, outcome_response
from app.config import get_settings
from app.models.analysis import AnalyzeDocumentRequest
from app.models.document import Document, DocumentResponse, DocumentStatus
from fairclause.errors import IngestionError
from fairclause.ingestion.text_source import infer_contract_type, text_source
from fairclause.pipeline import OutcomeStatus, PipelineOrchestrator

router = APIRouter()

# In-memory registry standing in for the external document store
documents_db: dict[UUID, Document] = {}


def _get_or_404(document_id: UUID) -> Document:
    document = documents_db.get(document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.post("/upload", response_model=DocumentResponse)
async def upload_document(file: UploadFile = File(...)) -> DocumentResponse:
    """Upload a PDF, Word or text document and extract its text."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    content = await file.read()
    if len(content) > get_settings().max_upload_bytes:
        raise HTTPException(status_code=413, detail="File is too large")

    try:
        source = text_source.from_bytes(content, file.filename, file.content_type)
    except IngestionError as e:
        raise HTTPException(status_code=422, detail=f"Failed to process document: {str(e)}")

    document = Document(
        filename=source.filename,
        content_type=source.mime_type,
        size_bytes=source.size_bytes,
        page_count=source.page_count,
        word_count=source.word_count,
        contract_type=infer_contract_type(source.filename, source.text),
        raw_text=source.text,
    )
    documents_db[document.id] = document

    return DocumentResponse.from_document(document)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: UUID) -> DocumentResponse:
    """Get document by ID."""
    return DocumentResponse.from_document(_get_or_404(document_id))


@router.get("/{document_id}/text")
async def get_document_text(document_id: UUID) -> dict[str, str]:
    """Get extracted text for a document."""
    return {"text": _get_or_404(document_id).raw_text}


@router.get("/", response_model=list[DocumentResponse])
async def list_documents() -> list[DocumentResponse]:
    """List all documents."""
    return [DocumentResponse.from_document(doc) for doc in documents_db.values()]


@router.post("/{document_id}/analyze")
async def analyze_document(
    document_id: UUID,
    body: AnalyzeDocumentRequest | None = None,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Analyze a stored document's text."""
    document = _get_or_404(document_id)
    body = body or AnalyzeDocumentRequest()

    settings = get_settings()
    context = body.to_context(settings.default_role, settings.default_jurisdiction)
    if not context.contract_type:
        context = context.model_copy(update={"contract_type": document.contract_type})

    outcome = await orchestrator.analyze_async(document.raw_text, body.kind, context)

    if outcome.status == OutcomeStatus.SUCCESS:
        status = DocumentStatus.ANALYZED
    elif outcome.status == OutcomeStatus.PARTIAL_SUCCESS:
        status = DocumentStatus.PARTIALLY_ANALYZED
    else:
        status = document.status
    documents_db[document_id] = document.model_copy(update={"status": status})

    return outcome_response(outcome)
