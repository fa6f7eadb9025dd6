"""Analysis API routes for inline text and direct uploads."""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from app.api.dependencies import get_orchestrator, outcome_response
from app.config import get_settings
from app.models.analysis import AnalysisOptions, AnalyzeTextRequest
from fairclause.pipeline import PipelineOrchestrator
from fairclause.taxonomy import AnalysisKind

router = APIRouter()


@router.post("/analyze")
async def analyze_text(
    body: AnalyzeTextRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Analyze already-extracted document text.

    Returns the pipeline outcome. AI failures come back as PARTIAL_SUCCESS
    with a fallback result; a missing text is a 422 FAILURE.
    """
    settings = get_settings()
    context = body.to_context(settings.default_role, settings.default_jurisdiction)
    outcome = await orchestrator.analyze_async(body.text, body.kind, context)
    return outcome_response(outcome)


@router.post("/upload")
async def upload_and_analyze(
    file: UploadFile = File(...),
    kind: AnalysisKind = Form(AnalysisKind.QUICK),
    role: str | None = Form(None),
    jurisdiction: str | None = Form(None),
    contract_type: str | None = Form(None, alias="contractType"),
    include_benchmark: bool = Form(False, alias="includeBenchmark"),
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Upload a document and analyze it in one call."""
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    content = await file.read()
    settings = get_settings()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File is too large")

    options = AnalysisOptions(
        role=role,
        jurisdiction=jurisdiction,
        contract_type=contract_type,
        include_benchmark=include_benchmark,
    )
    context = options.to_context(settings.default_role, settings.default_jurisdiction)
    outcome = await orchestrator.analyze_document_async(
        content, file.filename, file.content_type, kind, context
    )
    return outcome_response(outcome)
