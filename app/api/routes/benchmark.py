"""Fairness benchmark routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.api.dependencies import get_orchestrator, outcome_response
from app.api.routes.documents import documents_db
from app.config import get_settings
from app.models.analysis import FairnessRequest
from fairclause.models import AnalysisContext
from fairclause.pipeline import PipelineOrchestrator
from fairclause.taxonomy import AnalysisKind

router = APIRouter()


@router.post("/analyze-fairness")
async def analyze_fairness(
    body: FairnessRequest,
    orchestrator: PipelineOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Benchmark a contract's terms against market reference values.

    Accepts inline text or the id of a stored document.
    """
    text = body.text
    contract_type = body.contract_type
    if body.document_id:
        try:
            document = documents_db.get(UUID(body.document_id))
        except ValueError:
            document = None
        if not document:
            raise HTTPException(status_code=404, detail="Document not found")
        text = document.raw_text
        contract_type = contract_type or document.contract_type
    elif text is None:
        raise HTTPException(status_code=400, detail="Either text or documentId is required")

    settings = get_settings()
    context = AnalysisContext(
        role=body.role or settings.default_role,
        jurisdiction=body.jurisdiction or settings.default_jurisdiction,
        contract_type=contract_type,
    )
    outcome = await orchestrator.analyze_async(text, AnalysisKind.BENCHMARK, context)
    return outcome_response(outcome)
