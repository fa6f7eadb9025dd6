"""Shared route dependencies."""

from functools import lru_cache

from fastapi.responses import JSONResponse

from fairclause.pipeline import PipelineOrchestrator, PipelineOutcome


@lru_cache
def get_orchestrator() -> PipelineOrchestrator:
    """Get the shared orchestrator (overridden in tests)."""
    return PipelineOrchestrator()


def outcome_response(outcome: PipelineOutcome) -> JSONResponse:
    """Serialize an outcome; ingestion failures map to 422."""
    status_code = 422 if outcome.is_failure else 200
    return JSONResponse(status_code=status_code, content=outcome.to_dict())
