"""Request schemas for the analysis and benchmark routes."""

from pydantic import BaseModel, Field

from fairclause.models import AnalysisContext
from fairclause.taxonomy import AnalysisKind


class AnalysisOptions(BaseModel):
    """Context shared by every analysis request body."""
    role: str | None = None
    jurisdiction: str | None = None
    contract_type: str | None = Field(default=None, alias="contractType")
    document_type: str | None = Field(default=None, alias="documentType")
    include_benchmark: bool = Field(default=False, alias="includeBenchmark")
    require_text: bool = Field(default=False, alias="requireText")

    model_config = {"populate_by_name": True}

    def to_context(self, default_role: str, default_jurisdiction: str) -> AnalysisContext:
        return AnalysisContext(
            role=self.role or default_role,
            jurisdiction=self.jurisdiction or default_jurisdiction,
            contract_type=self.contract_type,
            document_type=self.document_type,
            include_benchmark=self.include_benchmark,
            require_text=self.require_text,
        )


class AnalyzeTextRequest(AnalysisOptions):
    """Body of POST /api/v1/analysis/analyze."""
    text: str | None = None
    kind: AnalysisKind = AnalysisKind.QUICK


class AnalyzeDocumentRequest(AnalysisOptions):
    """Body of POST /api/v1/documents/{id}/analyze."""
    kind: AnalysisKind = AnalysisKind.QUICK


class FairnessRequest(BaseModel):
    """Body of POST /api/v1/benchmark/analyze-fairness.

    Either inline text or the id of a stored document is required.
    """
    text: str | None = None
    document_id: str | None = Field(default=None, alias="documentId")
    contract_type: str | None = Field(default=None, alias="contractType")
    jurisdiction: str | None = None
    role: str | None = Field(default=None, alias="userRole")

    model_config = {"populate_by_name": True}
