"""Analysis and benchmark record models.

Records are immutable once built. Attributes are snake_case in Python; the
serialized form (to_record) uses camelCase names, which is the shape the
external document store and UI persist and render.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated

from fairclause.taxonomy import (
    AnalysisKind,
    AnalysisType,
    Assessment,
    MarketPosition,
    Priority,
    Recommendation,
    RiskLevel,
    clamp_score,
    normalize_assessment,
    normalize_market_position,
    normalize_priority,
    normalize_recommendation,
    normalize_risk_level,
)


ClampedScore = Annotated[int, BeforeValidator(clamp_score)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_text(v: Any) -> Any:
    """Render scalar AI values (numbers, booleans) as text."""
    if isinstance(v, (int, float, bool)):
        return str(v)
    return v


class RecordModel(BaseModel):
    """Base for all immutable, camelCase-serialized records."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(by_alias=True, mode="json")


class Clause(RecordModel):
    """A single clause identified in an analyzed document."""
    id: str
    text: str = ""
    risk_level: RiskLevel = RiskLevel.MEDIUM
    type: str = "general"
    explanation: str = "Analysis not available"
    suggestions: list[str] = Field(default_factory=list)
    legal_implications: str = ""
    red_flags: list[str] = Field(default_factory=list)
    obligations: list[str] = Field(default_factory=list)

    @field_validator("risk_level", mode="before")
    @classmethod
    def validate_risk_level(cls, v: Any) -> str:
        """Normalize risk level to valid enum."""
        return normalize_risk_level(v)


class AnalysisResult(RecordModel):
    """Risk assessment of a whole document."""
    document_type: str = "Unknown"
    risk_level: RiskLevel = RiskLevel.MEDIUM
    purpose: str = ""
    clauses: list[Clause] = Field(default_factory=list)
    legal_issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    key_points: list[str] = Field(default_factory=list)
    missing_clauses: list[str] = Field(default_factory=list)
    overall_score: ClampedScore = 70
    analysis_type: AnalysisType
    generated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("risk_level", mode="before")
    @classmethod
    def validate_risk_level(cls, v: Any) -> str:
        """Normalize risk level to valid enum."""
        return normalize_risk_level(v)

    @model_validator(mode="after")
    def check_unique_clause_ids(self) -> "AnalysisResult":
        ids = [clause.id for clause in self.clauses]
        if len(ids) != len(set(ids)):
            raise ValueError("clause ids must be unique within a result")
        return self


class MetricComparison(RecordModel):
    """A single contract term compared with its market reference."""
    contract_value: str = "Not specified"
    market_median: str = "Not available"
    market_range: str | None = None
    assessment: Assessment = Assessment.STANDARD
    percentile: str | None = None
    explanation: str | None = None

    @field_validator("contract_value", "market_median", "market_range", "percentile", mode="before")
    @classmethod
    def stringify_values(cls, v: Any) -> Any:
        return _as_text(v)

    @field_validator("assessment", mode="before")
    @classmethod
    def validate_assessment(cls, v: Any) -> str:
        """Normalize assessment to valid enum."""
        return normalize_assessment(v)


class Finding(RecordModel):
    """A notable clause surfaced by the fairness benchmark."""
    id: str
    clause: str = ""
    category: str = "other"
    risk_level: RiskLevel = RiskLevel.MEDIUM
    market_comparison: str = "Market comparison not available"
    percentile: str | None = None
    explanation: str = "Analysis not available"
    recommendation: str = "Review carefully"
    financial_impact: str | None = None

    @field_validator("risk_level", mode="before")
    @classmethod
    def validate_risk_level(cls, v: Any) -> str:
        """Normalize risk level to valid enum."""
        return normalize_risk_level(v)

    @field_validator("percentile", "financial_impact", mode="before")
    @classmethod
    def stringify_values(cls, v: Any) -> Any:
        return _as_text(v)


class Opportunity(RecordModel):
    """A term worth negotiating towards the market standard."""
    clause: str = ""
    current_term: str = ""
    suggested_term: str = ""
    justification: str = ""
    priority: Priority = Priority.MEDIUM
    likelihood: Priority = Priority.MEDIUM

    @field_validator("priority", "likelihood", mode="before")
    @classmethod
    def validate_priority(cls, v: Any) -> str:
        """Normalize priority/likelihood to valid enum."""
        return normalize_priority(v)


class FairnessBenchmark(RecordModel):
    """Contract terms benchmarked against market reference values."""
    overall_fairness_score: ClampedScore = 70
    risk_level: RiskLevel = RiskLevel.MEDIUM
    summary: str = ""
    key_findings: list[Finding] = Field(default_factory=list)
    benchmark_metrics: dict[str, MetricComparison] = Field(default_factory=dict)
    negotiation_opportunities: list[Opportunity] = Field(default_factory=list)
    market_position: MarketPosition = MarketPosition.AVERAGE
    recommendation: Recommendation = Recommendation.REVIEW_CAREFULLY
    red_flags: list[str] = Field(default_factory=list)
    positive_aspects: list[str] = Field(default_factory=list)
    market_insights: list[str] = Field(default_factory=list)
    contract_type: str | None = None
    jurisdiction: str | None = None
    analysis_type: AnalysisType
    generated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("risk_level", mode="before")
    @classmethod
    def validate_risk_level(cls, v: Any) -> str:
        """Normalize risk level to valid enum."""
        return normalize_risk_level(v)

    @field_validator("market_position", mode="before")
    @classmethod
    def validate_market_position(cls, v: Any) -> str:
        return normalize_market_position(v)

    @field_validator("recommendation", mode="before")
    @classmethod
    def validate_recommendation(cls, v: Any) -> str:
        return normalize_recommendation(v)


class AnalysisContext(RecordModel):
    """Caller-supplied context for an analysis request."""
    role: str = "Consumer"
    jurisdiction: str = "India"
    contract_type: str | None = None
    document_type: str | None = None
    include_benchmark: bool = False
    require_text: bool = False


class AnalysisRequest(RecordModel):
    """One orchestration request. Built per call and discarded after use."""
    source_text: str
    kind: AnalysisKind
    role: str
    jurisdiction: str
    contract_type: str | None = None
    document_type: str | None = None
    include_benchmark: bool = False

    @classmethod
    def build(
        cls,
        source_text: str,
        kind: AnalysisKind | str,
        context: AnalysisContext | None = None,
    ) -> "AnalysisRequest":
        """Build a request from source text, kind and context."""
        context = context or AnalysisContext()
        return cls(
            source_text=source_text,
            kind=AnalysisKind(kind),
            role=context.role,
            jurisdiction=context.jurisdiction,
            contract_type=context.contract_type,
            document_type=context.document_type,
            include_benchmark=context.include_benchmark,
        )
