"""Fallback Synthesizer - degraded results when AI output is unavailable.

Fallback results are complete and schema-valid so every request ends in a
renderable record, but they are always labeled analysis_type="fallback" and
carry only generic guidance. Nothing here is derived from the document
beyond the caller-supplied context.
"""

import logging

from fairclause.models import (
    AnalysisResult,
    FairnessBenchmark,
    MetricComparison,
)
from fairclause.taxonomy import (
    DEFAULT_SCORE,
    AnalysisType,
    MarketPosition,
    Recommendation,
    RiskLevel,
)

logger = logging.getLogger("fairclause.fallback")

FALLBACK_METRIC_NAME = "generalTerms"

FALLBACK_PURPOSE = (
    "Automated analysis is pending. The AI service did not return a usable "
    "result for this document."
)
FALLBACK_LEGAL_ISSUES = [
    "Automated clause analysis was not completed; no issues have been verified.",
]
FALLBACK_RECOMMENDATIONS = [
    "Review the document manually before signing.",
    "Consult a qualified legal professional for advice on specific clauses.",
    "Run the analysis again later for an AI-generated assessment.",
]

FALLBACK_SUMMARY = (
    "Contract uploaded successfully. Market comparison analysis pending; "
    "manual review is recommended."
)
FALLBACK_METRIC_EXPLANATION = (
    "Market comparison could not be completed automatically. Terms are "
    "treated as standard until reviewed."
)
FALLBACK_MARKET_INSIGHTS = [
    "Market benchmark data could not be applied to this contract automatically.",
]


class FallbackSynthesizer:
    """Builds clearly-labeled degraded analysis and benchmark results."""

    def analysis(
        self,
        document_type: str | None = None,
        reason: str | None = None,
    ) -> AnalysisResult:
        """Build a fallback AnalysisResult.

        Args:
            document_type: Caller-supplied document or contract type, if any.
            reason: Why the fallback was needed, for the log only.

        Returns:
            AnalysisResult with analysis_type FALLBACK and no clauses.
        """
        logger.warning(f"⚠️ Synthesizing fallback analysis: {reason or 'no reason given'}")
        return AnalysisResult(
            document_type=document_type or "Unknown",
            risk_level=RiskLevel.MEDIUM,
            purpose=FALLBACK_PURPOSE,
            clauses=[],
            legal_issues=list(FALLBACK_LEGAL_ISSUES),
            recommendations=list(FALLBACK_RECOMMENDATIONS),
            key_points=[],
            missing_clauses=[],
            overall_score=DEFAULT_SCORE,
            analysis_type=AnalysisType.FALLBACK,
        )

    def benchmark(
        self,
        contract_type: str | None = None,
        jurisdiction: str | None = None,
        reason: str | None = None,
    ) -> FairnessBenchmark:
        """Build a fallback FairnessBenchmark.

        The benchmark carries one generic "generalTerms" comparison marked
        STANDARD and no findings or opportunities.
        """
        logger.warning(f"⚠️ Synthesizing fallback benchmark: {reason or 'no reason given'}")
        return FairnessBenchmark(
            overall_fairness_score=DEFAULT_SCORE,
            risk_level=RiskLevel.MEDIUM,
            summary=FALLBACK_SUMMARY,
            key_findings=[],
            benchmark_metrics={
                FALLBACK_METRIC_NAME: MetricComparison(
                    contract_value="Not analyzed",
                    market_median="Not available",
                    assessment="STANDARD",
                    explanation=FALLBACK_METRIC_EXPLANATION,
                ),
            },
            negotiation_opportunities=[],
            market_position=MarketPosition.AVERAGE,
            recommendation=Recommendation.REVIEW_CAREFULLY,
            red_flags=[],
            positive_aspects=[],
            market_insights=list(FALLBACK_MARKET_INSIGHTS),
            contract_type=contract_type,
            jurisdiction=jurisdiction,
            analysis_type=AnalysisType.FALLBACK,
        )


# Global instance for dependency injection
fallback_synthesizer = FallbackSynthesizer()
