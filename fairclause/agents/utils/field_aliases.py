"""Field alias tables for mapping AI replies onto canonical records.

AI replies name the same field in several ways ("score" vs
"overallFairnessScore", "risk" vs "riskLevel"). Each canonical field lists its
accepted names in priority order; the first one present with a non-empty
value wins.

Usage:
    from fairclause.agents.utils.field_aliases import BENCHMARK_FIELD_ALIASES, lookup

    score = lookup(data, BENCHMARK_FIELD_ALIASES["overall_fairness_score"])
"""

from typing import Any

AliasTable = dict[str, tuple[str, ...]]


ANALYSIS_FIELD_ALIASES: AliasTable = {
    "document_type": ("documentType", "document_type", "docType"),
    "risk_level": ("riskLevel", "risk_level", "risk", "overallRisk", "overall_risk"),
    "purpose": ("purpose", "summary", "overview", "description"),
    "overall_score": ("overallScore", "overall_score", "score"),
    "clauses": ("clauses", "provisions", "clauseAnalysis"),
    "legal_issues": (
        "legalIssues",
        "legal_issues",
        "issues",
        "riskFactors",
        "risk_factors",
        "keyIssues",
    ),
    "recommendations": ("recommendations", "recommendation", "suggestions"),
    "key_points": ("keyPoints", "key_points", "highlights"),
    "missing_clauses": ("missingClauses", "missing_clauses"),
}

CLAUSE_FIELD_ALIASES: AliasTable = {
    "id": ("id", "clauseId", "clause_id"),
    "text": ("text", "clauseText", "clause_text", "clause", "content"),
    "risk_level": ("riskLevel", "risk_level", "risk", "severity"),
    "type": ("type", "category", "clauseType", "clause_type"),
    "explanation": ("explanation", "analysis", "description"),
    "suggestions": ("suggestions", "recommendations", "recommendation"),
    "legal_implications": ("legalImplications", "legal_implications", "implications"),
    "red_flags": ("redFlags", "red_flags", "concerns"),
    "obligations": ("obligations",),
}

BENCHMARK_FIELD_ALIASES: AliasTable = {
    "overall_fairness_score": (
        "overallFairnessScore",
        "overall_fairness_score",
        "score",
        "fairnessScore",
        "fairness_score",
    ),
    "risk_level": ("riskLevel", "risk_level", "risk"),
    "summary": ("summary", "overallAssessment", "overall_assessment"),
    "key_findings": ("keyFindings", "key_findings", "findings", "issues", "keyIssues"),
    "benchmark_metrics": (
        "benchmarkMetrics",
        "benchmark_metrics",
        "metrics",
        "marketComparisons",
        "market_comparisons",
    ),
    "negotiation_opportunities": (
        "negotiationOpportunities",
        "negotiation_opportunities",
        "opportunities",
    ),
    "market_position": ("marketPosition", "market_position"),
    "recommendation": ("recommendation", "verdict"),
    "red_flags": ("redFlags", "red_flags"),
    "positive_aspects": ("positiveAspects", "positive_aspects", "positives"),
    "market_insights": ("marketInsights", "market_insights", "insights"),
}

FINDING_FIELD_ALIASES: AliasTable = {
    "clause": ("clause", "clauseText", "term"),
    "category": ("category", "type"),
    "risk_level": ("riskLevel", "risk_level", "risk", "severity"),
    "market_comparison": ("marketComparison", "market_comparison", "comparison"),
    "percentile": ("percentile",),
    "explanation": ("explanation", "description", "issue"),
    "recommendation": ("recommendation", "advice"),
    "financial_impact": ("financialImpact", "financial_impact", "impact"),
}

METRIC_FIELD_ALIASES: AliasTable = {
    "contract_value": ("contractValue", "contract_value", "value", "actual"),
    "market_median": (
        "marketMedian",
        "market_median",
        "marketStandard",
        "market_standard",
        "median",
    ),
    "market_range": ("marketRange", "market_range", "range"),
    "assessment": ("assessment", "rating", "status"),
    "percentile": ("percentile",),
    "explanation": ("explanation", "note", "notes"),
}

# Names used for a metric when metrics arrive as a list rather than a map
METRIC_NAME_ALIASES: tuple[str, ...] = ("metric", "name", "clause", "term")

OPPORTUNITY_FIELD_ALIASES: AliasTable = {
    "clause": ("clause", "term", "area"),
    "current_term": ("currentTerm", "current_term", "current"),
    "suggested_term": ("suggestedTerm", "suggested_term", "suggested", "suggestion"),
    "justification": ("justification", "reason", "rationale"),
    "priority": ("priority",),
    "likelihood": ("likelihood",),
}

# Keys tried, in order, when a list item that should be text is an object
PRIMARY_TEXT_KEYS: tuple[str, ...] = ("issue", "feature", "text", "title", "clause", "name", "point")
SECONDARY_TEXT_KEYS: tuple[str, ...] = ("explanation", "benefit", "description", "advice", "reason")


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def lookup(data: dict[str, Any], aliases: tuple[str, ...], default: Any = None) -> Any:
    """Return the value of the first alias present with a non-empty value.

    Args:
        data: Decoded AI reply object.
        aliases: Accepted field names in priority order.
        default: Value returned when no alias matches.

    Returns:
        The matched value or the default.
    """
    for alias in aliases:
        value = data.get(alias)
        if not _is_empty(value):
            return value
    return default
