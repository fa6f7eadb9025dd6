"""Response Parser - recovers structured results from free-form AI replies.

AI replies may wrap JSON in prose, markdown fences, or contain nothing
parseable at all. The parser runs an ordered chain of pure extraction
strategies and decodes the first candidate that yields a JSON object:

1. FENCED_JSON      interior of a ```json fenced block
2. BALANCED_OBJECT  first "{" up to its depth-matching "}"
3. OUTER_BRACES     first "{" up to the last "}" in the text

Decoded objects are mapped onto the canonical records through the alias
tables in field_aliases, defaulting whatever is missing. The parser never
raises: it returns Parsed or ParseFailed.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from fairclause.agents.utils.field_aliases import (
    ANALYSIS_FIELD_ALIASES,
    BENCHMARK_FIELD_ALIASES,
    CLAUSE_FIELD_ALIASES,
    FINDING_FIELD_ALIASES,
    METRIC_FIELD_ALIASES,
    METRIC_NAME_ALIASES,
    OPPORTUNITY_FIELD_ALIASES,
    PRIMARY_TEXT_KEYS,
    SECONDARY_TEXT_KEYS,
    lookup,
)
from fairclause.errors import ResponseParseError
from fairclause.models import (
    AnalysisResult,
    Clause,
    FairnessBenchmark,
    Finding,
    MetricComparison,
    Opportunity,
)
from fairclause.taxonomy import AnalysisKind, AnalysisType

logger = logging.getLogger("fairclause.response_parser")

EXCERPT_CHARS = 200

FENCED_JSON_PATTERN = re.compile(r"```json\s*\n?([\s\S]*?)\n?```", re.IGNORECASE)
TRAILING_COMMA_PATTERN = re.compile(r",\s*([}\]])")
SMART_QUOTES = {"“": '"', "”": '"', "‘": "'", "’": "'"}


class ExtractionStrategy(str, Enum):
    """Ways of locating a JSON object inside an AI reply."""
    FENCED_JSON = "fenced_json"
    BALANCED_OBJECT = "balanced_object"
    OUTER_BRACES = "outer_braces"


def extract_fenced_json(text: str) -> str | None:
    """Return the interior of the first ```json fenced block."""
    match = FENCED_JSON_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return None


def extract_balanced_object(text: str) -> str | None:
    """Return the span from the first "{" to its matching "}".

    Braces inside JSON strings are ignored. Returns None when the object
    never closes.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    return None


def extract_outer_braces(text: str) -> str | None:
    """Return the span from the first "{" to the last "}"."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start:end + 1]


EXTRACTION_CHAIN: tuple[tuple[ExtractionStrategy, Callable[[str], str | None]], ...] = (
    (ExtractionStrategy.FENCED_JSON, extract_fenced_json),
    (ExtractionStrategy.BALANCED_OBJECT, extract_balanced_object),
    (ExtractionStrategy.OUTER_BRACES, extract_outer_braces),
)


def repair_json(candidate: str) -> str:
    """Repair common AI JSON mistakes: smart quotes and trailing commas."""
    for smart, plain in SMART_QUOTES.items():
        candidate = candidate.replace(smart, plain)
    return TRAILING_COMMA_PATTERN.sub(r"\1", candidate)


def decode_object(candidate: str) -> dict[str, Any] | None:
    """Decode a candidate into a JSON object, trying a repair on failure."""
    for attempt in (candidate, repair_json(candidate)):
        try:
            data = json.loads(attempt)
        except (ValueError, RecursionError):
            continue
        if isinstance(data, dict):
            return data
    return None


@dataclass(frozen=True)
class Parsed:
    """A successfully parsed AI reply."""
    result: AnalysisResult | FairnessBenchmark
    strategy: ExtractionStrategy


@dataclass(frozen=True)
class ParseFailed:
    """An AI reply from which no usable result could be recovered."""
    raw_excerpt: str
    reason: str

    def to_error(self) -> ResponseParseError:
        """Convert to an error attachable to a pipeline outcome."""
        return ResponseParseError(self.reason, self.raw_excerpt)


ParseOutcome = Parsed | ParseFailed


def _text(value: Any, default: str = "") -> str:
    """Coerce an AI value to a single string."""
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip() or default
    if isinstance(value, (int, float, bool)):
        return str(value)
    if isinstance(value, list):
        joined = "; ".join(item for item in _text_list(value))
        return joined or default
    if isinstance(value, dict):
        return _describe(value) or default
    return str(value)


def _describe(item: dict[str, Any]) -> str:
    """Render an object that should have been a string."""
    primary = lookup(item, PRIMARY_TEXT_KEYS)
    secondary = lookup(item, SECONDARY_TEXT_KEYS)
    parts = [str(part).strip() for part in (primary, secondary) if part]
    if parts:
        return " - ".join(parts)
    return json.dumps(item, ensure_ascii=False)


def _text_list(value: Any) -> list[str]:
    """Coerce an AI value to a list of non-empty strings."""
    if value is None:
        return []
    if not isinstance(value, list):
        value = [value]

    items = []
    for item in value:
        if isinstance(item, dict):
            text = _describe(item)
        elif item is None:
            continue
        else:
            text = str(item).strip()
        if text:
            items.append(text)
    return items


def _optional_text(value: Any) -> str | None:
    text = _text(value)
    return text or None


class ResponseParser:
    """Turns raw AI reply text into typed records. Never raises."""

    def parse(self, raw_text: str | None, kind: AnalysisKind) -> ParseOutcome:
        """Parse a reply for the given analysis kind."""
        if kind == AnalysisKind.BENCHMARK:
            return self.parse_benchmark(raw_text)
        return self.parse_analysis(raw_text)

    def parse_analysis(self, raw_text: str | None) -> ParseOutcome:
        """Parse a reply into an AnalysisResult."""
        return self._parse(raw_text, self.build_analysis_result)

    def parse_benchmark(self, raw_text: str | None) -> ParseOutcome:
        """Parse a reply into a FairnessBenchmark."""
        return self._parse(raw_text, self.build_fairness_benchmark)

    def extract_json(self, raw_text: str) -> tuple[dict[str, Any], ExtractionStrategy] | None:
        """Run the extraction chain; first candidate that decodes wins."""
        for strategy, extract in EXTRACTION_CHAIN:
            candidate = extract(raw_text)
            if candidate is None:
                continue
            data = decode_object(candidate)
            if data is not None:
                return data, strategy
        return None

    def _parse(
        self,
        raw_text: str | None,
        build: Callable[[dict[str, Any]], AnalysisResult | FairnessBenchmark],
    ) -> ParseOutcome:
        raw_text = raw_text or ""
        excerpt = raw_text.strip()[:EXCERPT_CHARS]

        if not raw_text.strip():
            return ParseFailed(raw_excerpt=excerpt, reason="AI reply was empty")

        if "{" not in raw_text or "}" not in raw_text:
            return ParseFailed(raw_excerpt=excerpt, reason="No JSON object found in AI reply")

        extracted = self.extract_json(raw_text)
        if extracted is None:
            logger.warning(f"Could not decode JSON from AI reply: {excerpt!r}")
            return ParseFailed(
                raw_excerpt=excerpt,
                reason="AI reply contained braces but no decodable JSON object",
            )

        data, strategy = extracted
        try:
            result = build(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"AI reply did not match the expected schema: {e}")
            return ParseFailed(
                raw_excerpt=excerpt,
                reason=f"AI reply did not match the expected schema: {e}",
            )

        logger.debug(f"Parsed AI reply using {strategy.value}")
        return Parsed(result=result, strategy=strategy)

    def build_analysis_result(self, data: dict[str, Any]) -> AnalysisResult:
        """Map a decoded reply onto an AnalysisResult, defaulting the rest."""
        aliases = ANALYSIS_FIELD_ALIASES
        raw_clauses = lookup(data, aliases["clauses"], [])

        return AnalysisResult(
            document_type=_text(lookup(data, aliases["document_type"]), "Unknown"),
            risk_level=lookup(data, aliases["risk_level"]),
            purpose=_text(lookup(data, aliases["purpose"])),
            overall_score=lookup(data, aliases["overall_score"]),
            clauses=self._build_clauses(raw_clauses),
            legal_issues=_text_list(lookup(data, aliases["legal_issues"])),
            recommendations=_text_list(lookup(data, aliases["recommendations"])),
            key_points=_text_list(lookup(data, aliases["key_points"])),
            missing_clauses=_text_list(lookup(data, aliases["missing_clauses"])),
            analysis_type=AnalysisType.AI,
        )

    def build_fairness_benchmark(self, data: dict[str, Any]) -> FairnessBenchmark:
        """Map a decoded reply onto a FairnessBenchmark, defaulting the rest."""
        aliases = BENCHMARK_FIELD_ALIASES

        return FairnessBenchmark(
            overall_fairness_score=lookup(data, aliases["overall_fairness_score"]),
            risk_level=lookup(data, aliases["risk_level"]),
            summary=_text(lookup(data, aliases["summary"]), "Fairness analysis completed"),
            key_findings=self._build_findings(lookup(data, aliases["key_findings"], [])),
            benchmark_metrics=self._build_metrics(lookup(data, aliases["benchmark_metrics"], {})),
            negotiation_opportunities=self._build_opportunities(
                lookup(data, aliases["negotiation_opportunities"], [])
            ),
            market_position=lookup(data, aliases["market_position"]),
            recommendation=lookup(data, aliases["recommendation"]),
            red_flags=_text_list(lookup(data, aliases["red_flags"])),
            positive_aspects=_text_list(lookup(data, aliases["positive_aspects"])),
            market_insights=_text_list(lookup(data, aliases["market_insights"])),
            analysis_type=AnalysisType.AI,
        )

    def _build_clauses(self, raw_clauses: Any) -> list[Clause]:
        if not isinstance(raw_clauses, list):
            return []

        entries = []
        for raw_clause in raw_clauses:
            if isinstance(raw_clause, str):
                raw_clause = {"text": raw_clause}
            if isinstance(raw_clause, dict):
                entries.append(raw_clause)

        ids = assign_clause_ids(
            [_text(lookup(entry, CLAUSE_FIELD_ALIASES["id"])) for entry in entries]
        )

        clauses = []
        for clause_id, entry in zip(ids, entries):
            aliases = CLAUSE_FIELD_ALIASES
            try:
                clause = Clause(
                    id=clause_id,
                    text=_text(lookup(entry, aliases["text"])),
                    risk_level=lookup(entry, aliases["risk_level"]),
                    type=_text(lookup(entry, aliases["type"]), "general"),
                    explanation=_text(lookup(entry, aliases["explanation"]), "Analysis not available"),
                    suggestions=_text_list(lookup(entry, aliases["suggestions"])),
                    legal_implications=_text(lookup(entry, aliases["legal_implications"])),
                    red_flags=_text_list(lookup(entry, aliases["red_flags"])),
                    obligations=_text_list(lookup(entry, aliases["obligations"])),
                )
            except (ValueError, TypeError) as e:
                logger.warning(f"Failed to parse clause {clause_id}: {e}")
                continue
            clauses.append(clause)
        return clauses

    def _build_findings(self, raw_findings: Any) -> list[Finding]:
        if not isinstance(raw_findings, list):
            raw_findings = [raw_findings]

        findings = []
        for raw_finding in raw_findings:
            if isinstance(raw_finding, str):
                raw_finding = {"explanation": raw_finding}
            if not isinstance(raw_finding, dict):
                continue
            aliases = FINDING_FIELD_ALIASES
            try:
                finding = Finding(
                    id=f"finding-{len(findings) + 1}",
                    clause=_text(lookup(raw_finding, aliases["clause"])),
                    category=_text(lookup(raw_finding, aliases["category"]), "other"),
                    risk_level=lookup(raw_finding, aliases["risk_level"]),
                    market_comparison=_text(
                        lookup(raw_finding, aliases["market_comparison"]),
                        "Market comparison not available",
                    ),
                    percentile=_optional_text(lookup(raw_finding, aliases["percentile"])),
                    explanation=_text(lookup(raw_finding, aliases["explanation"]), "Analysis not available"),
                    recommendation=_text(lookup(raw_finding, aliases["recommendation"]), "Review carefully"),
                    financial_impact=_optional_text(lookup(raw_finding, aliases["financial_impact"])),
                )
            except (ValueError, TypeError) as e:
                logger.warning(f"Failed to parse finding: {e}")
                continue
            findings.append(finding)
        return findings

    def _build_metrics(self, raw_metrics: Any) -> dict[str, MetricComparison]:
        if isinstance(raw_metrics, dict):
            named = list(raw_metrics.items())
        elif isinstance(raw_metrics, list):
            named = []
            for index, item in enumerate(raw_metrics, 1):
                if isinstance(item, dict):
                    name = _text(lookup(item, METRIC_NAME_ALIASES), f"metric{index}")
                    named.append((name, item))
        else:
            return {}

        metrics: dict[str, MetricComparison] = {}
        for name, raw_metric in named:
            if not isinstance(raw_metric, dict):
                raw_metric = {"contractValue": raw_metric}
            aliases = METRIC_FIELD_ALIASES
            try:
                metric = MetricComparison(
                    contract_value=_text(lookup(raw_metric, aliases["contract_value"]), "Not specified"),
                    market_median=_text(lookup(raw_metric, aliases["market_median"]), "Not available"),
                    market_range=_optional_text(lookup(raw_metric, aliases["market_range"])),
                    assessment=lookup(raw_metric, aliases["assessment"]),
                    percentile=_optional_text(lookup(raw_metric, aliases["percentile"])),
                    explanation=_optional_text(lookup(raw_metric, aliases["explanation"])),
                )
            except (ValueError, TypeError) as e:
                logger.warning(f"Failed to parse metric {name}: {e}")
                continue

            key = base = str(name)
            suffix = 2
            while key in metrics:
                key = f"{base}-{suffix}"
                suffix += 1
            metrics[key] = metric
        return metrics

    def _build_opportunities(self, raw_opportunities: Any) -> list[Opportunity]:
        if not isinstance(raw_opportunities, list):
            raw_opportunities = [raw_opportunities]

        opportunities = []
        for raw_opportunity in raw_opportunities:
            if isinstance(raw_opportunity, str):
                raw_opportunity = {"justification": raw_opportunity}
            if not isinstance(raw_opportunity, dict):
                continue
            aliases = OPPORTUNITY_FIELD_ALIASES
            try:
                opportunity = Opportunity(
                    clause=_text(lookup(raw_opportunity, aliases["clause"])),
                    current_term=_text(lookup(raw_opportunity, aliases["current_term"])),
                    suggested_term=_text(lookup(raw_opportunity, aliases["suggested_term"])),
                    justification=_text(lookup(raw_opportunity, aliases["justification"])),
                    priority=lookup(raw_opportunity, aliases["priority"]),
                    likelihood=lookup(raw_opportunity, aliases["likelihood"]),
                )
            except (ValueError, TypeError) as e:
                logger.warning(f"Failed to parse negotiation opportunity: {e}")
                continue
            opportunities.append(opportunity)
        return opportunities


def assign_clause_ids(natural_ids: list[str]) -> list[str]:
    """Assign ids unique within one result.

    A clause keeps its natural id unless it is empty or already taken, in
    which case it gets the index-derived id "clause-<n>".
    """
    used: set[str] = set()
    ids = []
    for index, natural_id in enumerate(natural_ids, 1):
        candidate = natural_id if natural_id and natural_id not in used else f"clause-{index}"
        suffix = 2
        base = candidate
        while candidate in used:
            candidate = f"{base}-{suffix}"
            suffix += 1
        used.add(candidate)
        ids.append(candidate)
    return ids


# Global instance for dependency injection
response_parser = ResponseParser()
