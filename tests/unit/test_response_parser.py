"""Unit tests for the Response Parser.

Tests cover:
- Extraction strategy precedence (fenced, balanced, outer braces)
- JSON repair of common AI mistakes
- Alias mapping and defaults for analysis and benchmark replies
- Never raising on malformed or empty input
"""

import json
import sys

import pytest

from fairclause.agents.response_parser import (
    EXCERPT_CHARS,
    ExtractionStrategy,
    ParseFailed,
    Parsed,
    ResponseParser,
    assign_clause_ids,
    decode_object,
    extract_balanced_object,
    extract_fenced_json,
    extract_outer_braces,
)
from fairclause.errors import ResponseParseError
from fairclause.models import AnalysisResult, FairnessBenchmark
from fairclause.taxonomy import AnalysisKind, AnalysisType, Assessment, RiskLevel


@pytest.fixture
def parser() -> ResponseParser:
    """Create parser instance for testing."""
    return ResponseParser()


class TestExtractionStrategies:
    """Tests for the pure extraction functions."""

    def test_fenced_json_interior(self) -> None:
        """Test fenced block interior is extracted without the fence."""
        text = 'Sure!\n```json\n{"score": 82}\n```\nHope that helps.'
        assert extract_fenced_json(text) == '{"score": 82}'

    def test_fenced_json_tag_is_case_insensitive(self) -> None:
        """Test ```JSON fences are recognised."""
        assert extract_fenced_json('```JSON\n{"a": 1}\n```') == '{"a": 1}'

    def test_fenced_json_missing(self) -> None:
        """Test plain text has no fenced candidate."""
        assert extract_fenced_json('{"a": 1}') is None

    def test_balanced_object_stops_at_matching_brace(self) -> None:
        """Test balanced scan ignores trailing objects."""
        text = 'First {"a": {"b": 1}} then {"c": 2}'
        assert extract_balanced_object(text) == '{"a": {"b": 1}}'

    def test_balanced_object_ignores_braces_in_strings(self) -> None:
        """Test braces and escaped quotes inside strings do not count."""
        text = 'x {"note": "use } and \\" carefully", "n": 1} y'
        assert extract_balanced_object(text) == '{"note": "use } and \\" carefully", "n": 1}'

    def test_balanced_object_unclosed(self) -> None:
        """Test an object that never closes yields no candidate."""
        assert extract_balanced_object('{"a": {"b": 1}') is None

    def test_outer_braces(self) -> None:
        """Test first-to-last brace span."""
        assert extract_outer_braces('pre {"a": 1} mid {"b": 2} post') == '{"a": 1} mid {"b": 2}'

    def test_outer_braces_reversed(self) -> None:
        """Test a closing brace before the opening one yields nothing."""
        assert extract_outer_braces("} oops {") is None


class TestDecodeObject:
    """Tests for JSON decoding with repair."""

    def test_decode_valid_object(self) -> None:
        assert decode_object('{"a": 1}') == {"a": 1}

    def test_decode_trailing_commas(self) -> None:
        """Test trailing commas (common LLM error) are repaired."""
        assert decode_object('{"a": [1, 2,], "b": 3,}') == {"a": [1, 2], "b": 3}

    def test_decode_smart_quotes(self) -> None:
        """Test typographic quotes are repaired."""
        assert decode_object("{“a”: “yes”}") == {"a": "yes"}

    def test_decode_rejects_non_object(self) -> None:
        """Test arrays are not accepted as results."""
        assert decode_object("[1, 2, 3]") is None

    def test_decode_garbage(self) -> None:
        assert decode_object("{not json at all}") is None

    def test_decode_deeply_nested(self) -> None:
        """Test nesting beyond the interpreter recursion limit is not decodable."""
        assert decode_object('{"a":' * 5000 + "1" + "}" * 5000) is None

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no integer digit limit")
    def test_decode_oversized_integer(self) -> None:
        assert decode_object('{"score": 1' + "0" * 5000 + "}") is None


class TestParseOutcome:
    """Tests for ParseFailed / Parsed outcomes."""

    def test_fenced_score_and_risk(self, parser: ResponseParser) -> None:
        """Test fenced reply with short field names maps to the benchmark."""
        raw = 'Here is the result:\n```json\n{"score":82,"risk":"LOW"}\n```'

        outcome = parser.parse(raw, AnalysisKind.BENCHMARK)

        assert isinstance(outcome, Parsed)
        assert outcome.strategy == ExtractionStrategy.FENCED_JSON
        benchmark = outcome.result
        assert isinstance(benchmark, FairnessBenchmark)
        assert benchmark.overall_fairness_score == 82
        assert benchmark.risk_level == RiskLevel.LOW
        assert benchmark.analysis_type == AnalysisType.AI
        assert benchmark.key_findings == []
        assert benchmark.benchmark_metrics == {}
        assert benchmark.negotiation_opportunities == []

    def test_prose_only_reply_fails(self, parser: ResponseParser) -> None:
        """Test a reply without any braces is a ParseFailed."""
        outcome = parser.parse("I cannot process this.", AnalysisKind.BENCHMARK)

        assert isinstance(outcome, ParseFailed)
        assert outcome.raw_excerpt == "I cannot process this."
        assert "No JSON object" in outcome.reason

    @pytest.mark.parametrize("raw", [None, "", "   \n  "])
    def test_empty_reply_fails(self, parser: ResponseParser, raw) -> None:
        """Test empty replies are a ParseFailed, not an exception."""
        outcome = parser.parse(raw, AnalysisKind.QUICK)
        assert isinstance(outcome, ParseFailed)
        assert outcome.reason == "AI reply was empty"

    def test_undecodable_braces_fail(self, parser: ResponseParser) -> None:
        """Test braces around non-JSON content fail cleanly."""
        outcome = parser.parse("The answer is {definitely not json}.", AnalysisKind.FULL)
        assert isinstance(outcome, ParseFailed)
        assert "no decodable JSON" in outcome.reason

    def test_deeply_nested_reply_fails(self, parser: ResponseParser) -> None:
        """Test pathological nesting is a ParseFailed, not an exception."""
        raw = '{"a":' * 5000 + "1" + "}" * 5000

        outcome = parser.parse_analysis(raw)

        assert isinstance(outcome, ParseFailed)
        assert "no decodable JSON" in outcome.reason

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no integer digit limit")
    def test_oversized_integer_reply_fails(self, parser: ResponseParser) -> None:
        raw = '{"score": 1' + "0" * 5000 + ', "risk": "LOW"}'

        outcome = parser.parse_benchmark(raw)

        assert isinstance(outcome, ParseFailed)

    def test_excerpt_is_bounded(self, parser: ResponseParser) -> None:
        """Test the excerpt never exceeds the limit."""
        outcome = parser.parse("x" * 5000, AnalysisKind.QUICK)
        assert isinstance(outcome, ParseFailed)
        assert len(outcome.raw_excerpt) == EXCERPT_CHARS

    def test_to_error(self) -> None:
        """Test ParseFailed converts to a ResponseParseError."""
        failed = ParseFailed(raw_excerpt="abc", reason="No JSON object found in AI reply")
        error = failed.to_error()

        assert isinstance(error, ResponseParseError)
        assert error.to_dict() == {
            "type": "parse",
            "message": "No JSON object found in AI reply",
            "excerpt": "abc",
        }

    def test_json_in_prose_uses_balanced_object(self, parser: ResponseParser) -> None:
        """Test unfenced JSON inside prose is recovered."""
        raw = 'Analysis follows: {"documentType": "NDA", "riskLevel": "low"} Thanks!'

        outcome = parser.parse(raw, AnalysisKind.QUICK)

        assert isinstance(outcome, Parsed)
        assert outcome.strategy == ExtractionStrategy.BALANCED_OBJECT
        assert outcome.result.document_type == "NDA"

    def test_fence_takes_precedence(self, parser: ResponseParser) -> None:
        """Test the fenced block wins over an earlier bare object."""
        raw = 'Example {"score": 10}\n```json\n{"score": 90}\n```'

        outcome = parser.parse_benchmark(raw)

        assert isinstance(outcome, Parsed)
        assert outcome.strategy == ExtractionStrategy.FENCED_JSON
        assert outcome.result.overall_fairness_score == 90

    def test_broken_fence_falls_through(self, parser: ResponseParser) -> None:
        """Test an undecodable fenced block falls through to later strategies."""
        raw = '```json\nnot json here\n```\nActual: {"score": 55}'

        outcome = parser.parse_benchmark(raw)

        assert isinstance(outcome, Parsed)
        assert outcome.result.overall_fairness_score == 55


class TestAnalysisMapping:
    """Tests for mapping replies onto AnalysisResult."""

    def test_full_reply(self, parser: ResponseParser, analysis_reply: str) -> None:
        """Test a complete reply maps every field."""
        outcome = parser.parse_analysis(analysis_reply)

        assert isinstance(outcome, Parsed)
        result = outcome.result
        assert isinstance(result, AnalysisResult)
        assert result.document_type == "Rental Agreement"
        assert result.risk_level == RiskLevel.HIGH
        assert result.overall_score == 58
        assert [clause.id for clause in result.clauses] == ["clause-1", "clause-2"]
        assert result.clauses[0].risk_level == RiskLevel.HIGH
        assert result.clauses[1].risk_level == RiskLevel.LOW
        assert result.legal_issues == ["Excessive security deposit"]

    def test_missing_fields_default(self, parser: ResponseParser) -> None:
        """Test an empty object yields a fully-defaulted result."""
        outcome = parser.parse_analysis("{}")

        assert isinstance(outcome, Parsed)
        result = outcome.result
        assert result.document_type == "Unknown"
        assert result.risk_level == RiskLevel.MEDIUM
        assert result.overall_score == 70
        assert result.clauses == []
        assert result.recommendations == []
        assert result.analysis_type == AnalysisType.AI

    def test_alias_fields(self, parser: ResponseParser) -> None:
        """Test alternative field names are accepted."""
        raw = json.dumps({
            "docType": "Employment Contract",
            "overallRisk": "critical",
            "summary": "Offer letter",
            "riskFactors": ["Broad non-compete"],
        })

        result = parser.parse_analysis(raw).result

        assert result.document_type == "Employment Contract"
        assert result.risk_level == RiskLevel.HIGH
        assert result.purpose == "Offer letter"
        assert result.legal_issues == ["Broad non-compete"]

    def test_clause_ids_unique(self, parser: ResponseParser) -> None:
        """Test natural ids are kept unless they collide."""
        raw = json.dumps({
            "clauses": [
                {"id": "payment", "text": "a"},
                {"id": "payment", "text": "b"},
                {"text": "c"},
            ]
        })

        result = parser.parse_analysis(raw).result

        ids = [clause.id for clause in result.clauses]
        assert ids == ["payment", "clause-2", "clause-3"]

    def test_string_clauses_and_bad_items(self, parser: ResponseParser) -> None:
        """Test bare-string clauses are wrapped and non-objects skipped."""
        raw = json.dumps({"clauses": ["Rent is due monthly.", 42, None]})

        result = parser.parse_analysis(raw).result

        assert len(result.clauses) == 1
        assert result.clauses[0].text == "Rent is due monthly."
        assert result.clauses[0].explanation == "Analysis not available"

    def test_object_list_items_become_text(self, parser: ResponseParser) -> None:
        """Test object items in string lists are rendered as text."""
        raw = json.dumps({
            "legalIssues": [{"issue": "Unlimited liability", "explanation": "No cap"}],
            "recommendations": "Seek legal advice",
        })

        result = parser.parse_analysis(raw).result

        assert result.legal_issues == ["Unlimited liability - No cap"]
        assert result.recommendations == ["Seek legal advice"]


class TestBenchmarkMapping:
    """Tests for mapping replies onto FairnessBenchmark."""

    def test_full_reply(self, parser: ResponseParser, benchmark_reply: str) -> None:
        """Test a complete benchmark reply maps every field."""
        benchmark = parser.parse_benchmark(benchmark_reply).result

        assert benchmark.overall_fairness_score == 64
        assert benchmark.key_findings[0].id == "finding-1"
        assert benchmark.key_findings[0].risk_level == RiskLevel.HIGH
        assert benchmark.benchmark_metrics["securityDeposit"].assessment == Assessment.UNFAVORABLE
        assert benchmark.benchmark_metrics["securityDeposit"].market_median == "Not available"
        assert benchmark.negotiation_opportunities[0].suggested_term == "3 months"
        assert benchmark.recommendation.value == "NEGOTIATE"
        assert benchmark.market_position.value == "below_average"

    @pytest.mark.parametrize("score, expected", [(150, 100), (-20, 0), ("82/100", 82), ("n/a", 70), (0, 0)])
    def test_score_clamped(self, parser: ResponseParser, score, expected: int) -> None:
        """Test the fairness score is always within 0..100."""
        benchmark = parser.parse_benchmark(json.dumps({"overallFairnessScore": score})).result
        assert benchmark.overall_fairness_score == expected

    @pytest.mark.parametrize(
        "raw_risk, expected",
        [
            ("low", RiskLevel.LOW),
            ("LOW", RiskLevel.LOW),
            ("HIGH_RISK", RiskLevel.HIGH),
            ("critical", RiskLevel.HIGH),
            ("caution", RiskLevel.MEDIUM),
            ("whatever", RiskLevel.MEDIUM),
        ],
    )
    def test_risk_normalized(self, parser: ResponseParser, raw_risk: str, expected: RiskLevel) -> None:
        """Test risk spellings are normalized to the three-value enum."""
        benchmark = parser.parse_benchmark(json.dumps({"riskLevel": raw_risk})).result
        assert benchmark.risk_level == expected

    def test_market_comparisons_list(self, parser: ResponseParser) -> None:
        """Test a list of comparisons becomes a metrics map keyed by clause name."""
        raw = json.dumps({
            "marketComparisons": [
                {
                    "clause": "Payment Terms",
                    "contractValue": "45 days",
                    "marketStandard": "30 days",
                    "assessment": "CAUTION - slower than most agreements",
                },
                {"clause": "Notice", "value": 30, "assessment": "favorable"},
            ]
        })

        metrics = parser.parse_benchmark(raw).result.benchmark_metrics

        assert set(metrics) == {"Payment Terms", "Notice"}
        assert metrics["Payment Terms"].market_median == "30 days"
        assert metrics["Payment Terms"].assessment == Assessment.UNFAVORABLE
        assert metrics["Notice"].contract_value == "30"
        assert metrics["Notice"].assessment == Assessment.FAVORABLE

    def test_scalar_metric_value(self, parser: ResponseParser) -> None:
        """Test a bare metric value is treated as the contract value."""
        raw = json.dumps({"benchmarkMetrics": {"lateFee": "5% per month"}})

        metric = parser.parse_benchmark(raw).result.benchmark_metrics["lateFee"]

        assert metric.contract_value == "5% per month"
        assert metric.assessment == Assessment.STANDARD

    def test_duplicate_metric_names_get_suffixes(self, parser: ResponseParser) -> None:
        """Test colliding metric names stay distinct with numbered suffixes."""
        raw = json.dumps({
            "marketComparisons": [
                {"clause": "Deposit", "value": "1 month"},
                {"clause": "Deposit", "value": "2 months"},
                {"clause": "Deposit-2", "value": "3 months"},
            ]
        })

        metrics = parser.parse_benchmark(raw).result.benchmark_metrics

        assert list(metrics) == ["Deposit", "Deposit-2", "Deposit-2-2"]
        assert metrics["Deposit-2"].contract_value == "2 months"


class TestAssignClauseIds:
    """Tests for clause id assignment."""

    def test_index_ids_when_missing(self) -> None:
        assert assign_clause_ids(["", "", ""]) == ["clause-1", "clause-2", "clause-3"]

    def test_natural_id_colliding_with_index_id(self) -> None:
        """Test a natural id equal to a later index id still yields unique ids."""
        ids = assign_clause_ids(["clause-2", ""])
        assert ids == ["clause-2", "clause-2-2"]
        assert len(set(ids)) == len(ids)
