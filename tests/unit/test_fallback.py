"""Unit tests for the Fallback Synthesizer."""

import pytest

from fairclause.agents.fallback import FALLBACK_METRIC_NAME, FallbackSynthesizer
from fairclause.agents.response_parser import ParseFailed, ResponseParser
from fairclause.taxonomy import AnalysisType, Assessment, RiskLevel


@pytest.fixture
def synthesizer() -> FallbackSynthesizer:
    """Create synthesizer instance for testing."""
    return FallbackSynthesizer()


class TestFallbackAnalysis:
    """Tests for fallback analysis results."""

    def test_labeled_as_fallback(self, synthesizer: FallbackSynthesizer) -> None:
        result = synthesizer.analysis(document_type="rental", reason="overloaded")

        assert result.analysis_type == AnalysisType.FALLBACK
        assert result.risk_level == RiskLevel.MEDIUM
        assert result.overall_score == 70
        assert result.document_type == "rental"

    def test_no_fabricated_clauses(self, synthesizer: FallbackSynthesizer) -> None:
        """Test fallback results carry generic guidance only."""
        result = synthesizer.analysis()

        assert result.clauses == []
        assert result.document_type == "Unknown"
        assert any("manual" in r.lower() for r in result.recommendations)

    def test_serialized_shape(self, synthesizer: FallbackSynthesizer) -> None:
        record = synthesizer.analysis().to_record()

        assert record["analysisType"] == "fallback"
        assert record["riskLevel"] == "MEDIUM"
        assert record["legalIssues"]


class TestFallbackBenchmark:
    """Tests for fallback benchmarks."""

    def test_single_standard_metric(self, synthesizer: FallbackSynthesizer) -> None:
        """Test the benchmark fallback carries one generic STANDARD comparison."""
        benchmark = synthesizer.benchmark(contract_type="rental", jurisdiction="India")

        assert list(benchmark.benchmark_metrics) == [FALLBACK_METRIC_NAME]
        metric = benchmark.benchmark_metrics[FALLBACK_METRIC_NAME]
        assert metric.assessment == Assessment.STANDARD
        assert metric.explanation
        assert benchmark.contract_type == "rental"
        assert benchmark.jurisdiction == "India"

    def test_unparseable_reply_then_fallback(self, synthesizer: FallbackSynthesizer) -> None:
        """Test a prose-only reply ends in the default fallback benchmark."""
        outcome = ResponseParser().parse_benchmark("I cannot process this.")
        assert isinstance(outcome, ParseFailed)

        benchmark = synthesizer.benchmark(reason=outcome.reason)

        assert benchmark.overall_fairness_score == 70
        assert benchmark.risk_level == RiskLevel.MEDIUM
        assert benchmark.analysis_type == AnalysisType.FALLBACK
        assert benchmark.key_findings == []
        assert benchmark.negotiation_opportunities == []
