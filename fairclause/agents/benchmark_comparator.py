"""Benchmark Comparator - fairness benchmark against market references.

Runs one AI-assisted comparison pass over a prior analysis (or raw text when
there is none): build the benchmark prompt, invoke the gateway, parse the
reply, then ground the metrics in the market reference table. Any gateway
or parse failure yields the fallback benchmark; the triggering error is
returned alongside it.

Example:
    comparator = BenchmarkComparator(gateway)
    run = comparator.compare(
        source_text=text,
        analysis=None,
        contract_type="rental",
        jurisdiction="Karnataka, India",
        role="Tenant",
    )
    run.benchmark.overall_fairness_score  # always within 0..100
"""

import logging
import time
import uuid
from dataclasses import dataclass

from app.config import get_settings
from fairclause.agents.fallback import FallbackSynthesizer
from fairclause.agents.gateway import BaseGateway
from fairclause.agents.prompts.builder import PromptBuilder
from fairclause.agents.response_parser import ParseFailed, ResponseParser
from fairclause.agents.utils.market_references import find_reference, get_market_references
from fairclause.errors import FairClauseError, GatewayError
from fairclause.event_log import EventRecorder, PipelineState
from fairclause.models import AnalysisRequest, AnalysisResult, FairnessBenchmark
from fairclause.taxonomy import AnalysisKind

logger = logging.getLogger("fairclause.benchmark_comparator")


@dataclass(frozen=True)
class BenchmarkRun:
    """Result of one comparator pass.

    error is None when the benchmark came from the AI; otherwise it is the
    GatewayError or ResponseParseError that triggered the fallback.
    """
    benchmark: FairnessBenchmark
    error: FairClauseError | None = None

    @property
    def used_fallback(self) -> bool:
        return self.error is not None


def ground_in_market_references(
    benchmark: FairnessBenchmark,
    contract_type: str | None,
    jurisdiction: str | None,
) -> FairnessBenchmark:
    """Fill missing medians and ranges from the reference table.

    Only metrics that match a reference by name are touched; values the AI
    supplied are kept. Returns a new benchmark stamped with the contract
    type and jurisdiction.
    """
    references = get_market_references(contract_type, jurisdiction)

    metrics = {}
    for name, metric in benchmark.benchmark_metrics.items():
        reference = find_reference(references, name)
        if reference is None:
            metrics[name] = metric
            continue

        updates = {}
        if metric.market_median == "Not available":
            updates["market_median"] = reference.market_median
        if not metric.market_range:
            updates["market_range"] = reference.market_range
        metrics[name] = metric.model_copy(update=updates) if updates else metric

    return benchmark.model_copy(
        update={
            "benchmark_metrics": metrics,
            "contract_type": contract_type,
            "jurisdiction": jurisdiction,
        }
    )


class BenchmarkComparator:
    """Produces a FairnessBenchmark for a contract."""

    def __init__(
        self,
        gateway: BaseGateway,
        builder: PromptBuilder | None = None,
        parser: ResponseParser | None = None,
        fallback: FallbackSynthesizer | None = None,
        recorder: EventRecorder | None = None,
    ) -> None:
        self.gateway = gateway
        self.builder = builder or PromptBuilder()
        self.parser = parser or ResponseParser()
        self.fallback = fallback or FallbackSynthesizer()
        self.recorder = recorder or EventRecorder()

    def compare(
        self,
        source_text: str | None,
        analysis: AnalysisResult | None = None,
        contract_type: str | None = None,
        jurisdiction: str | None = None,
        role: str | None = None,
        request_id: str | None = None,
    ) -> BenchmarkRun:
        """Benchmark a contract against market norms.

        Args:
            source_text: Extracted contract text; may be None or empty when a
                prior analysis is supplied.
            analysis: Prior analysis whose clauses are digested into the prompt.
            contract_type: Contract type for reference lookup (e.g. "rental").
            jurisdiction: Jurisdiction for reference lookup.
            role: The user's role in the contract.
            request_id: Correlation id for events; generated when missing.

        Returns:
            BenchmarkRun with a structurally valid benchmark.
        """
        settings = get_settings()
        request_id = request_id or uuid.uuid4().hex
        contract_type = contract_type or "contract"
        jurisdiction = jurisdiction or settings.default_jurisdiction
        start_time = time.time()

        request = AnalysisRequest(
            source_text=source_text or "",
            kind=AnalysisKind.BENCHMARK,
            role=role or settings.default_role,
            jurisdiction=jurisdiction,
            contract_type=contract_type,
        )
        prompt = self.builder.build(request, prior_analysis=analysis)

        self.recorder.record(
            request_id=request_id,
            state=PipelineState.BENCHMARKING,
            elapsed_ms=self._elapsed_ms(start_time),
            detail={
                "contract_type": contract_type,
                "jurisdiction": jurisdiction,
                "prompt_chars": len(prompt.text),
                "truncated": prompt.truncated,
                "has_prior_analysis": analysis is not None,
            },
        )

        try:
            raw_text = self.gateway.invoke(prompt.text)
        except GatewayError as e:
            return self._fallback(e, contract_type, jurisdiction, request_id, start_time)

        outcome = self.parser.parse_benchmark(raw_text)
        if isinstance(outcome, ParseFailed):
            return self._fallback(outcome.to_error(), contract_type, jurisdiction, request_id, start_time)

        benchmark = ground_in_market_references(outcome.result, contract_type, jurisdiction)
        logger.info(
            f"✅ Benchmark complete: score={benchmark.overall_fairness_score} "
            f"risk={benchmark.risk_level.value} metrics={len(benchmark.benchmark_metrics)} "
            f"strategy={outcome.strategy.value}"
        )
        return BenchmarkRun(benchmark=benchmark)

    def _fallback(
        self,
        error: FairClauseError,
        contract_type: str,
        jurisdiction: str,
        request_id: str,
        start_time: float,
    ) -> BenchmarkRun:
        self.recorder.record(
            request_id=request_id,
            state=PipelineState.SYNTHESIZING_FALLBACK,
            elapsed_ms=self._elapsed_ms(start_time),
            detail={"stage": "benchmark"},
            error=error.to_dict(),
        )
        benchmark = self.fallback.benchmark(
            contract_type=contract_type,
            jurisdiction=jurisdiction,
            reason=str(error),
        )
        return BenchmarkRun(benchmark=benchmark, error=error)

    @staticmethod
    def _elapsed_ms(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)
