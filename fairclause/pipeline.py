"""Pipeline Orchestrator - sequences one analysis request end to end.

State machine per request:

    INGESTING -> PROMPTING -> INVOKING -> PARSING
              -> (SYNTHESIZING_FALLBACK)? -> (BENCHMARKING)? -> DONE

A gateway error skips PARSING and goes straight to the fallback. Only
ingestion problems produce a FAILURE outcome; every other failure is
absorbed into a labeled fallback result and reported as PARTIAL_SUCCESS
with the first triggering error attached.

Example:
    orchestrator = PipelineOrchestrator()
    outcome = orchestrator.analyze(text, AnalysisKind.QUICK, AnalysisContext(role="Tenant"))
    if outcome.status == OutcomeStatus.PARTIAL_SUCCESS:
        print(outcome.error.to_dict())
"""

import asyncio
import functools
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from app.config import get_settings
from fairclause.agents.benchmark_comparator import BenchmarkComparator
from fairclause.agents.fallback import FallbackSynthesizer
from fairclause.agents.gateway import BaseGateway, OpenAIGateway
from fairclause.agents.prompts.builder import PromptBuilder
from fairclause.agents.response_parser import ParseFailed, ResponseParser
from fairclause.errors import FairClauseError, GatewayError, IngestionError
from fairclause.event_log import EventRecorder, PipelineState
from fairclause.ingestion.text_source import TextSourceAdapter, infer_contract_type
from fairclause.models import (
    AnalysisContext,
    AnalysisRequest,
    AnalysisResult,
    FairnessBenchmark,
)
from fairclause.taxonomy import AnalysisKind

logger = logging.getLogger("fairclause.pipeline")


class OutcomeStatus(str, Enum):
    """Terminal status of a pipeline run."""
    SUCCESS = "SUCCESS"
    PARTIAL_SUCCESS = "PARTIAL_SUCCESS"
    FAILURE = "FAILURE"


@dataclass
class PipelineOutcome:
    """Terminal result of one orchestration call.

    result is None only for FAILURE. benchmark holds the optional second
    pass; for kind=benchmark the benchmark is the result itself.
    """
    status: OutcomeStatus
    request_id: str
    result: AnalysisResult | FairnessBenchmark | None = None
    error: FairClauseError | None = None
    benchmark: FairnessBenchmark | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    states: list[PipelineState] = field(default_factory=list)

    @classmethod
    def success(cls, result, request_id: str, **kwargs) -> "PipelineOutcome":
        return cls(status=OutcomeStatus.SUCCESS, result=result, request_id=request_id, **kwargs)

    @classmethod
    def partial_success(cls, result, error: FairClauseError, request_id: str, **kwargs) -> "PipelineOutcome":
        return cls(
            status=OutcomeStatus.PARTIAL_SUCCESS,
            result=result,
            error=error,
            request_id=request_id,
            **kwargs,
        )

    @classmethod
    def failure(cls, error: FairClauseError, request_id: str, **kwargs) -> "PipelineOutcome":
        return cls(status=OutcomeStatus.FAILURE, error=error, request_id=request_id, **kwargs)

    @property
    def is_failure(self) -> bool:
        return self.status == OutcomeStatus.FAILURE

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "requestId": self.request_id,
            "result": self.result.to_record() if self.result is not None else None,
            "benchmark": self.benchmark.to_record() if self.benchmark is not None else None,
            "error": self.error.to_dict() if self.error is not None else None,
            "startedAt": self.started_at.isoformat(),
            "completedAt": self.completed_at.isoformat(),
            "states": [state.value for state in self.states],
        }


class _Run:
    """Per-request bookkeeping: id, clock, visited states, first error."""

    def __init__(self, recorder: EventRecorder) -> None:
        self.recorder = recorder
        self.request_id = uuid.uuid4().hex
        self.started_at = datetime.now(timezone.utc)
        self.start_time = time.time()
        self.states: list[PipelineState] = []
        self.error: FairClauseError | None = None

    def enter(
        self,
        state: PipelineState,
        detail: dict[str, Any] | None = None,
        error: FairClauseError | None = None,
    ) -> None:
        self.states.append(state)
        self.recorder.record(
            request_id=self.request_id,
            state=state,
            elapsed_ms=int((time.time() - self.start_time) * 1000),
            detail=detail,
            error=error.to_dict() if error is not None else None,
        )

    def degrade(self, error: FairClauseError) -> None:
        """Keep the first error that triggered a fallback."""
        if self.error is None:
            self.error = error

    def finish(self, result, benchmark: FairnessBenchmark | None = None) -> PipelineOutcome:
        self.enter(PipelineState.DONE, detail={"fallback": self.error is not None})
        kwargs = {
            "benchmark": benchmark,
            "started_at": self.started_at,
            "completed_at": datetime.now(timezone.utc),
            "states": list(self.states),
        }
        if self.error is not None:
            return PipelineOutcome.partial_success(result, self.error, self.request_id, **kwargs)
        return PipelineOutcome.success(result, self.request_id, **kwargs)

    def fail(self, error: IngestionError) -> PipelineOutcome:
        logger.error(f"❌ Request {self.request_id} failed during ingestion: {error}")
        return PipelineOutcome.failure(
            error,
            self.request_id,
            started_at=self.started_at,
            completed_at=datetime.now(timezone.utc),
            states=list(self.states),
        )


class PipelineOrchestrator:
    """Sequences ingestion, prompting, invocation, parsing and fallback.

    Holds only collaborators; every call is independent.
    """

    def __init__(
        self,
        gateway: BaseGateway | None = None,
        builder: PromptBuilder | None = None,
        parser: ResponseParser | None = None,
        fallback: FallbackSynthesizer | None = None,
        comparator: BenchmarkComparator | None = None,
        recorder: EventRecorder | None = None,
        text_source: TextSourceAdapter | None = None,
    ) -> None:
        self.gateway = gateway or OpenAIGateway()
        self.builder = builder or PromptBuilder()
        self.parser = parser or ResponseParser()
        self.fallback = fallback or FallbackSynthesizer()
        self.recorder = recorder or EventRecorder()
        self.comparator = comparator or BenchmarkComparator(
            self.gateway,
            builder=self.builder,
            parser=self.parser,
            fallback=self.fallback,
            recorder=self.recorder,
        )
        self.text_source = text_source or TextSourceAdapter()

    def analyze(
        self,
        source_text: str | None,
        kind: AnalysisKind | str = AnalysisKind.QUICK,
        context: AnalysisContext | None = None,
    ) -> PipelineOutcome:
        """Analyze already-extracted text.

        Args:
            source_text: Document text. None is an ingestion failure; empty
                text is valid unless context.require_text is set.
            kind: quick, full or benchmark.
            context: Role, jurisdiction, types and options.

        Returns:
            PipelineOutcome; never raises for AI or parse problems.
        """
        run = _Run(self.recorder)
        context = context or self._default_context()
        kind = AnalysisKind(kind)

        run.enter(PipelineState.INGESTING, detail={"kind": kind.value, "source": "text"})
        try:
            text = self._require_text(source_text, context)
        except IngestionError as e:
            return run.fail(e)

        return self._run(run, text, kind, context)

    def analyze_document(
        self,
        content: bytes,
        filename: str,
        mime_type: str | None = None,
        kind: AnalysisKind | str = AnalysisKind.QUICK,
        context: AnalysisContext | None = None,
    ) -> PipelineOutcome:
        """Ingest an uploaded file and analyze its text.

        The contract type is inferred from the file name and text when the
        context does not supply one.
        """
        run = _Run(self.recorder)
        context = context or self._default_context()
        kind = AnalysisKind(kind)

        run.enter(
            PipelineState.INGESTING,
            detail={"kind": kind.value, "source": "upload", "filename": filename},
        )
        try:
            document = self.text_source.from_bytes(content, filename, mime_type)
            text = self._require_text(document.text, context)
        except IngestionError as e:
            return run.fail(e)

        if not context.contract_type:
            context = context.model_copy(
                update={"contract_type": infer_contract_type(filename, document.text)}
            )

        return self._run(run, text, kind, context)

    async def analyze_async(
        self,
        source_text: str | None,
        kind: AnalysisKind | str = AnalysisKind.QUICK,
        context: AnalysisContext | None = None,
    ) -> PipelineOutcome:
        """Analyze text without blocking the event loop."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None, functools.partial(self.analyze, source_text, kind, context)
        )

    async def analyze_document_async(
        self,
        content: bytes,
        filename: str,
        mime_type: str | None = None,
        kind: AnalysisKind | str = AnalysisKind.QUICK,
        context: AnalysisContext | None = None,
    ) -> PipelineOutcome:
        """Ingest and analyze an upload without blocking the event loop."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(
            None,
            functools.partial(self.analyze_document, content, filename, mime_type, kind, context),
        )

    def _run(
        self,
        run: _Run,
        text: str,
        kind: AnalysisKind,
        context: AnalysisContext,
    ) -> PipelineOutcome:
        if kind == AnalysisKind.BENCHMARK:
            return self._run_benchmark(run, text, context)

        request = AnalysisRequest.build(text, kind, context)

        run.enter(PipelineState.PROMPTING, detail={"source_chars": len(text)})
        prompt = self.builder.build(request)

        run.enter(
            PipelineState.INVOKING,
            detail={
                "gateway": self.gateway.NAME,
                "prompt_chars": len(prompt.text),
                "truncated": prompt.truncated,
            },
        )
        result: AnalysisResult | None = None
        try:
            raw_text = self.gateway.invoke(prompt.text)
        except GatewayError as e:
            run.degrade(e)
        else:
            run.enter(PipelineState.PARSING, detail={"reply_chars": len(raw_text)})
            outcome = self.parser.parse_analysis(raw_text)
            if isinstance(outcome, ParseFailed):
                run.degrade(outcome.to_error())
            else:
                result = outcome.result

        if result is None:
            run.enter(PipelineState.SYNTHESIZING_FALLBACK, error=run.error)
            result = self.fallback.analysis(
                document_type=context.document_type or context.contract_type,
                reason=str(run.error),
            )

        benchmark = None
        if context.include_benchmark:
            benchmark = self._second_pass(run, text, result, context)

        return run.finish(result, benchmark)

    def _run_benchmark(self, run: _Run, text: str, context: AnalysisContext) -> PipelineOutcome:
        # The comparator records its own BENCHMARKING and fallback events
        run.states.append(PipelineState.BENCHMARKING)
        benchmark_run = self.comparator.compare(
            source_text=text,
            analysis=None,
            contract_type=context.contract_type,
            jurisdiction=context.jurisdiction,
            role=context.role,
            request_id=run.request_id,
        )
        if benchmark_run.error is not None:
            run.degrade(benchmark_run.error)
            run.states.append(PipelineState.SYNTHESIZING_FALLBACK)
        return run.finish(benchmark_run.benchmark)

    def _second_pass(
        self,
        run: _Run,
        text: str,
        analysis: AnalysisResult,
        context: AnalysisContext,
    ) -> FairnessBenchmark:
        run.states.append(PipelineState.BENCHMARKING)
        benchmark_run = self.comparator.compare(
            source_text=text,
            analysis=analysis,
            contract_type=context.contract_type,
            jurisdiction=context.jurisdiction,
            role=context.role,
            request_id=run.request_id,
        )
        if benchmark_run.error is not None:
            run.degrade(benchmark_run.error)
        return benchmark_run.benchmark

    @staticmethod
    def _require_text(source_text: str | None, context: AnalysisContext) -> str:
        if source_text is None:
            raise IngestionError("No document text was provided")
        if context.require_text and not source_text.strip():
            raise IngestionError("Document contains no readable text")
        return source_text

    @staticmethod
    def _default_context() -> AnalysisContext:
        settings = get_settings()
        return AnalysisContext(
            role=settings.default_role,
            jurisdiction=settings.default_jurisdiction,
        )
