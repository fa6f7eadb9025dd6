"""Prompt Builder - turns an AnalysisRequest into a single bounded prompt.

Source text is head-truncated to a per-kind character budget with an
explicit marker, so prompt size (and therefore latency and cost) is bounded
and identical for identical input.
"""

from dataclasses import dataclass

from app.config import get_settings
from fairclause.agents.prompts.analysis_prompt import (
    ANALYSIS_FULL_PROMPT_TEMPLATE,
    ANALYSIS_QUICK_PROMPT_TEMPLATE,
    ANALYSIS_SCHEMA,
    ANALYSIS_SCHEMA_DESCRIPTION,
)
from fairclause.agents.prompts.benchmark_prompt import (
    BENCHMARK_PROMPT_TEMPLATE,
    BENCHMARK_SCHEMA,
    BENCHMARK_SCHEMA_DESCRIPTION,
)
from fairclause.agents.utils.market_references import (
    format_market_references_for_prompt,
    get_market_references,
)
from fairclause.models import AnalysisRequest, AnalysisResult
from fairclause.taxonomy import AnalysisKind

TRUNCATION_MARKER = "... [truncated]"
EMPTY_TEXT_PLACEHOLDER = "[No document text was provided]"
MAX_DIGEST_CLAUSES = 15
DIGEST_CLAUSE_CHARS = 160


def truncate_text(text: str, budget: int) -> tuple[str, bool]:
    """Head-truncate text to a character budget.

    Args:
        text: Source text of any length.
        budget: Maximum number of source characters to keep.

    Returns:
        Tuple of (possibly truncated text, whether truncation happened).
    """
    if len(text) <= budget:
        return text, False
    return text[:budget] + TRUNCATION_MARKER, True


@dataclass(frozen=True)
class TruncationBudgets:
    """Character budgets per analysis kind."""
    quick: int = 1000
    full: int = 30000
    benchmark: int = 12000

    @classmethod
    def from_settings(cls) -> "TruncationBudgets":
        settings = get_settings()
        return cls(
            quick=settings.quick_truncation_chars,
            full=settings.full_truncation_chars,
            benchmark=settings.benchmark_truncation_chars,
        )

    def for_kind(self, kind: AnalysisKind) -> int:
        if kind == AnalysisKind.QUICK:
            return self.quick
        if kind == AnalysisKind.FULL:
            return self.full
        return self.benchmark


@dataclass(frozen=True)
class BuiltPrompt:
    """A ready-to-send prompt and the schema the reply must follow."""
    kind: AnalysisKind
    text: str
    schema_description: str
    truncated: bool
    source_chars: int


def format_clause_digest(analysis: AnalysisResult | None) -> str:
    """Summarize a prior analysis' clauses for the benchmark prompt."""
    if analysis is None or not analysis.clauses:
        return "None available."

    lines = []
    for clause in analysis.clauses[:MAX_DIGEST_CLAUSES]:
        excerpt, _ = truncate_text(clause.text, DIGEST_CLAUSE_CHARS)
        lines.append(f"- {clause.id} [{clause.type}, {clause.risk_level.value}]: {excerpt}")
    return "\n".join(lines)


class PromptBuilder:
    """Builds analysis and benchmark prompts. Pure and stateless."""

    def __init__(self, budgets: TruncationBudgets | None = None) -> None:
        self.budgets = budgets or TruncationBudgets.from_settings()

    def build(
        self,
        request: AnalysisRequest,
        prior_analysis: AnalysisResult | None = None,
    ) -> BuiltPrompt:
        """Build the prompt for a request.

        Never fails: empty or whitespace-only text still yields a prompt and
        is left to the parser and fallback stages.

        Args:
            request: The analysis request.
            prior_analysis: Earlier analysis to digest into benchmark prompts.

        Returns:
            BuiltPrompt for the request kind.
        """
        budget = self.budgets.for_kind(request.kind)
        text, truncated = truncate_text(request.source_text, budget)
        if not text.strip():
            text = EMPTY_TEXT_PLACEHOLDER

        if request.kind == AnalysisKind.BENCHMARK:
            prompt = self._format_benchmark_prompt(request, text, prior_analysis)
            schema_description = BENCHMARK_SCHEMA_DESCRIPTION
        else:
            prompt = self._format_analysis_prompt(request, text)
            schema_description = ANALYSIS_SCHEMA_DESCRIPTION

        return BuiltPrompt(
            kind=request.kind,
            text=prompt,
            schema_description=schema_description,
            truncated=truncated,
            source_chars=len(request.source_text),
        )

    def _format_analysis_prompt(self, request: AnalysisRequest, text: str) -> str:
        template = (
            ANALYSIS_QUICK_PROMPT_TEMPLATE
            if request.kind == AnalysisKind.QUICK
            else ANALYSIS_FULL_PROMPT_TEMPLATE
        )
        return template.format(
            document_type=request.document_type or request.contract_type or "legal document",
            role=request.role or "Not specified",
            jurisdiction=request.jurisdiction or "Not specified",
            document_text=text,
            schema=ANALYSIS_SCHEMA,
        )

    def _format_benchmark_prompt(
        self,
        request: AnalysisRequest,
        text: str,
        prior_analysis: AnalysisResult | None,
    ) -> str:
        references = get_market_references(request.contract_type, request.jurisdiction)
        return BENCHMARK_PROMPT_TEMPLATE.format(
            contract_type=request.contract_type or "contract",
            jurisdiction=request.jurisdiction or "Not specified",
            role=request.role or "Not specified",
            contract_text=text,
            clause_digest=format_clause_digest(prior_analysis),
            market_references=format_market_references_for_prompt(references),
            schema=BENCHMARK_SCHEMA,
        )
