"""Prompt templates and the prompt builder."""

from fairclause.agents.prompts.analysis_prompt import (
    ANALYSIS_FULL_PROMPT_TEMPLATE,
    ANALYSIS_QUICK_PROMPT_TEMPLATE,
    ANALYSIS_SCHEMA,
)
from fairclause.agents.prompts.benchmark_prompt import (
    BENCHMARK_PROMPT_TEMPLATE,
    BENCHMARK_SCHEMA,
)
from fairclause.agents.prompts.builder import (
    TRUNCATION_MARKER,
    BuiltPrompt,
    PromptBuilder,
    TruncationBudgets,
    truncate_text,
)

__all__ = [
    "ANALYSIS_FULL_PROMPT_TEMPLATE",
    "ANALYSIS_QUICK_PROMPT_TEMPLATE",
    "ANALYSIS_SCHEMA",
    "BENCHMARK_PROMPT_TEMPLATE",
    "BENCHMARK_SCHEMA",
    "TRUNCATION_MARKER",
    "BuiltPrompt",
    "PromptBuilder",
    "TruncationBudgets",
    "truncate_text",
]
