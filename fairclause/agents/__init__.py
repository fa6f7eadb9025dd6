"""Analysis agents for the FairClause pipeline.

Each stage is stateless: the prompt builder and response parser are pure,
the gateway wraps a single provider call, and the fallback synthesizer and
benchmark comparator only compose the other stages.
"""

from fairclause.agents.benchmark_comparator import BenchmarkComparator, BenchmarkRun
from fairclause.agents.fallback import FallbackSynthesizer
from fairclause.agents.gateway import BaseGateway, CallableGateway, OpenAIGateway, classify_error
from fairclause.agents.response_parser import (
    ExtractionStrategy,
    ParseFailed,
    Parsed,
    ResponseParser,
)

__all__ = [
    "BaseGateway",
    "BenchmarkComparator",
    "BenchmarkRun",
    "CallableGateway",
    "ExtractionStrategy",
    "FallbackSynthesizer",
    "OpenAIGateway",
    "ParseFailed",
    "Parsed",
    "ResponseParser",
    "classify_error",
]
