"""Shared fixtures for pipeline tests."""

import json

import pytest

from fairclause.agents.gateway import BaseGateway
from fairclause.event_log import EventRecorder


class ScriptedGateway(BaseGateway):
    """Gateway that replays scripted replies in order.

    A reply that is an exception instance is raised instead of returned.
    """

    NAME = "scripted"

    def __init__(self, *replies) -> None:
        super().__init__(timeout_seconds=5)
        self.replies = list(replies)
        self.prompts: list[str] = []

    def _generate(self, prompt: str, timeout: float) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


ANALYSIS_REPLY = json.dumps({
    "documentType": "Rental Agreement",
    "riskLevel": "high",
    "purpose": "Lease of a residential flat in Bengaluru",
    "overallScore": 58,
    "clauses": [
        {
            "text": "The tenant shall pay a security deposit of 10 months rent.",
            "riskLevel": "HIGH",
            "type": "payment",
            "explanation": "Deposit is far above the local norm.",
            "suggestions": ["Negotiate the deposit down to 3 months"],
        },
        {
            "text": "Either party may terminate with 30 days notice.",
            "riskLevel": "low",
            "type": "termination",
            "explanation": "Balanced notice period.",
            "suggestions": [],
        },
    ],
    "legalIssues": ["Excessive security deposit"],
    "recommendations": ["Request a lower deposit"],
})

BENCHMARK_REPLY = json.dumps({
    "overallFairnessScore": 64,
    "riskLevel": "MEDIUM",
    "summary": "Deposit is above market; other terms are standard.",
    "keyFindings": [
        {
            "clause": "Security deposit of 10 months rent",
            "category": "financial",
            "riskLevel": "HIGH",
            "marketComparison": "Above 90% of similar agreements",
            "explanation": "Deposit is unusually high.",
            "recommendation": "Negotiate to 3 months",
        }
    ],
    "benchmarkMetrics": {
        "securityDeposit": {
            "contractValue": "10 months rent",
            "assessment": "UNFAVORABLE",
            "percentile": "95th",
        },
        "noticePeriod": {
            "contractValue": "30 days",
            "marketMedian": "30 days",
            "marketRange": "15-60 days",
            "assessment": "STANDARD",
        },
    },
    "negotiationOpportunities": [
        {
            "clause": "Security deposit",
            "currentTerm": "10 months",
            "suggestedTerm": "3 months",
            "justification": "Local market median",
            "priority": "high",
            "likelihood": "medium",
        }
    ],
    "marketPosition": "below_average",
    "recommendation": "NEGOTIATE",
})


@pytest.fixture
def recorder() -> EventRecorder:
    """Create a fresh event recorder."""
    return EventRecorder(logger_name="fairclause.events.test")


@pytest.fixture
def make_gateway():
    """Factory for scripted gateways."""
    return ScriptedGateway


@pytest.fixture
def analysis_reply() -> str:
    """A well-formed analysis reply."""
    return ANALYSIS_REPLY


@pytest.fixture
def benchmark_reply() -> str:
    """A well-formed benchmark reply."""
    return BENCHMARK_REPLY
