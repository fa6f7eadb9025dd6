"""Market Reference Values for the Benchmark Comparator.

This module provides the reference medians and ranges that contract terms
are benchmarked against. They are embedded in the benchmark prompt and used
to fill gaps when the AI reply omits a median or range for a known metric.

Usage:
    from fairclause.agents.utils.market_references import get_market_references
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class MarketReference:
    """A market reference value for one contract metric."""
    metric: str
    label: str
    market_median: str
    market_range: str
    contract_type: str
    jurisdiction: str | None = None


# Sample market references for common contract types
MARKET_REFERENCES: dict[str, list[MarketReference]] = {
    "rental": [
        MarketReference(
            metric="securityDeposit",
            label="Security deposit",
            market_median="2 months rent",
            market_range="1-3 months rent",
            contract_type="rental",
        ),
        MarketReference(
            metric="rentIncrease",
            label="Annual rent increase",
            market_median="5% annually",
            market_range="3-7% annually",
            contract_type="rental",
        ),
        MarketReference(
            metric="noticePeriod",
            label="Termination notice period",
            market_median="30 days",
            market_range="15-60 days",
            contract_type="rental",
        ),
        MarketReference(
            metric="securityDeposit",
            label="Security deposit",
            market_median="3 months rent",
            market_range="2-6 months rent",
            contract_type="rental",
            jurisdiction="Karnataka, India",
        ),
    ],
    "employment": [
        MarketReference(
            metric="noticePeriod",
            label="Resignation notice period",
            market_median="30 days",
            market_range="15-90 days",
            contract_type="employment",
        ),
        MarketReference(
            metric="nonCompete",
            label="Post-employment non-compete",
            market_median="6 months",
            market_range="0-12 months",
            contract_type="employment",
        ),
        MarketReference(
            metric="probationPeriod",
            label="Probation period",
            market_median="3 months",
            market_range="1-6 months",
            contract_type="employment",
        ),
    ],
    "service": [
        MarketReference(
            metric="paymentTerms",
            label="Invoice payment terms",
            market_median="30 days",
            market_range="15-45 days",
            contract_type="service",
        ),
        MarketReference(
            metric="liabilityCap",
            label="Limitation of liability",
            market_median="12 months of fees",
            market_range="6-24 months of fees",
            contract_type="service",
        ),
        MarketReference(
            metric="terminationNotice",
            label="Termination for convenience notice",
            market_median="30 days",
            market_range="30-90 days",
            contract_type="service",
        ),
    ],
    "nda": [
        MarketReference(
            metric="confidentialityTerm",
            label="Confidentiality term",
            market_median="3 years",
            market_range="2-5 years",
            contract_type="nda",
        ),
    ],
    "contract": [
        MarketReference(
            metric="paymentTerms",
            label="Payment terms",
            market_median="30 days",
            market_range="15-30 days",
            contract_type="contract",
        ),
        MarketReference(
            metric="terminationNotice",
            label="Termination notice",
            market_median="30 days",
            market_range="15-60 days",
            contract_type="contract",
        ),
    ],
}


def metric_key(name: str) -> str:
    """Reduce a metric name to a comparable key.

    "Security Deposit", "security_deposit" and "securityDeposit" all map to
    "securitydeposit".
    """
    return re.sub(r"[^a-z0-9]", "", name.lower())


def get_market_references(
    contract_type: str | None,
    jurisdiction: str | None = None,
) -> list[MarketReference]:
    """Get market references for a contract type.

    A jurisdiction-specific reference replaces the generic one for the same
    metric; unknown contract types use the generic "contract" set.

    Args:
        contract_type: Type of contract (e.g., 'rental').
        jurisdiction: Optional jurisdiction, matched case-insensitively.

    Returns:
        List of references, at most one per metric.
    """
    references = MARKET_REFERENCES.get((contract_type or "").lower(), MARKET_REFERENCES["contract"])

    selected: dict[str, MarketReference] = {}
    for reference in references:
        if reference.jurisdiction is None:
            selected.setdefault(reference.metric, reference)
        elif jurisdiction and reference.jurisdiction.lower() == jurisdiction.lower():
            selected[reference.metric] = reference

    return list(selected.values())


def find_reference(
    references: list[MarketReference],
    metric_name: str,
) -> MarketReference | None:
    """Find the reference matching a metric name, if any."""
    key = metric_key(metric_name)
    for reference in references:
        if metric_key(reference.metric) == key or metric_key(reference.label) == key:
            return reference
    return None


def format_market_references_for_prompt(references: list[MarketReference]) -> str:
    """Format market references for inclusion in prompt.

    Args:
        references: List of market references.

    Returns:
        Formatted string for prompt.
    """
    if not references:
        return "No market reference values available for this contract type."

    parts = []
    for reference in references:
        parts.append(
            f"- {reference.metric} ({reference.label}): "
            f"median {reference.market_median}, typical range {reference.market_range}"
        )

    return "\n".join(parts)
