"""Enumerations and normalizers for analysis and benchmark records.

The enum value sets defined here are part of the persisted record shape and
are read by the storage and UI layers. AI replies use many spellings for the
same idea ("low", "LOW", "STANDARD", "HIGH_RISK", "critical", ...), so every
enum has a best-effort normalizer that never raises.

Usage:
    from fairclause.taxonomy import RiskLevel, normalize_risk_level
"""

import math
import re
from enum import Enum
from typing import Any


class AnalysisKind(str, Enum):
    """Requested analysis mode."""

    QUICK = "quick"
    """Small truncation budget, terse prompt."""

    FULL = "full"
    """Large truncation budget, verbose prompt. Same schema as quick."""

    BENCHMARK = "benchmark"
    """Fairness benchmark against market reference values."""


class AnalysisType(str, Enum):
    """Provenance of a result. Consumers must never conflate the two."""

    AI = "ai"
    FALLBACK = "fallback"


class RiskLevel(str, Enum):
    """Three-level risk scale used by results, clauses and findings."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Assessment(str, Enum):
    """Assessment of a contract term against its market reference."""

    FAVORABLE = "FAVORABLE"
    STANDARD = "STANDARD"
    UNFAVORABLE = "UNFAVORABLE"


class Priority(str, Enum):
    """Priority or likelihood of a negotiation opportunity."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Recommendation(str, Enum):
    """Overall recommendation attached to a fairness benchmark."""

    ACCEPT = "ACCEPT"
    NEGOTIATE = "NEGOTIATE"
    AVOID = "AVOID"
    REVIEW_CAREFULLY = "REVIEW_CAREFULLY"


class MarketPosition(str, Enum):
    """Where the contract sits relative to the market."""

    ABOVE_AVERAGE = "above_average"
    AVERAGE = "average"
    BELOW_AVERAGE = "below_average"
    CONCERNING = "concerning"


DEFAULT_SCORE = 70


def _token(value: Any) -> str:
    """Lower-case, underscore-joined form of an arbitrary value."""
    if value is None:
        return ""
    return str(value).lower().strip().replace(" ", "_").replace("-", "_")


def normalize_risk_level(value: Any) -> str:
    """Normalize a risk string to a RiskLevel value.

    Unknown or missing values map to MEDIUM.

    Args:
        value: Raw risk value from an AI reply.

    Returns:
        One of "LOW", "MEDIUM", "HIGH".
    """
    if isinstance(value, RiskLevel):
        return value.value

    token = _token(value)

    if token.upper() in RiskLevel.__members__:
        return token.upper()

    if "high" in token or "critical" in token or "severe" in token or "major" in token:
        return RiskLevel.HIGH.value
    if "medium" in token or "moderate" in token or "caution" in token:
        return RiskLevel.MEDIUM.value
    if "low" in token or "minor" in token or "minimal" in token or token == "standard":
        return RiskLevel.LOW.value

    return RiskLevel.MEDIUM.value


def normalize_assessment(value: Any) -> str:
    """Normalize an assessment string to an Assessment value.

    Handles prefixed forms such as "CAUTION - Higher than 85% of similar
    agreements". Unknown values map to STANDARD.
    """
    if isinstance(value, Assessment):
        return value.value

    token = _token(value)

    if "unfavo" in token or "high_risk" in token or "caution" in token or "concerning" in token:
        return Assessment.UNFAVORABLE.value
    if "favo" in token or "better" in token:
        return Assessment.FAVORABLE.value

    return Assessment.STANDARD.value


def normalize_priority(value: Any) -> str:
    """Normalize a priority/likelihood string. Unknown values map to medium."""
    token = _token(value)

    if "high" in token or "critical" in token:
        return Priority.HIGH.value
    if "low" in token:
        return Priority.LOW.value

    return Priority.MEDIUM.value


def normalize_recommendation(value: Any) -> str:
    """Normalize an overall recommendation. Unknown values map to REVIEW_CAREFULLY."""
    token = _token(value)

    if token.startswith("accept"):
        return Recommendation.ACCEPT.value
    if token.startswith("negotiat"):
        return Recommendation.NEGOTIATE.value
    if token.startswith("avoid") or token.startswith("reject"):
        return Recommendation.AVOID.value

    return Recommendation.REVIEW_CAREFULLY.value


def normalize_market_position(value: Any) -> str:
    """Normalize a market position string. Unknown values map to average."""
    token = _token(value)

    valid_positions = {p.value for p in MarketPosition}
    if token in valid_positions:
        return token

    if "concern" in token:
        return MarketPosition.CONCERNING.value
    if "above" in token:
        return MarketPosition.ABOVE_AVERAGE.value
    if "below" in token:
        return MarketPosition.BELOW_AVERAGE.value

    return MarketPosition.AVERAGE.value


def clamp_score(value: Any, default: int = DEFAULT_SCORE) -> int:
    """Coerce a score to an integer in [0, 100].

    Accepts numbers and numeric strings such as "82" or "82/100". Anything
    that carries no number yields the default.
    """
    if isinstance(value, bool):
        return default

    number: float | None = None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = re.search(r"-?\d+(?:\.\d+)?", value)
        if match:
            number = float(match.group())

    if number is None or math.isnan(number):
        return default

    return int(round(max(0.0, min(100.0, number))))
