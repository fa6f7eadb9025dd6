"""Error taxonomy for the analysis pipeline.

Only IngestionError is fatal to a request. GatewayError and
ResponseParseError are recovered with a fallback result and attached to the
outcome for observability and user messaging.
"""

from enum import Enum
from typing import Any


class GatewayErrorKind(str, Enum):
    """Coarse, advisory classification of an AI provider failure."""

    OVERLOADED = "overloaded"
    QUOTA_EXCEEDED = "quota_exceeded"
    NETWORK_ERROR = "network_error"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        """Whether a later retry by the caller is worthwhile."""
        return self in (GatewayErrorKind.OVERLOADED, GatewayErrorKind.NETWORK_ERROR)

    @property
    def user_message(self) -> str:
        """User-facing explanation for this kind of failure."""
        return GATEWAY_USER_MESSAGES[self]


GATEWAY_USER_MESSAGES: dict[GatewayErrorKind, str] = {
    GatewayErrorKind.OVERLOADED: (
        "The AI service is currently overloaded. Please wait a minute and try again."
    ),
    GatewayErrorKind.QUOTA_EXCEEDED: (
        "The AI service quota has been reached. Please try again later."
    ),
    GatewayErrorKind.NETWORK_ERROR: (
        "The AI service could not be reached or took too long to respond. Please try again."
    ),
    GatewayErrorKind.UNKNOWN: (
        "An unexpected error occurred during AI analysis. Please review the document manually."
    ),
}


class FairClauseError(Exception):
    """Base class for pipeline errors."""

    error_type = "error"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"type": self.error_type, "message": str(self)}


class IngestionError(FairClauseError):
    """No usable text could be obtained from the source."""

    error_type = "ingestion"


class GatewayError(FairClauseError):
    """The AI provider call failed."""

    error_type = "gateway"

    def __init__(
        self,
        kind: GatewayErrorKind,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["kind"] = self.kind.value
        data["retryable"] = self.kind.retryable
        data["userMessage"] = self.kind.user_message
        if self.status_code is not None:
            data["statusCode"] = self.status_code
        return data


class ResponseParseError(FairClauseError):
    """The AI reply could not be turned into a structured result."""

    error_type = "parse"

    def __init__(self, reason: str, excerpt: str = "") -> None:
        super().__init__(reason)
        self.reason = reason
        self.excerpt = excerpt

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["excerpt"] = self.excerpt
        return data
