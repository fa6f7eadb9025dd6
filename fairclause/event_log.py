"""Structured pipeline events keyed by request correlation id.

Every orchestrator state transition is recorded as a PipelineEvent and
written to a named logger. The recorder also keeps the events it has seen so
callers and tests can inspect the path a request took.

Usage:
    from fairclause.event_log import EventRecorder, PipelineState

    recorder = EventRecorder()
    recorder.record(
        request_id="3f2a9c...",
        state=PipelineState.INVOKING,
        detail={"prompt_chars": 1480, "kind": "quick"},
    )
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class PipelineState(str, Enum):
    """States of the analysis state machine."""
    INGESTING = "INGESTING"
    PROMPTING = "PROMPTING"
    INVOKING = "INVOKING"
    PARSING = "PARSING"
    SYNTHESIZING_FALLBACK = "SYNTHESIZING_FALLBACK"
    BENCHMARKING = "BENCHMARKING"
    DONE = "DONE"


# States that indicate degraded processing
WARNING_STATES = frozenset({PipelineState.SYNTHESIZING_FALLBACK})


@dataclass
class PipelineEvent:
    """Log entry for a single state transition."""
    timestamp: datetime
    request_id: str
    state: PipelineState
    elapsed_ms: int = 0
    detail: dict[str, Any] = field(default_factory=dict)
    error: dict[str, Any] | None = None

    def to_log_string(self) -> str:
        """Format as a standardized log string."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        detail_parts = " | ".join(f"{k}={v}" for k, v in self.detail.items())
        base = (
            f"[{timestamp_str}] {self.state.value} | {self.request_id} | "
            f"elapsed_ms={self.elapsed_ms}"
        )
        if detail_parts:
            base += f" | {detail_parts}"
        if self.error:
            base += f" | error={self.error.get('type')}:{self.error.get('message')}"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "request_id": self.request_id,
            "state": self.state.value,
            "elapsed_ms": self.elapsed_ms,
            "detail": self.detail,
            "error": self.error,
        }


class EventRecorder:
    """Records and logs pipeline events."""

    def __init__(self, logger_name: str = "fairclause.events", max_events: int = 1000) -> None:
        """Initialize the recorder with a named logger and a bounded buffer."""
        self.logger = logging.getLogger(logger_name)
        self._max_events = max_events
        self._events: deque[PipelineEvent] = deque(maxlen=max_events)
        # Shared across requests running on executor threads
        self._lock = threading.Lock()

    def record(
        self,
        request_id: str,
        state: PipelineState,
        elapsed_ms: int = 0,
        detail: dict[str, Any] | None = None,
        error: dict[str, Any] | None = None,
    ) -> PipelineEvent:
        """Create, log and store an event.

        Args:
            request_id: Correlation id of the request.
            state: State being entered.
            elapsed_ms: Milliseconds since the request started.
            detail: Additional structured data.
            error: Serialized error that triggered the transition, if any.

        Returns:
            The recorded PipelineEvent.
        """
        event = PipelineEvent(
            timestamp=datetime.now(timezone.utc),
            request_id=request_id,
            state=state,
            elapsed_ms=elapsed_ms,
            detail=detail or {},
            error=error,
        )
        with self._lock:
            self._events.append(event)

        log_level = logging.WARNING if state in WARNING_STATES or error else logging.INFO
        self.logger.log(log_level, event.to_log_string(), extra={"event": event.to_dict()})
        return event

    def events_for(self, request_id: str) -> list[PipelineEvent]:
        """Get all events recorded for one request."""
        with self._lock:
            return [event for event in self._events if event.request_id == request_id]

    def get_all_events(self) -> list[PipelineEvent]:
        """Get all recorded events."""
        with self._lock:
            return list(self._events)

    def reset(self) -> None:
        """Clear all recorded events."""
        with self._lock:
            self._events = deque(maxlen=self._max_events)
