"""Metrics and result containers for unmarshalling operations."""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

MS_PER_SECOND = 1000.0

T = TypeVar("T")


@dataclass
class UnmarshallingMetrics:
    """Counters collected by the event cursor during one traversal."""

    events_processed: int = 0
    elements_matched: int = 0
    elements_skipped: int = 0
    max_depth: int = 0
    processing_time_ms: float = 0.0

    @property
    def match_rate(self) -> float:
        """Fraction of examined start tags that were bound to a field."""
        examined = self.elements_matched + self.elements_skipped
        if examined == 0:
            return 0.0
        return self.elements_matched / examined

    @property
    def events_per_second(self) -> float:
        """Calculate events processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.events_processed * MS_PER_SECOND) / self.processing_time_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "events_processed": self.events_processed,
            "elements_matched": self.elements_matched,
            "elements_skipped": self.elements_skipped,
            "max_depth": self.max_depth,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class UnmarshalledResponse(Generic[T]):
    """A result object together with the response-level metadata around it."""

    result: T
    response_metadata: Any = None
    metrics: UnmarshallingMetrics = field(default_factory=UnmarshallingMetrics)
    correlation_id: Optional[str] = None

    @property
    def request_id(self) -> Optional[str]:
        """Request ID reported by the service, if the response carried one."""
        if self.response_metadata is None:
            return None
        return self.response_metadata.request_id
