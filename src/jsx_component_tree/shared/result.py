"""Diagnostic types shared by every parsing stage.

Each stage reports recoverable problems as diagnostic entries instead of
raising, so a caller always gets a usable result back together with a
structured account of what was repaired or skipped.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Iterable, List, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()      # Debug-level information
    INFO = auto()       # Informational messages (e.g. skipped fragments)
    WARNING = auto()    # Recovered syntax problems
    ERROR = auto()      # Unusable input
    CRITICAL = auto()   # Internal failure caught at the API boundary


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with context information."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate diagnostic entry."""
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    @property
    def is_error(self) -> bool:
        """Check if this entry describes an error condition."""
        return self.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)

    def to_dict(self) -> Dict[str, Any]:
        """Convert entry to a JSON-compatible dictionary."""
        result: Dict[str, Any] = {
            "severity": self.severity.name,
            "message": self.message,
            "component": self.component,
        }
        if self.position:
            result["position"] = dict(self.position)
        if self.details:
            result["details"] = dict(self.details)
        return result


def messages_of(
    diagnostics: Iterable[DiagnosticEntry], *severities: DiagnosticSeverity
) -> List[str]:
    """Return the messages of all entries with one of the given severities."""
    return [diag.message for diag in diagnostics if diag.severity in severities]


@dataclass
class PerformanceMetrics:
    """Timing and volume figures for a single parse call."""

    processing_time_ms: float = 0.0
    characters_processed: int = 0
    tokens_generated: int = 0
    nodes_created: int = 0
    recovery_operations: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens generated per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_generated * 1000.0) / self.processing_time_ms
