"""Structured logging utilities for component tree parsing.

This module provides correlation-aware logging so that every record emitted
while parsing one snippet can be tied back to the editor session that asked
for it. Loggers can carry bound context (the file being processed, say) and
can replay a result's diagnostics as log records at the matching level.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from .result import DiagnosticEntry, DiagnosticSeverity

# Log level used when a diagnostic is replayed
SEVERITY_LEVELS = {
    DiagnosticSeverity.DEBUG: logging.DEBUG,
    DiagnosticSeverity.INFO: logging.INFO,
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.ERROR: logging.ERROR,
    DiagnosticSeverity.CRITICAL: logging.CRITICAL,
}


class CorrelationLogger:
    """Logger that automatically includes correlation ID, component and bound context."""

    def __init__(
        self,
        name: str,
        correlation_id: Optional[str] = None,
        component: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize correlation logger.

        Args:
            name: Logger name (typically __name__)
            correlation_id: Optional correlation ID for request tracking
            component: Component name for structured logging
            context: Extra fields added to every record
        """
        self.logger = logging.getLogger(name)
        self.correlation_id = correlation_id
        self.component = component or name.split('.')[-1]
        self.context: Dict[str, Any] = dict(context or {})

    def _get_extra(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        combined_extra = {
            "component": self.component,
            "correlation_id": self.correlation_id,
        }
        combined_extra.update(self.context)
        if extra:
            combined_extra.update(extra)
        return combined_extra

    def bind(self, **context: Any) -> "CorrelationLogger":
        """New logger with ``context`` added to every record."""
        merged = dict(self.context)
        merged.update(context)
        return CorrelationLogger(
            self.logger.name, self.correlation_id, self.component, merged
        )

    def is_enabled_for(self, level: int) -> bool:
        """Check whether a record at ``level`` would be emitted."""
        return self.logger.isEnabledFor(level)

    def debug(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False
    ) -> None:
        """Log debug message with correlation info."""
        self.logger.debug(message, extra=self._get_extra(extra), exc_info=exc_info)

    def info(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False
    ) -> None:
        """Log info message with correlation info."""
        self.logger.info(message, extra=self._get_extra(extra), exc_info=exc_info)

    def warning(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False
    ) -> None:
        """Log warning message with correlation info."""
        self.logger.warning(message, extra=self._get_extra(extra), exc_info=exc_info)

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = True
    ) -> None:
        """Log error message with correlation info."""
        self.logger.error(message, extra=self._get_extra(extra), exc_info=exc_info)

    def exception(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log exception message with correlation info and traceback."""
        self.logger.exception(message, extra=self._get_extra(extra))

    def log_diagnostics(
        self,
        diagnostics: Iterable[DiagnosticEntry],
        level: Optional[int] = None
    ) -> int:
        """Replay diagnostics as log records; returns how many were emitted.

        Records are logged at ``level``, or at the level matching each
        diagnostic's severity when it is None. They keep the diagnostic's
        own component and position, so a log reader sees which stage
        reported them.
        """
        emitted = 0
        for diag in diagnostics:
            record_level = SEVERITY_LEVELS[diag.severity] if level is None else level
            if not self.logger.isEnabledFor(record_level):
                continue
            extra = self._get_extra({
                "diagnostic_component": diag.component,
                "severity": diag.severity.name,
            })
            if diag.position:
                extra["position"] = diag.position
            self.logger.log(record_level, diag.message, extra=extra)
            emitted += 1
        return emitted


def get_logger(
    name: str,
    correlation_id: Optional[str] = None,
    component: Optional[str] = None
) -> CorrelationLogger:
    """Get a correlation-aware logger instance.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Optional correlation ID for request tracking
        component: Component name for structured logging

    Returns:
        CorrelationLogger instance
    """
    return CorrelationLogger(name, correlation_id, component)
