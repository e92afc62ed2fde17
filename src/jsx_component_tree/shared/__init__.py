"""Shared utilities for component tree parsing.

This module provides the diagnostic types, configuration objects and
logging helpers used across all processing stages.
"""

from .config import (
    BuilderConfig,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    SerializerConfig,
    TokenizerConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    messages_of,
)

__all__ = [
    "BuilderConfig",
    "ConfigError",
    "ConfigValidationError",
    "CorrelationLogger",
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "ParserConfig",
    "PerformanceMetrics",
    "SerializerConfig",
    "TokenizerConfig",
    "get_logger",
    "messages_of",
]
