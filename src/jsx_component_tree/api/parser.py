"""Public parsing API.

Module-level ``parse``/``serialize`` functions cover one-off use; the
``ComponentTreeParser`` class keeps a configuration and registry for repeated
use and tracks statistics. Parsing never raises: unexpected failures are
logged and reported as a CRITICAL diagnostic on an otherwise empty result.
"""

import logging
import re
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from jsx_component_tree.attributes import Obj
from jsx_component_tree.registry import ComponentRegistry, ResolverLike
from jsx_component_tree.shared import DiagnosticSeverity, ParserConfig, get_logger
from jsx_component_tree.tokenization import JSXTokenizer
from jsx_component_tree.tree import (
    ComponentTreeBuilder,
    ElementNode,
    IdGenerator,
    ParseResult,
    validate_tree,
)
from jsx_component_tree.tree import serialize as serialize_tree

MS_PER_SECOND = 1000
PREVIEW_LENGTH = 100

_EVENT_HANDLER_RE = re.compile(r"^on[A-Z]")

INLINE_STYLE_NOTICE = (
    "Inline styles detected - these may not be fully preserved in the editor"
)
EVENT_HANDLER_NOTICE = (
    "Event handlers detected - these will need to be reconfigured in the editor"
)


def parse(
    markup: str,
    registry: ResolverLike = None,
    id_generator: Optional[IdGenerator] = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> ParseResult:
    """Parse a markup snippet into element trees.

    Args:
        markup: Markup snippet
        registry: Name resolver; defaults to ``ComponentRegistry.default()``
        id_generator: Id source; a fresh sequential generator when omitted
        config: Parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult with roots, warnings and errors

    Examples:
        >>> result = parse('<Card><Text>Hello</Text></Card>')
        >>> result.roots[0].children[0].text
        'Hello'
        >>> parse('<Card><Text>Oops</Card>').warnings != []
        True
    """
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse")
    config = config or ParserConfig.default()

    logger.info(
        "Starting parse operation",
        extra={
            "content_length": len(markup) if isinstance(markup, str) else None,
            "preview": _preview(markup),
        },
    )

    try:
        resolver = registry if registry is not None else ComponentRegistry.default()
        tokenization = JSXTokenizer(config.tokenizer, correlation_id).tokenize(markup)
        builder = ComponentTreeBuilder(resolver, id_generator, config.builder, correlation_id)
        result = builder.build(tokenization)
        _add_feature_notices(result)

        result.performance.processing_time_ms = (time.time() - start_time) * MS_PER_SECOND
        logger.log_diagnostics(result.diagnostics, logging.DEBUG)
        logger.info("Parse completed", extra=result.summary())
        return result

    except Exception as e:
        # Never-fail guarantee
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.exception(
            "Parse operation failed",
            extra={"processing_time_ms": processing_time},
        )
        return _create_error_result(
            f"Parse operation failed: {e}", correlation_id, processing_time
        )


def parse_file(
    file_path: Union[str, Path],
    registry: ResolverLike = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
    encoding: str = "utf-8",
) -> ParseResult:
    """Read and parse a markup file; unreadable files give an error result."""
    path = Path(file_path)
    try:
        markup = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        get_logger(__name__, correlation_id, "parse_file").error(
            "Could not read markup file", extra={"path": str(path)}, exc_info=False
        )
        return _create_error_result(f"Could not read {path}: {e}", correlation_id, 0.0)
    return parse(markup, registry=registry, config=config, correlation_id=correlation_id)


def serialize(
    roots: Sequence[ElementNode],
    registry: ResolverLike = None,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None,
) -> str:
    """Write element trees back to markup.

    Never raises: an unexpected failure is logged and gives an empty string.

    Args:
        roots: Root nodes
        registry: Inverse name resolver; defaults to ``ComponentRegistry.default()``
        config: Parser configuration whose serializer section is used
        correlation_id: Optional correlation ID for request tracking

    Returns:
        Markup text
    """
    config = config or ParserConfig.default()
    resolver = registry if registry is not None else ComponentRegistry.default()
    try:
        return serialize_tree(roots, resolver, config.serializer)
    except Exception:
        # Never-fail guarantee
        get_logger(__name__, correlation_id, "serialize").exception(
            "Serialization failed",
            extra={"root_type": type(roots).__name__},
        )
        return ""


def _add_feature_notices(result: ParseResult) -> None:
    # Features the editor cannot round-trip through its property panels
    has_inline_style = False
    has_event_handler = False
    for node in result.iter_nodes():
        for name, value in node.attrs.items():
            if name == "style" and isinstance(value, Obj):
                has_inline_style = True
            elif _EVENT_HANDLER_RE.match(name):
                has_event_handler = True

    if has_inline_style:
        result.add_diagnostic(DiagnosticSeverity.INFO, INLINE_STYLE_NOTICE, "api_parser")
    if has_event_handler:
        result.add_diagnostic(DiagnosticSeverity.INFO, EVENT_HANDLER_NOTICE, "api_parser")


def _preview(markup: Any) -> Optional[str]:
    if not isinstance(markup, str):
        return None
    if len(markup) > PREVIEW_LENGTH:
        return markup[:PREVIEW_LENGTH] + "..."
    return markup


def _create_error_result(
    error_message: str,
    correlation_id: Optional[str],
    processing_time: float
) -> ParseResult:
    """Create error result following never-fail philosophy.

    Args:
        error_message: Error description
        correlation_id: Optional correlation ID
        processing_time: Processing time in milliseconds

    Returns:
        ParseResult with no roots and a CRITICAL diagnostic
    """
    result = ParseResult(correlation_id=correlation_id)
    result.success = False
    result.performance.processing_time_ms = processing_time
    result.add_diagnostic(DiagnosticSeverity.CRITICAL, error_message, "api_parser")
    return result


class ComponentTreeParser:
    """Reusable parser with a fixed configuration and registry.

    Examples:
        >>> parser = ComponentTreeParser(config=ParserConfig.compact())
        >>> result = parser.parse('<Group><Button>A</Button></Group>')
        >>> parser.serialize(result.roots)
        '<Group><Button>A</Button></Group>'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        registry: ResolverLike = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize reusable parser.

        Args:
            config: Parser configuration (defaults to ``ParserConfig.default()``)
            registry: Name resolver (defaults to ``ComponentRegistry.default()``)
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig.default()
        self.registry = registry if registry is not None else ComponentRegistry.default()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "component_tree_parser")

        self._parse_count = 0
        self._total_processing_time = 0.0
        self._successful_parses = 0

    def parse(
        self,
        markup: str,
        id_generator: Optional[IdGenerator] = None,
        correlation_id_override: Optional[str] = None,
    ) -> ParseResult:
        """Parse ``markup`` with this parser's configuration."""
        result = parse(
            markup,
            registry=self.registry,
            id_generator=id_generator,
            config=self.config,
            correlation_id=correlation_id_override or self.correlation_id,
        )

        self._parse_count += 1
        self._total_processing_time += result.processing_time_ms
        if result.success:
            self._successful_parses += 1
        return result

    def serialize(self, roots: Sequence[ElementNode]) -> str:
        """Write ``roots`` back to markup with this parser's configuration."""
        return serialize(
            roots,
            registry=self.registry,
            config=self.config,
            correlation_id=self.correlation_id,
        )

    def validate(self, roots: Sequence[ElementNode]) -> List[str]:
        """Structural problems in ``roots`` against this parser's registry."""
        registry = self.registry if isinstance(self.registry, ComponentRegistry) else None
        return validate_tree(roots, registry)

    def reconfigure(
        self,
        config: Optional[ParserConfig] = None,
        registry: ResolverLike = None,
    ) -> None:
        """Replace the configuration and/or registry."""
        if config is not None:
            self.config = config
        if registry is not None:
            self.registry = registry
        self.logger.info(
            "Parser reconfigured",
            extra={
                "config_updated": config is not None,
                "registry_updated": registry is not None,
            },
        )

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._total_processing_time = 0.0
        self._successful_parses = 0
        self.logger.info("Parser statistics reset")
