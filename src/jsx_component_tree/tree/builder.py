"""Stack-machine tree builder.

This module turns a token stream into an ordered list of root element nodes.
Like the tokenizer it never fails: unbalanced markup is repaired with a
best-effort strategy and every repair is reported as a diagnostic.
"""

import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from jsx_component_tree.attributes import (
    Raw,
    Str,
    Value,
    parse_attrs,
    parse_string_literal,
    unwrap_braces,
)
from jsx_component_tree.attributes.parser import QUOTE_CHARS
from jsx_component_tree.registry import ResolverLike, resolve_name
from jsx_component_tree.shared import (
    BuilderConfig,
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    get_logger,
    messages_of,
)
from jsx_component_tree.tokenization import Token, TokenizationResult, TokenType

from .node import TEXT_ATTR, ElementNode, IdGenerator, SequentialIdGenerator
from .serializer import format_text

_COMMENT_EXPRESSION_RE = re.compile(r"\{\s*/\*.*?\*/\s*\}", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class ParseResult:
    """Result of building a tree, following the never-fail philosophy.

    ``roots`` is always usable, possibly empty. Problems are described by
    ``diagnostics``; ``warnings`` and ``errors`` expose their messages.
    """

    roots: List[ElementNode] = field(default_factory=list)
    success: bool = True
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    correlation_id: Optional[str] = None

    @property
    def warnings(self) -> List[str]:
        """Messages of all warning diagnostics."""
        return messages_of(self.diagnostics, DiagnosticSeverity.WARNING)

    @property
    def errors(self) -> List[str]:
        """Messages of all error and critical diagnostics."""
        return messages_of(
            self.diagnostics, DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL
        )

    @property
    def node_count(self) -> int:
        """Total number of nodes in all trees."""
        return sum(1 for _ in self.iter_nodes())

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def iter_nodes(self) -> Iterator[ElementNode]:
        """Iterate over every node in pre-order."""
        for root in self.roots:
            yield from root.iter()

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id,
        ))

    def get_diagnostics_by_severity(
        self, severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(diag.is_error for diag in self.diagnostics)

    def summary(self) -> Dict[str, Any]:
        """Compact overview used for logging and the CLI text output."""
        return {
            "success": self.success,
            "root_count": len(self.roots),
            "node_count": self.node_count,
            "warning_count": len(self.warnings),
            "error_count": len(self.errors),
            "processing_time_ms": round(self.processing_time_ms, 3),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to a JSON-compatible dictionary."""
        return {
            "success": self.success,
            "roots": [root.to_dict() for root in self.roots],
            "warnings": self.warnings,
            "errors": self.errors,
            "node_count": self.node_count,
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
        }


class ComponentTreeBuilder:
    """Builds element trees from token streams.

    State is a node stack, a stack of saved child lists and the list that
    collects children of the innermost open element (the root list when
    nothing is open). All of it is reset at the start of every ``build``.
    """

    def __init__(
        self,
        name_resolver: ResolverLike = None,
        id_generator: Optional[IdGenerator] = None,
        config: Optional[BuilderConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize tree builder.

        Args:
            name_resolver: Resolver for canonical types and categories
            id_generator: Id source shared across builds; a fresh
                ``SequentialIdGenerator`` is used per build when omitted
            config: Builder configuration
            correlation_id: Optional correlation ID for request tracking
        """
        self.name_resolver = name_resolver
        self.id_generator = id_generator
        self.config = config or BuilderConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

        self._stack: List[Tuple[ElementNode, str]] = []
        self._accumulators: List[List[ElementNode]] = []
        self._current: List[ElementNode] = []
        self._next_id: IdGenerator = SequentialIdGenerator()
        self._recoveries = 0

    def _reset_state(self) -> None:
        self._stack = []
        self._accumulators = []
        self._current = []
        self._next_id = self.id_generator or SequentialIdGenerator()
        self._recoveries = 0

    def build(self, tokens: Union[TokenizationResult, List[Token]]) -> ParseResult:
        """Build element trees from a token stream.

        Args:
            tokens: Either a TokenizationResult or a list of tokens

        Returns:
            ParseResult with the root nodes and diagnostics
        """
        start_time = time.time()
        result = ParseResult(correlation_id=self.correlation_id)

        if isinstance(tokens, TokenizationResult):
            token_list = tokens.tokens
            result.diagnostics.extend(tokens.diagnostics)
            result.performance.characters_processed = tokens.character_count
        else:
            token_list = list(tokens)

        self._reset_state()

        for index, token in enumerate(token_list):
            try:
                self._process_token(token, result)
            except Exception as e:
                # Never-fail: drop the token and keep going
                result.add_diagnostic(
                    DiagnosticSeverity.ERROR,
                    f"Error processing token {index}: {e}",
                    "tree_builder",
                    position=token.span.to_position(),
                    details={"exception_type": type(e).__name__},
                )

        self._close_unclosed_elements(result)
        result.roots = self._current

        if not result.roots and not result.has_errors():
            result.add_diagnostic(
                DiagnosticSeverity.ERROR,
                "Input contains no markup",
                "tree_builder",
                details={"token_count": len(token_list)},
            )

        result.success = not result.has_errors()
        result.performance.processing_time_ms = (time.time() - start_time) * 1000
        result.performance.tokens_generated = len(token_list)
        result.performance.nodes_created = result.node_count
        result.performance.recovery_operations = self._recoveries

        self.logger.debug(
            "Tree building completed",
            extra={
                "token_count": len(token_list),
                "root_count": len(result.roots),
                "recovery_operations": self._recoveries,
            },
        )
        return result

    def _process_token(self, token: Token, result: ParseResult) -> None:
        if token.type == TokenType.TAG_OPEN:
            node = self._create_node(token, result, self_closing=False)
            self._stack.append((node, token.name))
            self._accumulators.append(self._current)
            self._current = []
        elif token.type == TokenType.TAG_SELF_CLOSE:
            self._current.append(self._create_node(token, result, self_closing=True))
        elif token.type == TokenType.TAG_CLOSE:
            self._handle_closing_tag(token, result)
        elif token.type == TokenType.TEXT:
            self._handle_text(token, result)

    def _create_node(
        self, token: Token, result: ParseResult, self_closing: bool
    ) -> ElementNode:
        node_type, category, display_name = self._resolve(token.name, token, result)
        attrs, warnings = parse_attrs(token.raw_attrs)
        for warning in warnings:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"<{token.name}>: {warning}",
                "attribute_parser",
                position=token.span.to_position(),
            )

        # A children expression is stored in the same form as text markup
        text_value = attrs.get(TEXT_ATTR)
        if isinstance(text_value, Raw):
            wrapped = "{" + text_value.text + "}"
            if unwrap_braces(wrapped) is not None:
                attrs[TEXT_ATTR] = Raw(wrapped)

        return ElementNode(
            id=self._next_id(node_type),
            type=node_type,
            display_name=display_name,
            category=category,
            attrs=attrs,
            self_closing=self_closing,
        )

    def _resolve(
        self, raw_name: str, token: Token, result: ParseResult
    ) -> Tuple[str, str, str]:
        try:
            return resolve_name(self.name_resolver, raw_name)
        except Exception as e:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Name resolver failed for <{raw_name}>: {e}",
                "tree_builder",
                position=token.span.to_position(),
            )
            return resolve_name(None, raw_name)

    def _handle_closing_tag(self, token: Token, result: ParseResult) -> None:
        if not self._stack:
            self._recoveries += 1
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Unmatched closing tag </{token.name}> ignored",
                "tree_builder",
                position=token.span.to_position(),
            )
            return

        node, open_name = self._stack.pop()
        if open_name != token.name:
            self._recoveries += 1
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Closing tag </{token.name}> does not match <{open_name}>; "
                f"<{open_name}> closed instead",
                "tree_builder",
                position=token.span.to_position(),
                details={"expected": open_name, "found": token.name},
            )

        node.children = self._current
        self._current = self._accumulators.pop()
        self._current.append(node)

    def _handle_text(self, token: Token, result: ParseResult) -> None:
        value = self.normalize_text(token.content)
        if value is None:
            return

        if self._stack and not self._current:
            node = self._stack[-1][0]
            existing = node.attrs.get(TEXT_ATTR)
            if existing is not None:
                joined = _join_text(existing, value)
                if joined is None:
                    result.add_diagnostic(
                        DiagnosticSeverity.WARNING,
                        f"Text content replaces the '{TEXT_ATTR}' attribute of "
                        f"<{self._stack[-1][1]}>",
                        "tree_builder",
                        position=token.span.to_position(),
                    )
                else:
                    value = joined
            node.attrs[TEXT_ATTR] = value
            return

        raw_name = self.config.text_node_type
        node_type, category, display_name = self._resolve(raw_name, token, result)
        self._current.append(ElementNode(
            id=self._next_id(node_type),
            type=node_type,
            display_name=display_name,
            category=category,
            attrs={TEXT_ATTR: value},
        ))

    def normalize_text(self, content: str) -> Optional[Value]:
        """Normalize raw text between tags; None means skip it.

        Plain text becomes ``Str``. Text holding ``{...}`` expressions is kept
        as ``Raw`` markup, except a lone string literal, which is unquoted into
        ``Str`` when ``unquote_text_expressions`` is set.
        """
        text = _COMMENT_EXPRESSION_RE.sub("", content).strip()
        if not text:
            return None

        if "{" not in text:
            if self.config.collapse_whitespace:
                text = _WHITESPACE_RE.sub(" ", text)
            return Str(text)

        if self.config.unquote_text_expressions:
            inner = unwrap_braces(text)
            literal = parse_string_literal(inner.strip()) if inner is not None else None
            if literal is not None:
                return Str(literal) if literal.strip() else None

        if self.config.collapse_whitespace:
            text = _collapse_outside_expressions(text)
        return Raw(text)

    def _close_unclosed_elements(self, result: ParseResult) -> None:
        recovered: List[ElementNode] = []
        while self._stack:
            node, open_name = self._stack.pop()
            node.children = self._current
            self._current = self._accumulators.pop()
            recovered.append(node)
            self._recoveries += 1
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                f"Unclosed tag <{open_name}> closed at end of input",
                "tree_builder",
                details={"node_id": node.id},
            )
        self._current.extend(recovered)


def build_tree(
    tokens: Union[TokenizationResult, List[Token]],
    name_resolver: ResolverLike = None,
    id_generator: Optional[IdGenerator] = None,
    config: Optional[BuilderConfig] = None,
) -> ParseResult:
    """Build element trees from tokens with a one-off builder."""
    return ComponentTreeBuilder(name_resolver, id_generator, config).build(tokens)


def _text_markup(value: Value) -> str:
    if isinstance(value, Raw):
        return value.text
    return format_text(value.value)


def _join_text(existing: Value, addition: Value) -> Optional[Value]:
    # Inline text following earlier text on the same element; None if not text
    if isinstance(existing, Str) and not existing.value:
        return None
    if not isinstance(existing, (Str, Raw)):
        return None
    if isinstance(existing, Str) and isinstance(addition, Str):
        return Str(f"{existing.value} {addition.value}")
    return Raw(f"{_text_markup(existing)} {_text_markup(addition)}")


def _collapse_outside_expressions(text: str) -> str:
    """Collapse whitespace runs in text while leaving ``{...}`` expressions intact."""
    pieces: List[str] = []
    depth = 0
    quote: Optional[str] = None
    start = 0
    i = 0

    while i < len(text):
        char = text[i]
        if quote is not None:
            if char == "\\":
                i += 1
            elif char == quote:
                quote = None
        elif depth and char in QUOTE_CHARS:
            quote = char
        elif char == "{":
            if depth == 0:
                pieces.append(_WHITESPACE_RE.sub(" ", text[start:i]))
                start = i
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth == 0:
                pieces.append(text[start:i + 1])
                start = i + 1
        i += 1

    tail = text[start:]
    pieces.append(tail if depth else _WHITESPACE_RE.sub(" ", tail))
    return "".join(pieces)
