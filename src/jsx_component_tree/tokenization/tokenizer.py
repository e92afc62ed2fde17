"""Single-pass markup scanner.

This module converts a JSX-like markup snippet into an ordered stream of tag
and text tokens. The scanner never fails: anything it cannot classify as a tag
is folded into a text token, so the returned tokens always cover the input.

Tag ends are found with an explicit quote-state / brace-depth machine rather
than regular expressions, so attribute values such as
``style={{content: "a > b"}}`` never terminate a tag early.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Tuple

from jsx_component_tree.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    TokenizerConfig,
    get_logger,
    messages_of,
)

QUOTE_CHARS = frozenset("\"'`")
COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

# Sentinel for "the rest of the input is text"
_FOLD_REST = -1


def is_name_char(char: str) -> bool:
    """Check whether ``char`` may appear in a tag name."""
    return char.isalnum() or char in "._"


class TokenType(Enum):
    """Markup token types produced by the scanner."""

    TAG_OPEN = auto()           # <Name attrs>
    TAG_SELF_CLOSE = auto()     # <Name attrs />
    TAG_CLOSE = auto()          # </Name>
    TEXT = auto()               # Anything between tags


@dataclass(frozen=True)
class SourceSpan:
    """Location of a token in the source text."""

    start: int
    end: int
    line: int = 1
    column: int = 1

    def __post_init__(self) -> None:
        """Validate span values."""
        if self.start < 0:
            raise ValueError("Span start must be >= 0")
        if self.end < self.start:
            raise ValueError("Span end must be >= start")
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")

    @property
    def length(self) -> int:
        """Number of source characters covered."""
        return self.end - self.start

    def to_position(self) -> dict:
        """Position dictionary for diagnostics."""
        return {"offset": self.start, "line": self.line, "column": self.column}


@dataclass
class Token:
    """A single markup token."""

    type: TokenType
    span: SourceSpan
    name: str = ""
    raw_attrs: str = ""
    content: str = ""

    def __post_init__(self) -> None:
        """Validate token values."""
        if self.type != TokenType.TEXT and not self.name:
            raise ValueError("Tag tokens require a name")

    @property
    def is_tag(self) -> bool:
        """Check if this token is any kind of tag."""
        return self.type != TokenType.TEXT


@dataclass
class TokenizationResult:
    """Tokens plus the diagnostics collected while scanning."""

    tokens: List[Token] = field(default_factory=list)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    character_count: int = 0

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def warnings(self) -> List[str]:
        """Messages of all warning diagnostics."""
        return messages_of(self.diagnostics, DiagnosticSeverity.WARNING)

    @property
    def errors(self) -> List[str]:
        """Messages of all error diagnostics."""
        return messages_of(
            self.diagnostics, DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL
        )


class JSXTokenizer:
    """Fault-tolerant scanner for JSX-like markup.

    Instances keep per-call state only, and ``tokenize`` resets it on every
    call, so one tokenizer can be reused for many snippets from one thread.
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tokenizer")
        self._reset_state("")

    def _reset_state(self, text: str) -> None:
        self._text = text
        self._length = len(text)
        self._tokens: List[Token] = []
        self._diagnostics: List[DiagnosticEntry] = []
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\n"]
        self._skip_expressions = True

    def tokenize(self, text: str) -> TokenizationResult:
        """Scan ``text`` into tokens.

        Args:
            text: Markup snippet

        Returns:
            TokenizationResult whose tokens cover the whole input
        """
        if not isinstance(text, str):
            result = TokenizationResult()
            result.diagnostics.append(self._entry(
                DiagnosticSeverity.ERROR,
                f"Expected markup text, got {type(text).__name__}",
            ))
            return result

        limit = self.config.max_input_chars
        if limit is not None and len(text) > limit:
            result = TokenizationResult(character_count=len(text))
            result.diagnostics.append(self._entry(
                DiagnosticSeverity.ERROR,
                f"Input of {len(text)} characters exceeds the limit of {limit}",
                details={"limit": limit},
            ))
            return result

        self._reset_state(text)
        self._scan()

        self.logger.debug(
            "Tokenization completed",
            extra={
                "character_count": self._length,
                "token_count": len(self._tokens),
                "diagnostic_count": len(self._diagnostics),
            },
        )
        return TokenizationResult(
            tokens=self._tokens,
            diagnostics=self._diagnostics,
            character_count=self._length,
        )

    def _scan(self) -> None:
        text_start = 0
        pos = 0

        while pos < self._length:
            pos = self._next_tag_start(pos)
            if pos == -1:
                break

            end, token = self._scan_markup(pos)
            if end == _FOLD_REST:
                break
            if end is None:
                pos += 1
                continue

            self._flush_text(text_start, pos)
            if token is not None:
                self._tokens.append(token)
            pos = text_start = end

        self._flush_text(text_start, self._length)

    def _next_tag_start(self, pos: int) -> int:
        """Offset of the next ``<`` outside text expressions, or -1.

        A balanced ``{...}`` in text content is an expression and stays text
        even when it contains ``<``.
        """
        text = self._text
        while True:
            lt = text.find("<", pos)
            if lt == -1 or not self._skip_expressions:
                return lt
            brace = text.find("{", pos, lt)
            if brace == -1:
                return lt
            end = self._skip_expression(brace)
            if end is None:
                self._skip_expressions = False
                return lt
            pos = end

    def _skip_expression(self, start: int) -> Optional[int]:
        text = self._text
        quote: Optional[str] = None
        depth = 0
        i = start

        while i < self._length:
            char = text[i]
            if quote is not None:
                if char == "\\":
                    i += 2
                    continue
                if char == quote:
                    quote = None
            elif char in QUOTE_CHARS:
                quote = char
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        return None

    def _scan_markup(self, start: int) -> Tuple[Optional[int], Optional[Token]]:
        """Try to read a tag, comment or fragment marker at ``start``.

        Returns ``(end, token)``; ``end`` is None when the ``<`` is plain text,
        and ``_FOLD_REST`` when the remainder of the input becomes text.
        """
        text = self._text
        if text.startswith(COMMENT_OPEN, start):
            return self._scan_comment(start), None
        if text.startswith("</", start):
            return self._scan_closing_tag(start)

        name_end = self._read_name(start + 1)
        if name_end == start + 1:
            if text.startswith("<>", start) and self._accept_fragment(start):
                return start + 2, None
            return None, None
        return self._scan_opening_tag(start, name_end)

    def _scan_comment(self, start: int) -> int:
        close = self._text.find(COMMENT_CLOSE, start + len(COMMENT_OPEN))
        if close == -1:
            self._diagnostics.append(self._entry(
                DiagnosticSeverity.WARNING,
                "Unterminated comment folded into text",
                position=self._position(start),
            ))
            return _FOLD_REST
        return close + len(COMMENT_CLOSE)

    def _scan_closing_tag(self, start: int) -> Tuple[Optional[int], Optional[Token]]:
        text = self._text
        name_start = start + 2
        name_end = self._read_name(name_start)

        if name_end == name_start:
            after = self._skip_whitespace(name_start)
            if text.startswith(">", after) and self._accept_fragment(start):
                return after + 1, None
            return None, None

        name = text[name_start:name_end]
        close = text.find(">", name_end)
        if close == -1:
            self._diagnostics.append(self._entry(
                DiagnosticSeverity.WARNING,
                f"Closing tag </{name}> is missing '>'",
                position=self._position(start),
            ))
            end = self._length
        else:
            end = close + 1

        return end, Token(
            type=TokenType.TAG_CLOSE,
            span=self._span(start, end),
            name=name,
        )

    def _scan_opening_tag(
        self, start: int, name_end: int
    ) -> Tuple[Optional[int], Optional[Token]]:
        text = self._text
        name = text[start + 1:name_end]
        quote: Optional[str] = None
        depth = 0
        i = name_end

        while i < self._length:
            char = text[i]
            if quote is not None:
                if char == "\\":
                    i += 2
                    continue
                if char == quote:
                    quote = None
            elif char in QUOTE_CHARS:
                quote = char
            elif char == "{":
                depth += 1
            elif char == "}":
                if depth > 0:
                    depth -= 1
            elif depth == 0:
                if char == ">":
                    return i + 1, self._tag_token(
                        TokenType.TAG_OPEN, start, i + 1, name, text[name_end:i]
                    )
                if char == "/" and text.startswith(">", i + 1):
                    return i + 2, self._tag_token(
                        TokenType.TAG_SELF_CLOSE, start, i + 2, name, text[name_end:i]
                    )
            i += 1

        self._diagnostics.append(self._entry(
            DiagnosticSeverity.WARNING,
            f"Unterminated tag <{name}> folded into text",
            position=self._position(start),
            details={"open_quote": quote, "brace_depth": depth},
        ))
        return _FOLD_REST, None

    def _tag_token(
        self, token_type: TokenType, start: int, end: int, name: str, raw_attrs: str
    ) -> Token:
        return Token(
            type=token_type,
            span=self._span(start, end),
            name=name,
            raw_attrs=raw_attrs.strip(),
        )

    def _accept_fragment(self, start: int) -> bool:
        if self.config.allow_fragments:
            self._diagnostics.append(self._entry(
                DiagnosticSeverity.INFO,
                "Fragment wrapper skipped",
                position=self._position(start),
            ))
            return True
        self._diagnostics.append(self._entry(
            DiagnosticSeverity.WARNING,
            "Fragment wrapper treated as text",
            position=self._position(start),
        ))
        return False

    def _flush_text(self, start: int, end: int) -> None:
        if end > start:
            self._tokens.append(Token(
                type=TokenType.TEXT,
                span=self._span(start, end),
                content=self._text[start:end],
            ))

    def _read_name(self, pos: int) -> int:
        while pos < self._length and is_name_char(self._text[pos]):
            pos += 1
        return pos

    def _skip_whitespace(self, pos: int) -> int:
        while pos < self._length and self._text[pos].isspace():
            pos += 1
        return pos

    def _span(self, start: int, end: int) -> SourceSpan:
        line = bisect_right(self._line_starts, start)
        column = start - self._line_starts[line - 1] + 1
        return SourceSpan(start=start, end=end, line=line, column=column)

    def _position(self, offset: int) -> dict:
        return self._span(offset, offset).to_position()

    def _entry(
        self,
        severity: DiagnosticSeverity,
        message: str,
        position: Optional[dict] = None,
        details: Optional[dict] = None,
    ) -> DiagnosticEntry:
        return DiagnosticEntry(
            severity=severity,
            message=message,
            component="tokenizer",
            position=position,
            details=details,
            correlation_id=self.correlation_id,
        )


def tokenize(text: str, config: Optional[TokenizerConfig] = None) -> List[Token]:
    """Scan ``text`` and return only the tokens.

    >>> [t.type.name for t in tokenize('<Card>Hi</Card>')]
    ['TAG_OPEN', 'TEXT', 'TAG_CLOSE']
    """
    return JSXTokenizer(config).tokenize(text).tokens
