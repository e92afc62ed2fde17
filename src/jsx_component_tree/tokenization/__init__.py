"""Tokenization engine for component tree parsing.

Key Components:
    JSXTokenizer: Fault-tolerant single-pass scanner
    Token: One tag or text token with its source span
    TokenType: Enumeration of token kinds
    SourceSpan: Offset, line and column of a token
"""

from .tokenizer import (
    JSXTokenizer,
    SourceSpan,
    Token,
    TokenizationResult,
    TokenType,
    is_name_char,
    tokenize,
)

__all__ = [
    "JSXTokenizer",
    "SourceSpan",
    "Token",
    "TokenType",
    "TokenizationResult",
    "is_name_char",
    "tokenize",
]
