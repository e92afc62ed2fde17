"""Public parsing API.

Simple usage:
    >>> from jsx_component_tree.api import parse, serialize
    >>> result = parse('<Image src="a.png" height={200} />')
    >>> serialize(result.roots)
    '<Image src="a.png" height={200} />'
"""

from .parser import (
    EVENT_HANDLER_NOTICE,
    INLINE_STYLE_NOTICE,
    ComponentTreeParser,
    parse,
    parse_file,
    serialize,
)

__all__ = [
    "EVENT_HANDLER_NOTICE",
    "INLINE_STYLE_NOTICE",
    "ComponentTreeParser",
    "parse",
    "parse_file",
    "serialize",
]
